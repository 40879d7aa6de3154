"""Story element schemas.

Every element is a pydantic model whose JSON form uses camelCase keys.
Construction validates the whole element, and assignment to an attribute
is validated too, so an invalid element can never reach the story bible.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from ..exceptions import ValidationFailed
from .constants import (
    CharacterType,
    ElementStatus,
    ElementType,
    Genre,
    Priority,
    SceneType,
    StructureType,
    ThreadType,
)

M = TypeVar("M", bound="StoryModel")


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def describe_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic error into one readable line."""
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "<root>"
        parts.append(f"{location}: {item.get('msg')}")
    return "; ".join(parts)


class StoryModel(BaseModel):
    """Base for everything stored in the story bible."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        extra="allow",
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON document form."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_dict(cls: Type[M], data: Dict[str, Any]) -> M:
        """Create from the JSON document form, failing closed on invalid data."""
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ValidationFailed(
                f"Invalid {cls.__name__}: {describe_validation_error(e)}",
                errors=e.errors(),
            ) from e


class BaseElement(StoryModel):
    """Fields shared by every story element."""

    id: StrictInt = Field(gt=0)
    type: ElementType
    title: str = Field(min_length=1)
    description: str
    status: ElementStatus = ElementStatus.DRAFT
    priority: Priority = Priority.MEDIUM
    dependencies: Optional[List[StrictInt]] = None
    tags: Optional[List[str]] = None
    notes: Optional[str] = None
    created_at: str = Field(default_factory=now_iso)
    updated_at: str = Field(default_factory=now_iso)

    def touch(self) -> None:
        """Record a mutation."""
        self.updated_at = now_iso()


class Premise(BaseElement):
    """The core story premise."""

    type: Literal["premise"] = "premise"
    content: str
    genre: Genre
    target_audience: Optional[str] = None
    themes: Optional[List[str]] = None
    word_count_target: Optional[StrictInt] = Field(default=None, gt=0)


class Act(StoryModel):
    id: StrictInt = Field(gt=0)
    title: str
    description: str
    chapters: Optional[List[StrictInt]] = None


class Pacing(StoryModel):
    opening_hook: Optional[str] = None
    inciting_incident: Optional[str] = None
    midpoint: Optional[str] = None
    climax: Optional[str] = None
    resolution: Optional[str] = None


class Outline(BaseElement):
    """Structure of the whole story."""

    type: Literal["outline"] = "outline"
    structure_type: StructureType
    acts: Optional[List[Act]] = None
    plot_threads: Optional[List[StrictInt]] = None
    character_arcs: Optional[List[StrictInt]] = None
    pacing: Optional[Pacing] = None


class Relationship(StoryModel):
    character_id: StrictInt
    relationship: str


class Biography(StoryModel):
    age: Optional[StrictInt] = None
    background: Optional[str] = None
    occupation: Optional[str] = None
    relationships: Optional[List[Relationship]] = None


class Psychology(StoryModel):
    motivations: Optional[List[str]] = None
    fears: Optional[List[str]] = None
    goals: Optional[List[str]] = None
    flaws: Optional[List[str]] = None
    strengths: Optional[List[str]] = None


class CharacterArc(StoryModel):
    summary: Optional[str] = None
    starting_state: Optional[str] = None
    midpoint_state: Optional[str] = None
    ending_state: Optional[str] = None
    key_moments: Optional[List[str]] = None


class Voice(StoryModel):
    speech_patterns: Optional[List[str]] = None
    vocabulary: Optional[str] = None
    tone: Optional[str] = None
    distinctive_features: Optional[List[str]] = None


class Character(BaseElement):
    """A character and their development profile."""

    type: Literal["character"] = "character"
    character_type: CharacterType
    biography: Optional[Biography] = None
    psychology: Optional[Psychology] = None
    arc: Optional[CharacterArc] = None
    voice: Optional[Voice] = None
    appearance: Optional[str] = None
    traits: Optional[List[str]] = None

    @property
    def name(self) -> str:
        return self.title


class CharacterMoment(StoryModel):
    character_id: Optional[StrictInt] = None
    development: str


class Chapter(BaseElement):
    """A planned chapter and its cross-references."""

    type: Literal["chapter"] = "chapter"
    chapter_number: StrictInt = Field(gt=0)
    scenes: Optional[List[StrictInt]] = None
    purpose: str
    conflicts: Optional[List[str]] = None
    character_moments: Optional[List[CharacterMoment]] = None
    plot_advancement: Optional[str] = None
    word_count_target: Optional[StrictInt] = Field(default=None, gt=0)
    content: Optional[str] = None
    characters: Optional[List[StrictInt]] = None
    plot_threads: Optional[List[StrictInt]] = None
    pov: Optional[StrictInt] = None

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_word_count(cls, data: Any) -> Any:
        # Older story bibles stored the chapter target as targetWordCount
        if isinstance(data, dict) and "targetWordCount" in data and "wordCountTarget" not in data:
            data = dict(data)
            data["wordCountTarget"] = data.pop("targetWordCount")
        return data

    def lists_character(self, character_id: int) -> bool:
        return character_id in (self.characters or [])


class Scene(BaseElement):
    """A scene owned by one chapter."""

    type: Literal["scene"] = "scene"
    scene_type: SceneType
    chapter_id: StrictInt
    characters: List[StrictInt] = Field(default_factory=list)
    setting: str
    purpose: str
    conflict: Optional[str] = None
    dialogue: Optional[StrictBool] = None
    action: Optional[StrictBool] = None
    pov: Optional[StrictInt] = None
    content: Optional[str] = None
    beats: Optional[List[str]] = None


class PlotThread(BaseElement):
    """A plot line running through several chapters."""

    type: Literal["plot-thread"] = "plot-thread"
    thread_type: ThreadType
    introduction: Optional[str] = None
    development: Optional[List[str]] = None
    resolution: Optional[str] = None
    characters: Optional[List[StrictInt]] = None
    chapters: Optional[List[StrictInt]] = None


ELEMENT_MODELS: Dict[ElementType, Type[BaseElement]] = {
    ElementType.PREMISE: Premise,
    ElementType.OUTLINE: Outline,
    ElementType.CHARACTER: Character,
    ElementType.CHAPTER: Chapter,
    ElementType.SCENE: Scene,
    ElementType.PLOT_THREAD: PlotThread,
}


def validate_element(data: Dict[str, Any], element_type) -> BaseElement:
    """Validate raw element data against the schema for its type."""
    try:
        model = ELEMENT_MODELS[ElementType(element_type)]
    except ValueError:
        raise ValidationFailed(f"Unknown story element type: {element_type}")
    return model.from_dict(data)


# Shapes requested from the generation service

class GeneratedShape(BaseModel):
    """Base for structured replies from the generation service."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class AiPremise(GeneratedShape):
    content: str = Field(description="The core story premise")
    genre: Genre = Field(description="Primary genre")
    themes: List[str] = Field(description="Core themes and messages")
    target_audience: str = Field(description="Target reader demographic")
    word_count_target: int = Field(gt=0, description="Target word count")


class AiCharacter(GeneratedShape):
    title: str = Field(description="Character name")
    description: str = Field(description="Brief character description")
    character_type: CharacterType = Field(description="Role in the story")
    motivations: List[str] = Field(description="Core motivations")
    fears: List[str] = Field(description="Primary fears")
    goals: List[str] = Field(description="Character goals")
    traits: List[str] = Field(description="Key personality traits")
    arc: str = Field(description="Character development arc summary")
    speech_patterns: List[str] = Field(default_factory=list, description="Characteristic speech patterns")
    tone: Optional[str] = Field(default=None, description="Tone of voice")


class AiChapter(GeneratedShape):
    title: str = Field(description="Chapter title")
    description: str = Field(description="Chapter summary")
    purpose: str = Field(description="What this chapter accomplishes")
    conflicts: List[str] = Field(description="Conflicts in this chapter")
    plot_advancement: str = Field(description="How this chapter advances the plot")
    character_moments: List[str] = Field(description="Key character development moments")


class AiPlotThread(GeneratedShape):
    description: str = Field(description="Plot thread summary")
    introduction: str = Field(description="Where and how the thread is introduced")
    development: List[str] = Field(description="Key development milestones in order")
    resolution: str = Field(description="How the thread is intended to resolve")
