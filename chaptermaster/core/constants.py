"""Closed vocabularies for story elements."""

from enum import Enum
from typing import Dict, List, Optional


class ElementType(str, Enum):
    """Type discriminator of a story element."""
    PREMISE = "premise"
    OUTLINE = "outline"
    CHARACTER = "character"
    CHAPTER = "chapter"
    SCENE = "scene"
    PLOT_THREAD = "plot-thread"


class ElementStatus(str, Enum):
    """Workflow status of a story element."""
    DRAFT = "draft"
    IN_PROGRESS = "in-progress"
    REVIEW = "review"
    NEEDS_REVISION = "needs-revision"
    COMPLETED = "completed"
    PUBLISHED = "published"


class Priority(str, Enum):
    """Priority level of a story element."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Genre(str, Enum):
    """Primary genre of a story."""
    FANTASY = "fantasy"
    ROMANCE = "romance"
    THRILLER = "thriller"
    MYSTERY = "mystery"
    SCIENCE_FICTION = "science-fiction"
    LITERARY = "literary"
    YOUNG_ADULT = "young-adult"
    HORROR = "horror"
    HISTORICAL = "historical"


class StructureType(str, Enum):
    """Story structure methodology used by an outline."""
    SAVE_THE_CAT = "save-the-cat"
    HERO_JOURNEY = "hero-journey"
    THREE_ACT = "three-act"
    SEVEN_POINT = "seven-point"
    GENRE_SPECIFIC = "genre-specific"


class CharacterType(str, Enum):
    """Role of a character in the story."""
    PROTAGONIST = "protagonist"
    ANTAGONIST = "antagonist"
    SUPPORTING = "supporting"
    MINOR = "minor"


class SceneType(str, Enum):
    """Pacing role of a scene."""
    ACTION = "action"
    DIALOGUE = "dialogue"
    EXPOSITION = "exposition"
    CLIMAX = "climax"
    TRANSITION = "transition"
    FLASHBACK = "flashback"


class ThreadType(str, Enum):
    """Kind of plot thread."""
    MAIN = "main"
    SUBPLOT = "subplot"
    CHARACTER_ARC = "character-arc"


PRIORITY_ORDER: Dict[Priority, int] = {
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
}

# Placeholder written where generated content is missing
TO_BE_DEVELOPED = "To be developed"

_PARENTS: Dict[ElementType, ElementType] = {
    ElementType.SCENE: ElementType.CHAPTER,
    ElementType.CHAPTER: ElementType.OUTLINE,
    ElementType.CHARACTER: ElementType.OUTLINE,
    ElementType.PLOT_THREAD: ElementType.OUTLINE,
    ElementType.OUTLINE: ElementType.PREMISE,
}

_CHILDREN: Dict[ElementType, List[ElementType]] = {
    ElementType.PREMISE: [ElementType.OUTLINE],
    ElementType.OUTLINE: [ElementType.CHARACTER, ElementType.CHAPTER, ElementType.PLOT_THREAD],
    ElementType.CHAPTER: [ElementType.SCENE],
    ElementType.CHARACTER: [],
    ElementType.SCENE: [],
    ElementType.PLOT_THREAD: [],
}


def parent_element_type(element_type: ElementType) -> Optional[ElementType]:
    """Get the hierarchical parent type, or None for the top level."""
    return _PARENTS.get(ElementType(element_type))


def child_element_types(element_type: ElementType) -> List[ElementType]:
    """Get the element types nested under a type."""
    return list(_CHILDREN.get(ElementType(element_type), []))
