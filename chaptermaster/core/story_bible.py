"""The story bible: the aggregate document holding every story element."""

from typing import Dict, Iterable, List, Optional

from pydantic import Field, StrictInt

from .constants import ElementStatus, Genre
from .elements import (
    BaseElement,
    Chapter,
    Character,
    Outline,
    PlotThread,
    Premise,
    Scene,
    StoryModel,
    now_iso,
)

# Python attribute name -> JSON key of each ID-bearing collection
COLLECTIONS: Dict[str, str] = {
    "characters": "characters",
    "chapters": "chapters",
    "scenes": "scenes",
    "plot_threads": "plotThreads",
    "research": "research",
}

DEFAULT_VERSION = "0.1.0"


class StoryMeta(StoryModel):
    title: str = "Untitled Story"
    author: Optional[str] = None
    genre: Genre
    target_word_count: Optional[StrictInt] = Field(default=None, gt=0)
    created_at: str = Field(default_factory=now_iso)
    updated_at: str = Field(default_factory=now_iso)
    version: Optional[str] = DEFAULT_VERSION


class ResearchNote(StoryModel):
    id: StrictInt = Field(gt=0)
    topic: str
    content: str
    sources: Optional[List[str]] = None
    tags: Optional[List[str]] = None


class StyleGuide(StoryModel):
    voice: Optional[str] = None
    tense: Optional[str] = None
    pov: Optional[str] = None
    tone: Optional[str] = None
    style_notes: Optional[List[str]] = None


class StoryBible(StoryModel):
    """Single source of truth for one project.

    Collections are optional in the document and read through the
    ``all_*`` helpers, which never return None. Element IDs come from
    ``next_id``, which keeps a monotonic counter per collection in
    ``idCounters`` so an ID is never handed out twice.
    """

    meta: StoryMeta
    premise: Optional[Premise] = None
    outline: Optional[Outline] = None
    characters: Optional[List[Character]] = None
    chapters: Optional[List[Chapter]] = None
    scenes: Optional[List[Scene]] = None
    plot_threads: Optional[List[PlotThread]] = None
    research: Optional[List[ResearchNote]] = None
    style: Optional[StyleGuide] = None
    id_counters: Optional[Dict[str, StrictInt]] = None

    # Identity

    def next_id(self, collection: str) -> int:
        """Allocate the next ID for a collection."""
        if collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {collection}")
        key = COLLECTIONS[collection]
        existing = [item.id for item in (getattr(self, collection) or [])]
        counters = dict(self.id_counters or {})
        next_value = max([counters.get(key, 0), *existing]) + 1
        counters[key] = next_value
        self.id_counters = counters
        return next_value

    def touch(self) -> None:
        """Record a mutation of the document."""
        self.meta.updated_at = now_iso()

    # Read helpers

    @property
    def all_characters(self) -> List[Character]:
        return self.characters or []

    @property
    def all_chapters(self) -> List[Chapter]:
        return self.chapters or []

    @property
    def all_scenes(self) -> List[Scene]:
        return self.scenes or []

    @property
    def all_plot_threads(self) -> List[PlotThread]:
        return self.plot_threads or []

    def get_character(self, character_id: int) -> Optional[Character]:
        return _find(self.all_characters, character_id)

    def get_chapter(self, chapter_id: int) -> Optional[Chapter]:
        return _find(self.all_chapters, chapter_id)

    def get_scene(self, scene_id: int) -> Optional[Scene]:
        return _find(self.all_scenes, scene_id)

    def get_plot_thread(self, plot_thread_id: int) -> Optional[PlotThread]:
        return _find(self.all_plot_threads, plot_thread_id)

    def get_element(self, element_type: str, element_id: int) -> Optional[BaseElement]:
        """Look up any element by its type tag and ID."""
        if element_type == "premise":
            return self.premise if self.premise and self.premise.id == element_id else None
        if element_type == "outline":
            return self.outline if self.outline and self.outline.id == element_id else None
        lookups = {
            "character": self.get_character,
            "chapter": self.get_chapter,
            "scene": self.get_scene,
            "plot-thread": self.get_plot_thread,
        }
        if element_type not in lookups:
            raise ValueError(f"Unknown story element type: {element_type}")
        return lookups[element_type](element_id)

    def scenes_for_chapter(self, chapter: Chapter) -> List[Scene]:
        """Scenes listed by a chapter, in the chapter's order."""
        scene_ids = chapter.scenes or []
        by_id = {scene.id: scene for scene in self.all_scenes}
        return [by_id[scene_id] for scene_id in scene_ids if scene_id in by_id]

    def character_names(self, character_ids: Iterable[int]) -> List[str]:
        wanted = set(character_ids)
        return [c.title for c in self.all_characters if c.id in wanted]

    def max_chapter_number(self) -> int:
        return max((c.chapter_number for c in self.all_chapters), default=0)

    # Mutation helpers

    def add_character(self, character: Character) -> Character:
        self.characters = [*self.all_characters, character]
        return character

    def add_chapter(self, chapter: Chapter) -> Chapter:
        self.chapters = [*self.all_chapters, chapter]
        return chapter

    def replace_chapter(self, chapter: Chapter) -> Chapter:
        """Replace the chapter with the same ID in place."""
        chapters = self.all_chapters
        for index, existing in enumerate(chapters):
            if existing.id == chapter.id:
                chapters[index] = chapter
                return chapter
        raise KeyError(f"Chapter {chapter.id} not in story bible")

    def add_scenes(self, scenes: Iterable[Scene]) -> None:
        self.scenes = [*self.all_scenes, *scenes]

    def add_plot_thread(self, plot_thread: PlotThread) -> PlotThread:
        self.plot_threads = [*self.all_plot_threads, plot_thread]
        return plot_thread

    def set_status(self, element_type: str, element_id: int, status: ElementStatus) -> Optional[BaseElement]:
        """Change an element's status; returns None when the element is absent."""
        element = self.get_element(element_type, element_id)
        if element is None:
            return None
        element.status = ElementStatus(status)
        element.touch()
        return element

    @classmethod
    def create(cls, genre: Genre, title: Optional[str] = None, author: Optional[str] = None,
               target_word_count: Optional[int] = None) -> "StoryBible":
        """Create an empty story bible."""
        meta = StoryMeta(
            title=title or "Untitled Story",
            author=author,
            genre=genre,
            target_word_count=target_word_count,
        )
        return cls(meta=meta)


def _find(items: List[BaseElement], element_id: int) -> Optional[BaseElement]:
    for item in items:
        if item.id == element_id:
            return item
    return None
