"""Progress statistics and recommendations derived from a story bible.

Everything here is read-only: functions take a StoryBible and return plain
data. Formatting for humans lives in the operations layer.
"""

import math
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .constants import PRIORITY_ORDER, CharacterType, ElementStatus, Priority
from .elements import Chapter, Scene
from .story_bible import StoryBible

COMPLETION_WEIGHTS: Dict[str, int] = {
    "premise": 10,
    "chapters": 60,
    "characters": 20,
    "plot_threads": 10,
}


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values, unlike round()."""
    return int(math.floor(value + 0.5))


def percentage(part: int, total: int) -> int:
    return round_half_up(part / total * 100) if total > 0 else 0


def count_words(text: Optional[str]) -> int:
    return len(text.split()) if text else 0


@dataclass
class ChapterStats:
    total: int = 0
    draft: int = 0
    in_progress: int = 0
    review: int = 0
    needs_revision: int = 0
    completed: int = 0
    published: int = 0


@dataclass
class CharacterStats:
    total: int = 0
    protagonist: int = 0
    antagonist: int = 0
    supporting: int = 0
    minor: int = 0
    completed: int = 0


@dataclass
class CollectionStats:
    total: int = 0
    completed: int = 0


@dataclass
class WordCounts:
    target: int = 0
    planned: int = 0
    written: int = 0

    @property
    def progress(self) -> int:
        return min(100, percentage(self.written, self.target))


@dataclass
class StoryStats:
    premise_completed: bool = False
    chapters: ChapterStats = field(default_factory=ChapterStats)
    characters: CharacterStats = field(default_factory=CharacterStats)
    scenes: CollectionStats = field(default_factory=CollectionStats)
    plot_threads: CollectionStats = field(default_factory=CollectionStats)
    word_counts: WordCounts = field(default_factory=WordCounts)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["word_counts"]["progress"] = self.word_counts.progress
        return data


@dataclass
class Completion:
    overall: int
    chapters: int
    characters: int
    scenes: int
    plot_threads: int

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


def collect_stats(bible: StoryBible) -> StoryStats:
    """Count elements per collection and per status."""
    stats = StoryStats()
    stats.premise_completed = bool(bible.premise and bible.premise.status == ElementStatus.COMPLETED)

    chapter_fields = {
        ElementStatus.DRAFT: "draft",
        ElementStatus.IN_PROGRESS: "in_progress",
        ElementStatus.REVIEW: "review",
        ElementStatus.NEEDS_REVISION: "needs_revision",
        ElementStatus.COMPLETED: "completed",
        ElementStatus.PUBLISHED: "published",
    }
    for chapter in bible.all_chapters:
        stats.chapters.total += 1
        name = chapter_fields[chapter.status]
        setattr(stats.chapters, name, getattr(stats.chapters, name) + 1)

    for character in bible.all_characters:
        stats.characters.total += 1
        name = CharacterType(character.character_type).value
        setattr(stats.characters, name, getattr(stats.characters, name) + 1)
        if character.status == ElementStatus.COMPLETED:
            stats.characters.completed += 1

    stats.scenes = CollectionStats(
        total=len(bible.all_scenes),
        completed=sum(1 for s in bible.all_scenes if s.status == ElementStatus.COMPLETED),
    )
    stats.plot_threads = CollectionStats(
        total=len(bible.all_plot_threads),
        completed=sum(1 for p in bible.all_plot_threads if p.status == ElementStatus.COMPLETED),
    )
    stats.word_counts = collect_word_counts(bible)
    return stats


def collect_word_counts(bible: StoryBible) -> WordCounts:
    """Target, planned and written word counts."""
    written = sum(count_words(c.content) for c in bible.all_chapters)
    written += sum(count_words(s.content) for s in bible.all_scenes)
    return WordCounts(
        target=bible.meta.target_word_count or 0,
        planned=sum(c.word_count_target or 0 for c in bible.all_chapters),
        written=written,
    )


def overall_completion(stats: StoryStats) -> int:
    """Weighted completion percentage.

    Only categories that have at least one element count toward the
    denominator; the premise counts only once it is completed.
    """
    total_weight = 0
    completed_weight = 0.0

    if stats.premise_completed:
        total_weight += COMPLETION_WEIGHTS["premise"]
        completed_weight += COMPLETION_WEIGHTS["premise"]

    for name, collection in (
        ("chapters", stats.chapters),
        ("characters", stats.characters),
        ("plot_threads", stats.plot_threads),
    ):
        if collection.total > 0:
            weight = COMPLETION_WEIGHTS[name]
            total_weight += weight
            completed_weight += collection.completed / collection.total * weight

    return percentage(completed_weight, total_weight) if total_weight else 0


def completion_percentages(stats: StoryStats) -> Completion:
    return Completion(
        overall=overall_completion(stats),
        chapters=percentage(stats.chapters.completed, stats.chapters.total),
        characters=percentage(stats.characters.completed, stats.characters.total),
        scenes=percentage(stats.scenes.completed, stats.scenes.total),
        plot_threads=percentage(stats.plot_threads.completed, stats.plot_threads.total),
    )


class NextAction(str, Enum):
    """Steps of the recommendation ladder, in the order they are tried."""
    CREATE_PREMISE = "create-premise"
    GENERATE_CHAPTER = "generate-chapter"
    CREATE_CHARACTER = "create-character"
    CONTINUE_CHAPTER = "continue-chapter"
    START_DRAFT_CHAPTER = "start-draft-chapter"
    REVISE_CHAPTER = "revise-chapter"
    CHECK_CONSISTENCY = "check-consistency"


def recommend_next_action(bible: StoryBible, stats: Optional[StoryStats] = None) -> NextAction:
    """Pick the single most useful next step for the project."""
    stats = stats or collect_stats(bible)
    if bible.premise is None:
        return NextAction.CREATE_PREMISE
    if stats.chapters.total == 0:
        return NextAction.GENERATE_CHAPTER
    if stats.characters.total == 0:
        return NextAction.CREATE_CHARACTER
    if stats.chapters.in_progress > 0:
        return NextAction.CONTINUE_CHAPTER
    if stats.chapters.draft > 0:
        return NextAction.START_DRAFT_CHAPTER
    if stats.chapters.needs_revision > 0:
        return NextAction.REVISE_CHAPTER
    return NextAction.CHECK_CONSISTENCY


@dataclass
class ChapterRecommendation:
    """Outcome of the next-chapter ladder."""
    chapter: Optional[Chapter]
    reason: str
    chapter_number: int
    scenes: List[Scene] = field(default_factory=list)
    next_scene: Optional[Scene] = None


def _as_int(value) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def recommend_next_chapter(
    bible: StoryBible,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    character_focus=None,
    plot_thread=None,
) -> ChapterRecommendation:
    """Find the chapter to work on next.

    In-progress chapters come first, then chapters needing revision, then
    drafts ordered by priority and chapter number. When nothing qualifies
    the recommendation is to create the next chapter in sequence.
    """
    chapters = bible.all_chapters
    if not chapters:
        return ChapterRecommendation(chapter=None, reason="Create first chapter", chapter_number=1)

    character_id = _as_int(character_focus)
    plot_thread_id = _as_int(plot_thread)

    candidates = []
    for chapter in chapters:
        if status and chapter.status != status:
            continue
        if priority and chapter.priority != priority:
            continue
        if character_focus is not None and character_id not in (chapter.characters or []):
            continue
        if plot_thread is not None and plot_thread_id not in (chapter.plot_threads or []):
            continue
        candidates.append(chapter)

    chosen = None
    reason = ""
    in_progress = [c for c in candidates if c.status == ElementStatus.IN_PROGRESS]
    revision = [c for c in candidates if c.status == ElementStatus.NEEDS_REVISION]
    drafts = [c for c in candidates if c.status == ElementStatus.DRAFT]

    if in_progress:
        chosen, reason = in_progress[0], "Continue working on chapter already in progress"
    elif revision:
        chosen, reason = revision[0], "Address revision feedback"
    elif drafts:
        drafts.sort(key=lambda c: (-PRIORITY_ORDER.get(Priority(c.priority), 2), c.chapter_number))
        chosen, reason = drafts[0], "Continue story progression"

    if chosen is None:
        return ChapterRecommendation(
            chapter=None,
            reason="Create next chapter",
            chapter_number=bible.max_chapter_number() + 1,
        )

    scenes = bible.scenes_for_chapter(chosen)
    next_scene = next(
        (s for s in scenes if s.status in (ElementStatus.DRAFT, ElementStatus.IN_PROGRESS)),
        None,
    )
    return ChapterRecommendation(
        chapter=chosen,
        reason=reason,
        chapter_number=chosen.chapter_number,
        scenes=scenes,
        next_scene=next_scene,
    )
