"""Consistency checking for the story bible."""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from ..ai.claude_client import GenerationService
from ..ai.prompts import consistency_analysis_prompt
from ..core.constants import TO_BE_DEVELOPED, ElementStatus
from ..core.elements import Chapter, Character, PlotThread
from ..core.story_bible import StoryBible
from .issues import (
    CharacterIssue,
    FixedIssue,
    Issue,
    IssueType,
    PlotIssue,
    Severity,
    StyleIssue,
    TimelineIssue,
)

logger = logging.getLogger(__name__)


class CheckType(str, Enum):
    ALL = "all"
    CHARACTER = "character"
    PLOT = "plot"
    TIMELINE = "timeline"
    STYLE = "style"


class FixMode(str, Enum):
    """How far auto-fix may go: conservative touches only minor issues."""
    CONSERVATIVE = "conservative"
    AGGRESSIVE = "aggressive"


@dataclass
class CheckOptions:
    """Scope of one consistency run."""
    check_type: CheckType = CheckType.ALL
    character_id: Optional[int] = None
    plot_thread_id: Optional[int] = None
    start_chapter: int = 1
    end_chapter: Optional[int] = None

    def __post_init__(self):
        self.check_type = CheckType(self.check_type)

    def runs(self, check_type: CheckType) -> bool:
        return self.check_type in (CheckType.ALL, check_type)

    def chapters_in_scope(self, bible: StoryBible) -> List[Chapter]:
        return [
            chapter for chapter in bible.all_chapters
            if chapter.chapter_number >= self.start_chapter
            and (self.end_chapter is None or chapter.chapter_number <= self.end_chapter)
        ]

    def characters_in_scope(self, bible: StoryBible) -> List[Character]:
        if self.character_id is None:
            return bible.all_characters
        return [c for c in bible.all_characters if c.id == self.character_id]

    def plot_threads_in_scope(self, bible: StoryBible) -> List[PlotThread]:
        if self.plot_thread_id is None:
            return bible.all_plot_threads
        return [p for p in bible.all_plot_threads if p.id == self.plot_thread_id]


def _fix_character_unlisted(bible: StoryBible, issue: Issue) -> bool:
    """Add the character to the chapter's character list."""
    chapter = bible.get_chapter(issue.chapter_id)
    if chapter is None or issue.character_id is None or chapter.lists_character(issue.character_id):
        return False
    chapter.characters = [*(chapter.characters or []), issue.character_id]
    chapter.touch()
    return True


# Issue types without an entry have no automatic fix
FIX_HANDLERS: Dict[IssueType, Callable[[StoryBible, Issue], bool]] = {
    IssueType.CHARACTER_UNLISTED: _fix_character_unlisted,
}


class ConsistencyChecker:
    """Checks the story bible for structural defects.

    ``check`` is pure and deterministic. ``analyze`` optionally asks the
    generation service for advisory commentary, and ``auto_fix`` mutates
    the bible it is given; persisting is left to the caller.
    """

    def __init__(self, service: Optional[GenerationService] = None, analysis_timeout: float = 120.0):
        self.service = service
        self.analysis_timeout = analysis_timeout

    def check(self, bible: StoryBible, options: Optional[CheckOptions] = None) -> List[Issue]:
        """Run the rule families selected by ``options``, in a fixed order."""
        options = options or CheckOptions()
        chapters = options.chapters_in_scope(bible)

        issues: List[Issue] = []
        if options.runs(CheckType.CHARACTER):
            issues.extend(self._check_characters(options.characters_in_scope(bible), chapters, bible))
        if options.runs(CheckType.PLOT):
            issues.extend(self._check_plot_threads(options.plot_threads_in_scope(bible), chapters))
        if options.runs(CheckType.TIMELINE):
            issues.extend(self._check_timeline(chapters))
        if options.runs(CheckType.STYLE):
            issues.extend(self._check_style(chapters, bible))
        return issues

    def _check_characters(self, characters: List[Character], chapters: List[Chapter],
                          bible: StoryBible) -> List[Issue]:
        issues: List[Issue] = []
        chapters_by_id = {chapter.id: chapter for chapter in chapters}

        for character in characters:
            for scene in bible.all_scenes:
                if character.id not in scene.characters:
                    continue
                parent = chapters_by_id.get(scene.chapter_id)
                if parent is not None and not parent.lists_character(character.id):
                    issues.append(CharacterIssue(
                        type=IssueType.CHARACTER_UNLISTED,
                        description=(
                            f'Character "{character.title}" appears in scenes but not listed '
                            f'in chapter "{parent.title}"'
                        ),
                        severity=Severity.MODERATE,
                        character_id=character.id,
                        chapter_id=parent.id,
                    ))

            appearances = sum(1 for chapter in chapters if chapter.lists_character(character.id))
            if character.arc is not None and appearances > 1:
                summary = character.arc.summary
                if not summary or summary == TO_BE_DEVELOPED:
                    issues.append(CharacterIssue(
                        type=IssueType.CHARACTER_ARC_UNDEFINED,
                        description=(
                            f'Character "{character.title}" appears in multiple chapters '
                            f'but lacks defined character arc'
                        ),
                        severity=Severity.MINOR,
                        character_id=character.id,
                    ))
        return issues

    def _check_plot_threads(self, plot_threads: List[PlotThread], chapters: List[Chapter]) -> List[Issue]:
        issues: List[Issue] = []
        for plot_thread in plot_threads:
            title = plot_thread.title.lower()
            referenced = any(
                plot_thread.id in (chapter.plot_threads or [])
                or title in (chapter.plot_advancement or "").lower()
                for chapter in chapters
            )

            if not referenced and plot_thread.status != ElementStatus.COMPLETED:
                issues.append(PlotIssue(
                    type=IssueType.PLOT_THREAD_UNUSED,
                    description=f'Plot thread "{plot_thread.title}" is not referenced in any chapters',
                    severity=Severity.MINOR,
                    plot_thread_id=plot_thread.id,
                ))

            if plot_thread.status == ElementStatus.COMPLETED and not plot_thread.resolution:
                issues.append(PlotIssue(
                    type=IssueType.PLOT_THREAD_UNRESOLVED,
                    description=(
                        f'Plot thread "{plot_thread.title}" marked complete but no resolution specified'
                    ),
                    severity=Severity.MODERATE,
                    plot_thread_id=plot_thread.id,
                ))
        return issues

    def _check_timeline(self, chapters: List[Chapter]) -> List[Issue]:
        issues: List[Issue] = []
        numbers = sorted(chapter.chapter_number for chapter in chapters)

        for previous, current in zip(numbers, numbers[1:]):
            if current - previous > 1:
                issues.append(TimelineIssue(
                    type=IssueType.CHAPTER_SEQUENCE_GAP,
                    description=f"Gap in chapter sequence: Chapter {previous} followed by Chapter {current}",
                    severity=Severity.MINOR,
                ))

        # One issue for every occurrence after the first
        seen = set()
        for number in numbers:
            if number in seen:
                issues.append(TimelineIssue(
                    type=IssueType.DUPLICATE_CHAPTER_NUMBER,
                    description=f"Duplicate chapter number: {number}",
                    severity=Severity.CRITICAL,
                ))
            seen.add(number)
        return issues

    def _check_style(self, chapters: List[Chapter], bible: StoryBible) -> List[Issue]:
        style = bible.style
        if style is None:
            return []

        issues: List[Issue] = []
        if style.pov:
            missing = [chapter for chapter in chapters if not chapter.pov]
            if missing:
                issues.append(StyleIssue(
                    type=IssueType.POV_UNDEFINED,
                    description=f"{len(missing)} chapters don't specify POV character",
                    severity=Severity.MINOR,
                ))
        # TODO: compare chapter content against style.tense once chapter prose is analysed
        return issues

    async def analyze(self, bible: StoryBible, issues: List[Issue],
                      options: Optional[CheckOptions] = None) -> Optional[str]:
        """Ask for a prioritized narrative analysis of the issues.

        Advisory only: returns None when there is nothing to analyze, no
        generation service, or the call fails or times out.
        """
        if not issues or self.service is None:
            return None

        options = options or CheckOptions()
        prompt = consistency_analysis_prompt(
            genre=bible.premise.genre.value if bible.premise else None,
            chapters_analyzed=len(options.chapters_in_scope(bible)),
            characters_analyzed=len(bible.all_characters),
            issues=issues,
        )
        try:
            return await asyncio.wait_for(
                self.service.generate_text(prompt, role="research"),
                timeout=self.analysis_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Consistency analysis timed out after {self.analysis_timeout} seconds")
        except Exception as e:
            logger.warning(f"Could not get AI consistency analysis: {e}")
        return None

    @staticmethod
    def fixable(issues: List[Issue], fix_mode: FixMode = FixMode.CONSERVATIVE) -> List[Issue]:
        """Issues the mode admits and that have a fix handler."""
        fix_mode = FixMode(fix_mode)
        return [
            issue for issue in issues
            if (fix_mode == FixMode.AGGRESSIVE or issue.severity == Severity.MINOR)
            and issue.type in FIX_HANDLERS
        ]

    def auto_fix(self, bible: StoryBible, issues: List[Issue],
                 fix_mode: FixMode = FixMode.CONSERVATIVE) -> List[FixedIssue]:
        """Apply the fixes the mode allows and report the ones that changed the bible."""
        fix_mode = FixMode(fix_mode)
        fixed: List[FixedIssue] = []

        for issue in self.fixable(issues, fix_mode):
            handler = FIX_HANDLERS[issue.type]
            if handler(bible, issue):
                logger.info(f"Auto-fixed {issue.type.value}: {issue.description}")
                fixed.append(FixedIssue(issue=issue, fix_mode=fix_mode.value))

        return fixed
