"""Issues reported by the consistency checker."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, Optional

from ..core.elements import now_iso


class IssueType(str, Enum):
    """Kind of consistency defect."""
    CHARACTER_UNLISTED = "character-unlisted"
    CHARACTER_ARC_UNDEFINED = "character-arc-undefined"
    PLOT_THREAD_UNUSED = "plot-thread-unused"
    PLOT_THREAD_UNRESOLVED = "plot-thread-unresolved"
    CHAPTER_SEQUENCE_GAP = "chapter-sequence-gap"
    DUPLICATE_CHAPTER_NUMBER = "duplicate-chapter-number"
    POV_UNDEFINED = "pov-undefined"


class Severity(str, Enum):
    MINOR = "minor"
    MODERATE = "moderate"
    CRITICAL = "critical"


@dataclass(frozen=True)
class Issue:
    """A detected defect and the entities it concerns.

    Each rule family has its own subclass that only accepts the issue
    types that family can produce.
    """

    type: IssueType
    description: str
    severity: Severity
    character_id: Optional[int] = None
    chapter_id: Optional[int] = None
    plot_thread_id: Optional[int] = None

    allowed_types: ClassVar[FrozenSet[IssueType]] = frozenset(IssueType)

    def __post_init__(self):
        if self.type not in self.allowed_types:
            raise ValueError(f"{type(self).__name__} cannot carry issue type {self.type.value}")

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.type.value,
            "description": self.description,
            "severity": self.severity.value,
        }
        if self.character_id is not None:
            data["characterId"] = self.character_id
        if self.chapter_id is not None:
            data["chapterId"] = self.chapter_id
        if self.plot_thread_id is not None:
            data["plotThreadId"] = self.plot_thread_id
        return data


@dataclass(frozen=True)
class CharacterIssue(Issue):
    allowed_types: ClassVar[FrozenSet[IssueType]] = frozenset({
        IssueType.CHARACTER_UNLISTED,
        IssueType.CHARACTER_ARC_UNDEFINED,
    })


@dataclass(frozen=True)
class PlotIssue(Issue):
    allowed_types: ClassVar[FrozenSet[IssueType]] = frozenset({
        IssueType.PLOT_THREAD_UNUSED,
        IssueType.PLOT_THREAD_UNRESOLVED,
    })


@dataclass(frozen=True)
class TimelineIssue(Issue):
    allowed_types: ClassVar[FrozenSet[IssueType]] = frozenset({
        IssueType.CHAPTER_SEQUENCE_GAP,
        IssueType.DUPLICATE_CHAPTER_NUMBER,
    })


@dataclass(frozen=True)
class StyleIssue(Issue):
    allowed_types: ClassVar[FrozenSet[IssueType]] = frozenset({IssueType.POV_UNDEFINED})


@dataclass(frozen=True)
class FixedIssue:
    """An issue that auto-fix resolved."""

    issue: Issue
    fix_mode: str
    fixed_at: str = ""

    def __post_init__(self):
        if not self.fixed_at:
            object.__setattr__(self, "fixed_at", now_iso())

    def to_dict(self) -> Dict[str, Any]:
        data = self.issue.to_dict()
        data["fixedAt"] = self.fixed_at
        data["fixMode"] = self.fix_mode
        return data
