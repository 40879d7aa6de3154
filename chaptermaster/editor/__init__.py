"""Consistency checking and auto-fix for the story bible."""

from .consistency_checker import CheckOptions, CheckType, ConsistencyChecker, FixMode
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

__all__ = [
    "CheckOptions",
    "CheckType",
    "ConsistencyChecker",
    "FixMode",
    "CharacterIssue",
    "FixedIssue",
    "Issue",
    "IssueType",
    "PlotIssue",
    "Severity",
    "StyleIssue",
    "TimelineIssue",
]
