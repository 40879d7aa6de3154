"""
Chapter Master - AI-assisted story planning with a consistency-checked story bible.
"""

__version__ = "0.3.0"

from .core import (
    Chapter,
    Character,
    Outline,
    PlotThread,
    Premise,
    Scene,
    StoryBible,
)
from .io import StoryBibleStore
from .editor import CheckOptions, ConsistencyChecker, Issue
from .operations import OperationContext, OperationResult

__all__ = [
    "Chapter",
    "Character",
    "Outline",
    "PlotThread",
    "Premise",
    "Scene",
    "StoryBible",
    "StoryBibleStore",
    "CheckOptions",
    "ConsistencyChecker",
    "Issue",
    "OperationContext",
    "OperationResult",
]
