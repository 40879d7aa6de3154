"""Core domain models for Chapter Master."""

from .constants import (
    CharacterType,
    ElementStatus,
    ElementType,
    Genre,
    Priority,
    SceneType,
    StructureType,
    ThreadType,
    child_element_types,
    parent_element_type,
)
from .elements import (
    Chapter,
    Character,
    Outline,
    PlotThread,
    Premise,
    Scene,
    validate_element,
)
from .story_bible import StoryBible, StoryMeta, StyleGuide

__all__ = [
    "CharacterType",
    "ElementStatus",
    "ElementType",
    "Genre",
    "Priority",
    "SceneType",
    "StructureType",
    "ThreadType",
    "child_element_types",
    "parent_element_type",
    "Chapter",
    "Character",
    "Outline",
    "PlotThread",
    "Premise",
    "Scene",
    "validate_element",
    "StoryBible",
    "StoryMeta",
    "StyleGuide",
]
