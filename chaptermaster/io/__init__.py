"""Input/output handling for Chapter Master."""

from .file_handler import FileHandler, slugify
from .story_bible_store import StoryBibleStore

__all__ = ["FileHandler", "StoryBibleStore", "slugify"]
