"""Loading and saving the story bible document."""

import json
import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional, TypeVar, Union

from ..core.story_bible import StoryBible
from ..exceptions import PersistenceFailed, StoryBibleNotFound
from .file_handler import FileHandler, slugify

logger = logging.getLogger(__name__)

T = TypeVar("T")

STORY_BIBLE_DIR = "story-bible"
STORY_BIBLE_FILE = "story-bible.json"
CHARACTERS_DIR = "characters"
CHAPTERS_DIR = "chapters"
PLOT_THREADS_DIR = "plot-threads"


class StoryBibleStore:
    """Persists the story bible of one project.

    The store is the only place that reads or writes story-bible.json.
    Mutations go through ``transaction()``: load, mutate, bump the update
    timestamp, save. There is no locking; one invocation is assumed to
    finish before the next begins.
    """

    def __init__(self, project_root: Union[str, Path], file_handler: Optional[FileHandler] = None):
        self.project_root = Path(project_root)
        self.file_handler = file_handler or FileHandler()

    # Conventional paths

    @property
    def story_bible_dir(self) -> Path:
        return self.project_root / STORY_BIBLE_DIR

    @property
    def story_bible_path(self) -> Path:
        return self.story_bible_dir / STORY_BIBLE_FILE

    @property
    def premise_path(self) -> Path:
        return self.story_bible_dir / "premise.md"

    @property
    def outline_path(self) -> Path:
        return self.story_bible_dir / "outline.md"

    @property
    def characters_dir(self) -> Path:
        return self.project_root / CHARACTERS_DIR

    @property
    def chapters_dir(self) -> Path:
        return self.project_root / CHAPTERS_DIR

    @property
    def plot_threads_dir(self) -> Path:
        return self.project_root / PLOT_THREADS_DIR

    def plot_thread_path(self, title: str) -> Path:
        return self.plot_threads_dir / f"{slugify(title)}.md"

    def character_path(self, name: str) -> Path:
        return self.characters_dir / f"{slugify(name)}.md"

    def chapter_path(self, chapter_number: int) -> Path:
        return self.chapters_dir / f"chapter-{chapter_number:02d}.md"

    def report_path(self, timestamp_ms: Optional[int] = None) -> Path:
        if timestamp_ms is None:
            timestamp_ms = int(time.time() * 1000)
        return self.story_bible_dir / f"consistency-report-{timestamp_ms}.md"

    def resolve(self, relative_path: Union[str, Path]) -> Path:
        """Resolve a caller-supplied path against the project root."""
        path = Path(relative_path)
        return path if path.is_absolute() else self.project_root / path

    def ensure_structure(self) -> None:
        """Create the standard project directories."""
        for directory in (self.story_bible_dir, self.characters_dir, self.chapters_dir):
            directory.mkdir(parents=True, exist_ok=True)

    # Document access

    def exists(self) -> bool:
        return self.story_bible_path.is_file()

    def load(self) -> StoryBible:
        """Load and validate the story bible."""
        if not self.exists():
            raise StoryBibleNotFound(self.story_bible_path)

        try:
            data = self.file_handler.read_json(self.story_bible_path)
        except json.JSONDecodeError as e:
            raise PersistenceFailed(f"Story bible is not valid JSON: {e}") from e
        except OSError as e:
            raise PersistenceFailed(f"Could not read story bible: {e}") from e

        if not isinstance(data, dict):
            raise PersistenceFailed("Story bible must be a JSON object")

        return StoryBible.from_dict(data)

    def save(self, bible: StoryBible) -> Path:
        """Validate and write the whole story bible, replacing the old file."""
        data = bible.to_dict()
        # Round-trip through the schema so nothing invalid is ever written
        StoryBible.from_dict(data)

        try:
            path = self.file_handler.write_json(self.story_bible_path, data)
        except OSError as e:
            raise PersistenceFailed(f"Could not write story bible: {e}") from e

        logger.debug(f"Saved story bible to {path}")
        return path

    @contextmanager
    def transaction(self) -> Iterator[StoryBible]:
        """Load the story bible, hand it to the caller and save it afterwards.

        Nothing is written if the body raises.
        """
        bible = self.load()
        yield bible
        bible.touch()
        self.save(bible)

    def transact(self, fn: Callable[[StoryBible], T]) -> T:
        """Apply ``fn`` to the story bible inside one transaction."""
        with self.transaction() as bible:
            return fn(bible)

    def create(self, bible: StoryBible) -> Path:
        """Persist a brand-new story bible."""
        self.ensure_structure()
        return self.save(bible)
