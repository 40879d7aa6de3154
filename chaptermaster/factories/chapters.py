"""Chapter planning and placeholder scenes."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..ai.claude_client import GenerationService
from ..ai.enrichment import Enriched, enrich
from ..ai.prompts import chapter_prompt
from ..core.constants import ElementStatus, Priority, SceneType
from ..core.elements import AiChapter, Chapter, CharacterMoment, Scene
from ..core.story_bible import StoryBible
from ..exceptions import PreconditionFailed
from ..io.documents import render_chapter
from ..io.story_bible_store import StoryBibleStore

logger = logging.getLogger(__name__)

DEFAULT_TARGET_WORDS = 3000


@dataclass
class GeneratedChapter:
    chapter: Chapter
    file_path: Path
    is_new: bool
    scenes: List[Scene] = field(default_factory=list)
    enriched: bool = False


class ChapterGenerator:
    """Creates or updates chapters and their placeholder scenes."""

    def __init__(self, store: StoryBibleStore, service: Optional[GenerationService] = None):
        self.store = store
        self.service = service

    async def generate(
        self,
        chapter_id: Optional[int] = None,
        chapter_number: Optional[int] = None,
        title: Optional[str] = None,
        purpose: Optional[str] = None,
        target_word_count: Optional[int] = None,
        generate_scenes: bool = True,
        scene_count: int = 3,
        characters: Optional[List[int]] = None,
        plot_threads: Optional[List[int]] = None,
        conflicts: Optional[List[str]] = None,
        priority: Optional[str] = None,
    ) -> GeneratedChapter:
        """Create a chapter, or update the one with ``chapter_id``.

        Updates keep the chapter's ID, number, status and existing scenes;
        supplied fields replace the stored ones. New chapters default to
        DEFAULT_TARGET_WORDS words and medium priority.
        """
        with self.store.transaction() as bible:
            if chapter_id is not None:
                existing = bible.get_chapter(chapter_id)
                if existing is None:
                    raise PreconditionFailed(f"Chapter with ID {chapter_id} not found.")
                chapter = existing.model_copy(deep=True)
                self._update(chapter, title, purpose, target_word_count, characters,
                             plot_threads, conflicts, priority)
                is_new = False
            else:
                chapter = self._baseline(bible, chapter_number, title, purpose, target_word_count,
                                         characters, plot_threads, conflicts, priority)
                is_new = True

            prompt = chapter_prompt(
                bible.premise,
                chapter,
                chapter.word_count_target or DEFAULT_TARGET_WORDS,
                bible.character_names(chapter.characters or []),
            )
            result = await enrich(self.service, prompt, AiChapter, "chapter_structure")
            enriched = isinstance(result, Enriched)
            if enriched:
                self._apply(chapter, result.value)

            scenes: List[Scene] = []
            if generate_scenes and scene_count > 0:
                scenes = self._placeholder_scenes(bible, chapter, scene_count)
                chapter.scenes = [*(chapter.scenes or []), *(scene.id for scene in scenes)]
                bible.add_scenes(scenes)

            chapter.touch()
            if is_new:
                bible.add_chapter(chapter)
            else:
                bible.replace_chapter(chapter)

        file_path = self.store.file_handler.write_file(
            self.store.chapter_path(chapter.chapter_number),
            render_chapter(chapter, bible),
        )

        logger.info(f"{'Created' if is_new else 'Updated'} chapter {chapter.chapter_number} "
                    f"with {len(scenes)} new scenes")
        return GeneratedChapter(chapter=chapter, file_path=file_path, is_new=is_new,
                                scenes=scenes, enriched=enriched)

    @staticmethod
    def _baseline(bible: StoryBible, chapter_number, title, purpose, target_word_count,
                  characters, plot_threads, conflicts, priority) -> Chapter:
        number = chapter_number or bible.max_chapter_number() + 1
        return Chapter(
            id=bible.next_id("chapters"),
            title=title or f"Chapter {number}",
            chapter_number=number,
            description=purpose or "Chapter description to be developed",
            purpose=purpose or "Chapter purpose to be defined",
            status=ElementStatus.DRAFT,
            priority=Priority(priority or Priority.MEDIUM),
            characters=list(characters or []),
            plot_threads=list(plot_threads or []),
            conflicts=list(conflicts or []),
            scenes=[],
            word_count_target=target_word_count or DEFAULT_TARGET_WORDS,
        )

    @staticmethod
    def _update(chapter: Chapter, title, purpose, target_word_count, characters,
                plot_threads, conflicts, priority) -> None:
        if title:
            chapter.title = title
        if purpose:
            chapter.purpose = purpose
        if target_word_count:
            chapter.word_count_target = target_word_count
        if characters is not None:
            chapter.characters = list(characters)
        if plot_threads is not None:
            chapter.plot_threads = list(plot_threads)
        if conflicts is not None:
            chapter.conflicts = list(conflicts)
        if priority:
            chapter.priority = Priority(priority)

    @staticmethod
    def _apply(chapter: Chapter, generated: AiChapter) -> None:
        chapter.title = generated.title or chapter.title
        chapter.description = generated.description or chapter.description
        chapter.purpose = generated.purpose or chapter.purpose
        chapter.conflicts = generated.conflicts or chapter.conflicts
        chapter.plot_advancement = generated.plot_advancement
        chapter.character_moments = [
            CharacterMoment(development=moment) for moment in generated.character_moments
        ]

    @staticmethod
    def _placeholder_scenes(bible: StoryBible, chapter: Chapter, count: int) -> List[Scene]:
        return [
            Scene(
                id=bible.next_id("scenes"),
                title=f"{chapter.title} - Scene {index}",
                description=f"Scene {index} of chapter {chapter.chapter_number}",
                scene_type=SceneType.DIALOGUE,
                chapter_id=chapter.id,
                characters=list(chapter.characters or []),
                setting="To be determined",
                purpose=f"Advance chapter goals - scene {index}",
                status=ElementStatus.DRAFT,
                priority=Priority.MEDIUM,
            )
            for index in range(1, count + 1)
        ]
