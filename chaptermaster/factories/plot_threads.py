"""Plot thread creation."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..ai.claude_client import GenerationService
from ..ai.enrichment import Enriched, enrich
from ..ai.prompts import plot_thread_prompt
from ..core.constants import Priority, ThreadType
from ..core.elements import AiPlotThread, PlotThread
from ..io.documents import render_plot_thread
from ..io.story_bible_store import StoryBibleStore

logger = logging.getLogger(__name__)


@dataclass
class CreatedPlotThread:
    plot_thread: PlotThread
    file_path: Path
    linked_chapters: List[int]
    enriched: bool = False


class PlotThreadCreator:
    """Adds plot threads and links them into the chapters they run through."""

    def __init__(self, store: StoryBibleStore, service: Optional[GenerationService] = None):
        self.store = store
        self.service = service

    async def create(
        self,
        title: str,
        thread_type: str = ThreadType.SUBPLOT.value,
        description: Optional[str] = None,
        introduction: Optional[str] = None,
        characters: Optional[List[int]] = None,
        chapters: Optional[List[int]] = None,
        generate_details: bool = True,
        priority: str = Priority.MEDIUM.value,
    ) -> CreatedPlotThread:
        thread_type = ThreadType(thread_type)

        with self.store.transaction() as bible:
            plot_thread = PlotThread(
                id=bible.next_id("plot_threads"),
                title=title,
                description=description or f"{thread_type.value} plot thread",
                thread_type=thread_type,
                priority=Priority(priority),
                introduction=introduction,
                characters=list(characters or []),
                chapters=list(chapters or []),
            )

            enriched = False
            if generate_details:
                prompt = plot_thread_prompt(
                    bible.premise,
                    title,
                    thread_type.value,
                    description,
                    bible.character_names(characters or []),
                )
                result = await enrich(self.service, prompt, AiPlotThread, "plot_thread")
                if isinstance(result, Enriched):
                    generated = result.value
                    plot_thread.description = description or generated.description or plot_thread.description
                    plot_thread.introduction = introduction or generated.introduction
                    plot_thread.development = generated.development
                    plot_thread.resolution = generated.resolution
                    enriched = True

            # Chapters reference threads by ID, so record the thread on each chapter too
            linked = []
            for chapter_id in plot_thread.chapters or []:
                chapter = bible.get_chapter(chapter_id)
                if chapter is None:
                    logger.warning(f"Plot thread {title!r} names unknown chapter {chapter_id}")
                    continue
                if plot_thread.id not in (chapter.plot_threads or []):
                    chapter.plot_threads = [*(chapter.plot_threads or []), plot_thread.id]
                    chapter.touch()
                linked.append(chapter_id)

            bible.add_plot_thread(plot_thread)

        file_path = self.store.file_handler.write_file(
            self.store.plot_thread_path(title),
            render_plot_thread(plot_thread, bible),
        )

        logger.info(f"Created plot thread {plot_thread.id}: {title}")
        return CreatedPlotThread(plot_thread=plot_thread, file_path=file_path,
                                 linked_chapters=linked, enriched=enriched)
