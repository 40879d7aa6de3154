"""Premise analysis: the step that creates the story bible."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..ai.claude_client import GenerationService
from ..ai.prompts import outline_prompt, premise_analysis_prompt
from ..core.constants import ElementStatus, Priority, StructureType
from ..core.elements import AiPremise, Outline, Premise
from ..core.story_bible import StoryBible
from ..exceptions import ExternalServiceDegraded, ExternalServiceFailed, PreconditionFailed, ValidationFailed
from ..io.documents import render_outline, render_premise
from ..io.story_bible_store import StoryBibleStore

logger = logging.getLogger(__name__)


@dataclass
class ParsedPremise:
    """Outcome of parsing a premise."""
    bible: StoryBible
    analysis: AiPremise
    premise_path: Path
    outline_path: Optional[Path] = None
    replaced_existing: bool = False
    outline_cleared: bool = False


class PremiseParser:
    """Turns premise text into the premise element of a story bible.

    The analysis call is required; without it there is no genre and no
    story bible. Outline generation is optional and only logged when it
    fails.
    """

    def __init__(self, store: StoryBibleStore, service: Optional[GenerationService] = None):
        self.store = store
        self.service = service

    def read_premise(self, premise: Optional[str] = None, file_path: Optional[str] = "PREMISE.md") -> str:
        """Return the premise text, reading ``file_path`` when no text is given."""
        text = premise
        if not text and file_path:
            path = self.store.resolve(file_path)
            try:
                text = self.store.file_handler.read_file(path)
            except OSError as e:
                raise PreconditionFailed(f"Could not read premise file at {path}: {e}") from e

        if not text or not text.strip():
            raise ValidationFailed("No premise text provided")
        return text

    async def parse(
        self,
        premise: Optional[str] = None,
        file_path: Optional[str] = "PREMISE.md",
        target_word_count: int = 80000,
        generate_outline: bool = True,
        structure_type: str = StructureType.THREE_ACT.value,
        title: Optional[str] = None,
        author: Optional[str] = None,
    ) -> ParsedPremise:
        structure_type = StructureType(structure_type)
        premise_text = self.read_premise(premise, file_path)

        if self.service is None:
            raise ExternalServiceFailed("Premise analysis needs the AI service; set ANTHROPIC_API_KEY")

        logger.info("Analyzing premise")
        try:
            analysis = await self.service.generate_object(
                premise_analysis_prompt(premise_text, target_word_count),
                role="research",
                schema=AiPremise,
                schema_name="premise_analysis",
            )
        except ExternalServiceDegraded as e:
            raise ExternalServiceFailed(f"Premise analysis failed: {e}") from e

        premise_element = Premise(
            id=1,
            title="Story Premise",
            description="Core story premise and foundation",
            status=ElementStatus.COMPLETED,
            priority=Priority.HIGH,
            content=analysis.content,
            genre=analysis.genre,
            target_audience=analysis.target_audience,
            themes=analysis.themes,
            word_count_target=analysis.word_count_target,
        )

        outline_text = None
        if generate_outline:
            outline_text = await self._generate_outline(analysis, structure_type)

        outline = None
        if outline_text:
            outline = Outline(
                id=1,
                title="Story Outline",
                description=f"{structure_type.value} outline generated from the premise",
                structure_type=structure_type,
            )

        # Documents are only written once the story bible has been saved
        replaced = self.store.exists()
        outline_cleared = False
        if replaced:
            with self.store.transaction() as bible:
                outline_cleared = outline is None and bible.outline is not None
                self._apply(bible, premise_element, analysis, title, author)
                # An outline of the previous premise no longer applies
                bible.outline = outline
        else:
            bible = StoryBible.create(
                genre=analysis.genre,
                title=title,
                author=author,
                target_word_count=analysis.word_count_target,
            )
            bible.premise = premise_element
            bible.outline = outline
            self.store.create(bible)

        premise_path = self.store.file_handler.write_file(
            self.store.premise_path,
            render_premise(premise_text, analysis, analysis.word_count_target, structure_type.value),
        )
        outline_path = None
        if outline is not None:
            outline_path = self.store.file_handler.write_file(
                self.store.outline_path,
                render_outline(outline, outline_text, str(self.store.premise_path)),
            )
        elif self.store.outline_path.exists():
            self.store.outline_path.unlink()
            outline_cleared = True
            logger.info(f"Removed outline of the previous premise at {self.store.outline_path}")

        logger.info(f"Premise parsed: genre {analysis.genre.value}, {len(analysis.themes)} themes")
        return ParsedPremise(
            bible=bible,
            analysis=analysis,
            premise_path=premise_path,
            outline_path=outline_path,
            replaced_existing=replaced,
            outline_cleared=outline_cleared,
        )

    def _apply(self, bible: StoryBible, premise_element: Premise, analysis: AiPremise,
               title: Optional[str], author: Optional[str]) -> None:
        # Re-parsing replaces the premise only; characters, chapters and the rest stay
        bible.premise = premise_element
        bible.meta.genre = analysis.genre
        bible.meta.target_word_count = analysis.word_count_target
        if title:
            bible.meta.title = title
        if author:
            bible.meta.author = author

    async def _generate_outline(self, analysis: AiPremise, structure_type: StructureType) -> Optional[str]:
        try:
            return await self.service.generate_text(outline_prompt(analysis, structure_type.value), role="main")
        except ExternalServiceFailed as e:
            logger.warning(f"Outline generation failed, continuing without an outline: {e}")
            return None
