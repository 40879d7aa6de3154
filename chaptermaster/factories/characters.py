"""Character creation with optional AI-developed profiles."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..ai.claude_client import GenerationService
from ..ai.enrichment import Enriched, enrich
from ..ai.prompts import character_prompt
from ..core.constants import CharacterType, Priority
from ..core.elements import (
    AiCharacter,
    Biography,
    Character,
    CharacterArc,
    Psychology,
    Relationship,
    Voice,
)
from ..core.story_bible import StoryBible
from ..exceptions import PreconditionFailed
from ..io.documents import render_character
from ..io.story_bible_store import StoryBibleStore

logger = logging.getLogger(__name__)

RELATED_CHARACTER = "Related character"


@dataclass
class CreatedCharacter:
    character: Character
    file_path: Path
    enriched: bool = False


class CharacterCreator:
    """Adds characters to the story bible and writes their profile documents."""

    def __init__(self, store: StoryBibleStore, service: Optional[GenerationService] = None):
        self.store = store
        self.service = service

    async def create(
        self,
        name: str,
        character_type: str = CharacterType.SUPPORTING.value,
        description: Optional[str] = None,
        generate_profile: bool = True,
        generate_arc: bool = True,
        generate_voice: bool = True,
        related_characters: Optional[List[int]] = None,
        priority: str = Priority.MEDIUM.value,
    ) -> CreatedCharacter:
        character_type = CharacterType(character_type)

        with self.store.transaction() as bible:
            if bible.premise is None:
                raise PreconditionFailed("No premise found in story bible. Complete premise setup first.")

            character = Character(
                id=bible.next_id("characters"),
                title=name,
                description=description or f"{character_type.value} character",
                character_type=character_type,
                priority=Priority(priority),
            )
            if related_characters:
                character.biography = Biography(relationships=[
                    Relationship(character_id=related_id, relationship=RELATED_CHARACTER)
                    for related_id in related_characters
                ])

            enriched = False
            sections = self._requested_sections(generate_profile, generate_arc, generate_voice)
            if sections:
                prompt = character_prompt(
                    bible.premise,
                    name,
                    character_type.value,
                    description,
                    sections,
                    bible.character_names(related_characters or []),
                )
                result = await enrich(self.service, prompt, AiCharacter, "character_profile")
                if isinstance(result, Enriched):
                    self._apply(character, result.value, generate_profile, generate_arc, generate_voice)
                    enriched = True
                else:
                    logger.info(f"Creating {name} with a basic profile: {result.reason}")

            bible.add_character(character)

        file_path = self._write_profile(character, bible)

        logger.info(f"Created character {character.id}: {name}")
        return CreatedCharacter(character=character, file_path=file_path, enriched=enriched)

    @staticmethod
    def _requested_sections(profile: bool, arc: bool, voice: bool) -> List[str]:
        sections = []
        if profile:
            sections.append("Detailed character description and background")
            sections.append("Core motivations, fears, and goals")
            sections.append("Key personality traits")
        if arc:
            sections.append("Character development arc summary")
        if voice:
            sections.append("Characteristic speech patterns and tone of voice")
        if sections:
            sections.append("Any relevant relationships with other characters")
        return sections

    @staticmethod
    def _apply(character: Character, generated: AiCharacter, profile: bool, arc: bool, voice: bool) -> None:
        if profile:
            character.description = generated.description or character.description
            character.psychology = Psychology(
                motivations=generated.motivations,
                fears=generated.fears,
                goals=generated.goals,
            )
            character.traits = generated.traits
        if arc:
            character.arc = CharacterArc(summary=generated.arc)
        if voice and (generated.speech_patterns or generated.tone):
            character.voice = Voice(speech_patterns=generated.speech_patterns, tone=generated.tone)

    def _write_profile(self, character: Character, bible: StoryBible) -> Path:
        return self.store.file_handler.write_file(
            self.store.character_path(character.title),
            render_character(character, bible),
        )
