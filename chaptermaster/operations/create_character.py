"""create-character: add a character and write their profile."""

from typing import List, Optional

from ..factories.characters import CharacterCreator
from .result import OperationContext, OperationResult, operation


@operation("create character")
async def create_character(
    ctx: OperationContext,
    name: str,
    character_type: str = "supporting",
    description: Optional[str] = None,
    generate_profile: bool = True,
    generate_arc: bool = True,
    generate_voice: bool = True,
    related_characters: Optional[List[int]] = None,
    priority: str = "medium",
) -> OperationResult:
    creator = CharacterCreator(ctx.store, ctx.service)
    created = await creator.create(
        name=name,
        character_type=character_type,
        description=description,
        generate_profile=generate_profile,
        generate_arc=generate_arc,
        generate_voice=generate_voice,
        related_characters=related_characters,
        priority=priority,
    )
    character = created.character
    profile_note = "" if created.enriched else "\n- Profile: basic (AI enrichment unavailable)"

    message = f"""✅ Character "{character.title}" created successfully!

📁 Files Created:
- Character profile: {created.file_path}
- Updated story bible: {ctx.store.story_bible_path}

👤 Character Details:
- Name: {character.title}
- Type: {character.character_type.value}
- ID: {character.id}
- Status: {character.status.value}{profile_note}

🎯 Next Steps:
- Develop character relationships
- Refine character voice and dialogue style
- Use "generate-chapter" to feature this character
- Use "check-consistency" to verify character continuity"""

    return OperationResult(
        success=True,
        message=message,
        data={
            "character": character.to_dict(),
            "filePath": str(created.file_path),
            "id": character.id,
            "enriched": created.enriched,
        },
    )
