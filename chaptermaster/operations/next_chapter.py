"""next-chapter: recommend the chapter to work on next."""

from typing import Optional, Union

from ..core.constants import ElementStatus
from ..core.status import recommend_next_chapter
from .result import OperationContext, OperationResult, operation


@operation("find next chapter")
async def next_chapter(
    ctx: OperationContext,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    include_scenes: bool = True,
    character_focus: Optional[Union[int, str]] = None,
    plot_thread: Optional[Union[int, str]] = None,
) -> OperationResult:
    bible = ctx.store.load()

    if not bible.all_chapters:
        return OperationResult(
            success=True,
            message=(
                "📝 No chapters found in story bible.\n\n🎯 Next Steps:\n"
                '- Use "generate-chapter" to create your first chapter\n'
                "- Start with Chapter 1 to establish your story foundation"
            ),
            data={"nextChapter": None, "recommendation": "Create first chapter", "chapterNumber": 1},
        )

    recommendation = recommend_next_chapter(
        bible,
        status=status,
        priority=priority,
        character_focus=character_focus,
        plot_thread=plot_thread,
    )

    if recommendation.chapter is None:
        number = recommendation.chapter_number
        return OperationResult(
            success=True,
            message=(
                f"📝 All existing chapters are completed or in review.\n\n"
                f"🎯 Next Step: Create Chapter {number}\n\n"
                f'Use "generate-chapter" with chapterNumber={number} to continue your story.'
            ),
            data={
                "nextChapter": None,
                "recommendation": recommendation.reason,
                "chapterNumber": number,
                "completedChapters": sum(
                    1 for c in bible.all_chapters if c.status == ElementStatus.COMPLETED
                ),
                "totalChapters": len(bible.all_chapters),
            },
        )

    chapter = recommendation.chapter
    message = f"📖 Next Chapter to Work On: **{chapter.title}**\n\n"
    message += "📊 Chapter Details:\n"
    message += f"- Number: {chapter.chapter_number}\n"
    message += f"- Status: {chapter.status.value}\n"
    message += f"- Priority: {chapter.priority.value}\n"
    message += f"- Purpose: {chapter.purpose}\n"
    message += f"\n💡 Reason: {recommendation.reason}\n"

    if include_scenes and recommendation.scenes:
        message += "\n🎬 Scenes in this chapter:\n"
        for index, scene in enumerate(recommendation.scenes, start=1):
            message += f"{index}. {scene.title} ({scene.status.value})\n"
        if recommendation.next_scene:
            message += f"\n🎯 Next scene: **{recommendation.next_scene.title}**\n"

    characters = [c for c in bible.all_characters if chapter.lists_character(c.id)]
    if characters:
        message += "\n👥 Characters in this chapter:\n"
        for character in characters:
            message += f"- {character.title} ({character.character_type.value})\n"

    return OperationResult(
        success=True,
        message=message,
        data={
            "nextChapter": chapter.to_dict(),
            "reason": recommendation.reason,
            "chapterNumber": chapter.chapter_number,
            "scenes": [s.to_dict() for s in recommendation.scenes] if include_scenes else None,
            "nextScene": recommendation.next_scene.to_dict()
            if include_scenes and recommendation.next_scene else None,
        },
    )
