"""generate-chapter: create or update a chapter and its placeholder scenes."""

from typing import List, Optional

from ..factories.chapters import ChapterGenerator
from .result import OperationContext, OperationResult, operation


@operation("generate chapter")
async def generate_chapter(
    ctx: OperationContext,
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
) -> OperationResult:
    generator = ChapterGenerator(ctx.store, ctx.service)
    generated = await generator.generate(
        chapter_id=chapter_id,
        chapter_number=chapter_number,
        title=title,
        purpose=purpose,
        target_word_count=target_word_count,
        generate_scenes=generate_scenes,
        scene_count=scene_count,
        characters=characters,
        plot_threads=plot_threads,
        conflicts=conflicts,
        priority=priority,
    )
    chapter = generated.chapter
    verb = "created" if generated.is_new else "updated"

    message = f"""✅ Chapter {chapter.chapter_number} {verb} successfully!

📁 Files {verb.capitalize()}:
- Chapter file: {generated.file_path}
- Updated story bible: {ctx.store.story_bible_path}

📖 Chapter Details:
- Title: {chapter.title}
- Number: {chapter.chapter_number}
- Purpose: {chapter.purpose}
- Target Words: {(chapter.word_count_target or 0):,}
- Scenes: {len(chapter.scenes or [])}
- Status: {chapter.status.value}

🎯 Next Steps:
- Develop individual scenes
- Write chapter content
- Use "next-chapter" to find next chapter to work on
- Use "check-consistency" to verify story flow"""

    return OperationResult(
        success=True,
        message=message,
        data={
            "chapter": chapter.to_dict(),
            "scenes": [scene.to_dict() for scene in generated.scenes],
            "filePath": str(generated.file_path),
            "isNewChapter": generated.is_new,
            "sceneCount": len(chapter.scenes or []),
            "enriched": generated.enriched,
        },
    )
