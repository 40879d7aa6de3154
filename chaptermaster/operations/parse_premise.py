"""parse-premise: analyze a premise and set up the story bible."""

from typing import Optional

from ..factories.premise import PremiseParser
from .result import OperationContext, OperationResult, operation


@operation("parse premise")
async def parse_premise(
    ctx: OperationContext,
    premise: Optional[str] = None,
    file_path: Optional[str] = "PREMISE.md",
    target_word_count: int = 80000,
    generate_outline: bool = True,
    structure_type: str = "three-act",
    title: Optional[str] = None,
    author: Optional[str] = None,
) -> OperationResult:
    parser = PremiseParser(ctx.store, ctx.service)
    parsed = await parser.parse(
        premise=premise,
        file_path=file_path,
        target_word_count=target_word_count,
        generate_outline=generate_outline,
        structure_type=structure_type,
        title=title,
        author=author,
    )
    analysis = parsed.analysis
    store = ctx.store

    outline_line = f"\n- Generated basic outline: {parsed.outline_path}" if parsed.outline_path else ""
    if parsed.outline_cleared:
        outline_line = "\n- Previous outline removed; it described the old premise"
    heading = "Story Structure Updated" if parsed.replaced_existing else "Story Structure Created"
    message = f"""✅ Premise parsed successfully!

📁 {heading}:
- Story bible: {store.story_bible_path}
- Premise document: {parsed.premise_path}{outline_line}
- Characters directory: {store.characters_dir}
- Chapters directory: {store.chapters_dir}

📊 Analysis Results:
- Genre: {analysis.genre.value}
- Target audience: {analysis.target_audience}
- Target word count: {analysis.word_count_target:,}
- Themes: {len(analysis.themes)}

🎯 Next Steps:
- Use "create-character" to develop main characters
- Use "generate-chapter" to start outlining chapters
- Use "get-story-status" to track progress"""

    return OperationResult(
        success=True,
        message=message,
        data={
            "premise": analysis.model_dump(mode="json", by_alias=True),
            "storyBiblePath": str(store.story_bible_path),
            "premisePath": str(parsed.premise_path),
            "outlinePath": str(parsed.outline_path) if parsed.outline_path else None,
            "replacedExisting": parsed.replaced_existing,
            "outlineCleared": parsed.outline_cleared,
        },
    )
