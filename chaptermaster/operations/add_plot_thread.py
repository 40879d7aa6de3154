"""add-plot-thread: add a plot thread and link it into chapters."""

from typing import List, Optional

from ..factories.plot_threads import PlotThreadCreator
from .result import OperationContext, OperationResult, operation


@operation("add plot thread")
async def add_plot_thread(
    ctx: OperationContext,
    title: str,
    thread_type: str = "subplot",
    description: Optional[str] = None,
    introduction: Optional[str] = None,
    characters: Optional[List[int]] = None,
    chapters: Optional[List[int]] = None,
    generate_details: bool = True,
    priority: str = "medium",
) -> OperationResult:
    creator = PlotThreadCreator(ctx.store, ctx.service)
    created = await creator.create(
        title=title,
        thread_type=thread_type,
        description=description,
        introduction=introduction,
        characters=characters,
        chapters=chapters,
        generate_details=generate_details,
        priority=priority,
    )
    plot_thread = created.plot_thread
    linked = ", ".join(str(c) for c in created.linked_chapters) or "none yet"

    message = f"""✅ Plot thread "{plot_thread.title}" added!

🧵 Plot Thread Details:
- ID: {plot_thread.id}
- Type: {plot_thread.thread_type.value}
- Status: {plot_thread.status.value}
- Linked chapters: {linked}
- Milestones: {len(plot_thread.development or [])}
- Document: {created.file_path}

🎯 Next Steps:
- Reference this thread from chapters with "generate-chapter"
- Use "check-consistency" to find chapters that never pick it up"""

    return OperationResult(
        success=True,
        message=message,
        data={
            "plotThread": plot_thread.to_dict(),
            "filePath": str(created.file_path),
            "linkedChapters": created.linked_chapters,
            "enriched": created.enriched,
        },
    )
