"""get-story-status: progress statistics in summary, detailed or table form."""

from ..core.status import (
    Completion,
    NextAction,
    StoryStats,
    collect_stats,
    completion_percentages,
    recommend_next_action,
)
from ..core.story_bible import StoryBible
from .result import OperationContext, OperationResult, operation

FORMATS = ("summary", "detailed", "table")

NEXT_STEP_MESSAGES = {
    NextAction.CREATE_PREMISE: '⭐ Create premise with "parse-premise"',
    NextAction.GENERATE_CHAPTER: '📝 Generate first chapter with "generate-chapter"',
    NextAction.CREATE_CHARACTER: '👤 Create main characters with "create-character"',
    NextAction.CONTINUE_CHAPTER: "✍️ Continue working on in-progress chapters",
    NextAction.START_DRAFT_CHAPTER: "📖 Start writing draft chapters",
    NextAction.REVISE_CHAPTER: "🔄 Address revision feedback",
    NextAction.CHECK_CONSISTENCY: '🎉 Story looking good! Consider "check-consistency" for quality review',
}


@operation("get story status")
async def get_story_status(
    ctx: OperationContext,
    include_chapters: bool = True,
    include_characters: bool = True,
    include_plot_threads: bool = True,
    include_word_counts: bool = True,
    include_next_steps: bool = True,
    format: str = "detailed",
) -> OperationResult:
    if format not in FORMATS:
        raise ValueError(f"Unknown status format {format!r}; expected one of {', '.join(FORMATS)}")

    bible = ctx.store.load()
    stats = collect_stats(bible)
    completion = completion_percentages(stats)
    next_action = recommend_next_action(bible, stats)

    if format == "summary":
        message = build_summary_message(bible, stats, completion)
    elif format == "table":
        message = build_table_message(stats, completion)
    else:
        message = build_detailed_message(
            bible, stats, completion, next_action,
            include_chapters=include_chapters,
            include_characters=include_characters,
            include_plot_threads=include_plot_threads,
            include_word_counts=include_word_counts,
            include_next_steps=include_next_steps,
        )

    data = {
        "stats": stats.to_dict(),
        "completion": completion.to_dict(),
        "meta": bible.meta.to_dict(),
        "nextAction": next_action.value,
        "chapters": [c.to_dict() for c in bible.all_chapters] if include_chapters else None,
        "characters": [c.to_dict() for c in bible.all_characters] if include_characters else None,
        "plotThreads": [p.to_dict() for p in bible.all_plot_threads] if include_plot_threads else None,
    }
    return OperationResult(success=True, message=message, data=data)


def build_summary_message(bible: StoryBible, stats: StoryStats, completion: Completion) -> str:
    return f"""📚 **{bible.meta.title}** - {completion.overall}% Complete

📊 Quick Stats:
- Chapters: {stats.chapters.completed}/{stats.chapters.total} ({completion.chapters}%)
- Characters: {stats.characters.completed}/{stats.characters.total} ({completion.characters}%)
- Scenes: {stats.scenes.completed}/{stats.scenes.total} ({completion.scenes}%)"""


def build_table_message(stats: StoryStats, completion: Completion) -> str:
    rows = [
        ("Chapters", stats.chapters.total, stats.chapters.completed, completion.chapters),
        ("Characters", stats.characters.total, stats.characters.completed, completion.characters),
        ("Scenes", stats.scenes.total, stats.scenes.completed, completion.scenes),
        ("Plot Threads", stats.plot_threads.total, stats.plot_threads.completed, completion.plot_threads),
    ]
    lines = [
        "📊 Story Progress Table:",
        "",
        "| Element      | Total | Completed | Progress |",
        "|--------------|-------|-----------|----------|",
    ]
    for name, total, completed, percent in rows:
        lines.append(f"| {name:<12} | {total:>5} | {completed:>9} | {percent:>6}%   |")
    lines.append("")
    lines.append(f"**Overall Progress: {completion.overall}%**")
    return "\n".join(lines)


def build_detailed_message(
    bible: StoryBible,
    stats: StoryStats,
    completion: Completion,
    next_action: NextAction,
    include_chapters: bool = True,
    include_characters: bool = True,
    include_plot_threads: bool = True,
    include_word_counts: bool = True,
    include_next_steps: bool = True,
) -> str:
    meta = bible.meta
    message = f"📚 **{meta.title}**\n"
    message += f"🎯 Genre: {meta.genre.value}\n"
    message += f"📈 Overall Progress: **{completion.overall}%**\n\n"

    message += "📊 Development Status:\n"
    message += f"- ✅ Premise: {'Complete' if stats.premise_completed else 'Pending'}\n"
    message += f"- 📖 Chapters: {stats.chapters.completed}/{stats.chapters.total} ({completion.chapters}%)\n"
    message += f"- 👥 Characters: {stats.characters.completed}/{stats.characters.total} ({completion.characters}%)\n"
    message += f"- 🎬 Scenes: {stats.scenes.completed}/{stats.scenes.total} ({completion.scenes}%)\n"

    if include_chapters and stats.chapters.total > 0:
        message += "\n📖 Chapter Details:\n"
        for label, count in (
            ("Draft", stats.chapters.draft),
            ("In Progress", stats.chapters.in_progress),
            ("Completed", stats.chapters.completed),
            ("In Review", stats.chapters.review),
            ("Needs Revision", stats.chapters.needs_revision),
            ("Published", stats.chapters.published),
        ):
            if count > 0:
                message += f"- {label}: {count}\n"

    if include_characters and stats.characters.total > 0:
        message += "\n👥 Character Breakdown:\n"
        for label, count in (
            ("Protagonists", stats.characters.protagonist),
            ("Antagonists", stats.characters.antagonist),
            ("Supporting", stats.characters.supporting),
            ("Minor", stats.characters.minor),
        ):
            if count > 0:
                message += f"- {label}: {count}\n"

    if include_plot_threads and stats.plot_threads.total > 0:
        message += "\n🧵 Plot Threads:\n"
        for plot_thread in bible.all_plot_threads:
            message += f"- {plot_thread.title} ({plot_thread.thread_type.value}, {plot_thread.status.value})\n"

    if include_word_counts:
        words = stats.word_counts
        message += "\n📝 Word Counts:\n"
        message += f"- Target: {words.target:,}\n"
        message += f"- Planned: {words.planned:,}\n"
        message += f"- Written: {words.written:,} ({words.progress}% of target)\n"

    if include_next_steps:
        message += "\n🎯 Recommended Next Steps:\n"
        message += f"- {NEXT_STEP_MESSAGES[next_action]}\n"
        message += '- 📊 Use "next-chapter" to find the next chapter to work on\n'

    return message
