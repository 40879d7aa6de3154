"""check-consistency: run the consistency rules, optionally fix and report."""

from collections import Counter
from typing import Any, Dict, List, Optional

from ..editor.consistency_checker import CheckOptions, CheckType, ConsistencyChecker, FixMode
from ..editor.issues import FixedIssue
from ..io.documents import render_consistency_report
from .result import OperationContext, OperationResult, operation


@operation("check consistency")
async def check_consistency(
    ctx: OperationContext,
    check_type: str = "all",
    character_id: Optional[int] = None,
    plot_thread_id: Optional[int] = None,
    start_chapter: int = 1,
    end_chapter: Optional[int] = None,
    generate_report: bool = True,
    auto_fix: bool = False,
    fix_mode: str = "conservative",
) -> OperationResult:
    options = CheckOptions(
        check_type=CheckType(check_type),
        character_id=character_id,
        plot_thread_id=plot_thread_id,
        start_chapter=start_chapter,
        end_chapter=end_chapter,
    )
    fix_mode = FixMode(fix_mode)
    checker = ConsistencyChecker(ctx.service, ctx.config.analysis_timeout)

    bible = ctx.store.load()
    issues = checker.check(bible, options)
    chapters_analyzed = len(options.chapters_in_scope(bible))
    characters_analyzed = len(bible.all_characters)

    suggestions: List[Dict[str, Any]] = []
    analysis = await checker.analyze(bible, issues, options)
    if analysis:
        suggestions.append({"type": "ai-analysis", "content": analysis})

    fixed: List[FixedIssue] = []
    if auto_fix and checker.fixable(issues, fix_mode):
        current = ctx.store.load()
        fixed = checker.auto_fix(current, issues, fix_mode)
        # Saved only when a handler actually changed something
        if fixed:
            current.touch()
            ctx.store.save(current)

    issue_dicts = [issue.to_dict() for issue in issues]
    fixed_dicts = [item.to_dict() for item in fixed]

    report_path = None
    if generate_report:
        report_path = ctx.store.file_handler.write_file(
            ctx.store.report_path(),
            render_consistency_report(issue_dicts, fixed_dicts, suggestions, {
                "check_type": options.check_type.value,
                "character_id": character_id,
                "plot_thread_id": plot_thread_id,
                "start_chapter": start_chapter,
                "end_chapter": end_chapter,
                "chapters_analyzed": chapters_analyzed,
                "characters_analyzed": characters_analyzed,
            }),
        )

    message = _build_message(issues, fixed, options, chapters_analyzed, characters_analyzed, report_path)
    return OperationResult(
        success=True,
        message=message,
        data={
            "issues": issue_dicts,
            "suggestions": suggestions,
            "fixedIssues": fixed_dicts,
            "reportPath": str(report_path) if report_path else None,
            "stats": {
                "totalIssues": len(issues),
                "fixedIssues": len(fixed),
                "chaptersAnalyzed": chapters_analyzed,
                "charactersAnalyzed": characters_analyzed,
            },
        },
    )


def _plural(count: int) -> str:
    return "" if count == 1 else "s"


def _build_message(issues, fixed, options, chapters_analyzed, characters_analyzed, report_path) -> str:
    message = "🔍 Consistency Check Complete\n\n"

    if not issues:
        message += "✅ **No consistency issues found!**\n\n"
        message += "📊 Analysis Summary:\n"
        message += f"- Chapters analyzed: {chapters_analyzed}\n"
        message += f"- Characters checked: {characters_analyzed}\n"
        message += f"- Check type: {options.check_type.value}\n"
        message += "\n🎉 Your story maintains good consistency across all checked elements."
        return message

    message += f"⚠️ **Found {len(issues)} potential issue{_plural(len(issues))}**\n\n"
    if fixed:
        message += f"✅ Auto-fixed {len(fixed)} issue{_plural(len(fixed))}\n\n"

    message += "📊 Issues by Type:\n"
    for issue_type, count in Counter(issue.type.value for issue in issues).items():
        message += f"- {issue_type}: {count}\n"

    message += "\n🔧 Top Issues to Address:\n"
    for index, issue in enumerate(issues[:3], start=1):
        message += f"{index}. {issue.description}\n"

    if report_path:
        message += f"\n📄 Detailed report: {report_path}"
    return message
