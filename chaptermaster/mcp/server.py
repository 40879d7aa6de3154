"""MCP server exposing the story operations as tools."""

import logging
from pathlib import Path
from typing import Annotated, List, Literal, Optional, Union

from fastmcp import FastMCP
from pydantic import Field

from ..config import setup_logging
from ..operations import (
    OperationContext,
    OperationResult,
    add_plot_thread,
    check_consistency,
    create_character,
    generate_chapter,
    get_story_status,
    next_chapter,
    parse_premise,
    set_status,
)

logger = logging.getLogger(__name__)

mcp = FastMCP(name="chaptermaster")

_settings = {"project_root": None, "use_ai": True}
_context: Optional[OperationContext] = None


def configure(project_root: Optional[Union[str, Path]] = None, use_ai: bool = True) -> None:
    """Set the project the tools work on; the context is built on first use."""
    global _context
    _settings["project_root"] = project_root
    _settings["use_ai"] = use_ai
    _context = None


def get_context() -> OperationContext:
    global _context
    if _context is None:
        _context = OperationContext.create(_settings["project_root"], use_ai=_settings["use_ai"])
        setup_logging(_context.config.log_level, _context.config.log_file)
        logger.info(f"Serving project at {_context.store.project_root}")
    return _context


def format_result(result: OperationResult) -> str:
    """Tools answer with the operation's message text."""
    if result.success:
        return result.message
    if result.error and result.error not in result.message:
        return f"{result.message}\n\nError: {result.error}"
    return result.message


# ----------------------------------------------------------------------
# Tools
# ----------------------------------------------------------------------

@mcp.tool(name="parse-premise")
async def parse_premise_tool(
    premise: Annotated[Optional[str], Field(description="The story premise text")] = None,
    file_path: Annotated[str, Field(description="Premise file relative to the project root, used when no text is given")] = "PREMISE.md",
    target_word_count: Annotated[int, Field(description="Target word count for the novel", gt=0)] = 80000,
    generate_outline: Annotated[bool, Field(description="Generate an initial story outline")] = True,
    structure_type: Annotated[
        Literal["save-the-cat", "hero-journey", "three-act", "seven-point", "genre-specific"],
        Field(description="Story structure methodology"),
    ] = "three-act",
    title: Annotated[Optional[str], Field(description="Story title")] = None,
    author: Annotated[Optional[str], Field(description="Author name")] = None,
) -> str:
    """Analyze a story premise and create the story bible."""
    result = await parse_premise(
        get_context(),
        premise=premise,
        file_path=file_path,
        target_word_count=target_word_count,
        generate_outline=generate_outline,
        structure_type=structure_type,
        title=title,
        author=author,
    )
    return format_result(result)


@mcp.tool(name="create-character")
async def create_character_tool(
    name: Annotated[str, Field(description="Character name")],
    character_type: Annotated[
        Literal["protagonist", "antagonist", "supporting", "minor"],
        Field(description="Role of the character in the story"),
    ] = "supporting",
    description: Annotated[Optional[str], Field(description="Brief character description")] = None,
    generate_profile: Annotated[bool, Field(description="Generate a psychological profile")] = True,
    generate_arc: Annotated[bool, Field(description="Generate a character arc")] = True,
    generate_voice: Annotated[bool, Field(description="Generate voice characteristics")] = True,
    related_characters: Annotated[Optional[List[int]], Field(description="IDs of related characters")] = None,
    priority: Annotated[Literal["high", "medium", "low"], Field(description="Priority level")] = "medium",
) -> str:
    """Create a character with a development profile."""
    result = await create_character(
        get_context(),
        name=name,
        character_type=character_type,
        description=description,
        generate_profile=generate_profile,
        generate_arc=generate_arc,
        generate_voice=generate_voice,
        related_characters=related_characters,
        priority=priority,
    )
    return format_result(result)


@mcp.tool(name="generate-chapter")
async def generate_chapter_tool(
    chapter_id: Annotated[Optional[int], Field(description="ID of an existing chapter to update")] = None,
    chapter_number: Annotated[Optional[int], Field(description="Number for a new chapter", gt=0)] = None,
    title: Annotated[Optional[str], Field(description="Chapter title")] = None,
    purpose: Annotated[Optional[str], Field(description="What the chapter should accomplish")] = None,
    target_word_count: Annotated[Optional[int], Field(description="Target word count (3000 for new chapters)", gt=0)] = None,
    generate_scenes: Annotated[bool, Field(description="Create placeholder scenes")] = True,
    scene_count: Annotated[int, Field(description="Number of scenes to create", ge=0)] = 3,
    characters: Annotated[Optional[List[int]], Field(description="Character IDs appearing in the chapter")] = None,
    plot_threads: Annotated[Optional[List[int]], Field(description="Plot thread IDs the chapter advances")] = None,
    conflicts: Annotated[Optional[List[str]], Field(description="Conflicts to address")] = None,
    priority: Annotated[Optional[Literal["high", "medium", "low"]], Field(description="Priority level")] = None,
) -> str:
    """Create a new chapter or update an existing one."""
    result = await generate_chapter(
        get_context(),
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
    return format_result(result)


@mcp.tool(name="check-consistency")
async def check_consistency_tool(
    check_type: Annotated[
        Literal["all", "character", "plot", "timeline", "style"],
        Field(description="Which consistency rules to run"),
    ] = "all",
    character_id: Annotated[Optional[int], Field(description="Only check this character")] = None,
    plot_thread_id: Annotated[Optional[int], Field(description="Only check this plot thread")] = None,
    start_chapter: Annotated[int, Field(description="First chapter number in scope", ge=1)] = 1,
    end_chapter: Annotated[Optional[int], Field(description="Last chapter number in scope")] = None,
    generate_report: Annotated[bool, Field(description="Write a consistency report")] = True,
    auto_fix: Annotated[bool, Field(description="Automatically fix eligible issues")] = False,
    fix_mode: Annotated[
        Literal["conservative", "aggressive"],
        Field(description="conservative fixes minor issues only; aggressive fixes every severity"),
    ] = "conservative",
) -> str:
    """Check story consistency across characters, plot threads and the timeline."""
    result = await check_consistency(
        get_context(),
        check_type=check_type,
        character_id=character_id,
        plot_thread_id=plot_thread_id,
        start_chapter=start_chapter,
        end_chapter=end_chapter,
        generate_report=generate_report,
        auto_fix=auto_fix,
        fix_mode=fix_mode,
    )
    return format_result(result)


@mcp.tool(name="get-story-status")
async def get_story_status_tool(
    include_chapters: Annotated[bool, Field(description="Include chapter details")] = True,
    include_characters: Annotated[bool, Field(description="Include character breakdown")] = True,
    include_plot_threads: Annotated[bool, Field(description="Include plot threads")] = True,
    include_word_counts: Annotated[bool, Field(description="Include word counts")] = True,
    include_next_steps: Annotated[bool, Field(description="Include recommended next steps")] = True,
    format: Annotated[Literal["summary", "detailed", "table"], Field(description="Output format")] = "detailed",
) -> str:
    """Report story progress and completion."""
    result = await get_story_status(
        get_context(),
        include_chapters=include_chapters,
        include_characters=include_characters,
        include_plot_threads=include_plot_threads,
        include_word_counts=include_word_counts,
        include_next_steps=include_next_steps,
        format=format,
    )
    return format_result(result)


@mcp.tool(name="next-chapter")
async def next_chapter_tool(
    status: Annotated[
        Optional[Literal["draft", "in-progress", "review", "needs-revision", "completed", "published"]],
        Field(description="Only consider chapters with this status"),
    ] = None,
    priority: Annotated[Optional[Literal["high", "medium", "low"]], Field(description="Only consider this priority")] = None,
    include_scenes: Annotated[bool, Field(description="List the chapter's scenes")] = True,
    character_focus: Annotated[Optional[int], Field(description="Only chapters featuring this character ID")] = None,
    plot_thread: Annotated[Optional[int], Field(description="Only chapters advancing this plot thread ID")] = None,
) -> str:
    """Find the next chapter to work on."""
    result = await next_chapter(
        get_context(),
        status=status,
        priority=priority,
        include_scenes=include_scenes,
        character_focus=character_focus,
        plot_thread=plot_thread,
    )
    return format_result(result)


@mcp.tool(name="add-plot-thread")
async def add_plot_thread_tool(
    title: Annotated[str, Field(description="Plot thread title")],
    thread_type: Annotated[Literal["main", "subplot", "character-arc"], Field(description="Kind of plot thread")] = "subplot",
    description: Annotated[Optional[str], Field(description="Plot thread summary")] = None,
    introduction: Annotated[Optional[str], Field(description="Where the thread is introduced")] = None,
    characters: Annotated[Optional[List[int]], Field(description="Character IDs involved")] = None,
    chapters: Annotated[Optional[List[int]], Field(description="Chapter IDs the thread runs through")] = None,
    generate_details: Annotated[bool, Field(description="Generate milestones and a resolution")] = True,
    priority: Annotated[Literal["high", "medium", "low"], Field(description="Priority level")] = "medium",
) -> str:
    """Add a plot thread to the story bible."""
    result = await add_plot_thread(
        get_context(),
        title=title,
        thread_type=thread_type,
        description=description,
        introduction=introduction,
        characters=characters,
        chapters=chapters,
        generate_details=generate_details,
        priority=priority,
    )
    return format_result(result)


@mcp.tool(name="set-status")
async def set_status_tool(
    element_type: Annotated[
        Literal["premise", "outline", "character", "chapter", "scene", "plot-thread"],
        Field(description="Type of story element"),
    ],
    element_id: Annotated[int, Field(description="Element ID", gt=0)],
    status: Annotated[
        Literal["draft", "in-progress", "review", "needs-revision", "completed", "published"],
        Field(description="New status"),
    ],
) -> str:
    """Change the workflow status of a story element."""
    result = await set_status(get_context(), element_type=element_type, element_id=element_id, status=status)
    return format_result(result)


def run(project_root: Optional[Union[str, Path]] = None, use_ai: bool = True) -> None:
    """Serve the tools over stdio."""
    configure(project_root, use_ai)
    mcp.run()


def main() -> None:
    """Main entry point for the Chapter Master MCP server."""
    setup_logging("INFO")
    run()


if __name__ == "__main__":
    main()
