"""Main CLI entry point for Chapter Master."""

import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

import click

from .. import __version__
from ..config import CONFIG_FILE_NAME, Config, setup_logging
from ..core.constants import CharacterType, ElementStatus, ElementType, Priority, StructureType, ThreadType
from ..editor import CheckType, FixMode
from ..io.file_handler import FileHandler
from ..operations import (
    OperationContext,
    add_plot_thread,
    check_consistency,
    create_character,
    generate_chapter,
    get_story_status,
    next_chapter,
    parse_premise,
    set_status,
)
from ..operations.get_story_status import FORMATS


def _choices(enum_cls) -> click.Choice:
    return click.Choice([member.value for member in enum_cls])


def _id_list(ctx, param, value) -> Optional[List[int]]:
    """Parse a comma-separated list of IDs, e.g. "1,3,4"."""
    if not value:
        return None
    try:
        return [int(part) for part in value.split(',') if part.strip()]
    except ValueError:
        raise click.BadParameter("expected comma-separated integer IDs")


def _text_list(ctx, param, value) -> Optional[List[str]]:
    if not value:
        return None
    return list(value)


def _context(ctx) -> OperationContext:
    if ctx.obj.get('context') is None:
        context = OperationContext.create(ctx.obj['project_root'], use_ai=ctx.obj['use_ai'])
        config = context.config
        setup_logging("DEBUG" if ctx.obj['verbose'] else config.log_level, config.log_file)
        ctx.obj['context'] = context
    return ctx.obj['context']


def _run(ctx, op, **kwargs) -> None:
    """Run an operation and print its result; failures exit with status 1."""
    result = asyncio.run(op(_context(ctx), **kwargs))

    if ctx.obj['json']:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    elif result.success:
        click.echo(result.message)
    else:
        click.echo(result.message, err=True)

    if not result.success:
        sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option('--project-root', type=click.Path(file_okay=False), help='Project directory (defaults to the nearest one with a story bible)')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.option('--no-ai', is_flag=True, help='Skip AI generation and use placeholders')
@click.option('--json', 'as_json', is_flag=True, help='Print results as JSON')
@click.pass_context
def cli(ctx, project_root, verbose, no_ai, as_json):
    """Chapter Master - AI-assisted story planning"""
    ctx.ensure_object(dict)
    ctx.obj['project_root'] = project_root
    ctx.obj['use_ai'] = not no_ai
    ctx.obj['json'] = as_json
    ctx.obj['verbose'] = verbose
    ctx.obj.setdefault('context', None)
    setup_logging("DEBUG" if verbose else "WARNING")


@cli.command()
@click.option('--force', is_flag=True, help='Overwrite an existing configuration file')
@click.pass_context
def init(ctx, force):
    """Write a default configuration file to the project"""
    root = Path(ctx.obj['project_root'] or Path.cwd()).resolve()
    config_path = root / CONFIG_FILE_NAME
    if config_path.exists() and not force:
        click.echo(f"❌ {config_path} already exists (use --force to overwrite)", err=True)
        sys.exit(1)

    defaults = Config()
    FileHandler().write_yaml(config_path, {
        'models': defaults.models,
        'max_tokens': defaults.max_tokens,
        'max_retries': defaults.max_retries,
        'request_timeout': defaults.request_timeout,
        'analysis_timeout': defaults.analysis_timeout,
        'log_level': defaults.log_level,
    })
    click.echo(f"✅ Created {config_path}")
    click.echo('📝 Next: write PREMISE.md and run "chaptermaster parse-premise"')


@cli.command('parse-premise')
@click.argument('premise', required=False)
@click.option('--file', 'file_path', default='PREMISE.md', show_default=True, help='Premise file, used when no text is given')
@click.option('--target-word-count', type=click.IntRange(min=1), default=80000, show_default=True)
@click.option('--no-outline', is_flag=True, help='Skip outline generation')
@click.option('--structure', 'structure_type', type=_choices(StructureType), default='three-act', show_default=True)
@click.option('--title', help='Story title')
@click.option('--author', help='Author name')
@click.pass_context
def parse_premise_cmd(ctx, premise, file_path, target_word_count, no_outline, structure_type, title, author):
    """Analyze a premise and create the story bible"""
    _run(
        ctx, parse_premise,
        premise=premise,
        file_path=file_path,
        target_word_count=target_word_count,
        generate_outline=not no_outline,
        structure_type=structure_type,
        title=title,
        author=author,
    )


@cli.command('create-character')
@click.argument('name')
@click.option('--type', 'character_type', type=_choices(CharacterType), default='supporting', show_default=True)
@click.option('--description', help='Brief character description')
@click.option('--no-profile', is_flag=True, help='Skip the psychological profile')
@click.option('--no-arc', is_flag=True, help='Skip the character arc')
@click.option('--no-voice', is_flag=True, help='Skip voice characteristics')
@click.option('--related', 'related_characters', callback=_id_list, help='Related character IDs, e.g. "1,2"')
@click.option('--priority', type=_choices(Priority), default='medium', show_default=True)
@click.pass_context
def create_character_cmd(ctx, name, character_type, description, no_profile, no_arc, no_voice, related_characters, priority):
    """Create a character with a development profile"""
    _run(
        ctx, create_character,
        name=name,
        character_type=character_type,
        description=description,
        generate_profile=not no_profile,
        generate_arc=not no_arc,
        generate_voice=not no_voice,
        related_characters=related_characters,
        priority=priority,
    )


@cli.command('generate-chapter')
@click.option('--id', 'chapter_id', type=int, help='Update the chapter with this ID')
@click.option('--number', 'chapter_number', type=click.IntRange(min=1), help='Number for a new chapter')
@click.option('--title', help='Chapter title')
@click.option('--purpose', help='What the chapter should accomplish')
@click.option('--target-word-count', type=click.IntRange(min=1), help='Target word count (3000 for new chapters)')
@click.option('--no-scenes', is_flag=True, help='Do not create placeholder scenes')
@click.option('--scene-count', type=click.IntRange(min=0), default=3, show_default=True)
@click.option('--characters', callback=_id_list, help='Character IDs, e.g. "1,2"')
@click.option('--plot-threads', callback=_id_list, help='Plot thread IDs, e.g. "1"')
@click.option('--conflict', 'conflicts', multiple=True, callback=_text_list, help='Conflict to address (repeatable)')
@click.option('--priority', type=_choices(Priority))
@click.pass_context
def generate_chapter_cmd(ctx, chapter_id, chapter_number, title, purpose, target_word_count, no_scenes,
                         scene_count, characters, plot_threads, conflicts, priority):
    """Create a new chapter or update an existing one"""
    _run(
        ctx, generate_chapter,
        chapter_id=chapter_id,
        chapter_number=chapter_number,
        title=title,
        purpose=purpose,
        target_word_count=target_word_count,
        generate_scenes=not no_scenes,
        scene_count=scene_count,
        characters=characters,
        plot_threads=plot_threads,
        conflicts=conflicts,
        priority=priority,
    )


@cli.command('check-consistency')
@click.option('--type', 'check_type', type=_choices(CheckType), default='all', show_default=True)
@click.option('--character', 'character_id', type=int, help='Only check this character ID')
@click.option('--plot-thread', 'plot_thread_id', type=int, help='Only check this plot thread ID')
@click.option('--start', 'start_chapter', type=click.IntRange(min=1), default=1, show_default=True)
@click.option('--end', 'end_chapter', type=int, help='Last chapter number in scope')
@click.option('--no-report', is_flag=True, help='Do not write a consistency report')
@click.option('--fix', 'auto_fix', is_flag=True, help='Automatically fix eligible issues')
@click.option('--fix-mode', type=_choices(FixMode), default='conservative', show_default=True,
              help='conservative fixes minor issues only; aggressive fixes every severity')
@click.pass_context
def check_consistency_cmd(ctx, check_type, character_id, plot_thread_id, start_chapter, end_chapter,
                          no_report, auto_fix, fix_mode):
    """Check story consistency"""
    _run(
        ctx, check_consistency,
        check_type=check_type,
        character_id=character_id,
        plot_thread_id=plot_thread_id,
        start_chapter=start_chapter,
        end_chapter=end_chapter,
        generate_report=not no_report,
        auto_fix=auto_fix,
        fix_mode=fix_mode,
    )


@cli.command('get-story-status')
@click.option('--format', 'output_format', type=click.Choice(FORMATS), default='detailed', show_default=True)
@click.option('--no-chapters', is_flag=True)
@click.option('--no-characters', is_flag=True)
@click.option('--no-plot-threads', is_flag=True)
@click.option('--no-word-counts', is_flag=True)
@click.option('--no-next-steps', is_flag=True)
@click.pass_context
def get_story_status_cmd(ctx, output_format, no_chapters, no_characters, no_plot_threads, no_word_counts, no_next_steps):
    """Show story progress and completion"""
    _run(
        ctx, get_story_status,
        include_chapters=not no_chapters,
        include_characters=not no_characters,
        include_plot_threads=not no_plot_threads,
        include_word_counts=not no_word_counts,
        include_next_steps=not no_next_steps,
        format=output_format,
    )


cli.add_command(get_story_status_cmd, name='status')


@cli.command('next-chapter')
@click.option('--status', type=_choices(ElementStatus), help='Only consider chapters with this status')
@click.option('--priority', type=_choices(Priority), help='Only consider this priority')
@click.option('--no-scenes', is_flag=True, help='Do not list scenes')
@click.option('--character', 'character_focus', type=int, help='Only chapters featuring this character ID')
@click.option('--plot-thread', type=int, help='Only chapters advancing this plot thread ID')
@click.pass_context
def next_chapter_cmd(ctx, status, priority, no_scenes, character_focus, plot_thread):
    """Find the next chapter to work on"""
    _run(
        ctx, next_chapter,
        status=status,
        priority=priority,
        include_scenes=not no_scenes,
        character_focus=character_focus,
        plot_thread=plot_thread,
    )


@cli.command('add-plot-thread')
@click.argument('title')
@click.option('--type', 'thread_type', type=_choices(ThreadType), default='subplot', show_default=True)
@click.option('--description', help='Plot thread summary')
@click.option('--introduction', help='Where the thread is introduced')
@click.option('--characters', callback=_id_list, help='Character IDs, e.g. "1,2"')
@click.option('--chapters', callback=_id_list, help='Chapter IDs, e.g. "1,2"')
@click.option('--no-details', is_flag=True, help='Skip generated milestones')
@click.option('--priority', type=_choices(Priority), default='medium', show_default=True)
@click.pass_context
def add_plot_thread_cmd(ctx, title, thread_type, description, introduction, characters, chapters, no_details, priority):
    """Add a plot thread to the story bible"""
    _run(
        ctx, add_plot_thread,
        title=title,
        thread_type=thread_type,
        description=description,
        introduction=introduction,
        characters=characters,
        chapters=chapters,
        generate_details=not no_details,
        priority=priority,
    )


@cli.command('set-status')
@click.argument('element_type', type=_choices(ElementType))
@click.argument('element_id', type=click.IntRange(min=1))
@click.argument('status', type=_choices(ElementStatus))
@click.pass_context
def set_status_cmd(ctx, element_type, element_id, status):
    """Change the status of a story element"""
    _run(ctx, set_status, element_type=element_type, element_id=element_id, status=status)


@cli.command()
@click.pass_context
def serve(ctx):
    """Run the MCP server over stdio"""
    # fastmcp is only needed when serving
    from ..mcp.server import run

    setup_logging("DEBUG" if ctx.obj.get('verbose') else "INFO")
    click.echo("📡 Starting Chapter Master MCP server", err=True)
    run(ctx.obj['project_root'], use_ai=ctx.obj['use_ai'])


def main():
    """Main entry point"""
    cli()


if __name__ == '__main__':
    main()
