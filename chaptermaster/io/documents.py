"""Human-readable Markdown mirrors of story elements."""

from typing import Any, Dict, Iterable, List, Optional

from ..core.constants import TO_BE_DEVELOPED
from ..core.elements import AiPremise, Chapter, Character, Outline, PlotThread, now_iso
from ..core.story_bible import StoryBible


def _bullets(items: Optional[Iterable[str]], empty: str = TO_BE_DEVELOPED) -> str:
    items = [item for item in (items or []) if item]
    if not items:
        return empty
    return "\n".join(f"- {item}" for item in items)


def render_premise(original: str, analysis: AiPremise, target_word_count: int, structure_type: str) -> str:
    """Premise document written by parse-premise."""
    return f"""# Story Premise

## Original Premise
{original.strip()}

## Enhanced Premise
{analysis.content}

## Story Details

### Genre
{analysis.genre.value}

### Target Audience
{analysis.target_audience}

### Target Word Count
{target_word_count}

### Core Themes
{_bullets(analysis.themes)}

## Generated
- Created: {now_iso()}
- Structure Type: {structure_type}
- Status: completed
"""


def render_outline(outline: Outline, generated_text: str, premise_path: str) -> str:
    return f"""# Story Outline

## Structure Type
{outline.structure_type.value}

## Generated Outline
{generated_text.strip()}

## Metadata
- Generated: {outline.created_at}
- Based on: {premise_path}
- Status: {outline.status.value}
"""


def render_character(character: Character, bible: Optional[StoryBible] = None) -> str:
    """Character profile written to characters/<slug>.md."""
    psychology = character.psychology
    if psychology:
        psychology_text = f"""
### Motivations
{_bullets(psychology.motivations)}

### Fears
{_bullets(psychology.fears)}

### Goals
{_bullets(psychology.goals)}
"""
    else:
        psychology_text = TO_BE_DEVELOPED

    arc_summary = character.arc.summary if character.arc and character.arc.summary else TO_BE_DEVELOPED

    voice = character.voice
    if voice and (voice.speech_patterns or voice.tone):
        voice_lines = []
        if voice.tone:
            voice_lines.append(f"- **Tone**: {voice.tone}")
        voice_lines.extend(f"- {pattern}" for pattern in voice.speech_patterns or [])
        voice_text = "\n".join(voice_lines)
    else:
        voice_text = f"*{TO_BE_DEVELOPED}*"

    relationships = character.biography.relationships if character.biography else None
    if relationships:
        names = {}
        if bible:
            names = {c.id: c.title for c in bible.all_characters}
        relationship_text = "\n".join(
            f"- {names.get(r.character_id, f'Character {r.character_id}')}: {r.relationship}"
            for r in relationships
        )
    else:
        relationship_text = f"*{TO_BE_DEVELOPED}*"

    return f"""# {character.title}

## Character Overview
- **Type**: {character.character_type.value}
- **Status**: {character.status.value}
- **Priority**: {character.priority.value}

## Description
{character.description}

## Psychology
{psychology_text}

## Character Arc
{arc_summary}

## Traits
{_bullets(character.traits)}

## Voice and Dialogue
{voice_text}

## Relationships
{relationship_text}

## Notes
*Additional character notes and development ideas*

---
*Character created: {character.created_at}*
"""


def render_chapter(chapter: Chapter, bible: StoryBible) -> str:
    """Chapter plan written to chapters/chapter-NN.md."""
    character_names = ", ".join(bible.character_names(chapter.characters or []))
    moments = [m.development for m in chapter.character_moments or []]
    scenes = "\n".join(
        f"- Scene {index}: [Scene ID {scene_id}]"
        for index, scene_id in enumerate(chapter.scenes or [], start=1)
    ) or "Scenes to be developed"
    content = chapter.content or "*Content to be written*"

    return f"""# {chapter.title}

## Chapter {chapter.chapter_number}

### Purpose
{chapter.purpose}

### Description
{chapter.description}

### Plot Advancement
{chapter.plot_advancement or TO_BE_DEVELOPED}

### Characters
{character_names or 'Characters to be determined'}

### Conflicts
{_bullets(chapter.conflicts, 'Conflicts to be developed')}

### Character Development
{_bullets(moments, 'Character moments to be developed')}

### Scenes
{scenes}

### Chapter Content
{content}

---
**Chapter Details:**
- Target Word Count: {chapter.word_count_target or 'Not set'}
- Status: {chapter.status.value}
- Priority: {chapter.priority.value}
- Created: {chapter.created_at}
- Updated: {chapter.updated_at}
"""


def render_plot_thread(plot_thread: PlotThread, bible: StoryBible) -> str:
    character_names = ", ".join(bible.character_names(plot_thread.characters or []))
    return f"""# {plot_thread.title}

- **Type**: {plot_thread.thread_type.value}
- **Status**: {plot_thread.status.value}
- **Characters**: {character_names or 'None yet'}
- **Chapters**: {', '.join(str(c) for c in plot_thread.chapters or []) or 'None yet'}

## Introduction
{plot_thread.introduction or TO_BE_DEVELOPED}

## Development
{_bullets(plot_thread.development)}

## Resolution
{plot_thread.resolution or TO_BE_DEVELOPED}
"""


def _or_default(value: Any, default: str) -> Any:
    return default if value is None else value


def render_consistency_report(
    issues: List[Dict[str, Any]],
    fixed_issues: List[Dict[str, Any]],
    suggestions: List[Dict[str, Any]],
    params: Dict[str, Any],
) -> str:
    """Report written by check-consistency."""
    if issues:
        issue_sections = "\n".join(
            f"""
### {index}. {issue['type']}
- **Description**: {issue['description']}
- **Severity**: {issue['severity']}
- **Character ID**: {issue.get('characterId', 'N/A')}
- **Chapter ID**: {issue.get('chapterId', 'N/A')}
- **Plot Thread ID**: {issue.get('plotThreadId', 'N/A')}
"""
            for index, issue in enumerate(issues, start=1)
        )
    else:
        issue_sections = "No issues found! ✅"

    if fixed_issues:
        fixed_sections = "\n".join(
            f"""
### {index}. {issue['type']}
- **Description**: {issue['description']}
- **Fixed At**: {issue['fixedAt']}
- **Fix Mode**: {issue['fixMode']}
"""
            for index, issue in enumerate(fixed_issues, start=1)
        )
    else:
        fixed_sections = "No issues were auto-fixed."

    if suggestions:
        suggestion_sections = "\n".join(
            f"""
### {index}. {suggestion['type']}
{suggestion['content']}
"""
            for index, suggestion in enumerate(suggestions, start=1)
        )
    else:
        suggestion_sections = "No AI suggestions available."

    return f"""# Story Consistency Report

Generated: {now_iso()}

## Check Parameters
- Check Type: {params['check_type']}
- Character ID: {_or_default(params.get('character_id'), 'All')}
- Plot Thread ID: {_or_default(params.get('plot_thread_id'), 'All')}
- Chapter Range: {params['start_chapter']} - {_or_default(params.get('end_chapter'), 'End')}
- Chapters Analyzed: {params['chapters_analyzed']}
- Characters Analyzed: {params['characters_analyzed']}

## Summary
- Total Issues Found: {len(issues)}
- Issues Auto-Fixed: {len(fixed_issues)}
- Remaining Issues: {len(issues) - len(fixed_issues)}

## Issues Found
{issue_sections}

## Auto-Fixed Issues
{fixed_sections}

## AI Suggestions
{suggestion_sections}

## Recommendations

1. Review and address remaining issues based on severity
2. Consider running consistency checks regularly during development
3. Use AI suggestions to improve story coherence
4. Update character profiles and plot threads as needed

---
*Generated by Chapter Master*
"""
