"""Prompt builders for the generation service."""

from typing import Iterable, List, Optional

from ..core.constants import TO_BE_DEVELOPED, Genre
from ..core.elements import AiPremise, Chapter, Premise


def _join(items: Optional[Iterable[str]], empty: str) -> str:
    items = [item for item in (items or []) if item]
    return ", ".join(items) if items else empty


def premise_analysis_prompt(premise_text: str, target_word_count: Optional[int] = None) -> str:
    genres = ", ".join(g.value for g in Genre)
    requested = f"\nThe author is aiming for about {target_word_count} words.\n" if target_word_count else ""
    return f"""Analyze this story premise and generate foundational story elements:

PREMISE:
{premise_text.strip()}
{requested}
Please analyze and return a structured response with:
1. Genre classification (from: {genres})
2. Core themes and messages (array of strings)
3. Target audience description
4. Enhanced premise with additional details
5. Recommended target word count (considering the scope)

Return your analysis in a structured format that can guide story development."""


def outline_prompt(analysis: AiPremise, structure_type: str) -> str:
    return f"""Based on this analyzed premise, create a basic story outline using {structure_type} structure:

PREMISE ANALYSIS:
Genre: {analysis.genre.value}
Themes: {', '.join(analysis.themes)}
Target Word Count: {analysis.word_count_target}

Create a structured outline with:
1. Three-act structure (if three-act) or appropriate structure beats
2. Key plot points and turning moments
3. Character arc suggestions
4. Pacing recommendations

Provide a clear, actionable outline for {analysis.genre.value} genre."""


def character_prompt(
    premise: Premise,
    name: str,
    character_type: str,
    description: Optional[str],
    sections: List[str],
    related_names: Optional[List[str]] = None,
) -> str:
    """Build the character profile prompt.

    ``sections`` names the parts the caller asked for (profile, arc, voice).
    """
    requested = "\n".join(f"{index}. {section}" for index, section in enumerate(sections, start=1))
    relations = ""
    if related_names:
        relations = f"\nRelated Characters: {', '.join(related_names)}"

    return f"""Create a comprehensive character profile for this story character:

STORY CONTEXT:
Genre: {premise.genre.value}
Themes: {_join(premise.themes, 'Not specified')}
Premise: {premise.content}

CHARACTER DETAILS:
Name: {name}
Type: {character_type}
Description: {description or TO_BE_DEVELOPED}{relations}

Please create:
{requested}

Return a structured character profile suitable for {premise.genre.value} genre."""


def chapter_prompt(
    premise: Optional[Premise],
    chapter: Chapter,
    target_word_count: int,
    character_names: List[str],
) -> str:
    genre = premise.genre.value if premise else None
    return f"""Create a detailed chapter structure for this story:

STORY CONTEXT:
Genre: {genre or 'Unspecified'}
Premise: {premise.content if premise else 'Story premise not available'}

CHAPTER DETAILS:
Number: {chapter.chapter_number}
Title: {chapter.title}
Purpose: {chapter.purpose}
Target Word Count: {target_word_count}
Characters: {_join(character_names, 'To be determined')}
Conflicts: {_join(chapter.conflicts, TO_BE_DEVELOPED)}

Please create:
1. Enhanced chapter title and description
2. Specific purpose and goals for this chapter
3. Conflicts to introduce or resolve
4. Plot advancement details
5. Character development moments

Return a structured chapter outline that fits the {genre or 'general'} genre."""


def plot_thread_prompt(
    premise: Optional[Premise],
    title: str,
    thread_type: str,
    description: Optional[str],
    character_names: List[str],
) -> str:
    return f"""Develop a plot thread for this story:

STORY CONTEXT:
Genre: {premise.genre.value if premise else 'Unspecified'}
Premise: {premise.content if premise else 'Story premise not available'}

PLOT THREAD:
Title: {title}
Type: {thread_type}
Description: {description or TO_BE_DEVELOPED}
Characters: {_join(character_names, 'To be determined')}

Please create:
1. A short summary of the thread
2. How and where the thread is introduced
3. Development milestones in story order
4. The intended resolution"""


def consistency_analysis_prompt(genre: Optional[str], chapters_analyzed: int,
                                characters_analyzed: int, issues) -> str:
    issue_lines = "\n".join(
        f"{index}. {issue.type.value}: {issue.description}"
        for index, issue in enumerate(issues, start=1)
    )
    return f"""Analyze these potential story consistency issues and provide recommendations:

STORY CONTEXT:
Genre: {genre or 'Unspecified'}
Chapters analyzed: {chapters_analyzed}
Characters: {characters_analyzed}

IDENTIFIED ISSUES:
{issue_lines}

Please provide:
1. Severity assessment for each issue (critical, moderate, minor)
2. Specific recommendations for resolution
3. Priority order for addressing issues
4. Any additional consistency concerns you notice

Focus on maintaining story coherence and character authenticity."""
