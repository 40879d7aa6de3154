"""Story operations shared by the CLI and the MCP server."""

from .add_plot_thread import add_plot_thread
from .check_consistency import check_consistency
from .create_character import create_character
from .generate_chapter import generate_chapter
from .get_story_status import get_story_status
from .next_chapter import next_chapter
from .parse_premise import parse_premise
from .result import NO_STORY_BIBLE_MESSAGE, OperationContext, OperationResult, operation
from .set_status import set_status

__all__ = [
    "add_plot_thread",
    "check_consistency",
    "create_character",
    "generate_chapter",
    "get_story_status",
    "next_chapter",
    "parse_premise",
    "set_status",
    "NO_STORY_BIBLE_MESSAGE",
    "OperationContext",
    "OperationResult",
    "operation",
]
