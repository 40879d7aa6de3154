"""The boundary every story operation goes through."""

import functools
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from pydantic import ValidationError

from ..ai.claude_client import GenerationService, build_generation_service
from ..config import Config, find_project_root
from ..core.elements import describe_validation_error
from ..exceptions import ChapterMasterError, PreconditionFailed, StoryBibleNotFound
from ..io.story_bible_store import StoryBibleStore

logger = logging.getLogger(__name__)

NO_STORY_BIBLE_MESSAGE = '❌ No story bible found. Run "parse-premise" first to set up your story structure.'


@dataclass
class OperationResult:
    """What every operation returns; exceptions never escape an operation."""
    success: bool
    message: str
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"success": self.success, "message": self.message}
        if self.data is not None:
            result["data"] = self.data
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass
class OperationContext:
    """Collaborators shared by the operations of one invocation."""
    store: StoryBibleStore
    service: Optional[GenerationService] = None
    config: Config = field(default_factory=Config)

    @classmethod
    def create(cls, project_root: Optional[Union[str, Path]] = None, use_ai: bool = True) -> "OperationContext":
        """Build a context for a project, loading its configuration."""
        root = Path(project_root).resolve() if project_root else find_project_root()
        config = Config.load(root)
        service = build_generation_service(config) if use_ai else None
        return cls(store=StoryBibleStore(root), service=service, config=config)


Operation = Callable[..., Awaitable[OperationResult]]


def operation(action: str) -> Callable[[Operation], Operation]:
    """Convert every error raised by an operation into a failed result.

    ``action`` completes the sentence "Failed to ..." in error messages.
    """
    def decorator(fn: Operation) -> Operation:
        @functools.wraps(fn)
        async def wrapper(ctx: OperationContext, *args, **kwargs) -> OperationResult:
            try:
                return await fn(ctx, *args, **kwargs)
            except StoryBibleNotFound:
                return OperationResult(
                    success=False,
                    message=NO_STORY_BIBLE_MESSAGE,
                    error="Story bible not found",
                )
            except PreconditionFailed as e:
                return OperationResult(success=False, message=f"❌ {e}", error=str(e))
            except ChapterMasterError as e:
                logger.error(f"Failed to {action}: {e}")
                return OperationResult(success=False, message=f"Failed to {action}: {e}", error=str(e))
            except ValidationError as e:
                error = describe_validation_error(e)
                logger.error(f"Failed to {action}: {error}")
                return OperationResult(success=False, message=f"Failed to {action}: {error}", error=error)
            except Exception as e:
                logger.exception(f"Unexpected error while trying to {action}")
                return OperationResult(success=False, message=f"Failed to {action}: {e}", error=str(e))
        return wrapper
    return decorator
