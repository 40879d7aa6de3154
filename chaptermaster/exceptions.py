"""Error taxonomy for Chapter Master."""


class ChapterMasterError(Exception):
    """Base exception for Chapter Master."""
    pass


class PreconditionFailed(ChapterMasterError):
    """Raised when a required prior artifact is missing."""
    pass


class StoryBibleNotFound(PreconditionFailed):
    """Raised when the project has no story bible yet."""

    def __init__(self, path=None):
        self.path = path
        super().__init__(f"Story bible not found at {path}" if path else "Story bible not found")


class ValidationFailed(ChapterMasterError):
    """Raised when an element breaks its schema contract."""

    def __init__(self, message: str, errors=None):
        super().__init__(message)
        self.errors = errors or []


class ExternalServiceDegraded(ChapterMasterError):
    """Raised when a generation reply cannot be parsed into the expected shape."""
    pass


class ExternalServiceFailed(ChapterMasterError):
    """Raised when a generation call errors or times out."""
    pass


class PersistenceFailed(ChapterMasterError):
    """Raised when the document store cannot be read or written."""
    pass
