"""Exception hierarchy for MediaInspector."""

from typing import Optional


class MediaInspectorError(Exception):
    """Base class for all MediaInspector errors."""


class InvalidMediaFileError(MediaInspectorError, ValueError):
    """Raised when a media file descriptor violates its invariants."""


class InvalidTargetError(MediaInspectorError):
    """Raised when a language request names a bad track or a malformed code.

    Attributes:
        key: The offending request key (e.g. "audio_3"), if any
    """

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class EmptyPlanError(MediaInspectorError):
    """Raised when no assignments were requested for a file with unknown tracks."""


class ExecutionFailure(MediaInspectorError):
    """Raised by plan executors when applying a plan fails.

    Attributes:
        path: Source file path the plan was applied to
        detail: Executor-specific failure detail (stderr excerpt, errno text)
    """

    def __init__(self, message: str, path: Optional[str] = None, detail: Optional[str] = None):
        super().__init__(message)
        self.path = path
        self.detail = detail


class PlanInFlightError(MediaInspectorError):
    """Raised when a plan is submitted for a path that already has one pending."""

    def __init__(self, path: str):
        super().__init__(f"A remediation plan is already in flight for {path}")
        self.path = path


class UnknownFileError(MediaInspectorError, LookupError):
    """Raised when a path is not part of the scanned catalog."""

    def __init__(self, path: str):
        super().__init__(f"File not found in catalog: {path}")
        self.path = path
