"""
Exception hierarchy for walkthrough runs.

    WalkthroughError
    ├── ConfigError
    ├── WorkspaceAllocationError   fatal, never retried
    ├── StepResolutionError        fatal, aborts the remaining steps
    ├── CaptureError               fatal, treated like a resolution failure
    ├── DocumentError              fatal, the test-case file could not be written
    └── CollaboratorError          narration seam only, always absorbed
"""

from typing import Optional


class WalkthroughError(Exception):
    """Base class for every error raised by the walkthrough engine."""

    def __init__(self, message: str = "", context: Optional[dict] = None):
        self.context = context or {}
        super().__init__(message)


class ConfigError(WalkthroughError):
    """Invalid configuration value or roles file."""


class WorkspaceAllocationError(WalkthroughError):
    """The run directory could not be created."""

    def __init__(self, path: str = "", original: Optional[Exception] = None):
        self.original = original
        msg = f"Could not create run directory: {path}"
        if original:
            msg += f" ({type(original).__name__}: {original})"
        super().__init__(msg, context={"path": path})


class StepResolutionError(WalkthroughError):
    """A required step's target never became actionable."""

    def __init__(self, ordinal: int = 0, selector: str = "", timeout_ms: int = 0):
        self.ordinal = ordinal
        self.selector = selector
        msg = f"Step {ordinal}: could not resolve element '{selector}'"
        if timeout_ms:
            msg += f" (waited {timeout_ms}ms)"
        super().__init__(
            msg,
            context={"ordinal": ordinal, "selector": selector, "timeout_ms": timeout_ms},
        )


class CaptureError(WalkthroughError):
    """A screenshot could not be written."""

    def __init__(self, path: str = "", original: Optional[Exception] = None):
        self.original = original
        msg = f"Could not capture screenshot: {path}"
        if original:
            msg += f" ({type(original).__name__}: {original})"
        super().__init__(msg, context={"path": path})


class DocumentError(WalkthroughError):
    """The test-case document could not be written."""

    def __init__(self, path: str = "", original: Optional[Exception] = None):
        self.original = original
        msg = f"Could not write document: {path}"
        if original:
            msg += f" ({type(original).__name__}: {original})"
        super().__init__(msg, context={"path": path})


class CollaboratorError(WalkthroughError):
    """The narration backend failed or returned nothing usable."""

    def __init__(self, message: str = "", original: Optional[Exception] = None):
        self.original = original
        if not message and original:
            message = f"{type(original).__name__}: {original}"
        super().__init__(message or "Narration backend unavailable")
