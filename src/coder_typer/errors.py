"""Exceptions raised while preparing a reconciliation pass."""

from __future__ import annotations


class CoderTyperError(RuntimeError):
    """Base class for pass-scoped failures."""


class WorkspaceResolutionError(CoderTyperError):
    """Raised when a reference directory is configured but the document has no
    enclosing workspace folder to resolve it against."""

    def __init__(self, message: str, *, document_path: str | None = None) -> None:
        super().__init__(message)
        self.document_path = document_path


class ReferenceReadError(CoderTyperError):
    """Raised when a reference file exists but cannot be read."""

    def __init__(self, path: str, cause: OSError) -> None:
        reason = cause.strerror or str(cause)
        super().__init__(f"{reason}: {path}")
        self.path = path
        self.cause = cause


__all__ = ["CoderTyperError", "WorkspaceResolutionError", "ReferenceReadError"]
