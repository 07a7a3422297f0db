"""Host editor boundary and the in-memory host."""

from .base import DocumentHandle, HostEditor
from .memory import MemoryDocument, MemoryHost, Notification

__all__ = [
    "DocumentHandle",
    "HostEditor",
    "MemoryDocument",
    "MemoryHost",
    "Notification",
]
