"""Reference-file location and loading."""

from .loader import load_reference
from .paths import NO_WORKSPACE_MESSAGE, find_workspace_root, resolve_reference_path

__all__ = [
    "NO_WORKSPACE_MESSAGE",
    "find_workspace_root",
    "load_reference",
    "resolve_reference_path",
]
