"""Map a document path to the path of its reference file."""

from __future__ import annotations

import os
from typing import Iterable, Optional

from coder_typer.config import REFERENCE_SUFFIX
from coder_typer.errors import WorkspaceResolutionError

NO_WORKSPACE_MESSAGE = "Cannot determine workspace folder for the current file."


def resolve_reference_path(
    document_path: str,
    reference_directory: str,
    workspace_root: Optional[str],
) -> str:
    """Resolve the reference file for ``document_path``.

    With no ``reference_directory`` the sibling ``<document_path>.ref`` is
    used. Otherwise the document's path relative to ``workspace_root`` is
    joined onto the reference directory, which is itself taken relative to
    the workspace root unless absolute.
    """

    if not reference_directory:
        return document_path + REFERENCE_SUFFIX

    if workspace_root is None:
        raise WorkspaceResolutionError(
            NO_WORKSPACE_MESSAGE, document_path=document_path
        )

    relative = os.path.relpath(document_path, workspace_root)
    if os.path.isabs(reference_directory):
        return os.path.normpath(os.path.join(reference_directory, relative))
    return os.path.normpath(
        os.path.join(workspace_root, reference_directory, relative)
    )


def find_workspace_root(document_path: str, folders: Iterable[str]) -> Optional[str]:
    """Return the innermost folder in ``folders`` that contains the document."""

    target = os.path.abspath(document_path)
    best: Optional[str] = None
    for folder in folders:
        root = os.path.abspath(folder)
        try:
            common = os.path.commonpath([root, target])
        except ValueError:  # different drives on Windows
            continue
        if common != root:
            continue
        if best is None or len(root) > len(best):
            best = root
    return best
