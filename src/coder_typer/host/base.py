"""Boundary between the reconciliation core and a host editor."""

from __future__ import annotations

from typing import Any, Optional, Protocol


class DocumentHandle(Protocol):
    """Opaque identity of a host document; compared with ``is``."""


class HostEditor(Protocol):
    """Operations a host editor provides to a reconciliation session."""

    def get_active_document(self) -> Optional[DocumentHandle]:
        ...

    def get_document_text(self, handle: DocumentHandle) -> str:
        ...

    def get_document_path(self, handle: DocumentHandle) -> str:
        ...

    def get_workspace_root(self, handle: DocumentHandle) -> Optional[str]:
        ...

    def replace_full_document(self, handle: DocumentHandle, new_text: str) -> bool:
        """Replace the whole text in one edit; ``False`` if the host refused."""
        ...

    def read_config(self, key: str, default: Any = None) -> Any:
        ...

    def show_info(self, message: str) -> None:
        ...

    def show_error(self, message: str) -> None:
        ...
