"""In-process host editor, used for scripting and tests."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from coder_typer.config import ConfigStore
from coder_typer.detector.events import ContentChange, EditEvent
from coder_typer.reference.paths import find_workspace_root


@dataclass(eq=False)
class MemoryDocument:
    path: str
    text: str = ""


@dataclass
class Notification:
    severity: str
    message: str


class MemoryHost:
    """Keeps documents in memory and records every notification it shows."""

    def __init__(
        self,
        *,
        workspace_folders: Iterable[str] = (),
        config: Optional[ConfigStore] = None,
    ) -> None:
        self.workspace_folders: List[str] = [
            os.path.abspath(folder) for folder in workspace_folders
        ]
        self.config = config or ConfigStore(environ={})
        self.documents: Dict[str, MemoryDocument] = {}
        self.notifications: List[Notification] = []
        self.reject_edits = False
        self.applied_edits = 0
        self._active: Optional[MemoryDocument] = None

    def open_document(
        self, path: str, text: str = "", *, focus: bool = True
    ) -> MemoryDocument:
        absolute = os.path.abspath(path)
        document = self.documents.get(absolute)
        if document is None:
            document = MemoryDocument(path=absolute, text=text)
            self.documents[absolute] = document
        if focus:
            self._active = document
        return document

    def focus(self, document: Optional[MemoryDocument]) -> None:
        self._active = document

    def edit(
        self, document: MemoryDocument, offset: int, removed: int, inserted: str
    ) -> EditEvent:
        """Apply a user edit and return the notification a host would send."""

        if offset < 0 or offset + removed > len(document.text):
            raise ValueError("Edit range outside the document")
        text = document.text
        document.text = text[:offset] + inserted + text[offset + removed :]
        change = ContentChange(offset=offset, removed=removed, inserted=inserted)
        return EditEvent(document=document, changes=(change,))

    def type_text(self, document: MemoryDocument, text: str) -> EditEvent:
        """Append ``text`` at the end of the document, like a typist would."""

        return self.edit(document, len(document.text), 0, text)

    # HostEditor ---------------------------------------------------------

    def get_active_document(self) -> Optional[MemoryDocument]:
        return self._active

    def get_document_text(self, handle: MemoryDocument) -> str:
        return handle.text

    def get_document_path(self, handle: MemoryDocument) -> str:
        return handle.path

    def get_workspace_root(self, handle: MemoryDocument) -> Optional[str]:
        return find_workspace_root(handle.path, self.workspace_folders)

    def replace_full_document(self, handle: MemoryDocument, new_text: str) -> bool:
        if self.reject_edits:
            return False
        handle.text = new_text
        self.applied_edits += 1
        return True

    def read_config(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def show_info(self, message: str) -> None:
        self.notifications.append(Notification("info", message))

    def show_error(self, message: str) -> None:
        self.notifications.append(Notification("error", message))

    @property
    def errors(self) -> List[str]:
        return [n.message for n in self.notifications if n.severity == "error"]
