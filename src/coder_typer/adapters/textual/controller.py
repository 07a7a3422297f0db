"""Textual-free controller that feeds widget edits into a session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict

from coder_typer.detector import EditEvent, diff_change
from coder_typer.host.base import DocumentHandle
from coder_typer.session import PassResult, ReconciliationSession


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks the controller uses to update Textual widgets."""

    update_status: Callable[[str], None] = _noop
    log: Callable[[str], None] = _noop


_STATUS_LABELS = {
    "applied": "corrected",
    "unchanged": "in step",
    "no_reference": "no reference file",
    "no_workspace": "no workspace",
    "read_error": "reference unreadable",
    "apply_failed": "edit rejected",
}


class TextualTyperAdapter:
    """Bridges ``TextArea`` change notifications to a reconciliation session.

    ``TextArea.Changed`` carries no change list, so the controller keeps the
    last text it saw per document and derives the change from it.
    """

    def __init__(self, session: ReconciliationSession, hooks: TextualUIHooks) -> None:
        self.session = session
        self.hooks = hooks
        self._last_text: Dict[int, str] = {}
        session.subscribe(self._after_pass)

    def track(self, document: DocumentHandle, text: str) -> None:
        """Record the text a document was opened with."""

        self._last_text[id(document)] = text

    def handle_text_changed(self, document: DocumentHandle, text: str) -> bool:
        before = self._last_text.get(id(document), "")
        self._last_text[id(document)] = text
        change = diff_change(before, text)
        event = EditEvent(document=document, changes=(change,) if change else ())
        scheduled = self.session.on_edit(event)
        self._log(
            "edit ->",
            length=len(text),
            change=change,
            scheduled=scheduled,
        )
        return scheduled

    def _after_pass(self, result: PassResult) -> None:
        label = _STATUS_LABELS.get(result.status, result.status)
        if result.applied:
            label = f"{label} ({result.corrections})"
        self.hooks.update_status(label)
        self._log(
            "pass <-",
            status=result.status,
            reference=result.reference_path,
            message=result.message,
        )

    def _log(self, prefix: str, **fields: object) -> None:
        parts = [prefix]
        parts.extend(f"{key}={value!r}" for key, value in fields.items() if value is not None)
        self.hooks.log(" ".join(parts))


__all__ = ["TextualTyperAdapter", "TextualUIHooks"]
