"""Filters host edit notifications and debounces them into passes."""

from __future__ import annotations

from typing import Callable

from coder_typer.host.base import DocumentHandle, HostEditor
from coder_typer.runtime import telemetry

from .debounce import Debouncer
from .events import EditEvent


class ChangeDetector:
    """Turns a stream of edits on the focused document into pass requests."""

    def __init__(
        self,
        host: HostEditor,
        debouncer: Debouncer,
        on_quiescent: Callable[[DocumentHandle], None],
    ) -> None:
        self.host = host
        self.debouncer = debouncer
        self._on_quiescent = on_quiescent

    def on_edit(self, event: EditEvent) -> bool:
        """Schedule a pass for ``event``; return ``False`` if it was ignored."""

        if not event.changes:
            return False
        active = self.host.get_active_document()
        if active is None or active is not event.document:
            return False

        document = event.document
        self.debouncer.trigger(lambda: self._on_quiescent(document))
        telemetry.record_event(
            "detector.edit",
            level="debug",
            data={"changes": len(event.changes)},
        )
        return True

    def cancel(self) -> bool:
        return self.debouncer.cancel()
