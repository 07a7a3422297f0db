"""Reconciliation session: one per activated host.

A session wires a host editor to the change detector and runs reconciliation
passes: resolve the reference path, read the reference, reconcile, and apply
the corrected text when it differs. Every failure is scoped to its pass.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable, List, Optional, Set

from coder_typer.config import QUIESCENCE_WINDOW_MS, TyperSettings
from coder_typer.detector import (
    AsyncioScheduler,
    ChangeDetector,
    Debouncer,
    EditEvent,
    Scheduler,
)
from coder_typer.errors import (
    CoderTyperError,
    ReferenceReadError,
    WorkspaceResolutionError,
)
from coder_typer.host.base import DocumentHandle, HostEditor
from coder_typer.reconcile import divergent_positions, reconcile
from coder_typer.reference import load_reference, resolve_reference_path
from coder_typer.runtime import telemetry

ACTIVATION_MESSAGE = "Coder Typer is now active."

ReferenceLoader = Callable[[str], Optional[str]]


@dataclass(slots=True)
class PassResult:
    """Outcome of one reconciliation pass."""

    status: str
    reference_path: Optional[str] = None
    message: Optional[str] = None
    corrections: int = 0

    @property
    def applied(self) -> bool:
        return self.status == "applied"


class ReconciliationSession:
    """Owns the debounce slot and runs passes for a single host."""

    def __init__(
        self,
        host: HostEditor,
        *,
        scheduler: Optional[Scheduler] = None,
        window_ms: int = QUIESCENCE_WINDOW_MS,
        loader: ReferenceLoader = load_reference,
        dispatch: Optional[Callable[[DocumentHandle], None]] = None,
    ) -> None:
        self.host = host
        self.logger = telemetry.get_logger("coder_typer.session")
        self._loader = loader
        self._listeners: List[Callable[[PassResult], None]] = []
        self._tasks: Set["asyncio.Task[PassResult]"] = set()
        scheduler = scheduler or AsyncioScheduler()
        if dispatch is None:
            if isinstance(scheduler, AsyncioScheduler):
                dispatch = self._spawn_pass
            else:
                dispatch = self.run_pass
        self._dispatch = dispatch
        self.debouncer = Debouncer(scheduler, window_ms=window_ms)
        self.detector = ChangeDetector(host, self.debouncer, self._on_quiescent)
        self.active = False

    def activate(self) -> None:
        self.active = True
        self.logger.info(ACTIVATION_MESSAGE)
        self.host.show_info(ACTIVATION_MESSAGE)

    def deactivate(self) -> None:
        self.debouncer.cancel()
        self._listeners.clear()
        self.active = False
        telemetry.record_event("session.deactivated")

    def subscribe(self, callback: Callable[[PassResult], None]) -> None:
        self._listeners.append(callback)

    def on_edit(self, event: EditEvent) -> bool:
        if not self.active:
            return False
        return self.detector.on_edit(event)

    def _on_quiescent(self, document: DocumentHandle) -> None:
        self._dispatch(document)

    def _spawn_pass(self, document: DocumentHandle) -> None:
        task = asyncio.get_running_loop().create_task(self.run_pass_async(document))
        self._tasks.add(task)
        task.add_done_callback(self._pass_done)

    def _pass_done(self, task: "asyncio.Task[PassResult]") -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.logger.error(f"reconciliation pass crashed: {exc!r}")

    def resolve_reference(self, document: DocumentHandle) -> str:
        settings = TyperSettings.load(self.host.read_config)
        document_path = self.host.get_document_path(document)
        workspace_root = None
        if settings.reference_directory:
            workspace_root = self.host.get_workspace_root(document)
        return resolve_reference_path(
            document_path, settings.reference_directory, workspace_root
        )

    def run_pass(self, document: DocumentHandle) -> PassResult:
        """Run a full pass synchronously."""

        with telemetry.span("reconcile::pass", component="reconciler"):
            try:
                reference_path = self.resolve_reference(document)
                reference_text = self._loader(reference_path)
            except CoderTyperError as exc:
                return self._publish(self._failed(exc))
            return self._publish(self._apply(document, reference_path, reference_text))

    async def run_pass_async(self, document: DocumentHandle) -> PassResult:
        """Run a pass, reading the reference file off the event loop."""

        with telemetry.span("reconcile::pass", component="reconciler"):
            try:
                reference_path = self.resolve_reference(document)
                reference_text = await asyncio.to_thread(self._loader, reference_path)
            except CoderTyperError as exc:
                return self._publish(self._failed(exc))
            return self._publish(self._apply(document, reference_path, reference_text))

    def _apply(
        self,
        document: DocumentHandle,
        reference_path: str,
        reference_text: Optional[str],
    ) -> PassResult:
        if reference_text is None:
            return PassResult("no_reference", reference_path=reference_path)

        current = self.host.get_document_text(document)
        corrected = reconcile(current, reference_text)
        if corrected is None:
            return PassResult("unchanged", reference_path=reference_path)

        corrections = len(divergent_positions(current, reference_text))
        if not self.host.replace_full_document(document, corrected):
            self.logger.error("Failed to replace text")
            return PassResult(
                "apply_failed",
                reference_path=reference_path,
                message="Failed to replace text",
                corrections=corrections,
            )

        telemetry.record_event(
            "reconcile.applied",
            data={"reference": reference_path, "corrections": corrections},
        )
        return PassResult(
            "applied", reference_path=reference_path, corrections=corrections
        )

    def _failed(self, exc: CoderTyperError) -> PassResult:
        if isinstance(exc, WorkspaceResolutionError):
            message = str(exc)
            self.host.show_error(message)
            return PassResult("no_workspace", message=message)
        if isinstance(exc, ReferenceReadError):
            message = f"Error reading reference file: {exc}"
            self.host.show_error(message)
            return PassResult("read_error", reference_path=exc.path, message=message)
        raise exc

    def _publish(self, result: PassResult) -> PassResult:
        self.logger.debug(f"pass finished status={result.status}")
        for listener in list(self._listeners):
            try:
                listener(result)
            except Exception as exc:
                self.logger.error(f"pass listener failed: {exc!r}")
        return result


def activate(
    host: HostEditor,
    *,
    scheduler: Optional[Scheduler] = None,
    window_ms: int = QUIESCENCE_WINDOW_MS,
    dispatch: Optional[Callable[[DocumentHandle], None]] = None,
) -> ReconciliationSession:
    """Create and activate a session for ``host``."""

    session = ReconciliationSession(
        host, scheduler=scheduler, window_ms=window_ms, dispatch=dispatch
    )
    session.activate()
    return session


def deactivate(session: ReconciliationSession) -> None:
    session.deactivate()


__all__ = [
    "ACTIVATION_MESSAGE",
    "PassResult",
    "ReconciliationSession",
    "activate",
    "deactivate",
]
