from __future__ import annotations

import asyncio
import os
import threading
import time
from typing import List, Optional

from coder_typer.config import ConfigStore
from coder_typer.detector import ManualScheduler
from coder_typer.host import MemoryDocument, MemoryHost
from coder_typer.reference import load_reference
from coder_typer.session import (
    ACTIVATION_MESSAGE,
    PassResult,
    ReconciliationSession,
    activate,
    deactivate,
)


def make_session(
    workspace: str,
    *,
    reference_directory: Optional[str] = None,
    workspace_folders: Optional[List[str]] = None,
) -> tuple[MemoryHost, ManualScheduler, ReconciliationSession]:
    values = {}
    if reference_directory is not None:
        values["referenceDirectory"] = reference_directory
    host = MemoryHost(
        workspace_folders=[workspace] if workspace_folders is None else workspace_folders,
        config=ConfigStore(values, environ={}),
    )
    scheduler = ManualScheduler()
    session = activate(host, scheduler=scheduler)
    return host, scheduler, session


def write(path, text: str) -> None:
    os.makedirs(os.path.dirname(str(path)), exist_ok=True)
    with open(str(path), "w", encoding="utf-8", newline="") as handle:
        handle.write(text)


def type_and_settle(
    host: MemoryHost,
    scheduler: ManualScheduler,
    session: ReconciliationSession,
    document: MemoryDocument,
    text: str,
) -> None:
    session.on_edit(host.type_text(document, text))
    scheduler.advance_ms(150)


def test_activation_announces_itself(tmp_path) -> None:
    host, _, session = make_session(str(tmp_path))

    assert session.active
    assert host.notifications[0].severity == "info"
    assert host.notifications[0].message == ACTIVATION_MESSAGE


def test_typing_is_corrected_from_sibling_reference(tmp_path) -> None:
    host, scheduler, session = make_session(str(tmp_path))
    write(tmp_path / "main.py.ref", "print('hello')\n")
    document = host.open_document(str(tmp_path / "main.py"))

    type_and_settle(host, scheduler, session, document, "prant")

    assert document.text == "print"
    assert host.applied_edits == 1


def test_reference_directory_relative_to_workspace(tmp_path) -> None:
    host, scheduler, session = make_session(
        str(tmp_path), reference_directory="answers"
    )
    write(tmp_path / "answers" / "src" / "a.txt", "expected")
    document = host.open_document(str(tmp_path / "src" / "a.txt"))

    type_and_settle(host, scheduler, session, document, "exqxxx")

    assert document.text == "expect"


def test_absolute_reference_directory(tmp_path) -> None:
    workspace = tmp_path / "ws"
    refs = tmp_path / "refs"
    host, scheduler, session = make_session(
        str(workspace), reference_directory=str(refs)
    )
    write(refs / "notes.md", "# Title")
    document = host.open_document(str(workspace / "notes.md"))

    type_and_settle(host, scheduler, session, document, "@ Tit")

    assert document.text == "# Tit"


def test_burst_of_edits_runs_one_pass(tmp_path) -> None:
    host, scheduler, session = make_session(str(tmp_path))
    write(tmp_path / "a.txt.ref", "abcdef")
    document = host.open_document(str(tmp_path / "a.txt"))
    results: List[PassResult] = []
    session.subscribe(results.append)

    for char in "xyz":
        session.on_edit(host.type_text(document, char))
        scheduler.advance_ms(30)
    scheduler.advance_ms(200)

    assert len(results) == 1
    assert results[0].status == "applied"
    assert results[0].corrections == 3
    assert document.text == "abc"


def test_text_past_reference_is_untouched(tmp_path) -> None:
    host, scheduler, session = make_session(str(tmp_path))
    write(tmp_path / "a.txt.ref", "hello")
    document = host.open_document(str(tmp_path / "a.txt"))
    results: List[PassResult] = []
    session.subscribe(results.append)

    type_and_settle(host, scheduler, session, document, "hello there")

    assert document.text == "hello there"
    assert results[-1].status == "unchanged"
    assert host.applied_edits == 0


def test_missing_reference_is_silent(tmp_path) -> None:
    host, scheduler, session = make_session(str(tmp_path))
    document = host.open_document(str(tmp_path / "a.txt"))
    results: List[PassResult] = []
    session.subscribe(results.append)

    type_and_settle(host, scheduler, session, document, "anything")

    assert document.text == "anything"
    assert results[-1].status == "no_reference"
    assert host.errors == []


def test_reference_edits_apply_on_next_pass(tmp_path) -> None:
    host, scheduler, session = make_session(str(tmp_path))
    reference = tmp_path / "a.txt.ref"
    write(reference, "first")
    document = host.open_document(str(tmp_path / "a.txt"))

    type_and_settle(host, scheduler, session, document, "fir")
    write(reference, "other")
    type_and_settle(host, scheduler, session, document, "s")

    assert document.text == "othe"


def test_missing_workspace_is_reported(tmp_path) -> None:
    host, scheduler, session = make_session(
        str(tmp_path), reference_directory="refs", workspace_folders=[]
    )
    document = host.open_document(str(tmp_path / "a.txt"))
    results: List[PassResult] = []
    session.subscribe(results.append)

    type_and_settle(host, scheduler, session, document, "x")

    assert results[-1].status == "no_workspace"
    assert host.errors == ["Cannot determine workspace folder for the current file."]
    assert document.text == "x"


def test_unreadable_reference_is_reported(tmp_path) -> None:
    host, scheduler, session = make_session(str(tmp_path))
    (tmp_path / "a.txt.ref").mkdir()
    document = host.open_document(str(tmp_path / "a.txt"))
    results: List[PassResult] = []
    session.subscribe(results.append)

    type_and_settle(host, scheduler, session, document, "x")

    assert results[-1].status == "read_error"
    assert len(host.errors) == 1
    assert host.errors[0].startswith("Error reading reference file: ")
    assert document.text == "x"


def test_rejected_edit_is_not_shown_to_user(tmp_path) -> None:
    host, scheduler, session = make_session(str(tmp_path))
    write(tmp_path / "a.txt.ref", "abc")
    document = host.open_document(str(tmp_path / "a.txt"))
    host.reject_edits = True
    results: List[PassResult] = []
    session.subscribe(results.append)

    type_and_settle(host, scheduler, session, document, "xbc")

    assert results[-1].status == "apply_failed"
    assert host.errors == []
    assert document.text == "xbc"


def test_deactivate_cancels_pending_pass(tmp_path) -> None:
    host, scheduler, session = make_session(str(tmp_path))
    write(tmp_path / "a.txt.ref", "abc")
    document = host.open_document(str(tmp_path / "a.txt"))

    session.on_edit(host.type_text(document, "x"))
    deactivate(session)
    scheduler.advance_ms(200)

    assert document.text == "x"
    assert session.on_edit(host.type_text(document, "y")) is False


def test_run_pass_async_reads_reference(tmp_path) -> None:
    host = MemoryHost(workspace_folders=[str(tmp_path)])
    session = ReconciliationSession(host, scheduler=ManualScheduler())
    write(tmp_path / "a.txt.ref", "async")
    document = host.open_document(str(tmp_path / "a.txt"), "asy_c")

    result = asyncio.run(session.run_pass_async(document))

    assert result.applied
    assert document.text == "async"
    assert result.reference_path == str(tmp_path / "a.txt.ref")


def test_custom_dispatch_receives_document(tmp_path) -> None:
    host = MemoryHost(workspace_folders=[str(tmp_path)])
    scheduler = ManualScheduler()
    dispatched: List[MemoryDocument] = []
    session = activate(host, scheduler=scheduler, dispatch=dispatched.append)
    document = host.open_document(str(tmp_path / "a.txt"))

    session.on_edit(host.type_text(document, "x"))
    scheduler.advance_ms(150)

    assert dispatched == [document]


def test_default_scheduler_reads_reference_off_the_loop(tmp_path) -> None:
    write(tmp_path / "a.txt.ref", "abc")
    loader_threads: List[int] = []
    gaps: List[float] = []

    def slow_loader(path: str) -> Optional[str]:
        loader_threads.append(threading.get_ident())
        time.sleep(0.3)
        return load_reference(path)

    async def scenario() -> tuple[int, MemoryDocument]:
        host = MemoryHost(workspace_folders=[str(tmp_path)])
        session = ReconciliationSession(host, loader=slow_loader, window_ms=10)
        session.activate()
        document = host.open_document(str(tmp_path / "a.txt"))
        session.on_edit(host.type_text(document, "xbc"))

        last = time.monotonic()
        for _ in range(12):
            await asyncio.sleep(0.05)
            now = time.monotonic()
            gaps.append(now - last)
            last = now
        return threading.get_ident(), document

    loop_thread, document = asyncio.run(scenario())

    assert loader_threads and loader_threads[0] != loop_thread
    assert max(gaps) < 0.25
    assert document.text == "abc"


def test_failing_listener_does_not_stop_others(tmp_path) -> None:
    host, scheduler, session = make_session(str(tmp_path))
    write(tmp_path / "a.txt.ref", "abc")
    document = host.open_document(str(tmp_path / "a.txt"))
    results: List[PassResult] = []

    def broken(result: PassResult) -> None:
        raise RuntimeError("listener bug")

    session.subscribe(broken)
    session.subscribe(results.append)

    type_and_settle(host, scheduler, session, document, "xbc")

    assert document.text == "abc"
    assert [result.status for result in results] == ["applied"]
