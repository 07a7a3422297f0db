"""Terminal typing app that keeps one file in step with its reference."""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from typing import Any, Optional, Sequence

try:  # pragma: no cover - imported only when the app is run
    from textual.app import App, ComposeResult
    from textual.widgets import Footer, Header, Static, TextArea
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use coder_typer.adapters.textual.app"
    ) from exc

from coder_typer.config import REFERENCE_DIRECTORY_KEY, ConfigStore
from coder_typer.reference import find_workspace_root
from coder_typer.runtime import telemetry
from coder_typer.session import ReconciliationSession, activate, deactivate

from .controller import TextualTyperAdapter, TextualUIHooks


@dataclass(eq=False)
class TextualDocument:
    path: str


class TextualHost:
    """Host editor backed by a single ``TextArea``."""

    def __init__(
        self,
        app: "CoderTyperApp",
        document: TextualDocument,
        *,
        workspace_folders: Sequence[str],
        config: ConfigStore,
    ) -> None:
        self.app = app
        self.document = document
        self.workspace_folders = [os.path.abspath(f) for f in workspace_folders]
        self.config = config
        self.logger = telemetry.get_logger("coder_typer.adapters.textual")

    def get_active_document(self) -> Optional[TextualDocument]:
        return self.document if self.app.editor is not None else None

    def get_document_text(self, handle: TextualDocument) -> str:
        assert self.app.editor is not None
        return self.app.editor.text

    def get_document_path(self, handle: TextualDocument) -> str:
        return handle.path

    def get_workspace_root(self, handle: TextualDocument) -> Optional[str]:
        return find_workspace_root(handle.path, self.workspace_folders)

    def replace_full_document(self, handle: TextualDocument, new_text: str) -> bool:
        editor = self.app.editor
        if editor is None:
            return False
        try:
            editor.replace(
                new_text,
                (0, 0),
                editor.document.end,
                maintain_selection_offset=True,
            )
        except ValueError as exc:
            self.logger.error(f"replace rejected: {exc}")
            return False
        return True

    def read_config(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def show_info(self, message: str) -> None:
        self.app.notify(message)

    def show_error(self, message: str) -> None:
        self.app.notify(message, severity="error")


class CoderTyperApp(App[None]):
    """Editor whose buffer is corrected toward a reference as you type."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#editor {
		height: 1fr;
		border: round $accent;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+s", "save", "Save"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        path: str,
        *,
        workspace_folders: Sequence[str] = (),
        config: Optional[ConfigStore] = None,
    ) -> None:
        super().__init__()
        self.document = TextualDocument(path=os.path.abspath(path))
        self._workspace_folders = list(workspace_folders)
        self._config = config or ConfigStore()
        self.editor: TextArea | None = None
        self._status_widget: Static | None = None
        self.session: ReconciliationSession | None = None
        self.adapter: TextualTyperAdapter | None = None
        self.logger = telemetry.get_logger("coder_typer.adapters.textual")

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        self.editor = TextArea(_read_initial(self.document.path), id="editor")
        yield self.editor
        self._status_widget = Static("", id="status-line")
        yield self._status_widget
        yield Footer()

    def on_mount(self) -> None:
        host = TextualHost(
            self,
            self.document,
            workspace_folders=self._workspace_folders,
            config=self._config,
        )
        self.session = activate(host, dispatch=self._start_pass)
        self.adapter = TextualTyperAdapter(
            self.session,
            TextualUIHooks(update_status=self._update_status, log=self._log_line),
        )
        if self.editor is not None:
            self.adapter.track(self.document, self.editor.text)
            self.editor.focus()
        self._update_status(self.document.path)

    def on_unmount(self) -> None:
        if self.session is not None:
            deactivate(self.session)
            self.session = None

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        if self.adapter is None:
            return
        self.adapter.handle_text_changed(self.document, event.text_area.text)

    def _start_pass(self, document: Any) -> None:
        if self.session is None:
            return
        self.run_worker(
            self.session.run_pass_async(document),
            group="reconcile",
            description="reconciliation pass",
        )

    def action_save(self) -> None:
        if self.editor is None:
            return
        try:
            with open(self.document.path, "w", encoding="utf-8", newline="") as handle:
                handle.write(self.editor.text)
        except OSError as exc:
            self.notify(f"Could not save {self.document.path}: {exc}", severity="error")
            return
        self._update_status(f"saved {self.document.path}")

    def _update_status(self, status: str) -> None:
        if self._status_widget:
            self._status_widget.update(status)

    def _log_line(self, line: str) -> None:
        self.logger.debug(line)


def _read_initial(path: str) -> str:
    try:
        with open(path, encoding="utf-8", errors="replace", newline="") as handle:
            return handle.read()
    except FileNotFoundError:
        return ""


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Type into FILE while it is kept in step with its reference."
    )
    parser.add_argument("file", help="Document to edit")
    parser.add_argument(
        "--workspace",
        default=os.environ.get("CODER_TYPER_WORKSPACE", os.getcwd()),
        help="Workspace root used to resolve a reference directory (default: cwd)",
    )
    parser.add_argument(
        "--reference-dir",
        default=None,
        help=(
            "Reference directory, absolute or relative to the workspace; "
            "overrides CODER_TYPER_REFERENCE_DIRECTORY and --settings"
        ),
    )
    parser.add_argument(
        "--settings",
        default=None,
        help="JSON settings file holding coderTyper.* keys",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    telemetry.configure(preset="quiet")
    config = ConfigStore.from_json_file(args.settings) if args.settings else ConfigStore()
    if args.reference_dir is not None:
        config.set(REFERENCE_DIRECTORY_KEY, args.reference_dir)
    app = CoderTyperApp(args.file, workspace_folders=[args.workspace], config=config)
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual run
    main()
