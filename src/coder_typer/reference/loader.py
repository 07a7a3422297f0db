"""Read reference files."""

from __future__ import annotations

from typing import Optional

from coder_typer.errors import ReferenceReadError
from coder_typer.runtime import telemetry


def load_reference(path: str) -> Optional[str]:
    """Return the text of ``path``, or ``None`` when the file does not exist.

    The file is opened directly instead of being checked for existence first.
    Any other ``OSError`` is raised as :class:`ReferenceReadError`. Invalid
    UTF-8 is replaced rather than rejected and line endings are preserved.
    """

    try:
        with open(path, encoding="utf-8", errors="replace", newline="") as handle:
            return handle.read()
    except (FileNotFoundError, NotADirectoryError):
        telemetry.get_logger("coder_typer.reference").debug(f"no reference at {path}")
        return None
    except OSError as exc:
        raise ReferenceReadError(path, exc) from exc
