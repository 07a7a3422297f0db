"""Settings lookup for coder_typer.

Only one option is recognised, ``coderTyper.referenceDirectory``: a directory
(absolute, or relative to the workspace root) mirroring the workspace tree and
holding reference files under identical relative paths. When empty, the
reference for ``<path>`` is the sibling file ``<path>.ref``.
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

SECTION = "coderTyper"
REFERENCE_DIRECTORY_KEY = "referenceDirectory"
REFERENCE_SUFFIX = ".ref"
QUIESCENCE_WINDOW_MS = 100
ENV_PREFIX = "CODER_TYPER_"

ConfigReader = Callable[[str, Any], Any]

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def env_name(key: str) -> str:
    """``referenceDirectory`` -> ``CODER_TYPER_REFERENCE_DIRECTORY``."""

    bare = key.split(".")[-1]
    return ENV_PREFIX + _CAMEL_BOUNDARY.sub("_", bare).upper()


class ConfigStore:
    """Key lookup with defaults.

    Precedence: values pinned with ``set`` (e.g. CLI flags), then
    ``CODER_TYPER_*`` environment variables, then the settings mapping.
    """

    def __init__(
        self,
        values: Optional[Mapping[str, Any]] = None,
        *,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._values: Dict[str, Any] = {}
        for key, value in (values or {}).items():
            self._values[_qualify(key)] = value
        self._environ = os.environ if environ is None else environ
        self._overrides: Dict[str, Any] = {}

    @classmethod
    def from_json_file(
        cls, path: str, *, environ: Optional[Mapping[str, str]] = None
    ) -> "ConfigStore":
        """Load a flat editor-style settings file; a missing file is empty."""

        try:
            with open(path, encoding="utf-8") as handle:
                data = json.load(handle)
        except FileNotFoundError:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Settings file {path} must contain a JSON object")
        own = {
            key: value
            for key, value in data.items()
            if key.startswith(f"{SECTION}.")
        }
        return cls(own, environ=environ)

    def get(self, key: str, default: Any = None) -> Any:
        qualified = _qualify(key)
        if qualified in self._overrides:
            return self._overrides[qualified]
        from_env = self._environ.get(env_name(key))
        if from_env is not None:
            return from_env
        return self._values.get(qualified, default)

    def set(self, key: str, value: Any) -> None:
        """Pin ``key`` to ``value``; pinned values beat the environment."""

        self._overrides[_qualify(key)] = value

    __call__ = get


def _qualify(key: str) -> str:
    return key if "." in key else f"{SECTION}.{key}"


@dataclass(frozen=True, slots=True)
class TyperSettings:
    """Per-pass snapshot of the settings a reconciliation needs."""

    reference_directory: str = ""

    @classmethod
    def load(cls, read_config: ConfigReader) -> "TyperSettings":
        raw = read_config(REFERENCE_DIRECTORY_KEY, "")
        return cls(reference_directory=str(raw or ""))


__all__ = [
    "ConfigReader",
    "ConfigStore",
    "TyperSettings",
    "env_name",
    "ENV_PREFIX",
    "QUIESCENCE_WINDOW_MS",
    "REFERENCE_DIRECTORY_KEY",
    "REFERENCE_SUFFIX",
    "SECTION",
]
