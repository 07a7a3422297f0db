"""Edit notifications passed from a host to the change detector."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from coder_typer.host.base import DocumentHandle


@dataclass(frozen=True, slots=True)
class ContentChange:
    """``removed`` characters at ``offset`` were replaced by ``inserted``."""

    offset: int
    removed: int
    inserted: str = ""


@dataclass(frozen=True, slots=True)
class EditEvent:
    document: DocumentHandle
    changes: Tuple[ContentChange, ...] = ()


def diff_change(before: str, after: str) -> Optional[ContentChange]:
    """Describe the edit between two snapshots as a single change.

    Hosts that only report "the text changed" use this to recover a change
    set. Identical snapshots yield ``None``.
    """

    if before == after:
        return None

    limit = min(len(before), len(after))
    prefix = 0
    while prefix < limit and before[prefix] == after[prefix]:
        prefix += 1

    suffix = 0
    while (
        suffix < limit - prefix
        and before[len(before) - 1 - suffix] == after[len(after) - 1 - suffix]
    ):
        suffix += 1

    return ContentChange(
        offset=prefix,
        removed=len(before) - prefix - suffix,
        inserted=after[prefix : len(after) - suffix],
    )
