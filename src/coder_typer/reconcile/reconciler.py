"""Positional reconciliation of a live buffer against a reference text."""

from __future__ import annotations

from typing import List, Optional


def correct_text(current_text: str, reference_text: str) -> str:
    """Return ``current_text`` with its overlap rewritten to match the reference.

    Only the first ``min(len(current_text), len(reference_text))`` characters
    are compared. Anything typed past the end of the reference is kept as is,
    so the result always has the length of ``current_text``.
    """

    overlap = min(len(current_text), len(reference_text))
    corrected = [
        expected if expected != typed else typed
        for typed, expected in zip(current_text[:overlap], reference_text[:overlap])
    ]
    return "".join(corrected) + current_text[overlap:]


def reconcile(current_text: str, reference_text: str) -> Optional[str]:
    """Return the full replacement text, or ``None`` when nothing changes."""

    corrected = correct_text(current_text, reference_text)
    if corrected == current_text:
        return None
    return corrected


def divergent_positions(current_text: str, reference_text: str) -> List[int]:
    """Indices in the overlapping prefix where the two texts disagree."""

    return [
        index
        for index, (typed, expected) in enumerate(zip(current_text, reference_text))
        if typed != expected
    ]
