"""Guided typing: keep a live document in step with a reference text."""

__all__ = [
    "adapters",
    "config",
    "detector",
    "errors",
    "host",
    "reconcile",
    "reference",
    "runtime",
    "session",
]

__version__ = "0.1.0"
