"""Textual host adapter. ``app`` needs the ``textual`` package; the controller does not."""

from .controller import TextualTyperAdapter, TextualUIHooks

__all__ = ["TextualTyperAdapter", "TextualUIHooks"]
