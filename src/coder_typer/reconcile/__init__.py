"""Pure reconciliation core."""

from .reconciler import correct_text, divergent_positions, reconcile

__all__ = ["correct_text", "divergent_positions", "reconcile"]
