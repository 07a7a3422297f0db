"""Edit intake and debouncing."""

from .change_detector import ChangeDetector
from .debounce import (
    AsyncioScheduler,
    Debouncer,
    ManualScheduler,
    ManualTimer,
    Scheduler,
    TimerHandle,
)
from .events import ContentChange, EditEvent, diff_change

__all__ = [
    "AsyncioScheduler",
    "ChangeDetector",
    "ContentChange",
    "Debouncer",
    "EditEvent",
    "ManualScheduler",
    "ManualTimer",
    "Scheduler",
    "TimerHandle",
    "diff_change",
]
