"""Single-slot debouncing on top of a pluggable timer primitive."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol

from coder_typer.runtime import telemetry


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Anything able to run a callback after ``delay`` seconds."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class AsyncioScheduler:
    """Schedules on an asyncio event loop (the running one by default)."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def call_later(
        self, delay: float, callback: Callable[[], None]
    ) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


@dataclass
class ManualTimer:
    deadline: float
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual-clock scheduler; timers fire only from ``advance``."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self._timers: List[ManualTimer] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(deadline=self.now + delay, callback=callback)
        self._timers.append(timer)
        return timer

    @property
    def pending(self) -> int:
        return sum(1 for timer in self._timers if not timer.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward and run every timer that came due."""

        self.now += seconds
        due = sorted(
            (t for t in self._timers if t.deadline <= self.now and not t.cancelled),
            key=lambda t: t.deadline,
        )
        self._timers = [
            t for t in self._timers if t.deadline > self.now and not t.cancelled
        ]
        fired = 0
        for timer in due:
            if not timer.cancelled:
                timer.callback()
                fired += 1
        return fired

    def advance_ms(self, milliseconds: float) -> int:
        return self.advance(milliseconds / 1000.0)


class Debouncer:
    """Collapses bursts of triggers into one callback after a quiet window.

    Holds a single pending timer. Each ``trigger`` cancels it and arms a new
    one; a generation counter discards callbacks from superseded timers that
    a scheduler fires anyway.
    """

    def __init__(self, scheduler: Scheduler, *, window_ms: int) -> None:
        if window_ms < 0:
            raise ValueError("window_ms must be non-negative")
        self.scheduler = scheduler
        self.window_ms = window_ms
        self._pending: Optional[TimerHandle] = None
        self._generation = 0
        self.logger = telemetry.get_logger("coder_typer.detector")

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def trigger(self, callback: Callable[[], None]) -> None:
        superseded = self.cancel()
        self._generation += 1
        generation = self._generation
        self._pending = self.scheduler.call_later(
            self.window_ms / 1000.0, lambda: self._fire(generation, callback)
        )
        self.logger.debug(
            f"debounce armed generation={generation} superseded={superseded}"
        )

    def cancel(self) -> bool:
        if self._pending is None:
            return False
        self._pending.cancel()
        self._pending = None
        return True

    def _fire(self, generation: int, callback: Callable[[], None]) -> None:
        if generation != self._generation:
            return
        self._pending = None
        callback()
