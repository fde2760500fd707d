"""
frame_scheduler.py
------------------
Cooperative, single-threaded scheduler driven by the host's frame loop.

Responsibilities
----------------
- Queue "soon" callbacks that run at the start of the next update.
- Queue frame callbacks that run on the next paint boundary.
- Run timeout callbacks in (due time, scheduling order) order.
- Run "after" callbacks once the batch of callbacks for an instant ends.
- Track a virtual clock in milliseconds so ordering stays deterministic
  even when several timers fall inside the same frame.
"""

import heapq
import itertools
from typing import Callable, List, Optional

from stagecraft.core.debug_logger import DebugLogger
from stagecraft.core.settings import Timing


class ScheduledCall:
    """Handle for a queued callback. Cancelled calls are skipped."""

    __slots__ = ("callback", "due_ms", "seq", "cancelled", "label")

    def __init__(self, callback: Callable[[], None], due_ms: float, seq: int, label: str = ""):
        self.callback = callback
        self.due_ms = due_ms
        self.seq = seq
        self.cancelled = False
        self.label = label

    def cancel(self):
        """Invalidate the call; it will never run."""
        self.cancelled = True

    def __lt__(self, other: "ScheduledCall") -> bool:
        return (self.due_ms, self.seq) < (other.due_ms, other.seq)

    def __repr__(self):
        state = "cancelled" if self.cancelled else "pending"
        return f"ScheduledCall({self.label or self.callback!r}, due={self.due_ms:.1f}ms, {state})"


class FrameScheduler:
    """Frame and timer queue advanced explicitly through update(dt)."""

    def __init__(self, start_ms: float = 0.0):
        self.now_ms = float(start_ms)
        self.frame_count = 0

        self._seq = itertools.count()
        self._soon: List[ScheduledCall] = []
        self._frames: List[ScheduledCall] = []
        self._timers: List[ScheduledCall] = []
        self._after: List[ScheduledCall] = []

    # ===========================================================
    # Scheduling
    # ===========================================================

    def call_soon(self, callback: Callable[[], None], label: str = "") -> ScheduledCall:
        """Run callback at the start of the next update, before frame callbacks."""
        call = ScheduledCall(callback, self.now_ms, next(self._seq), label)
        self._soon.append(call)
        return call

    def request_frame(self, callback: Callable[[], None], label: str = "") -> ScheduledCall:
        """Run callback on the next paint boundary."""
        call = ScheduledCall(callback, self.now_ms, next(self._seq), label)
        self._frames.append(call)
        return call

    def set_timeout(self, delay_ms: float, callback: Callable[[], None], label: str = "") -> ScheduledCall:
        """
        Run callback once the virtual clock reaches now + delay_ms.

        Args:
            delay_ms: Delay in milliseconds (negative values clamp to 0)
            callback: Zero-argument callable
            label: Optional description for debugging

        Returns:
            ScheduledCall handle
        """
        call = ScheduledCall(callback, self.now_ms + max(0.0, delay_ms), next(self._seq), label)
        heapq.heappush(self._timers, call)
        return call

    def call_after(self, callback: Callable[[], None], label: str = "") -> ScheduledCall:
        """
        Run callback once the batch of callbacks for the current instant ends.

        Calls queued outside advance() run at the start of the next advance,
        before the clock moves, or on an explicit flush().
        """
        call = ScheduledCall(callback, self.now_ms, next(self._seq), label)
        self._after.append(call)
        return call

    # ===========================================================
    # Frame Cycle
    # ===========================================================

    def update(self, dt: float):
        """
        Advance one host frame.

        Args:
            dt: Delta time in seconds
        """
        self.advance(dt * 1000.0)

    def advance(self, ms: float):
        """
        Advance the virtual clock by ms milliseconds.

        Soon callbacks run first, then the frame callbacks queued before this
        call, then every timer due within the step in due order. Callbacks
        queued while running land in the next step, except timers that fall
        due inside the current one. call_after callbacks run once each batch
        (soon, frames, timers sharing a due time) has finished, and once
        before anything else for work queued since the last step.
        """
        target = self.now_ms + max(0.0, ms)
        self.frame_count += 1

        # Work deferred by callers outside the scheduler belongs to the current instant
        self.flush()

        # Frames requested by soon callbacks wait for the next paint boundary
        soon, self._soon = self._soon, []
        frames, self._frames = self._frames, []

        for call in soon:
            if not call.cancelled:
                call.callback()
        self.flush()

        for call in frames:
            if not call.cancelled:
                call.callback()
        self.flush()

        # Timers sharing a due time form one batch
        while self._timers and self._timers[0].due_ms <= target:
            due_ms = self._timers[0].due_ms
            self.now_ms = max(self.now_ms, due_ms)
            while self._timers and self._timers[0].due_ms == due_ms:
                call = heapq.heappop(self._timers)
                if call.cancelled:
                    continue
                DebugLogger.trace(f"Timer fired at {self.now_ms:.1f}ms: {call!r}")
                call.callback()
            self.flush()

        self.now_ms = target

    def flush(self):
        """Run call_after callbacks, including ones queued while flushing."""
        while self._after:
            call = self._after.pop(0)
            if not call.cancelled:
                call.callback()

    def run_until_idle(self, step_ms: float = Timing.FRAME_MS, max_steps: int = 10000):
        """Advance in fixed steps until nothing is queued. Returns steps taken."""
        steps = 0
        while self.has_pending() and steps < max_steps:
            self.advance(step_ms)
            steps += 1
        return steps

    # ===========================================================
    # Queries
    # ===========================================================

    def has_pending(self) -> bool:
        """True while any non-cancelled callback is queued."""
        queues = (self._soon, self._frames, self._timers, self._after)
        return any(not call.cancelled for queue in queues for call in queue)

    def next_due(self) -> Optional[float]:
        """Due time of the earliest live timer, or None."""
        live = [call.due_ms for call in self._timers if not call.cancelled]
        return min(live) if live else None
