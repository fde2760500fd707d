"""
completion.py
-------------
Decides when one node's own transition (not its descendants') is done.

The style engine's native transition-end signal is authoritative. If it
never arrives (detached element, zero-duration property, signal fired per
property), a timeout at the declared duration plus a small grace period
resolves the node instead. Zero totals resolve synchronously.
"""

from typing import Callable, Optional

from stagecraft.core.debug_logger import DebugLogger
from stagecraft.core.settings import Timing


class CompletionDetector:
    """Per-node helper that calls on_done exactly once per watch()."""

    def __init__(self, style_engine, scheduler, epsilon_ms: float = Timing.EPSILON_MS):
        """
        Args:
            style_engine: StyleEngine used to measure timing and subscribe to signals
            scheduler: FrameScheduler used for the timeout fallback
            epsilon_ms: Grace period added to the declared duration
        """
        self.style_engine = style_engine
        self.scheduler = scheduler
        self.epsilon_ms = epsilon_ms

        self.resolved_by: Optional[str] = None
        self._token = 0
        self._timer = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def pending(self) -> bool:
        return self._timer is not None or self._unsubscribe is not None

    def measure(self, node) -> float:
        """Total (duration + delay) of node's slowest property, in ms."""
        return self.style_engine.measure_timing(node).total_ms

    def is_instant(self, node, start, end) -> bool:
        """
        True when neither the start nor the end class set declares any timing.

        Engines that cannot measure unapplied classes are never instant here;
        watch() still resolves them synchronously after the end swap.
        """
        for classes in (start, end):
            timing = self.style_engine.measure_classes(node, tuple(classes))
            if timing is None or timing.total_ms > 0:
                return False
        return True

    def watch(self, node, on_done: Callable[[], None]) -> bool:
        """
        Start waiting for node's transition to end.

        Args:
            node: Node whose classes were just swapped to the end set
            on_done: Called exactly once when the transition is done

        Returns:
            True if the node resolved synchronously (zero duration)
        """
        self.cancel()
        self.resolved_by = None
        token = self._token

        total = self.measure(node)
        if total <= 0:
            self.resolved_by = "instant"
            on_done()
            return True

        def resolve(source: str):
            if token != self._token:
                return
            self._token += 1
            self._release()
            self.resolved_by = source
            if source == "timeout":
                DebugLogger.trace(
                    f"No transition-end signal for '{getattr(node, 'id', node)}' "
                    f"after {total:.0f}ms; resolved by timeout"
                )
            on_done()

        self._unsubscribe = self.style_engine.on_transition_end(node, lambda: resolve("signal"))
        self._timer = self.scheduler.set_timeout(
            total + self.epsilon_ms,
            lambda: resolve("timeout"),
            label=f"{getattr(node, 'id', node)}:completion",
        )
        return False

    def cancel(self):
        """Invalidate any outstanding wait; its callbacks become no-ops."""
        self._token += 1
        self._release()

    def _release(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
