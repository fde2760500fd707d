"""
style_engine.py
---------------
Host-side styling collaborator: applies class tokens to nodes, reports the
transition timing those tokens declare, and delivers the native
transition-end signal.

Responsibilities
----------------
- Define the StyleEngine interface the coordinator talks to.
- Provide SheetStyleEngine, a stylesheet-driven implementation where each
  class token maps to a block of declarations (timing plus visual
  properties such as alpha and offsets).
- Parse CSS-like time values ("150ms", "0.2s", "100ms, 0.3s").
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from stagecraft.core.config_manager import PARSE_ERRORS, load_config
from stagecraft.core.debug_logger import DebugLogger
from stagecraft.transitions.errors import TransitionConfigError


TIMING_KEYS = ("transition_duration", "transition_delay")


@dataclass(frozen=True)
class TransitionTiming:
    """Timing of the slowest animated property of one element."""
    duration_ms: float = 0.0
    delay_ms: float = 0.0

    @property
    def total_ms(self) -> float:
        return max(0.0, self.duration_ms + self.delay_ms)


# ===========================================================
# Time Parsing
# ===========================================================

def parse_time(value) -> float:
    """
    Parse a single time value into milliseconds.

    Accepts "150ms", "0.15s", "150" and plain numbers (milliseconds).

    Raises:
        TransitionConfigError: If the value cannot be parsed
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        raise TransitionConfigError(f"Invalid time value {value!r}")
    if isinstance(value, (int, float)):
        return max(0.0, float(value))

    text = str(value).strip().lower()
    if not text:
        return 0.0
    try:
        if text.endswith("ms"):
            return max(0.0, float(text[:-2]))
        if text.endswith("s"):
            return max(0.0, float(text[:-1]) * 1000.0)
        return max(0.0, float(text))
    except ValueError as e:
        raise TransitionConfigError(f"Invalid time value {value!r}") from e


def parse_time_list(value) -> List[float]:
    """Parse a comma-separated list of time values. Empty input yields [0.0]."""
    if isinstance(value, (list, tuple)):
        items = list(value)
    elif isinstance(value, str):
        items = [part for part in value.split(",") if part.strip()]
    else:
        items = [value]
    return [parse_time(item) for item in items] or [0.0]


def resolve_timing(durations, delays) -> TransitionTiming:
    """
    Pick the property that finishes last.

    The shorter list is repeated to the length of the longer one, matching
    how a style engine pairs per-property durations and delays.
    """
    durations = parse_time_list(durations)
    delays = parse_time_list(delays)
    count = max(len(durations), len(delays))

    best = TransitionTiming()
    for i in range(count):
        candidate = TransitionTiming(durations[i % len(durations)], delays[i % len(delays)])
        if candidate.total_ms > best.total_ms:
            best = candidate
    return best


# ===========================================================
# Style Engine Interface
# ===========================================================

class StyleEngine(ABC):
    """Interface the coordinator requires from the host's styling layer."""

    @abstractmethod
    def apply_classes(self, node, classes: Tuple[str, ...]) -> None:
        """Replace the transition class tokens applied to node."""

    @abstractmethod
    def measure_timing(self, node) -> TransitionTiming:
        """Timing declared by the classes currently applied to node itself."""

    @abstractmethod
    def on_transition_end(self, node, callback: Callable[[], None]) -> Callable[[], None]:
        """Subscribe to node's native transition-end signal. Returns an unsubscribe callable."""

    def measure_classes(self, node, classes: Tuple[str, ...]) -> Optional[TransitionTiming]:
        """
        Timing node would declare with classes applied, without applying them.

        Returns None when the engine can only measure applied classes.
        """
        return None

    def forget(self, node) -> None:
        """Drop any state kept for node (called on unregistration)."""


# ===========================================================
# Stylesheet Implementation
# ===========================================================

class SheetStyleEngine(StyleEngine):
    """Style engine backed by a token -> declarations stylesheet."""

    def __init__(self, stylesheet: Dict[str, Dict] = None):
        """
        Args:
            stylesheet: Mapping of class token to declarations, e.g.
                {"fade": {"transition_duration": "150ms"}, "opacity-0": {"alpha": 0}}
                A top-level "classes" key is unwrapped if present.
        """
        stylesheet = stylesheet or {}
        if "classes" in stylesheet and isinstance(stylesheet["classes"], dict):
            stylesheet = stylesheet["classes"]
        self.rules: Dict[str, Dict] = {token: dict(decls or {}) for token, decls in stylesheet.items()}

        self._applied: Dict[object, Tuple[str, ...]] = {}
        self._listeners: Dict[object, List[Callable[[], None]]] = {}

    @classmethod
    def from_file(cls, path: str, strict: bool = True) -> "SheetStyleEngine":
        """
        Load a stylesheet from a .json/.yaml file.

        Raises:
            TransitionConfigError: If strict and the file does not parse
        """
        try:
            return cls(load_config(path, strict=strict))
        except PARSE_ERRORS as e:
            raise TransitionConfigError(f"Malformed stylesheet: {path}") from e

    # ===========================================================
    # StyleEngine API
    # ===========================================================

    def apply_classes(self, node, classes: Tuple[str, ...]) -> None:
        self._applied[node] = tuple(classes)
        DebugLogger.trace(f"{getattr(node, 'id', node)} -> '{' '.join(classes)}'", category="style")

    def measure_timing(self, node) -> TransitionTiming:
        return self.timing_for(self.classes_of(node))

    def measure_classes(self, node, classes: Tuple[str, ...]) -> Optional[TransitionTiming]:
        return self.timing_for(classes)

    def on_transition_end(self, node, callback: Callable[[], None]) -> Callable[[], None]:
        listeners = self._listeners.setdefault(node, [])
        listeners.append(callback)

        def unsubscribe():
            try:
                listeners.remove(callback)
            except ValueError:
                pass

        return unsubscribe

    def forget(self, node) -> None:
        self._applied.pop(node, None)
        self._listeners.pop(node, None)

    # ===========================================================
    # Host Helpers
    # ===========================================================

    def classes_of(self, node) -> Tuple[str, ...]:
        """Tokens currently applied to node."""
        return self._applied.get(node, ())

    def computed_style(self, node) -> Dict:
        """Cascade the declarations of the applied tokens; later tokens win."""
        return self.cascade(self.classes_of(node))

    def cascade(self, classes: Tuple[str, ...]) -> Dict:
        """Cascade the declarations of classes in order; later tokens win."""
        computed = {}
        for token in classes:
            computed.update(self.rules.get(token, {}))
        return computed

    def timing_for(self, classes: Tuple[str, ...]) -> TransitionTiming:
        """Timing declared by classes, whether or not they are applied anywhere."""
        computed = self.cascade(classes)
        return resolve_timing(
            computed.get("transition_duration", 0),
            computed.get("transition_delay", 0),
        )

    def visual_properties(self, node) -> Dict:
        """Computed declarations minus the timing keys."""
        return {key: value for key, value in self.computed_style(node).items() if key not in TIMING_KEYS}

    def emit_transition_end(self, node) -> int:
        """
        Deliver the native transition-end signal for node.

        Returns:
            Number of listeners notified
        """
        listeners = list(self._listeners.get(node, ()))
        for callback in listeners:
            callback()
        return len(listeners)
