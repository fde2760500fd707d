"""
options.py
----------
Per-node configuration surface: visibility, render strategy, phase class
tokens and lifecycle hooks.

Options can be built in code or loaded from a .json/.yaml file. Keys are
accepted in snake_case or in the camelCase spelling hosts often use
(``enterFrom``, ``beforeEnter`` ...).
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

from stagecraft.core.config_manager import PARSE_ERRORS, load_config
from stagecraft.core.settings import NodeDefaults
from stagecraft.transitions.errors import TransitionConfigError
from stagecraft.transitions.stages import Direction, RenderStrategy


Hook = Optional[Callable[[], Any]]

CLASS_KEYS = (
    "class_name",
    "enter", "enter_from", "enter_to", "entered",
    "leave", "leave_from", "leave_to", "leaved",
)

HOOK_KEYS = ("before_enter", "after_enter", "before_leave", "after_leave")

ALLOWED_KEYS = set(CLASS_KEYS) | set(HOOK_KEYS) | {"id", "show", "appear", "unmount"}

ALIASES = {
    "className": "class_name",
    "enterFrom": "enter_from",
    "enterTo": "enter_to",
    "leaveFrom": "leave_from",
    "leaveTo": "leave_to",
    "beforeEnter": "before_enter",
    "afterEnter": "after_enter",
    "beforeLeave": "before_leave",
    "afterLeave": "after_leave",
}


def split_tokens(value) -> Tuple[str, ...]:
    """Split a whitespace-separated class string into unique tokens, keeping order."""
    if value is None:
        return ()
    if isinstance(value, str):
        parts = value.split()
    elif isinstance(value, (list, tuple)):
        parts = [token for item in value for token in str(item).split()]
    else:
        raise TransitionConfigError(f"Class tokens must be a string or list, got {type(value).__name__}")
    return tuple(dict.fromkeys(parts))


def merge_tokens(*groups: Tuple[str, ...]) -> Tuple[str, ...]:
    """Concatenate token groups, dropping duplicates."""
    return tuple(dict.fromkeys(token for group in groups for token in group))


# ===========================================================
# Class Sets
# ===========================================================

@dataclass(frozen=True)
class ClassSets:
    """
    Phase class tokens of one node.

    ``enter``/``leave`` are the active tokens present for the whole phase,
    ``*_from`` the start tokens, ``*_to`` the end tokens, and
    ``entered``/``leaved`` the tokens added once the phase has settled.
    """
    base: Tuple[str, ...] = ()
    enter: Tuple[str, ...] = ()
    enter_from: Tuple[str, ...] = ()
    enter_to: Tuple[str, ...] = ()
    entered: Tuple[str, ...] = ()
    leave: Tuple[str, ...] = ()
    leave_from: Tuple[str, ...] = ()
    leave_to: Tuple[str, ...] = ()
    leaved: Tuple[str, ...] = ()

    def _phase(self, direction: Direction):
        if direction is Direction.ENTER:
            return self.enter, self.enter_from, self.enter_to, self.entered
        return self.leave, self.leave_from, self.leave_to, self.leaved

    def start(self, direction: Direction) -> Tuple[str, ...]:
        active, start, _, _ = self._phase(direction)
        return merge_tokens(self.base, active, start)

    def end(self, direction: Direction) -> Tuple[str, ...]:
        active, _, end, _ = self._phase(direction)
        return merge_tokens(self.base, active, end)

    def settled(self, direction: Direction) -> Tuple[str, ...]:
        _, _, end, settled = self._phase(direction)
        return merge_tokens(self.base, end, settled)

    def has_delta(self, direction: Direction) -> bool:
        """False when start and end sets are identical, so nothing can animate."""
        return set(self.start(direction)) != set(self.end(direction))


# ===========================================================
# Transition Options
# ===========================================================

@dataclass
class TransitionOptions:
    """Recognized per-node options."""
    show: Optional[bool] = None
    appear: bool = NodeDefaults.APPEAR
    unmount: bool = NodeDefaults.UNMOUNT
    id: Optional[str] = None
    class_sets: ClassSets = field(default_factory=ClassSets)
    before_enter: Hook = None
    after_enter: Hook = None
    before_leave: Hook = None
    after_leave: Hook = None

    @property
    def render_strategy(self) -> RenderStrategy:
        return RenderStrategy.UNMOUNT if self.unmount else RenderStrategy.HIDDEN

    def hook(self, name: str) -> Hook:
        return getattr(self, name)

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "TransitionOptions":
        """
        Build options from a flat dict.

        Args:
            config: Option mapping, snake_case or camelCase keys

        Raises:
            TransitionConfigError: On unknown keys or ill-typed values
        """
        normalized = {}
        for key, value in config.items():
            name = ALIASES.get(key, key)
            if name not in ALLOWED_KEYS:
                raise TransitionConfigError(f"Unknown transition option '{key}'")
            normalized[name] = value

        for flag in ("show", "appear", "unmount"):
            value = normalized.get(flag)
            if value is not None and not isinstance(value, bool):
                raise TransitionConfigError(f"Option '{flag}' must be a bool, got {value!r}")

        for name in HOOK_KEYS:
            value = normalized.get(name)
            if value is not None and not callable(value):
                raise TransitionConfigError(f"Hook '{name}' must be callable")

        node_id = normalized.get("id")
        class_sets = ClassSets(
            base=split_tokens(normalized.get("class_name")),
            **{key: split_tokens(normalized.get(key)) for key in CLASS_KEYS if key != "class_name"},
        )
        return cls(
            show=normalized.get("show"),
            appear=normalized.get("appear", NodeDefaults.APPEAR),
            unmount=normalized.get("unmount", NodeDefaults.UNMOUNT),
            id=str(node_id) if node_id is not None else None,
            class_sets=class_sets,
            **{name: normalized.get(name) for name in HOOK_KEYS},
        )

    @classmethod
    def from_file(cls, path: str, hooks: Optional[Dict[str, Callable]] = None,
                  strict: bool = True) -> "TransitionOptions":
        """
        Load options from a .json/.yaml file; hooks are supplied in code.

        Args:
            path: Config file path
            hooks: Optional mapping of hook name to callable
            strict: Raise if the file is missing or malformed

        Raises:
            FileNotFoundError: If strict and the file is missing
            TransitionConfigError: If strict and the file does not parse
        """
        try:
            config = load_config(path, strict=strict)
        except PARSE_ERRORS as e:
            raise TransitionConfigError(f"Malformed transition config: {path}") from e
        if hooks:
            config = {**config, **hooks}
        return cls.from_dict(config)
