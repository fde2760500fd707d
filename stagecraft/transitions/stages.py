"""
stages.py
---------
Defines the state enumerations of transition nodes and scopes, plus the
explicit stage transition functions nodes are allowed to take.
"""

from enum import Enum, IntEnum


class Stage(IntEnum):
    """
    Phase of a single node.

    Stage flow:
      IDLE     -> ENTERING | ENTERED (silent mount) | LEFT (silent mount)
      ENTERING -> ENTERED | LEAVING (interrupted)
      ENTERED  -> LEAVING
      LEAVING  -> LEFT | ENTERING (interrupted)
      LEFT     -> ENTERING
    """
    IDLE = 0
    ENTERING = 1
    ENTERED = 2
    LEAVING = 3
    LEFT = 4

    @property
    def is_active(self) -> bool:
        """True while the node is mid-transition."""
        return self in (Stage.ENTERING, Stage.LEAVING)


class Direction(Enum):
    """Target visibility of a whole scope."""
    ENTER = "enter"
    LEAVE = "leave"

    @classmethod
    def from_show(cls, show: bool) -> "Direction":
        return cls.ENTER if show else cls.LEAVE

    @property
    def active_stage(self) -> Stage:
        return Stage.ENTERING if self is Direction.ENTER else Stage.LEAVING

    @property
    def settled_stage(self) -> Stage:
        return Stage.ENTERED if self is Direction.ENTER else Stage.LEFT


class RenderStrategy(Enum):
    """What happens to a node once it reaches LEFT."""
    UNMOUNT = "unmount"
    HIDDEN = "hidden"


class ScopeStatus(Enum):
    """Derived status of a scope for its current direction."""
    IN_PROGRESS = "in_progress"
    SETTLED = "settled"


# ===========================================================
# Stage Transitions
# ===========================================================

_ALLOWED = {
    Stage.IDLE: {Stage.ENTERING, Stage.ENTERED, Stage.LEAVING, Stage.LEFT},
    Stage.ENTERING: {Stage.ENTERED, Stage.LEAVING, Stage.ENTERING},
    Stage.ENTERED: {Stage.LEAVING, Stage.ENTERING},
    Stage.LEAVING: {Stage.LEFT, Stage.ENTERING, Stage.LEAVING},
    Stage.LEFT: {Stage.ENTERING, Stage.LEAVING},
}


def can_transition(current: Stage, target: Stage) -> bool:
    """Check whether a node may move from current to target."""
    return target in _ALLOWED[current]


def begin(current: Stage, direction: Direction) -> Stage:
    """Stage a node moves to when a transition in direction starts."""
    target = direction.active_stage
    if not can_transition(current, target):
        raise ValueError(f"Cannot start {direction.value} from {current.name}")
    return target


def finish(current: Stage) -> Stage:
    """Stage a node moves to once its own transition is done."""
    if current is Stage.ENTERING:
        return Stage.ENTERED
    if current is Stage.LEAVING:
        return Stage.LEFT
    raise ValueError(f"No transition in flight from {current.name}")
