"""
node.py
-------
One participating transitionable element.

Responsibilities
----------------
- Own the element's phase class tokens, lifecycle hooks and stage.
- Apply start classes synchronously and swap to end classes on the next
  frame boundary.
- Hand completion detection to its CompletionDetector.
- Register with / unregister from a Coordinator scope.

Hook ordering across the tree is decided by the Coordinator; a node never
fires its own after hook.
"""

import itertools
from typing import Any, Dict, List, Optional, Union

from stagecraft.core.debug_logger import DebugLogger
from stagecraft.core.settings import NodeDefaults
from stagecraft.transitions import stages
from stagecraft.transitions.errors import RegistrationError, TransitionError, TransitionHookError
from stagecraft.transitions.options import TransitionOptions
from stagecraft.transitions.stages import Direction, RenderStrategy, Stage


_node_ids = itertools.count(1)


class TransitionNode:
    """A node in a transition scope."""

    def __init__(self, options: Union[TransitionOptions, Dict[str, Any], None] = None, **overrides):
        """
        Args:
            options: TransitionOptions or an option dict
            **overrides: Extra options, same keys as the option dict
        """
        if isinstance(options, TransitionOptions):
            if overrides:
                raise TransitionError("Pass either TransitionOptions or keyword options, not both")
            self.options = options
        else:
            self.options = TransitionOptions.from_dict({**(options or {}), **overrides})

        self.id: str = self.options.id or f"{NodeDefaults.ID_PREFIX}-{next(_node_ids)}"
        self.class_sets = self.options.class_sets
        self.render_strategy: RenderStrategy = self.options.render_strategy
        self.appear: bool = self.options.appear

        # Tree (registration, not lifetime)
        self.coordinator = None
        self.parent: Optional["TransitionNode"] = None
        self.children: List["TransitionNode"] = []

        # Stage and gating bookkeeping (written by the coordinator)
        self.stage = Stage.IDLE
        self.pending_children = 0
        self.hidden = False
        self.classes = ()

        self._cycle = -1
        self._own_done = False
        self._after_fired = False
        self._frame = None
        self._detector = None

    def __repr__(self):
        return f"TransitionNode({self.id!r}, {self.stage.name})"

    # ===========================================================
    # Properties
    # ===========================================================

    @property
    def show(self) -> Optional[bool]:
        return self.options.show

    @property
    def is_registered(self) -> bool:
        return self.coordinator is not None

    @property
    def is_root(self) -> bool:
        return self.coordinator is not None and self.coordinator.root is self

    @property
    def own_done(self) -> bool:
        return self._own_done

    @property
    def after_fired(self) -> bool:
        return self._after_fired

    @property
    def detector(self):
        """CompletionDetector while registered, else None."""
        return self._detector

    # ===========================================================
    # Registration Protocol
    # ===========================================================

    def register(self, handle=None, env=None):
        """
        Join a scope.

        Args:
            handle: ScopeHandle from the nearest enclosing node, or None to
                start a new scope with this node as root
            env: TransitionEnvironment, required when handle is None

        Returns:
            ScopeHandle for this node's descendants
        """
        from stagecraft.transitions.coordinator import Coordinator

        if self.coordinator is not None:
            raise RegistrationError("Node is already registered", self.id)

        if handle is None:
            Coordinator.create(self, env)
        else:
            handle.register(self)
        return self.handle()

    def unregister(self):
        """Leave the scope; registered descendants are unregistered first."""
        if self.coordinator is None:
            raise RegistrationError("Node is not registered", self.id)
        self.coordinator.unregister(self)

    def handle(self):
        """Scope handle descendants register with."""
        from stagecraft.transitions.coordinator import ScopeHandle

        if self.coordinator is None:
            raise RegistrationError("Unregistered nodes have no scope handle", self.id)
        return ScopeHandle(self.coordinator, self)

    def set_show(self, show: bool):
        """Drive the scope direction. Only the scope root may do this."""
        if not self.is_root:
            raise TransitionError("Only a scope root can change the direction", self.id)
        self.coordinator.set_show(show)

    # ===========================================================
    # Phase Operations
    # ===========================================================

    def start_enter(self):
        """Begin entering. Called by the coordinator in pre-order."""
        self._begin(Direction.ENTER)

    def start_leave(self):
        """Begin leaving. Called by the coordinator in post-order."""
        self._begin(Direction.LEAVE)

    def mark_own_transition_done(self):
        """
        Own transition finished: ENTERING -> ENTERED or LEAVING -> LEFT.

        Does not fire after hooks; the coordinator decides when.
        """
        if self.coordinator is None or not self.stage.is_active:
            return
        direction = Direction.ENTER if self.stage is Stage.ENTERING else Direction.LEAVE

        self._frame = None
        self.stage = stages.finish(self.stage)
        self._own_done = True
        self._apply(self.class_sets.settled(direction))

        coordinator = self.coordinator
        coordinator.stage_changed(self)
        coordinator.node_done(self)

    def report_child_done(self):
        """One direct child completed (or was dropped) for the current cycle."""
        if self.pending_children > 0:
            self.pending_children -= 1

    # ===========================================================
    # Coordinator Internals
    # ===========================================================

    def _attach(self, coordinator, parent, detector):
        self.coordinator = coordinator
        self.parent = parent
        self._detector = detector
        if parent is not None:
            parent.children.append(self)

    def _detach(self):
        self._cancel_pending()
        if self.parent is not None and self in self.parent.children:
            self.parent.children.remove(self)
        self.coordinator = None
        self.parent = None
        self._detector = None

    def _reset_for_cycle(self, cycle: int):
        self._cancel_pending()
        self._cycle = cycle
        self._own_done = False
        self._after_fired = False
        self.pending_children = len(self.children)

    def _settle_silently(self, direction: Direction, cycle: int):
        """Jump to the settled stage of direction without classes or hooks."""
        self._cancel_pending()
        self._cycle = cycle
        self.stage = direction.settled_stage
        self._own_done = True
        self._after_fired = True
        self.pending_children = 0
        self.hidden = direction is Direction.LEAVE and self.render_strategy is RenderStrategy.HIDDEN
        self.coordinator.stage_changed(self)

    def _cancel_pending(self):
        if self._frame is not None:
            self._frame.cancel()
            self._frame = None
        if self._detector is not None:
            self._detector.cancel()

    def _begin(self, direction: Direction):
        coordinator = self.coordinator
        if coordinator is None:
            raise RegistrationError("Cannot transition an unregistered node", self.id)

        # Already there, or never shown and so nothing to animate out of
        if self.stage is direction.settled_stage or (direction is Direction.LEAVE and self.stage is Stage.IDLE):
            self._settle_silently(direction, self._cycle)
            if self.parent is not None:
                self.parent.report_child_done()
            return

        cycle = self._cycle
        self.stage = stages.begin(self.stage, direction)
        if direction is Direction.ENTER:
            self.hidden = False
        coordinator.stage_changed(self)

        self.fire_hook(f"before_{direction.value}")
        # A hook may flip the direction or unmount this node
        if self.coordinator is None or self._cycle != cycle:
            return

        start = self.class_sets.start(direction)
        end = self.class_sets.end(direction)
        self._apply(start)
        # Timing may be declared on either side of the swap
        if not self.class_sets.has_delta(direction) or self._detector.is_instant(self, start, end):
            self.mark_own_transition_done()
            return

        self._frame = coordinator.scheduler.request_frame(
            lambda: self._swap_to_end(direction, cycle),
            label=f"{self.id}:{direction.value}-swap",
        )

    def _swap_to_end(self, direction: Direction, cycle: int):
        if self.coordinator is None or self._cycle != cycle:
            return
        self._frame = None
        self._apply(self.class_sets.end(direction))
        self._detector.watch(self, lambda: self._on_detected(cycle))

    def _on_detected(self, cycle: int):
        if self.coordinator is None or self._cycle != cycle:
            return
        self.mark_own_transition_done()

    def _apply(self, classes):
        self.classes = tuple(classes)
        self.coordinator.style_engine.apply_classes(self, self.classes)

    def fire_hook(self, name: str):
        """
        Invoke a lifecycle hook by name.

        Raises:
            TransitionHookError: If the hook raised
        """
        hook = self.options.hook(name)
        if hook is None:
            return
        DebugLogger.action(f"{self.id}: {name}")
        try:
            hook()
        except Exception as e:
            DebugLogger.fail(f"{self.id}: {name} raised {type(e).__name__}: {e}")
            raise TransitionHookError(name, self.id, e) from e
