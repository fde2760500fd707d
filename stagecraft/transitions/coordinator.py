"""
coordinator.py
--------------
Owns one transition scope: the registration tree, the current direction,
hook ordering and completion gating.

Responsibilities
----------------
- Register / unregister nodes and keep the scope tree consistent.
- Broadcast direction changes: ENTER starts nodes in pre-order, LEAVE
  dispatches in post-order so descendants run before_leave first.
- Gate after hooks: a node completes only once its own transition is done
  and every direct child has completed. Same-instant completions resolve
  in stable tree order (post-order sweep, siblings in registration order).
- Absorb direction flips mid-flight by cancelling outstanding waits and
  restarting from the currently rendered classes.
- Report settlement to the host through the event manager.
"""

import itertools
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from stagecraft.core.debug_logger import DebugLogger
from stagecraft.core.event_manager import (
    EventManager,
    NodeStageEvent,
    ScopeDestroyedEvent,
    ScopeSettledEvent,
    get_events,
)
from stagecraft.core.frame_scheduler import FrameScheduler
from stagecraft.core.settings import Timing
from stagecraft.transitions.completion import CompletionDetector
from stagecraft.transitions.errors import MissingShowError, RegistrationError, ScopeNotFoundError
from stagecraft.transitions.stages import Direction, RenderStrategy, ScopeStatus


@dataclass
class TransitionEnvironment:
    """Host collaborators shared by every node of a scope."""
    style_engine: object
    scheduler: FrameScheduler
    events: EventManager = field(default_factory=get_events)
    epsilon_ms: float = Timing.EPSILON_MS


class ScopeHandle:
    """What a node hands its descendants so they can join its scope."""

    __slots__ = ("coordinator", "parent")

    def __init__(self, coordinator: "Coordinator", parent):
        self.coordinator = coordinator
        self.parent = parent

    def register(self, node):
        """
        Register node as a child of this handle's parent.

        Raises:
            ScopeNotFoundError: If the scope was destroyed or the parent left it
            RegistrationError: If node would become its own parent
        """
        if not self.coordinator.alive:
            raise ScopeNotFoundError(f"Scope '{self.coordinator.id}' no longer exists", node.id)
        if self.parent.coordinator is not self.coordinator:
            raise ScopeNotFoundError(
                f"Parent '{self.parent.id}' is no longer registered in scope '{self.coordinator.id}'",
                node.id,
            )
        if node is self.parent:
            raise RegistrationError("A node cannot be its own parent", node.id)
        self.coordinator.attach(node, self.parent)

    def __repr__(self):
        return f"ScopeHandle({self.coordinator.id!r}, parent={self.parent.id!r})"


class Coordinator:
    """One transition scope and its registered node tree."""

    _scope_ids = itertools.count(1)

    def __init__(self, env: TransitionEnvironment, root):
        self.id = f"scope-{next(Coordinator._scope_ids)}"
        self.style_engine = env.style_engine
        self.scheduler = env.scheduler
        self.events = env.events
        self.epsilon_ms = env.epsilon_ms

        self.root = None
        self.direction = Direction.from_show(root.show)
        self.status = ScopeStatus.SETTLED
        self.appear = root.appear
        self.cycle = 0
        self.alive = True

        self._nodes: List = []
        self._dispatching = False
        self._initial_call = None
        self._sweep_call = None

        DebugLogger.init(f"Scope '{self.id}' created for root '{root.id}'", category="scope")
        self._attach_root(root)

    @classmethod
    def create(cls, root, env: Optional[TransitionEnvironment]) -> "Coordinator":
        """
        Start a new scope with root as its root node.

        Raises:
            ScopeNotFoundError: If no environment was supplied
            MissingShowError: If the root has no show value
        """
        if env is None:
            raise ScopeNotFoundError("No scope handle or environment supplied", root.id)
        if root.show is None:
            raise MissingShowError("A transition root is registered without a `show` value", root.id)
        return cls(env, root)

    # ===========================================================
    # Queries
    # ===========================================================

    @property
    def nodes(self) -> tuple:
        return tuple(self._nodes)

    @property
    def settled(self) -> bool:
        return self.status is ScopeStatus.SETTLED

    def find(self, node_id: str):
        for node in self._nodes:
            if node.id == node_id:
                return node
        return None

    def preorder(self) -> List:
        order = []

        def visit(node):
            order.append(node)
            for child in node.children:
                visit(child)

        if self.root is not None:
            visit(self.root)
        return order

    def postorder(self) -> List:
        order = []

        def visit(node):
            for child in node.children:
                visit(child)
            order.append(node)

        if self.root is not None:
            visit(self.root)
        return order

    def describe(self) -> Dict:
        """Nested snapshot of the scope for debugging."""
        def node_dict(node):
            return {
                "id": node.id,
                "stage": node.stage.name,
                "pending": node.pending_children,
                "hidden": node.hidden,
                "children": [node_dict(child) for child in node.children],
            }

        return {
            "scope": self.id,
            "direction": self.direction.value,
            "status": self.status.value,
            "cycle": self.cycle,
            "tree": node_dict(self.root) if self.root is not None else None,
        }

    # ===========================================================
    # Registration
    # ===========================================================

    def _new_detector(self) -> CompletionDetector:
        return CompletionDetector(self.style_engine, self.scheduler, self.epsilon_ms)

    def _attach_root(self, root):
        self.root = root
        self._nodes.append(root)
        root._attach(self, None, self._new_detector())

        if self.direction is Direction.ENTER and self.appear:
            # Let descendants mounted in the same host pass join the appear pass
            self.status = ScopeStatus.IN_PROGRESS
            self._initial_call = self.scheduler.call_soon(self._run_initial_pass, label=f"{self.id}:appear")
        else:
            root._settle_silently(self.direction, self.cycle)

    def attach(self, node, parent):
        """Register node under parent (a node already in this scope)."""
        if node.coordinator is not None:
            raise RegistrationError("Node is already registered", node.id)
        if node.show is not None:
            DebugLogger.warn(
                f"'{node.id}' sets show but joined scope '{self.id}'; the scope direction applies",
                category="scope",
            )

        self._nodes.append(node)
        node._attach(self, parent, self._new_detector())
        DebugLogger.system(f"'{node.id}' registered under '{parent.id}'", category="scope")

        if self._initial_call is not None:
            return
        # Late mounts adopt the current direction without animating
        node._settle_silently(self.direction, self.cycle)

    def unregister(self, node):
        """
        Remove node and its registered descendants from the scope.

        A dropped node that had not completed the current cycle releases its
        parent's completion gate.
        """
        if node.coordinator is not self:
            raise RegistrationError(f"Node is not registered in scope '{self.id}'", node.id)

        parent = node.parent
        releases_gate = (
            parent is not None
            and node._cycle == self.cycle
            and not node._after_fired
            and parent._cycle == self.cycle
            and not parent._after_fired
        )

        self._remove(node)
        if releases_gate:
            parent.report_child_done()

        if not self._nodes:
            self._destroy()
            return
        if not self._dispatching:
            self._sweep()

    def _remove(self, node):
        for child in list(node.children):
            self._remove(child)
        self._nodes.remove(node)
        self.style_engine.forget(node)
        node._detach()
        if node is self.root:
            self.root = None
        DebugLogger.system(f"'{node.id}' unregistered from '{self.id}'", category="scope")

    def _destroy(self):
        self.alive = False
        if self._initial_call is not None:
            self._initial_call.cancel()
            self._initial_call = None
        if self._sweep_call is not None:
            self._sweep_call.cancel()
            self._sweep_call = None
        DebugLogger.system(f"Scope '{self.id}' destroyed", category="scope")
        self.events.dispatch(ScopeDestroyedEvent(self.id))

    # ===========================================================
    # Direction
    # ===========================================================

    def set_show(self, show: bool):
        """
        Broadcast a new target visibility to the whole scope.

        Raises:
            ScopeNotFoundError: If the scope was destroyed
        """
        if not self.alive:
            raise ScopeNotFoundError(f"Scope '{self.id}' no longer exists")

        direction = Direction.from_show(bool(show))
        if direction is self.direction:
            return

        if self._initial_call is not None:
            self._initial_call.cancel()
            self._initial_call = None
        if self.status is ScopeStatus.IN_PROGRESS:
            DebugLogger.state(
                f"Scope '{self.id}' interrupted: {self.direction.value} -> {direction.value}",
                category="scope",
            )
        self._broadcast(direction)

    def _run_initial_pass(self):
        self._initial_call = None
        if self.alive:
            self._broadcast(Direction.ENTER)

    def _broadcast(self, direction: Direction):
        self.cycle += 1
        cycle = self.cycle
        self.direction = direction
        self.status = ScopeStatus.IN_PROGRESS
        DebugLogger.state(f"Scope '{self.id}' -> {direction.value} (cycle {cycle})", category="scope")

        order = self.preorder() if direction is Direction.ENTER else self.postorder()
        for node in order:
            node._reset_for_cycle(cycle)

        self._dispatching = True
        try:
            for node in order:
                # A hook flipped the direction again or unmounted the scope
                if self.cycle != cycle or not self.alive:
                    return
                if node.coordinator is not self:
                    continue
                if direction is Direction.ENTER:
                    node.start_enter()
                else:
                    node.start_leave()
        finally:
            self._dispatching = False

        self._sweep()

        # Nothing animated and no hook fired (e.g. leaving a never-shown tree)
        if self.alive and self.cycle == cycle and self.status is ScopeStatus.IN_PROGRESS:
            root = self.root
            if root is not None and root._after_fired and root._cycle == cycle:
                self.status = ScopeStatus.SETTLED
                self._announce_settled()

    # ===========================================================
    # Completion Gating
    # ===========================================================

    def stage_changed(self, node):
        DebugLogger.state(f"'{node.id}' -> {node.stage.name}")
        self.events.dispatch(NodeStageEvent(self.id, node.id, node.stage))

    def node_done(self, node):
        """
        A node's own transition finished.

        Completions arriving in the same scheduler batch share one sweep, so
        they fire in tree order rather than arrival order.
        """
        if self._dispatching or self._sweep_call is not None:
            return
        self._sweep_call = self.scheduler.call_after(self._flush_sweep, label=f"{self.id}:sweep")

    def _flush_sweep(self):
        self._sweep_call = None
        if self.alive:
            self._sweep()

    def _sweep(self):
        cycle = self.cycle
        for node in self.postorder():
            if self.cycle != cycle or not self.alive:
                return
            if node.coordinator is not self:
                continue
            if (node._cycle == cycle and node._own_done
                    and not node._after_fired and node.pending_children == 0):
                self._complete(node, cycle)

    def _complete(self, node, cycle: int):
        direction = self.direction
        node._after_fired = True
        if direction is Direction.LEAVE and node.render_strategy is RenderStrategy.HIDDEN:
            node.hidden = True
        if node.parent is not None:
            node.parent.report_child_done()

        is_root = node is self.root
        if is_root:
            self.status = ScopeStatus.SETTLED

        node.fire_hook(f"after_{direction.value}")

        if is_root and self.alive and self.cycle == cycle:
            self._announce_settled()

    def _announce_settled(self):
        DebugLogger.state(f"Scope '{self.id}' settled ({self.direction.value})", category="scope")
        self.events.dispatch(ScopeSettledEvent(self.id, self.direction, self.root.render_strategy))
