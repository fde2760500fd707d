"""
stagecraft
----------
Tree-scoped visibility-transition coordinator.

Exports:
    TransitionNode        - One participating element
    TransitionOptions     - Per-node options (show, appear, unmount, classes, hooks)
    Coordinator           - One scope: registration tree, direction, gating
    TransitionEnvironment - Host collaborators a scope runs against
    FrameScheduler        - Frame/timer queue driven by update(dt)
"""

from stagecraft.core.frame_scheduler import FrameScheduler
from stagecraft.transitions import (
    ClassSets,
    Coordinator,
    Direction,
    RenderStrategy,
    ScopeHandle,
    ScopeStatus,
    Stage,
    TransitionEnvironment,
    TransitionNode,
    TransitionOptions,
)

__all__ = [
    'FrameScheduler',
    'ClassSets',
    'Coordinator',
    'Direction',
    'RenderStrategy',
    'ScopeHandle',
    'ScopeStatus',
    'Stage',
    'TransitionEnvironment',
    'TransitionNode',
    'TransitionOptions',
]
