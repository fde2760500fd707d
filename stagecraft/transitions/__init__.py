"""
Transition engine exports.

Provides nodes, scopes, completion detection and the stage enums.
"""

from stagecraft.transitions.stages import Direction, RenderStrategy, ScopeStatus, Stage
from stagecraft.transitions.errors import (
    MissingShowError,
    RegistrationError,
    ScopeNotFoundError,
    TransitionConfigError,
    TransitionError,
    TransitionHookError,
)
from stagecraft.transitions.options import ClassSets, TransitionOptions
from stagecraft.transitions.completion import CompletionDetector
from stagecraft.transitions.node import TransitionNode
from stagecraft.transitions.coordinator import Coordinator, ScopeHandle, TransitionEnvironment

__all__ = [
    # Stages
    'Direction',
    'RenderStrategy',
    'ScopeStatus',
    'Stage',
    # Errors
    'MissingShowError',
    'RegistrationError',
    'ScopeNotFoundError',
    'TransitionConfigError',
    'TransitionError',
    'TransitionHookError',
    # Engine
    'ClassSets',
    'TransitionOptions',
    'CompletionDetector',
    'TransitionNode',
    'Coordinator',
    'ScopeHandle',
    'TransitionEnvironment',
]
