"""
Core services exports.

Provides logging, configuration loading, events and frame scheduling.
"""

from stagecraft.core.config_manager import load_config
from stagecraft.core.debug_logger import DebugLogger, LoggerConfig
from stagecraft.core.event_manager import (
    get_events,
    reset_events,
    BaseEvent,
    EventManager,
    NodeStageEvent,
    ScopeDestroyedEvent,
    ScopeSettledEvent,
)
from stagecraft.core.frame_scheduler import FrameScheduler, ScheduledCall

__all__ = [
    # Config
    'load_config',
    # Logging
    'DebugLogger',
    'LoggerConfig',
    # Events
    'get_events',
    'reset_events',
    'BaseEvent',
    'EventManager',
    'NodeStageEvent',
    'ScopeDestroyedEvent',
    'ScopeSettledEvent',
    # Scheduling
    'FrameScheduler',
    'ScheduledCall',
]
