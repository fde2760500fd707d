"""
Host-side UI collaborators.

Provides the style engine interface, a stylesheet-driven engine and a
pygame element that animates from applied classes.
"""

from stagecraft.ui.style_engine import (
    SheetStyleEngine,
    StyleEngine,
    TransitionTiming,
    parse_time,
    resolve_timing,
)
from stagecraft.ui.transition_element import TransitionElement

__all__ = [
    'SheetStyleEngine',
    'StyleEngine',
    'TransitionTiming',
    'parse_time',
    'resolve_timing',
    'TransitionElement',
]
