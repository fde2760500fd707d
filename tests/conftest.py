"""
conftest.py
-----------
Shared pytest configuration and fixtures for stagecraft tests.

Contains:
- Scheduler, event manager and style engine fixtures
- A hook recorder that timestamps lifecycle callbacks
- Helpers to mount nested node trees
"""

import os
import sys

import pytest
from unittest.mock import MagicMock

# Add project root to Python path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from stagecraft.core.debug_logger import LoggerConfig
from stagecraft.core.event_manager import EventManager
from stagecraft.core.frame_scheduler import FrameScheduler
from stagecraft.transitions.coordinator import TransitionEnvironment
from stagecraft.transitions.node import TransitionNode
from stagecraft.ui.style_engine import SheetStyleEngine


EPSILON_MS = 50.0

# Enter durations from the nested ordering scenario
SCENARIO_DURATIONS = {
    "root": 50,
    "child-1": 75,
    "child-2": 100,
    "child-2-1": 150,
    "child-2-2": 125,
}

# (name, children) tuples
SCENARIO_TREE = ("root", [
    ("child-1", []),
    ("child-2", [
        ("child-2-1", []),
        ("child-2-2", []),
    ]),
])


def build_stylesheet(durations, leave_durations=None):
    """Stylesheet with one enter/leave token per node name plus shared from/to tokens."""
    leave_durations = leave_durations or durations
    sheet = {
        "enter-from": {"alpha": 0},
        "enter-to": {"alpha": 255},
        "leave-from": {"alpha": 255},
        "leave-to": {"alpha": 0},
    }
    for name, ms in durations.items():
        sheet[f"{name}-enter"] = {"transition_duration": f"{ms}ms"}
    for name, ms in leave_durations.items():
        sheet[f"{name}-leave"] = {"transition_duration": f"{ms}ms"}
    return sheet


class HookRecorder:
    """Collects (label, virtual time) pairs for every lifecycle hook call."""

    def __init__(self, scheduler):
        self.scheduler = scheduler
        self.calls = []

    def mark(self, label):
        self.calls.append((label, self.scheduler.now_ms))

    def hooks(self, name):
        return {
            "before_enter": lambda: self.mark(f"{name}: beforeEnter"),
            "after_enter": lambda: self.mark(f"{name}: afterEnter"),
            "before_leave": lambda: self.mark(f"{name}: beforeLeave"),
            "after_leave": lambda: self.mark(f"{name}: afterLeave"),
        }

    def labels(self, suffix=None):
        labels = [label for label, _ in self.calls]
        if suffix is None:
            return labels
        return [label.split(":")[0] for label in labels if label.endswith(suffix)]

    def time_of(self, label):
        for recorded, at in self.calls:
            if recorded == label:
                return at
        raise KeyError(label)

    def clear(self):
        self.calls.clear()


def node_props(name, recorder, **extra):
    """Option dict for a node named after its stylesheet tokens."""
    props = {
        "id": name,
        "enter": f"{name}-enter",
        "enter_from": "enter-from",
        "enter_to": "enter-to",
        "leave": f"{name}-leave",
        "leave_from": "leave-from",
        "leave_to": "leave-to",
    }
    props.update(recorder.hooks(name))
    props.update(extra)
    return props


def mount_tree(tree, env, recorder, show=False, **root_extra):
    """
    Register a (name, children) tree depth-first, parents before children.

    Returns:
        dict: node name -> TransitionNode
    """
    nodes = {}

    def mount(spec, handle, extra):
        name, children = spec
        node = TransitionNode(node_props(name, recorder, **extra))
        child_handle = node.register(handle, env=env)
        nodes[name] = node
        child_extra = {k: v for k, v in extra.items() if k not in ("show", "appear")}
        for child in children:
            mount(child, child_handle, child_extra)

    mount(tree, None, {"show": show, **root_extra})
    return nodes


# ===========================================================
# Fixtures
# ===========================================================

@pytest.fixture(autouse=True)
def quiet_logger():
    """Keep test output free of logger noise."""
    previous = LoggerConfig.ENABLE_LOGGING
    LoggerConfig.ENABLE_LOGGING = False
    yield
    LoggerConfig.ENABLE_LOGGING = previous


@pytest.fixture
def scheduler():
    return FrameScheduler()


@pytest.fixture
def events():
    return EventManager()


@pytest.fixture
def style_engine():
    return SheetStyleEngine(build_stylesheet(SCENARIO_DURATIONS))


@pytest.fixture
def env(style_engine, scheduler, events):
    return TransitionEnvironment(
        style_engine=style_engine,
        scheduler=scheduler,
        events=events,
        epsilon_ms=EPSILON_MS,
    )


@pytest.fixture
def recorder(scheduler):
    return HookRecorder(scheduler)


@pytest.fixture
def mock_draw_manager():
    """Mock for a draw manager with a queue_draw method."""
    draw_manager = MagicMock()
    draw_manager.queue_draw = MagicMock()
    return draw_manager


# Pytest configuration
def pytest_configure(config):
    """Custom pytest configuration."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")


def pytest_collection_modifyitems(config, items):
    """Mark everything outside integration tests as unit tests."""
    for item in items:
        if "integration" not in item.nodeid:
            item.add_marker(pytest.mark.unit)
