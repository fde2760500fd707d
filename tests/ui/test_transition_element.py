"""
test_transition_element.py
--------------------------
Integration tests for the pygame host element.

Responsibilities
----------------
- Verify tweens follow the node's start and end classes.
- Verify the element's transition-end signal resolves nodes before the
  timeout fallback.
- Ensure hidden and left nodes are not drawn.
"""

import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

import pygame
import pytest

from stagecraft.transitions.coordinator import TransitionEnvironment
from stagecraft.transitions.node import TransitionNode
from stagecraft.transitions.stages import Stage
from stagecraft.ui.style_engine import SheetStyleEngine
from stagecraft.ui.transition_element import TransitionElement


# ===========================================================
# Fixtures
# ===========================================================

@pytest.fixture(scope="module", autouse=True)
def pygame_session():
    pygame.init()
    yield
    pygame.quit()


@pytest.fixture
def sheet_engine():
    return SheetStyleEngine({
        "fade": {"transition_duration": "100ms"},
        "opacity-0": {"alpha": 0},
        "opacity-100": {"alpha": 255},
    })


@pytest.fixture
def card(sheet_engine, scheduler, events, recorder):
    env = TransitionEnvironment(style_engine=sheet_engine, scheduler=scheduler, events=events)
    node = TransitionNode(
        id="card",
        show=False,
        unmount=False,
        enter="fade", enter_from="opacity-0", enter_to="opacity-100",
        leave="fade", leave_from="opacity-100", leave_to="opacity-0",
        **recorder.hooks("card"),
    )
    node.register(env=env)
    return node


@pytest.fixture
def element(card, sheet_engine):
    return TransitionElement(card, sheet_engine, size=(40, 20), position=(10, 10), layer=5)


def step(scheduler, element, dt=0.016):
    """One host frame: scheduler first, then the element."""
    scheduler.update(dt)
    element.update(dt)


# ===========================================================
# Tests
# ===========================================================

def test_enter_tween_resolves_by_signal(card, element, scheduler, recorder):
    card.set_show(True)
    element.update(0.016)
    assert element.values["alpha"] == 0.0
    assert not element.animating

    step(scheduler, element)
    assert element.animating

    element.update(0.05)
    assert element.values["alpha"] == pytest.approx(127.5)
    assert card.stage is Stage.ENTERING

    element.update(0.06)
    assert element.values["alpha"] == 255.0
    assert card.stage is Stage.ENTERED
    assert card.detector.resolved_by == "signal"

    # After hooks run once the scheduler flushes the current instant
    assert recorder.labels("afterEnter") == []
    scheduler.flush()
    assert recorder.labels("afterEnter") == ["card"]
    assert scheduler.now_ms < 150


def test_draw_queues_visible_element(card, element, scheduler, mock_draw_manager):
    card.set_show(True)
    for _ in range(12):
        step(scheduler, element)

    element.draw(mock_draw_manager)
    mock_draw_manager.queue_draw.assert_called_once()
    image, rect, layer = mock_draw_manager.queue_draw.call_args[0]
    assert rect == pygame.Rect(10, 10, 40, 20)
    assert layer == 5
    assert image.get_alpha() == 255


def test_left_and_hidden_elements_are_not_drawn(card, element, scheduler, mock_draw_manager):
    element.draw(mock_draw_manager)
    mock_draw_manager.queue_draw.assert_not_called()

    card.set_show(True)
    for _ in range(12):
        step(scheduler, element)
    card.set_show(False)
    for _ in range(12):
        step(scheduler, element)

    assert card.stage is Stage.LEFT
    assert card.hidden
    assert not element.visible
    element.draw(mock_draw_manager)
    mock_draw_manager.queue_draw.assert_not_called()


def test_zero_alpha_is_not_drawn(card, element, mock_draw_manager):
    card.set_show(True)
    element.update(0.016)

    assert element.visible
    element.draw(mock_draw_manager)
    mock_draw_manager.queue_draw.assert_not_called()


def test_draw_leaves_element_surface_untouched(card, element, scheduler, mock_draw_manager):
    """Alpha is set on the queued image, never on the element's own surface."""
    card.set_show(True)
    element.update(0.016)
    step(scheduler, element)
    element.update(0.05)
    original_alpha = element.surface.get_alpha()

    element.draw(mock_draw_manager)
    image, rect, _ = mock_draw_manager.queue_draw.call_args[0]

    assert image is not element.surface
    assert image.get_alpha() == 127
    assert element.surface.get_alpha() == original_alpha
    assert rect.size == (40, 20)
