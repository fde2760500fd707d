"""
transition_element.py
---------------------
pygame-backed host element bound to one TransitionNode.

Responsibilities
----------------
- Watch the class tokens the coordinator applies to its node.
- Tween visual properties (alpha, offsets, scale) toward the values those
  tokens declare, honouring the declared duration and delay.
- Emit the native transition-end signal when a tween reaches its target.
- Draw through a draw manager, skipping nodes that are hidden or left.
"""

import pygame
from typing import Dict, Optional, Tuple

from stagecraft.core.debug_logger import DebugLogger
from stagecraft.core.settings import Render
from stagecraft.transitions.stages import Direction, Stage
from stagecraft.ui.style_engine import TransitionTiming


class TransitionElement:
    """Visual element whose appearance follows its node's transition classes."""

    def __init__(self, node, style_engine, size: Tuple[int, int] = (100, 50),
                 position: Tuple[int, int] = (0, 0), color=(255, 255, 255),
                 layer: int = Render.LAYER):
        """
        Args:
            node: TransitionNode driving this element
            style_engine: SheetStyleEngine the node's scope applies classes through
            size: Element size in pixels
            position: Top-left position before offsets
            color: Fill color
            layer: Draw order; higher layers render on top
        """
        self.node = node
        self.style_engine = style_engine
        self.position = position
        self.layer = layer

        self.surface = pygame.Surface(size, pygame.SRCALPHA)
        self.surface.fill(color)

        self.values: Dict[str, float] = dict(Render.PROPERTY_DEFAULTS)
        self._start: Dict[str, float] = {}
        self._target: Dict[str, float] = {}
        self._timing = TransitionTiming()
        self._elapsed_ms = 0.0
        self._animating = False
        self._last_classes: Optional[tuple] = None

    # ===========================================================
    # Properties
    # ===========================================================

    @property
    def visible(self) -> bool:
        """Drawn while the node is shown or animating, and not hidden."""
        if self.node.hidden:
            return False
        return self.node.stage in (Stage.ENTERING, Stage.ENTERED, Stage.LEAVING)

    @property
    def animating(self) -> bool:
        return self._animating

    # ===========================================================
    # Frame Cycle
    # ===========================================================

    def update(self, dt: float):
        """
        Advance the property tween.

        Args:
            dt: Delta time in seconds
        """
        if self._sync_classes():
            return
        if not self._animating:
            return

        self._elapsed_ms += dt * 1000.0
        progress = self._progress()
        for key, end in self._target.items():
            start = self._start.get(key, end)
            self.values[key] = start + (end - start) * progress

        if progress >= 1.0:
            self._animating = False
            DebugLogger.trace(f"'{self.node.id}' reached its target", category="render")
            self.style_engine.emit_transition_end(self.node)

    def draw(self, draw_manager):
        """Queue the element for drawing."""
        if not self.visible:
            return

        alpha = int(max(0.0, min(255.0, self.values["alpha"])))
        scale = max(0.0, self.values["scale"])
        width = int(self.surface.get_width() * scale)
        height = int(self.surface.get_height() * scale)
        if alpha <= 0 or width <= 0 or height <= 0:
            return

        # Alpha goes on a per-draw surface; self.surface stays untouched
        if scale != 1.0:
            image = pygame.transform.scale(self.surface, (width, height))
        else:
            image = self.surface.copy()
        image.set_alpha(alpha)

        x = self.position[0] + self.values["offset_x"]
        y = self.position[1] + self.values["offset_y"]
        draw_manager.queue_draw(image, pygame.Rect(int(x), int(y), width, height), self.layer)

    # ===========================================================
    # Tweening
    # ===========================================================

    def _sync_classes(self) -> bool:
        """Start a new tween if the node's classes changed. Returns True on change."""
        classes = self.style_engine.classes_of(self.node)
        if classes == self._last_classes:
            return False
        self._last_classes = classes

        target = dict(Render.PROPERTY_DEFAULTS)
        for key, value in self.style_engine.visual_properties(self.node).items():
            if key in Render.ANIMATED_PROPERTIES:
                target[key] = float(value)

        changed = {key: value for key, value in target.items() if self.values[key] != value}
        timing = self.style_engine.measure_timing(self.node)

        # Start classes snap into place unless interrupting a running tween;
        # no change or no duration emits no signal
        snap = self._is_start_snapshot(classes) and not self._animating
        if snap or not changed or timing.duration_ms <= 0:
            self.values.update(target)
            self._animating = False
            return True

        self._start = {key: self.values[key] for key in changed}
        self._target = changed
        self._timing = timing
        self._elapsed_ms = 0.0
        self._animating = True
        return True

    def _is_start_snapshot(self, classes) -> bool:
        stage = self.node.stage
        if stage is Stage.ENTERING:
            return classes == self.node.class_sets.start(Direction.ENTER)
        if stage is Stage.LEAVING:
            return classes == self.node.class_sets.start(Direction.LEAVE)
        return False

    def _progress(self) -> float:
        active = self._elapsed_ms - self._timing.delay_ms
        if active <= 0:
            return 0.0
        return min(1.0, active / self._timing.duration_ms)
