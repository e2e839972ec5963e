"""
Pointer and keyboard handling for placing a robot on the field.

``LocationChooser`` turns raw input into calls on an ``UncertaintyRegion``.
It knows nothing about any GUI toolkit: the embedding widget forwards its
events as ``PointerEvent`` values and key names, sets the returned cursor,
and repaints when a handler returns True.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np

from view_frustum.debug import format_point, log_frustum_state
from view_frustum.frustum import EdgeTarget, PivotVertex
from view_frustum.region import UncertaintyRegion

logger = logging.getLogger(__name__)

ROTATE_INCREMENT_DEG = 2.0
MOVE_STEP_PX = 10.0
GROW_STEP_PX = 10.0

# Arrow key name -> (dx, dy) direction
ARROW_KEYS: dict[str, tuple[float, float]] = {
    "up": (0.0, -1.0),
    "down": (0.0, 1.0),
    "left": (-1.0, 0.0),
    "right": (1.0, 0.0),
}


class Cursor(Enum):
    """Cursor shape the widget should show."""

    DEFAULT = "default"
    CROSSHAIR = "crosshair"
    HAND = "hand"
    MOVE = "move"


class DragMode(Enum):
    """What a pointer drag currently manipulates."""

    NONE = "none"
    MOVE = "move"
    RESIZE = "resize"
    PRIMARY = "primary"
    EDGE_A = "edge_a"
    EDGE_B = "edge_b"


@dataclass(frozen=True)
class PointerEvent:
    """Pointer position in field pixels plus the shift modifier."""

    x: float
    y: float
    shift: bool = False

    @property
    def point(self) -> tuple[float, float]:
        return (self.x, self.y)


class LocationChooser:
    """Dispatches pointer and key input to an UncertaintyRegion.

    Shift inverts the default behaviour of each gesture: dragging the region
    moves the frustum rigidly instead of keeping the gaze on its target, and
    dragging a corner pivots around the opposite corner instead of the
    primary target.

    Attributes:
        region: The region being edited
        drag_mode: Gesture in progress, DragMode.NONE when idle
        cursor: Cursor last requested from the widget
    """

    def __init__(self, region: UncertaintyRegion) -> None:
        self.region = region
        self.drag_mode = DragMode.NONE
        self.cursor = Cursor.DEFAULT
        self._at_edge = False
        self._last_point: tuple[float, float] | None = None

    def set_region(self, region: UncertaintyRegion) -> None:
        """Edit a different region, abandoning any gesture in progress."""
        self.region = region
        self._clear_state()

    def _clear_state(self) -> None:
        self.drag_mode = DragMode.NONE
        self._at_edge = False
        self._last_point = None

    # -------------------------------------------------------------------------
    # Pointer
    # -------------------------------------------------------------------------

    def pointer_moved(self, event: PointerEvent) -> bool:
        """Update cursor and pivot hints for a hover. Returns True if a repaint is needed."""
        frustum = self.region.frustum
        p = event.point
        previous_pivot = frustum.pivot

        if self.region.near_edge(p):
            self._at_edge = True
            self.cursor = Cursor.CROSSHAIR
            return False

        self._at_edge = False
        if self.region.contains(p):
            self.cursor = Cursor.HAND
            frustum.set_pivot(PivotVertex.NONE if event.shift else PivotVertex.PRIMARY)
        elif frustum.target_contains(PivotVertex.PRIMARY, p):
            self.cursor = Cursor.HAND
        elif frustum.target_contains(PivotVertex.EDGE_A, p):
            self.cursor = Cursor.HAND
            frustum.set_pivot(PivotVertex.EDGE_B if event.shift else PivotVertex.PRIMARY)
        elif frustum.target_contains(PivotVertex.EDGE_B, p):
            self.cursor = Cursor.HAND
            frustum.set_pivot(PivotVertex.EDGE_A if event.shift else PivotVertex.PRIMARY)
        else:
            self.cursor = Cursor.DEFAULT
            frustum.set_pivot(PivotVertex.NONE)

        return frustum.pivot is not previous_pivot

    def pointer_pressed(self, event: PointerEvent) -> bool:
        """
        Start a gesture under the pointer.

        A press that hits neither the region nor a target resets the region
        to its initial placement.

        Returns:
            True if the press reset the region and a repaint is needed
        """
        p = event.point
        frustum = self.region.frustum

        if self._at_edge:
            self.drag_mode = DragMode.RESIZE
        elif self.region.contains(p):
            self.drag_mode = DragMode.MOVE
            self.cursor = Cursor.MOVE
        else:
            vertex = frustum.vertex_at(p)
            self.drag_mode = {
                PivotVertex.PRIMARY: DragMode.PRIMARY,
                PivotVertex.EDGE_A: DragMode.EDGE_A,
                PivotVertex.EDGE_B: DragMode.EDGE_B,
            }.get(vertex, DragMode.NONE)
            if self.drag_mode is not DragMode.NONE:
                self.cursor = Cursor.MOVE

        self._last_point = p
        logger.debug("pointer pressed at %s: %s", format_point(np.array(p)), self.drag_mode.name)

        if self.drag_mode is not DragMode.NONE:
            return False
        self.region.reset()
        logger.debug("press on empty field, region reset to %s", format_point(self.region.center))
        return True

    def pointer_dragged(self, event: PointerEvent) -> bool:
        """Apply the gesture in progress. Returns True if the geometry changed."""
        p = event.point
        mode = self.drag_mode

        if mode is DragMode.MOVE:
            if self._last_point is None:
                self._last_point = p
            dx = p[0] - self._last_point[0]
            dy = p[1] - self._last_point[1]
            self._last_point = p
            self.region.move(dx, dy, track_target=not event.shift)
            self.region.frustum.set_pivot(PivotVertex.NONE if event.shift else PivotVertex.PRIMARY)
        elif mode is DragMode.RESIZE:
            self._last_point = p
            self.region.grow_to_point(p)
        elif mode is DragMode.PRIMARY:
            self.region.look_at(p)
        elif mode in (DragMode.EDGE_A, DragMode.EDGE_B):
            self._drag_edge(EdgeTarget.A if mode is DragMode.EDGE_A else EdgeTarget.B, event)
        else:
            return False
        return True

    def _drag_edge(self, which: EdgeTarget, event: PointerEvent) -> None:
        frustum = self.region.frustum
        solution = frustum.set_edge_target(which, event.point, central_pivot=not event.shift)
        if solution:
            self.region.move_to(solution.point, track_target=False)
        else:
            logger.warning(
                "No origin reproduces edge %s at %s; frustum left at origin %s",
                which.name,
                format_point(np.array(event.point)),
                format_point(self.region.center),
            )
        frustum.set_pivot(which.opposite.vertex if event.shift else PivotVertex.PRIMARY)

    def pointer_released(self, event: PointerEvent | None = None) -> bool:
        """
        End the gesture in progress.

        Args:
            event: Pointer position at release; the cursor stays a hand while
                   it is over the region or a target

        Returns:
            True if a gesture was in progress
        """
        was_dragging = self.drag_mode is not DragMode.NONE
        if was_dragging:
            log_frustum_state(self.region.frustum, label=f"after {self.drag_mode.name.lower()} drag")
        self._clear_state()
        if event is not None and self._over_handle(event.point):
            self.cursor = Cursor.HAND
        else:
            self.cursor = Cursor.DEFAULT
        return was_dragging

    def _over_handle(self, p: tuple[float, float]) -> bool:
        if self.region.contains(p):
            return True
        return self.region.frustum.vertex_at(p) is not PivotVertex.NONE

    # -------------------------------------------------------------------------
    # Keyboard
    # -------------------------------------------------------------------------

    def key_pressed(self, key: str, shift: bool = False) -> bool:
        """Handle a key press.

        Bindings: ``j``/``k`` rotate, ``r`` resets, arrow keys move the
        frustum rigidly (with shift the gaze stays on the primary target),
        ``a``/``s`` grow and shrink the uncertainty circle.

        Args:
            key: Key name, a letter or one of "up", "down", "left", "right"
            shift: Whether shift is held

        Returns:
            True if the key was bound and a repaint is needed
        """
        key = key.lower()
        if key == "j":
            self.region.rotate(ROTATE_INCREMENT_DEG)
        elif key == "k":
            self.region.rotate(-ROTATE_INCREMENT_DEG)
        elif key == "r":
            self.region.reset()
        elif key in ARROW_KEYS:
            ux, uy = ARROW_KEYS[key]
            self.region.move(ux * MOVE_STEP_PX, uy * MOVE_STEP_PX, track_target=shift)
        elif key == "a":
            self.region.grow(GROW_STEP_PX)
        elif key == "s":
            self.region.grow(-GROW_STEP_PX)
        else:
            return False
        return True
