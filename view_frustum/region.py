"""
Uncertainty Region
==================

Where on the field a robot could be given its visual information: a circle
centered at the estimated position whose radius expresses the position error.
The region owns the camera frustum anchored at its center and forwards
transforms to it so the two never drift apart.
"""

from __future__ import annotations

import logging
from enum import Enum

import numpy as np
from numpy.typing import NDArray

from view_frustum.camera import CameraProfile, DEFAULT_CAMERA_PROFILE
from view_frustum.debug import format_point
from view_frustum.frustum import BearingRange, ViewFrustum
from view_frustum.geometry import PointLike, ValidationError, as_point, distance

logger = logging.getLogger(__name__)

DEFAULT_RADIUS = 25.0
MINIMUM_RADIUS = 5.0

# How close to the rim, in pixels, a pointer must be to resize the circle
EDGE_TOLERANCE_PX = 3.0


class MirrorAxis(Enum):
    """Field axis to mirror a region across."""

    X_AXIS = "x"
    Y_AXIS = "y"
    BOTH = "both"


class UncertaintyRegion:
    """Circle of candidate robot positions, with the camera frustum at its center.

    The frustum is owned by the region and its origin always equals
    ``center``. Move it through the region so the two stay together.
    """

    def __init__(
        self,
        center: PointLike,
        radius: float = DEFAULT_RADIUS,
        camera: CameraProfile = DEFAULT_CAMERA_PROFILE,
    ) -> None:
        """
        Args:
            center: Estimated robot position (x, y)
            radius: Initial uncertainty radius, at least MINIMUM_RADIUS
            camera: Camera used for the frustum

        Raises:
            ValidationError: If center is malformed or radius is below the minimum
        """
        self._center = as_point(center, "center")
        self._initial_center = self._center.copy()

        radius = float(radius)
        if not radius >= MINIMUM_RADIUS:
            raise ValidationError(
                f"radius must be at least {MINIMUM_RADIUS}, got {radius}"
            )
        self._radius = radius

        self._frustum = ViewFrustum(self._center, camera=camera)

    @property
    def frustum(self) -> ViewFrustum:
        """The owned ViewFrustum."""
        return self._frustum

    @property
    def center(self) -> NDArray[np.float64]:
        return self._center.copy()

    @property
    def radius(self) -> float:
        return self._radius

    @property
    def gaze_angle_deg(self) -> float:
        return self._frustum.gaze_angle_deg

    # -------------------------------------------------------------------------
    # Hit testing
    # -------------------------------------------------------------------------

    def contains(self, point: PointLike) -> bool:
        """True if point lies inside or on the circle."""
        return distance(self._center, as_point(point)) <= self._radius

    def near_edge(self, point: PointLike) -> bool:
        """True if point is within EDGE_TOLERANCE_PX of the rim."""
        return abs(self._radius - distance(self._center, as_point(point))) < EDGE_TOLERANCE_PX

    # -------------------------------------------------------------------------
    # Radius
    # -------------------------------------------------------------------------

    def set_radius(self, radius: float) -> None:
        """Set the radius; values below MINIMUM_RADIUS are ignored."""
        if radius >= MINIMUM_RADIUS:
            self._radius = float(radius)
        else:
            logger.debug("set_radius %s ignored (minimum %s)", radius, MINIMUM_RADIUS)

    def grow(self, delta: float) -> None:
        """Change the radius by delta; shrinking below the minimum is ignored."""
        self.set_radius(self._radius + delta)

    def grow_to_point(self, point: PointLike) -> None:
        """Resize so the rim passes through point."""
        self.set_radius(distance(self._center, as_point(point)))

    # -------------------------------------------------------------------------
    # Transforms
    # -------------------------------------------------------------------------

    def look_at(self, target: PointLike) -> None:
        self._frustum.look_at(target)

    def rotate(self, delta_deg: float) -> None:
        self._frustum.rotate(delta_deg)

    def move(self, dx: float, dy: float, track_target: bool) -> None:
        """Translate the center and the frustum origin together.

        Args:
            dx: Offset along x
            dy: Offset along y
            track_target: Keep the gaze on the same primary target
        """
        self._center = self._center + np.array([dx, dy], dtype=np.float64)
        self._frustum.move(dx, dy, track_target)

    def move_to(self, point: PointLike, track_target: bool) -> None:
        """Place the center (and frustum origin) at point."""
        self._center = as_point(point, "point")
        self._frustum.move_to(self._center, track_target)
        logger.debug("region moved to %s", format_point(self._center))

    def reset(self) -> None:
        """Return to the construction-time center and default gaze."""
        self._center = self._initial_center.copy()
        self._frustum.reset()

    # -------------------------------------------------------------------------
    # Derived
    # -------------------------------------------------------------------------

    def possible_bearings(self, point: PointLike) -> BearingRange:
        """Bearing range of point, using this region's radius as the lateral error."""
        return self._frustum.possible_bearings(point, self._radius)

    def mirrored(self, axis: MirrorAxis, field_size: tuple[float, float]) -> UncertaintyRegion:
        """Return a new region reflected across the middle of the field.

        Args:
            axis: X_AXIS flips left/right about half the width, Y_AXIS flips
                  top/bottom about half the height, BOTH does both
            field_size: (width, height) of the field in pixels

        Returns:
            A fresh region at the mirrored center with the same radius and camera
        """
        if not isinstance(axis, MirrorAxis):
            raise ValidationError(f"axis must be a MirrorAxis, got {axis!r}")

        width, height = field_size
        x, y = self._center
        if axis in (MirrorAxis.X_AXIS, MirrorAxis.BOTH):
            x = width - x
        if axis in (MirrorAxis.Y_AXIS, MirrorAxis.BOTH):
            y = height - y

        return UncertaintyRegion((x, y), radius=self._radius, camera=self._frustum.camera)

    def describe(self) -> str:
        """One-line status text, e.g. ``Location: (100, 100) Radius: 25 Angle: -90.00°``."""
        return (
            f"Location: ({self._center[0]:.0f}, {self._center[1]:.0f}) "
            f"Radius: {self._radius:.0f} "
            f"Angle: {self._frustum.gaze_angle_deg:.2f}°"
        )

    def __repr__(self) -> str:
        return f"UncertaintyRegion(center={format_point(self._center)}, radius={self._radius})"
