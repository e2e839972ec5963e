"""
Camera view frustum projected onto the field, seen from overhead.

Viewed from above, the part of the field a robot camera can see is a
triangle: its apex is the robot position (origin) and its two equal sides
leave the origin at plus and minus half the horizontal field of view around
the gaze direction. The frustum is described by three target points:

- primary target: the point the gaze is centered on
- edge target A: corner at ``gaze - fov/2``
- edge target B: corner at ``gaze + fov/2``

Both edge targets project onto the line through the primary target that is
perpendicular to the gaze, so the edges have length
``|primary - origin| / cos(fov/2)``.

Dragging any vertex re-solves the others. Moving an edge target fixes the
base of the triangle, and the apex is recovered from the base and the apex
angle by intersecting two circles (see ``geometry.circle_intersection``).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple
import logging
import math

import numpy as np
from numpy.typing import NDArray

from view_frustum.camera import CameraProfile, DEFAULT_CAMERA_PROFILE
from view_frustum.debug import format_angle, format_point
from view_frustum.geometry import (
    PointLike,
    ValidationError,
    as_point,
    bearing_deg,
    circle_intersection,
    distance,
    normalize_angle_deg,
    polar_to_cartesian,
    rotate_about,
)

logger = logging.getLogger(__name__)

# Pick radius for target hit tests, in pixels
TARGET_RADIUS = 5.0

# Gaze set up on construction and reset: straight down-field
DEFAULT_GAZE_OFFSET = (0.0, -100.0)

# Length of the frustum rays drawn past the edge targets
FAR_RANGE = 1000.0


class PivotVertex(Enum):
    """Triangle vertex held fixed while another vertex is dragged."""

    NONE = "none"
    PRIMARY = "primary"
    EDGE_A = "edge_a"
    EDGE_B = "edge_b"


class EdgeTarget(Enum):
    """One of the two frustum corners."""

    A = "a"
    B = "b"

    @property
    def vertex(self) -> PivotVertex:
        """The pivot vertex naming this corner."""
        return PivotVertex.EDGE_A if self is EdgeTarget.A else PivotVertex.EDGE_B

    @property
    def opposite(self) -> "EdgeTarget":
        """The other corner."""
        return EdgeTarget.B if self is EdgeTarget.A else EdgeTarget.A


@dataclass
class OriginSolution:
    """
    Result of solving for the origin from two edge targets.

    Attributes:
        point: Candidate origin closest to the reference point, or None when
               no origin reproduces the edge targets
        alternative: The other circle-intersection candidate (mirror image of
                     ``point`` across the edge-to-edge chord), or None
    """
    point: Optional[NDArray[np.float64]]
    alternative: Optional[NDArray[np.float64]] = None

    def __bool__(self) -> bool:
        """Returns True if an origin was found."""
        return self.point is not None


@dataclass(frozen=True)
class BearingRange:
    """
    Bearing of a field point relative to the gaze, with its uncertainty.

    Angles are degrees, counter-clockwise positive. nominal_deg is in
    [-180, 180); min_deg and max_deg may run past that range so the interval
    stays contiguous for points behind the robot.

    Attributes:
        nominal_deg: Relative bearing seen from the origin
        min_deg: Smallest relative bearing over the origin and the two lateral
                 extremes of the uncertainty circle
        max_deg: Largest relative bearing over the same three positions
    """
    nominal_deg: float
    min_deg: float
    max_deg: float

    @property
    def spread_deg(self) -> float:
        """Width of the bearing interval."""
        return self.max_deg - self.min_deg


@dataclass(frozen=True)
class FrustumSnapshot:
    """Read-only copy of the frustum state consumed by the renderer."""
    origin: Tuple[float, float]
    gaze_angle_deg: float
    primary_target: Tuple[float, float]
    edge_target_a: Tuple[float, float]
    edge_target_b: Tuple[float, float]
    pivot: PivotVertex


def _as_tuple(point: NDArray[np.float64]) -> Tuple[float, float]:
    return (float(point[0]), float(point[1]))


class ViewFrustum:
    """
    Overhead view frustum of a robot camera.

    Every mutator recomputes all dependent fields before returning, so the
    three targets, the origin and the gaze angle are always consistent.
    Accessors return copies; mutate only through the methods.

    The gaze angle is unbounded: ``rotate`` never wraps it and only its value
    modulo 360 is meaningful.
    """

    def __init__(
        self,
        origin: PointLike,
        camera: CameraProfile = DEFAULT_CAMERA_PROFILE
    ) -> None:
        """
        Parameters:
            origin: Robot position (x, y)
            camera: Camera whose field of view shapes the frustum
        """
        if not isinstance(camera, CameraProfile):
            raise ValidationError(
                f"camera must be a CameraProfile, got {type(camera).__name__}"
            )

        self._camera = camera
        self._origin = as_point(origin, "origin")
        self._initial_origin = self._origin.copy()
        self._pivot = PivotVertex.NONE

        self._gaze_angle_deg = 0.0
        self._primary = self._origin.copy()
        self._edge_a = self._origin.copy()
        self._edge_b = self._origin.copy()

        self.look_at(self._origin + np.array(DEFAULT_GAZE_OFFSET))

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def camera(self) -> CameraProfile:
        return self._camera

    @property
    def horizontal_fov_deg(self) -> float:
        return self._camera.horizontal_fov_deg

    @property
    def vertical_fov_deg(self) -> float:
        return self._camera.vertical_fov_deg

    @property
    def origin(self) -> NDArray[np.float64]:
        return self._origin.copy()

    @property
    def initial_origin(self) -> NDArray[np.float64]:
        return self._initial_origin.copy()

    @property
    def gaze_angle_deg(self) -> float:
        return self._gaze_angle_deg

    @property
    def primary_target(self) -> NDArray[np.float64]:
        return self._primary.copy()

    @property
    def edge_target_a(self) -> NDArray[np.float64]:
        return self._edge_a.copy()

    @property
    def edge_target_b(self) -> NDArray[np.float64]:
        return self._edge_b.copy()

    @property
    def pivot(self) -> PivotVertex:
        return self._pivot

    def target(self, vertex: PivotVertex) -> NDArray[np.float64]:
        """
        Return the target point named by vertex.

        Raises:
            ValidationError: If vertex is PivotVertex.NONE or not a PivotVertex
        """
        if vertex is PivotVertex.PRIMARY:
            return self.primary_target
        if vertex is PivotVertex.EDGE_A:
            return self.edge_target_a
        if vertex is PivotVertex.EDGE_B:
            return self.edge_target_b
        raise ValidationError(f"vertex must name a target, got {vertex!r}")

    def snapshot(self) -> FrustumSnapshot:
        """Copy of everything the renderer draws."""
        return FrustumSnapshot(
            origin=_as_tuple(self._origin),
            gaze_angle_deg=self._gaze_angle_deg,
            primary_target=_as_tuple(self._primary),
            edge_target_a=_as_tuple(self._edge_a),
            edge_target_b=_as_tuple(self._edge_b),
            pivot=self._pivot,
        )

    # -------------------------------------------------------------------------
    # Forward derivation
    # -------------------------------------------------------------------------

    def look_at(self, target: PointLike) -> None:
        """
        Aim the gaze at target and rebuild the frustum corners.

        If target coincides with the origin the edges collapse onto the
        origin and the gaze angle becomes 0. That output is degenerate but
        well defined.

        Parameters:
            target: New primary target (x, y)
        """
        self._primary = as_point(target, "target")
        self._gaze_angle_deg = bearing_deg(self._origin, self._primary)
        self._rebuild_edges()
        logger.debug(
            "look_at %s: gaze=%s",
            format_point(self._primary),
            format_angle(self._gaze_angle_deg),
        )

    def _rebuild_edges(self) -> None:
        half_fov = self.horizontal_fov_deg / 2.0
        central_length = distance(self._origin, self._primary)

        # cos(fov/2) = adjacent / hypotenuse
        hypot_length = central_length / math.cos(math.radians(half_fov))

        self._edge_a = self._origin + polar_to_cartesian(hypot_length, self._gaze_angle_deg - half_fov)
        self._edge_b = self._origin + polar_to_cartesian(hypot_length, self._gaze_angle_deg + half_fov)

    # -------------------------------------------------------------------------
    # Inverse derivation
    # -------------------------------------------------------------------------

    def set_edge_target(
        self,
        which: EdgeTarget,
        point: PointLike,
        central_pivot: bool
    ) -> OriginSolution:
        """
        Move one frustum corner and solve for the origin that explains it.

        With ``central_pivot`` the primary target stays fixed and the other
        corner is mirrored through it. Without it the other corner stays fixed
        and the primary target moves to the midpoint of the two corners.

        The origin itself is not moved: the caller applies the returned
        candidate (typically with ``move_to(solution.point, False)``) or
        rejects it. The gaze angle is refreshed from the current origin.

        Parameters:
            which: Corner being dragged
            point: New position of that corner
            central_pivot: Pivot around the primary target instead of the
                           untouched corner

        Returns:
            OriginSolution whose ``point`` is the candidate closest to the
            current origin; falsy when the corners admit no origin (e.g. both
            corners on the same spot), in which case the targets and gaze are
            left as they were before the call
        """
        if not isinstance(which, EdgeTarget):
            raise ValidationError(f"which must be an EdgeTarget, got {which!r}")

        moved = as_point(point, "point")
        previous = (self._primary, self._edge_a, self._edge_b, self._gaze_angle_deg)

        if which is EdgeTarget.A:
            self._edge_a = moved
        else:
            self._edge_b = moved

        if central_pivot:
            mirrored = self._primary + (self._primary - moved)
            if which is EdgeTarget.A:
                self._edge_b = mirrored
            else:
                self._edge_a = mirrored
        else:
            self._primary = (self._edge_a + self._edge_b) / 2.0

        self._refresh_gaze()

        solution = self._solve_origin(self._edge_a, self._edge_b, self._origin)
        if solution:
            logger.debug(
                "set_edge_target %s -> %s (central_pivot=%s): origin candidate %s",
                which.name,
                format_point(moved),
                central_pivot,
                format_point(solution.point),
            )
        else:
            # No apex fits these corners; put the targets back as they were
            self._primary, self._edge_a, self._edge_b, self._gaze_angle_deg = previous
            logger.debug(
                "set_edge_target %s -> %s (central_pivot=%s): no origin, targets restored",
                which.name,
                format_point(moved),
                central_pivot,
            )
        return solution

    def origin_from_targets(
        self,
        target_a: PointLike,
        target_b: PointLike,
        reference: Optional[PointLike] = None
    ) -> OriginSolution:
        """
        Given the two corners at the base of the triangle, find the apex.

        Does not modify the frustum.

        Parameters:
            target_a: Corner at ``gaze - fov/2``
            target_b: Corner at ``gaze + fov/2``
            reference: Point used to choose between the two candidates;
                       defaults to the current origin

        Returns:
            OriginSolution with the candidate closest to reference first
        """
        a = as_point(target_a, "target_a")
        b = as_point(target_b, "target_b")
        ref = self._origin if reference is None else as_point(reference, "reference")
        return self._solve_origin(a, b, ref)

    def _solve_origin(
        self,
        a: NDArray[np.float64],
        b: NDArray[np.float64],
        reference: NDArray[np.float64]
    ) -> OriginSolution:
        # sin(fov/2) = (base / 2) / side
        base = distance(a, b)
        side_length = base / (2.0 * math.sin(self._camera.half_fov_rad))

        candidates = circle_intersection(a, side_length, b, side_length)
        if candidates is None:
            return OriginSolution(point=None)

        first, second = candidates
        if distance(first, reference) <= distance(second, reference):
            return OriginSolution(point=first, alternative=second)
        return OriginSolution(point=second, alternative=first)

    def _refresh_gaze(self) -> None:
        # A zero-length gaze has no direction; keep the previous angle
        if distance(self._origin, self._primary) > 0.0:
            self._gaze_angle_deg = bearing_deg(self._origin, self._primary)

    # -------------------------------------------------------------------------
    # Pivot and hit testing
    # -------------------------------------------------------------------------

    def set_pivot(self, vertex: PivotVertex) -> None:
        """Make vertex the only pivot; PivotVertex.NONE clears it."""
        if not isinstance(vertex, PivotVertex):
            raise ValidationError(f"vertex must be a PivotVertex, got {vertex!r}")
        self._pivot = vertex

    def target_contains(
        self,
        vertex: PivotVertex,
        point: PointLike,
        pick_radius: float = TARGET_RADIUS
    ) -> bool:
        """True if point lies within pick_radius of the named target."""
        return distance(self.target(vertex), as_point(point)) <= pick_radius

    def vertex_at(self, point: PointLike, pick_radius: float = TARGET_RADIUS) -> PivotVertex:
        """
        Return the first target under point, checking the primary target first.

        Returns:
            The hit vertex, or PivotVertex.NONE
        """
        p = as_point(point)
        for vertex in (PivotVertex.PRIMARY, PivotVertex.EDGE_A, PivotVertex.EDGE_B):
            if distance(self.target(vertex), p) <= pick_radius:
                return vertex
        return PivotVertex.NONE

    # -------------------------------------------------------------------------
    # Transforms
    # -------------------------------------------------------------------------

    def move(self, dx: float, dy: float, track_target: bool) -> None:
        """
        Translate the origin by (dx, dy).

        Parameters:
            dx: Offset along x
            dy: Offset along y
            track_target: Keep looking at the same primary target (the angle
                          changes); otherwise translate the whole frustum
                          rigidly (the angle is unchanged)
        """
        offset = np.array([dx, dy], dtype=np.float64)
        self._origin = self._origin + offset

        if track_target:
            self.look_at(self._primary)
        else:
            self._primary = self._primary + offset
            self._edge_a = self._edge_a + offset
            self._edge_b = self._edge_b + offset
            logger.debug("move by (%s, %s): rigid", dx, dy)

    def move_to(self, point: PointLike, track_target: bool) -> None:
        """
        Place the origin at point.

        With ``track_target`` the gaze is re-aimed at the unchanged primary
        target. Without it the targets stay where they are and only the gaze
        angle is refreshed; this is how a solved origin from
        ``set_edge_target`` is applied.
        """
        self._origin = as_point(point, "point")
        if track_target:
            self.look_at(self._primary)
        else:
            self._refresh_gaze()
            logger.debug("move_to %s", format_point(self._origin))

    def rotate(self, delta_deg: float) -> None:
        """Turn the gaze by delta_deg degrees, swinging the targets around the origin."""
        self._gaze_angle_deg += delta_deg
        self._primary = rotate_about(self._primary, self._origin, delta_deg)
        self._edge_a = rotate_about(self._edge_a, self._origin, delta_deg)
        self._edge_b = rotate_about(self._edge_b, self._origin, delta_deg)

    def reset(self) -> None:
        """Return to the construction-time origin with the default gaze."""
        self._origin = self._initial_origin.copy()
        self.look_at(self._origin + np.array(DEFAULT_GAZE_OFFSET))

    # -------------------------------------------------------------------------
    # Derived quantities
    # -------------------------------------------------------------------------

    def distance_to_visible_ground(self) -> float:
        """
        Distance from the robot to the first visible patch of ground.

        Assumes the camera looks straight ahead, so the lower edge of the
        image meets the ground at ``(180 - vfov) / 2`` degrees from vertical.
        """
        alpha = (180.0 - self.vertical_fov_deg) / 2.0
        return self._camera.mount_height * math.tan(math.radians(alpha))

    def _ray_point(self, length: float, side: float) -> NDArray[np.float64]:
        half_fov = self.horizontal_fov_deg / 2.0
        return self._origin + polar_to_cartesian(length, self._gaze_angle_deg + side * half_fov)

    def blind_zone_polygon(self) -> NDArray[np.float64]:
        """Triangle between the robot and the first visible ground, shape (3, 2)."""
        near = self.distance_to_visible_ground()
        return np.array([
            self._origin,
            self._ray_point(near, -1.0),
            self._ray_point(near, +1.0),
        ], dtype=np.float64)

    def visible_polygon(self) -> NDArray[np.float64]:
        """Visible ground from the blind zone out to the edge targets, shape (4, 2)."""
        near = self.distance_to_visible_ground()
        return np.array([
            self._ray_point(near, -1.0),
            self._ray_point(near, +1.0),
            self._edge_b,
            self._edge_a,
        ], dtype=np.float64)

    def beyond_range_polygon(self, far_range: float = FAR_RANGE) -> NDArray[np.float64]:
        """Frustum area past the edge targets, out to far_range, shape (4, 2)."""
        return np.array([
            self._edge_b,
            self._ray_point(far_range, +1.0),
            self._ray_point(far_range, -1.0),
            self._edge_a,
        ], dtype=np.float64)

    def possible_bearings(self, point: PointLike, radius: float) -> BearingRange:
        """
        Bearing of a field point relative to the gaze, allowing for position error.

        The robot may stand anywhere inside a circle of the given radius around
        the origin. The bearing is evaluated from the origin and from the two
        points of that circle orthogonal to the gaze, where the lateral error
        is largest. From each position the bearing is measured against the
        direction to the primary target.

        Parameters:
            point: Field point (x, y), e.g. a landmark
            radius: Position uncertainty radius

        Returns:
            BearingRange with nominal, minimum and maximum relative bearings
        """
        p = as_point(point)
        nominal = normalize_angle_deg(bearing_deg(self._origin, p) - self._gaze_angle_deg)

        # Offsets from nominal so the interval never straddles the +/-180 wrap
        offsets = [0.0]
        for side in (-90.0, 90.0):
            lateral = self._origin + polar_to_cartesian(radius, self._gaze_angle_deg + side)
            gaze_from_lateral = bearing_deg(lateral, self._primary)
            relative = bearing_deg(lateral, p) - gaze_from_lateral
            offsets.append(normalize_angle_deg(relative - nominal))

        return BearingRange(
            nominal_deg=nominal,
            min_deg=nominal + min(offsets),
            max_deg=nominal + max(offsets),
        )

    def __repr__(self) -> str:
        return (
            f"ViewFrustum(origin={format_point(self._origin)}, "
            f"gaze={format_angle(self._gaze_angle_deg)}, camera={self._camera.name!r})"
        )
