"""
Geometry utilities for point coercion, polar conversion, and circle intersection.
"""

from typing import Optional, Sequence, Tuple, Union
import math

import numpy as np
from numpy.typing import NDArray

PointLike = Union[Sequence[float], NDArray[np.floating]]


class ValidationError(ValueError):
    """Raised when input validation fails."""

    pass


def as_point(point: PointLike, name: str = "point") -> NDArray[np.float64]:
    """
    Coerce a 2-sequence into a float64 point array.

    Parameters:
        point: Any (x, y) sequence or array of shape (2,)
        name: Argument name used in error messages

    Returns:
        New array of shape (2,) with dtype float64

    Raises:
        ValidationError: If the shape is not (2,) or a coordinate is not finite
    """
    try:
        arr = np.array(point, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{name} must be numeric (x, y), got {point!r}") from e

    if arr.shape != (2,):
        raise ValidationError(f"{name} must have shape (2,), got {arr.shape}")

    if not np.all(np.isfinite(arr)):
        raise ValidationError(f"{name} must have finite coordinates, got {arr.tolist()}")

    return arr


def distance(p0: NDArray[np.float64], p1: NDArray[np.float64]) -> float:
    """Euclidean distance between two points."""
    return float(math.hypot(p1[0] - p0[0], p1[1] - p0[1]))


def polar_to_cartesian(r: float, angle_deg: float) -> NDArray[np.float64]:
    """
    Convert a polar offset to a Cartesian one.

    Parameters:
        r: Length of the offset
        angle_deg: Degrees counter-clockwise from the positive x axis

    Returns:
        Offset (dx, dy) as an array of shape (2,)
    """
    theta = math.radians(angle_deg)
    return np.array([r * math.cos(theta), r * math.sin(theta)], dtype=np.float64)


def bearing_deg(origin: NDArray[np.float64], target: NDArray[np.float64]) -> float:
    """Angle in degrees of the ray from origin to target, in (-180, 180]."""
    return math.degrees(math.atan2(target[1] - origin[1], target[0] - origin[0]))


def normalize_angle_deg(angle: float) -> float:
    """
    Wrap angle to [-180, 180) range.

    Parameters:
        angle: Angle in degrees

    Returns:
        Normalized angle in [-180, 180)
    """
    return (angle + 180.0) % 360.0 - 180.0


def rotate_about(
    point: NDArray[np.float64],
    center: NDArray[np.float64],
    delta_deg: float
) -> NDArray[np.float64]:
    """Rotate point counter-clockwise around center by delta_deg degrees."""
    theta = math.radians(delta_deg)
    c, s = math.cos(theta), math.sin(theta)
    dx, dy = point - center
    return np.array([center[0] + c * dx - s * dy, center[1] + s * dx + c * dy], dtype=np.float64)


def circle_intersection(
    c0: NDArray[np.float64],
    r0: float,
    c1: NDArray[np.float64],
    r1: float
) -> Optional[Tuple[NDArray[np.float64], NDArray[np.float64]]]:
    """
    Compute the intersection points of two circles.

    The line through both intersection points (the radical line) crosses the
    segment between the centers at distance ``a`` from c0; the intersections
    sit a half-chord ``h`` away from that crossing, on either side.

    Parameters:
        c0: Center of the first circle (2,)
        r0: Radius of the first circle
        c1: Center of the second circle (2,)
        r1: Radius of the second circle

    Returns:
        Tuple of two points ``(p2 + offset, p2 - offset)``, or None when the
        circles are disjoint, one lies strictly inside the other, or the
        centers coincide. Tangent circles return the touching point twice.
    """
    delta = c1 - c0
    d = float(math.hypot(delta[0], delta[1]))

    # Disjoint
    if d > r0 + r1:
        return None

    # One circle contained in the other
    if d < abs(r0 - r1):
        return None

    # Concentric: either no intersection or infinitely many
    if d == 0.0:
        return None

    a = (r0 * r0 - r1 * r1 + d * d) / (2.0 * d)
    p2 = c0 + delta * (a / d)

    # Rounding can push r0² - a² slightly negative for tangent circles
    h = math.sqrt(max(r0 * r0 - a * a, 0.0))
    offset = np.array([-delta[1], delta[0]], dtype=np.float64) * (h / d)

    return p2 + offset, p2 - offset
