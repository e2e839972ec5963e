"""
Visualization utilities for drawing a robot location on a field image.

These functions only read the geometry; they never modify the region.
"""

import math
from typing import Tuple

import numpy as np
from numpy.typing import NDArray

from view_frustum.frustum import TARGET_RADIUS, PivotVertex
from view_frustum.region import UncertaintyRegion

# Try to import cv2, set flag if not available
try:
    import cv2

    HAS_CV2 = True
except ImportError:
    HAS_CV2 = False

Color = Tuple[int, int, int]

# BGR
BLACK: Color = (0, 0, 0)
RED: Color = (0, 0, 255)
GREEN: Color = (0, 255, 0)
BLUE: Color = (255, 0, 0)

TARGET_COLORS = {
    PivotVertex.PRIMARY: RED,
    PivotVertex.EDGE_A: BLUE,
    PivotVertex.EDGE_B: GREEN,
}


def _ensure_cv2() -> None:
    """Raise an error if cv2 is not available."""
    if not HAS_CV2:
        raise ImportError(
            "OpenCV (cv2) is required for visualization functions. "
            "Install with: pip install opencv-python"
        )


def _to_pixels(points: NDArray[np.float64]) -> NDArray[np.int32]:
    return np.round(points).astype(np.int32).reshape((-1, 1, 2))


def _pixel(point: NDArray[np.float64]) -> Tuple[int, int]:
    return (int(round(point[0])), int(round(point[1])))


def _blend_polygon(
    image: NDArray[np.uint8],
    polygon: NDArray[np.float64],
    color: Color,
    alpha: float
) -> None:
    overlay = image.copy()
    cv2.fillPoly(overlay, [_to_pixels(polygon)], color)
    cv2.addWeighted(overlay, alpha, image, 1 - alpha, 0, image)


def draw_dashed_line(
    image: NDArray[np.uint8],
    start: NDArray[np.float64],
    end: NDArray[np.float64],
    color: Color = BLACK,
    dash_length: float = 10.0,
    thickness: int = 1
) -> NDArray[np.uint8]:
    """
    Draw a dashed line in place.

    Parameters:
        image: Image (H, W, 3) BGR format, modified in place
        start: Line start (2,)
        end: Line end (2,)
        color: BGR color tuple
        dash_length: Length of each dash and of each gap
        thickness: Line thickness

    Returns:
        The same image
    """
    _ensure_cv2()

    length = math.hypot(end[0] - start[0], end[1] - start[1])
    if length == 0.0:
        return image

    direction = (end - start) / length
    pos = 0.0
    while pos < length:
        seg_end = min(pos + dash_length, length)
        cv2.line(image, _pixel(start + direction * pos), _pixel(start + direction * seg_end),
                 color, thickness, cv2.LINE_AA)
        pos += 2 * dash_length
    return image


def draw_region_overlay(
    image: NDArray[np.uint8],
    region: UncertaintyRegion,
    fill_alpha: float = 0.3,
    show_blind_zone: bool = False,
    thickness: int = 1
) -> NDArray[np.uint8]:
    """
    Draw the uncertainty circle and camera frustum on an image.

    Parameters:
        image: Input image (H, W, 3) BGR format
        region: Region to draw
        fill_alpha: Transparency of the filled areas
        show_blind_zone: Also shade the ground too close to the robot to be seen
        thickness: Outline thickness

    Returns:
        Image with the overlay (modified copy)
    """
    _ensure_cv2()

    output = image.copy()
    frustum = region.frustum
    center = _pixel(region.center)
    radius = int(round(region.radius))

    # Uncertainty circle
    overlay = output.copy()
    cv2.circle(overlay, center, radius, BLACK, -1)
    cv2.addWeighted(overlay, fill_alpha, output, 1 - fill_alpha, 0, output)
    cv2.circle(output, center, radius, BLACK, thickness, cv2.LINE_AA)

    # Frustum areas
    if show_blind_zone:
        _blend_polygon(output, frustum.blind_zone_polygon(), RED, fill_alpha)
    _blend_polygon(output, frustum.visible_polygon(), BLUE, fill_alpha)
    _blend_polygon(output, frustum.beyond_range_polygon(), RED, fill_alpha)

    # Gaze line
    draw_dashed_line(output, frustum.origin, frustum.primary_target, BLACK, thickness=thickness)

    # Pivot marker
    if frustum.pivot is not PivotVertex.NONE:
        pivot = frustum.target(frustum.pivot)
        ring = int(2 * TARGET_RADIUS)
        cv2.circle(output, _pixel(pivot), ring, BLACK, thickness, cv2.LINE_AA)
        for side in (-1, 1):
            tip = pivot + np.array([side * ring, 0.0])
            for spread in (-5.0, 5.0):
                cv2.line(output, _pixel(tip), _pixel(tip + np.array([spread, side * -5.0])),
                         BLACK, thickness, cv2.LINE_AA)

    # Targets
    r = int(TARGET_RADIUS)
    for vertex, color in TARGET_COLORS.items():
        p = _pixel(frustum.target(vertex))
        cv2.circle(output, p, r, color, -1, cv2.LINE_AA)
        cv2.circle(output, p, r, BLACK, 1, cv2.LINE_AA)

    return output


def draw_location_label(
    image: NDArray[np.uint8],
    region: UncertaintyRegion,
    font_scale: float = 0.5,
    text_color: Color = BLACK,
    origin: Tuple[int, int] = (5, 15)
) -> NDArray[np.uint8]:
    """
    Write the region's status line (position, radius, gaze angle) on the image.

    The degree sign is spelled "deg" since Hershey fonts are ASCII only.

    Returns:
        Image with the label (modified copy)
    """
    _ensure_cv2()

    output = image.copy()
    label = region.describe().replace("°", " deg")
    cv2.putText(output, label, origin, cv2.FONT_HERSHEY_SIMPLEX, font_scale,
                text_color, 1, cv2.LINE_AA)
    return output
