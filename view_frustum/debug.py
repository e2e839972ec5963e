"""
Debug logging helpers for frustum geometry.

All package modules log under the ``view_frustum`` logger hierarchy. These
helpers attach a console handler to it and format points and angles
compactly for log lines.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Optional

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from view_frustum.frustum import ViewFrustum

PACKAGE_LOGGER_NAME = "view_frustum"
DEBUG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)

_debug_handler: Optional[logging.Handler] = None


def setup_debug_logging(level: int = logging.DEBUG) -> logging.Logger:
    """
    Route package log records to stderr.

    Calling this more than once replaces the handler instead of stacking them.

    Parameters:
        level: Logging level for the package logger

    Returns:
        The package logger
    """
    global _debug_handler

    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    if _debug_handler is not None:
        package_logger.removeHandler(_debug_handler)

    _debug_handler = logging.StreamHandler()
    _debug_handler.setFormatter(logging.Formatter(DEBUG_FORMAT))
    package_logger.addHandler(_debug_handler)
    package_logger.setLevel(level)
    return package_logger


def disable_debug_logging() -> None:
    """Remove the handler added by setup_debug_logging and silence DEBUG records."""
    global _debug_handler

    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    if _debug_handler is not None:
        package_logger.removeHandler(_debug_handler)
        _debug_handler = None
    package_logger.setLevel(logging.WARNING)


def format_point(point: Optional[NDArray[np.float64]], precision: int = 1) -> str:
    """Format a point as ``(x, y)``."""
    if point is None:
        return "(none)"
    return f"({point[0]:.{precision}f}, {point[1]:.{precision}f})"


def format_angle(angle_deg: float, precision: int = 2) -> str:
    """Format an angle in degrees with a degree sign."""
    return f"{angle_deg:.{precision}f}°"


def format_polygon(polygon: Iterable[NDArray[np.float64]], precision: int = 1) -> str:
    """Format a sequence of vertices as ``[(x0, y0), (x1, y1), ...]``."""
    return "[" + ", ".join(format_point(p, precision) for p in polygon) + "]"


def log_frustum_state(frustum: "ViewFrustum", label: str = "frustum") -> None:
    """Log every rendered field of a frustum at DEBUG level."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug(
        "%s: origin=%s gaze=%s primary=%s edge_a=%s edge_b=%s pivot=%s",
        label,
        format_point(frustum.origin),
        format_angle(frustum.gaze_angle_deg),
        format_point(frustum.primary_target),
        format_point(frustum.edge_target_a),
        format_point(frustum.edge_target_b),
        frustum.pivot.name,
    )
