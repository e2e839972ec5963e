"""
View Frustum Placement
======================

Geometry for placing a robot's position, gaze and camera field of view on an
overhead field map, and for keeping that geometry consistent while the user
drags any part of it.
"""

from view_frustum.geometry import ValidationError, circle_intersection
from view_frustum.camera import (
    CameraProfile,
    NAO,
    AIBO,
    CAMERA_PROFILES,
    DEFAULT_CAMERA_PROFILE,
    get_camera_profile,
)
from view_frustum.frustum import (
    ViewFrustum,
    PivotVertex,
    EdgeTarget,
    OriginSolution,
    BearingRange,
    FrustumSnapshot,
    TARGET_RADIUS,
    DEFAULT_GAZE_OFFSET,
)
from view_frustum.region import (
    UncertaintyRegion,
    MirrorAxis,
    DEFAULT_RADIUS,
    MINIMUM_RADIUS,
    EDGE_TOLERANCE_PX,
)
from view_frustum.interaction import LocationChooser, PointerEvent, Cursor, DragMode
from view_frustum.debug import (
    setup_debug_logging,
    disable_debug_logging,
    format_point,
    format_angle,
    format_polygon,
    log_frustum_state,
)

__all__ = [
    # Geometry
    'ValidationError',
    'circle_intersection',
    # Camera configuration
    'CameraProfile',
    'NAO',
    'AIBO',
    'CAMERA_PROFILES',
    'DEFAULT_CAMERA_PROFILE',
    'get_camera_profile',
    # Frustum
    'ViewFrustum',
    'PivotVertex',
    'EdgeTarget',
    'OriginSolution',
    'BearingRange',
    'FrustumSnapshot',
    'TARGET_RADIUS',
    'DEFAULT_GAZE_OFFSET',
    # Region
    'UncertaintyRegion',
    'MirrorAxis',
    'DEFAULT_RADIUS',
    'MINIMUM_RADIUS',
    'EDGE_TOLERANCE_PX',
    # Interaction
    'LocationChooser',
    'PointerEvent',
    'Cursor',
    'DragMode',
    # Debug utilities
    'setup_debug_logging',
    'disable_debug_logging',
    'format_point',
    'format_angle',
    'format_polygon',
    'log_frustum_state',
]
__version__ = '0.1.0'
