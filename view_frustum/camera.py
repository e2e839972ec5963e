"""
Camera Profiles
===============

Fixed optical parameters of the robot cameras. A profile is chosen when a
frustum is constructed and never changes afterwards.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from view_frustum.geometry import ValidationError


@dataclass(frozen=True)
class CameraProfile:
    """Optical parameters of a robot camera.

    Attributes:
        name: Identifier used for lookup (e.g. "nao")
        horizontal_fov_deg: Angular width of the image in degrees
        vertical_fov_deg: Angular height of the image in degrees
        mount_height: Height of the camera above the ground, in field units

    Raises:
        ValidationError: If an angle is outside (0, 180) or the height is not positive
    """

    name: str
    horizontal_fov_deg: float
    vertical_fov_deg: float
    mount_height: float = 63.0

    def __post_init__(self) -> None:
        """Validate angles and height."""
        if not isinstance(self.name, str) or not self.name:
            raise ValidationError(f"name must be a non-empty string, got {self.name!r}")

        for label, value in (
            ("horizontal_fov_deg", self.horizontal_fov_deg),
            ("vertical_fov_deg", self.vertical_fov_deg),
        ):
            if not math.isfinite(value) or value <= 0 or value >= 180:
                raise ValidationError(f"{label} must be in (0, 180), got {value}")

        if not math.isfinite(self.mount_height) or self.mount_height <= 0:
            raise ValidationError(f"mount_height must be positive, got {self.mount_height}")

    @property
    def half_fov_rad(self) -> float:
        """Half the horizontal field of view, in radians."""
        return math.radians(self.horizontal_fov_deg / 2.0)


NAO = CameraProfile(name="nao", horizontal_fov_deg=46.4, vertical_fov_deg=34.8)
AIBO = CameraProfile(name="aibo", horizontal_fov_deg=56.9, vertical_fov_deg=45.2)

CAMERA_PROFILES: dict[str, CameraProfile] = {
    NAO.name: NAO,
    AIBO.name: AIBO,
}

DEFAULT_CAMERA_PROFILE = NAO


def get_camera_profile(name: str) -> CameraProfile:
    """Look up a built-in camera profile by name (case-insensitive).

    Args:
        name: Profile name, e.g. "nao" or "AIBO"

    Returns:
        The matching CameraProfile

    Raises:
        ValidationError: If no profile has that name
    """
    profile = CAMERA_PROFILES.get(str(name).lower())
    if profile is None:
        known = ", ".join(sorted(CAMERA_PROFILES))
        raise ValidationError(f"Unknown camera profile {name!r}; expected one of: {known}")
    return profile
