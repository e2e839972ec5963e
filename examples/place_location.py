#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Place a robot on a blank field and render its camera frustum.

The script replays a short sequence of pointer gestures through
LocationChooser, the same way a GUI would, and writes one image per step:
1. Initial placement with the default gaze
2. Gaze dragged onto a landmark
3. Corner A dragged outwards (robot backs away to keep the FOV)
4. Uncertainty circle enlarged

Usage:
    python examples/place_location.py --center 300 380 --look-at 420 120
    python examples/place_location.py --camera aibo --debug
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

import numpy as np
from numpy.typing import NDArray

try:
    import cv2
except ImportError:
    raise SystemExit(
        "This script requires opencv-python.\n"
        "Install with: pip install -e '.[visualization]'"
    )

from view_frustum import (
    LocationChooser,
    PointerEvent,
    UncertaintyRegion,
    get_camera_profile,
    setup_debug_logging,
)
from view_frustum.visualize import draw_location_label, draw_region_overlay

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="[%(levelname)s] %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

SCRIPT_DIR = Path(__file__).resolve().parent
OUTPUT_DIR = SCRIPT_DIR / "output"

FIELD_SIZE = (600, 480)
FIELD_GREEN = (60, 140, 60)
LINE_WHITE = (255, 255, 255)


def make_field_image(width: int, height: int) -> NDArray[np.uint8]:
    """Green field with a border and a center line and circle."""
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:] = FIELD_GREEN
    cv2.rectangle(image, (20, 20), (width - 21, height - 21), LINE_WHITE, 2)
    cv2.line(image, (width // 2, 20), (width // 2, height - 21), LINE_WHITE, 2)
    cv2.circle(image, (width // 2, height // 2), 60, LINE_WHITE, 2)
    return image


def render(field: NDArray[np.uint8], region: UncertaintyRegion, path: Path) -> None:
    image = draw_region_overlay(field, region, show_blind_zone=True)
    image = draw_location_label(image, region)
    cv2.imwrite(str(path), image)
    logger.info(f"{region.describe()} -> {path.name}")


def drag(chooser: LocationChooser, start: NDArray[np.float64], end: NDArray[np.float64]) -> None:
    """Hover, press, drag and release without modifiers."""
    chooser.pointer_moved(PointerEvent(float(start[0]), float(start[1])))
    chooser.pointer_pressed(PointerEvent(float(start[0]), float(start[1])))
    chooser.pointer_dragged(PointerEvent(float(end[0]), float(end[1])))
    chooser.pointer_released(PointerEvent(float(end[0]), float(end[1])))


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Render a robot location and camera frustum on a field"
    )
    parser.add_argument(
        "--center",
        type=float,
        nargs=2,
        default=(300.0, 380.0),
        metavar=("X", "Y"),
        help="Initial robot position in field pixels",
    )
    parser.add_argument(
        "--look-at",
        type=float,
        nargs=2,
        default=(420.0, 120.0),
        metavar=("X", "Y"),
        help="Landmark to aim the gaze at",
    )
    parser.add_argument(
        "--camera",
        default="nao",
        help="Camera profile name (nao or aibo)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=OUTPUT_DIR,
        help="Directory for the rendered images",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log every geometry update",
    )
    args = parser.parse_args()

    if args.debug:
        setup_debug_logging()

    args.output_dir.mkdir(parents=True, exist_ok=True)
    field = make_field_image(*FIELD_SIZE)

    region = UncertaintyRegion(args.center, camera=get_camera_profile(args.camera))
    chooser = LocationChooser(region)
    logger.info(
        f"Camera {region.frustum.camera.name}: "
        f"hfov={region.frustum.horizontal_fov_deg}°, "
        f"blind distance={region.frustum.distance_to_visible_ground():.1f}px"
    )

    render(field, region, args.output_dir / "01_initial.png")

    drag(chooser, region.frustum.primary_target, np.array(args.look_at))
    render(field, region, args.output_dir / "02_look_at.png")

    frustum = region.frustum
    outward = frustum.edge_target_a - frustum.primary_target
    outward /= np.linalg.norm(outward)
    drag(chooser, frustum.edge_target_a, frustum.edge_target_a + 25.0 * outward)
    render(field, region, args.output_dir / "03_edge_drag.png")

    rim = region.center + np.array([region.radius, 0.0])
    drag(chooser, rim, rim + np.array([20.0, 0.0]))
    render(field, region, args.output_dir / "04_resized.png")

    bearings = region.possible_bearings(args.look_at)
    logger.info(
        f"Landmark bearing {bearings.nominal_deg:.2f}° "
        f"(range {bearings.min_deg:.2f}° to {bearings.max_deg:.2f}°)"
    )


if __name__ == "__main__":
    main()
