"""
Tests for ViewFrustum.

Tests cover:
- Forward derivation with look_at (isosceles corners, FOV apex angle)
- Inverse derivation with set_edge_target and origin_from_targets
- Rigid and target-tracking moves, rotation, reset
- Pivot state, hit testing, polygons and bearing ranges
"""

import math

import numpy as np
import pytest
from numpy.testing import assert_allclose

from view_frustum.camera import NAO
from view_frustum.frustum import (
    DEFAULT_GAZE_OFFSET,
    TARGET_RADIUS,
    EdgeTarget,
    FrustumSnapshot,
    OriginSolution,
    PivotVertex,
    ViewFrustum,
)
from view_frustum.geometry import ValidationError, distance


HALF_FOV_RAD = math.radians(NAO.horizontal_fov_deg / 2.0)


# =============================================================================
# Helper functions
# =============================================================================


def apex_angle_deg(frustum: ViewFrustum) -> float:
    """Angle at the origin between the two edge rays."""
    va = frustum.edge_target_a - frustum.origin
    vb = frustum.edge_target_b - frustum.origin
    cos_angle = np.dot(va, vb) / (np.linalg.norm(va) * np.linalg.norm(vb))
    return math.degrees(math.acos(np.clip(cos_angle, -1.0, 1.0)))


def assert_consistent(frustum: ViewFrustum) -> None:
    """Check the corners against the origin, gaze and FOV."""
    o = frustum.origin
    da = distance(o, frustum.edge_target_a)
    db = distance(o, frustum.edge_target_b)
    assert da == pytest.approx(db, rel=1e-9)
    assert apex_angle_deg(frustum) == pytest.approx(frustum.horizontal_fov_deg, abs=1e-6)

    # Primary target on the gaze ray
    gaze = math.radians(frustum.gaze_angle_deg)
    v = frustum.primary_target - o
    assert_allclose(
        v / np.linalg.norm(v), [math.cos(gaze), math.sin(gaze)], atol=1e-9
    )


def make_frustum(origin: tuple = (100.0, 100.0)) -> ViewFrustum:
    return ViewFrustum(origin)


# =============================================================================
# Tests: construction and look_at
# =============================================================================


class TestConstruction:
    """Tests for the initial frustum state."""

    def test_default_gaze_is_down_field(self) -> None:
        f = make_frustum()
        assert_allclose(f.primary_target, np.array([100.0, 100.0]) + DEFAULT_GAZE_OFFSET)
        assert f.gaze_angle_deg == pytest.approx(-90.0)

    def test_initial_pivot_is_none(self) -> None:
        assert make_frustum().pivot is PivotVertex.NONE

    def test_accessors_return_copies(self) -> None:
        f = make_frustum()
        origin = f.origin
        origin[0] = -1.0
        assert f.origin[0] == 100.0

    def test_bad_origin(self) -> None:
        with pytest.raises(ValidationError):
            ViewFrustum((1.0, 2.0, 3.0))

    def test_repr(self) -> None:
        assert "nao" in repr(make_frustum())


class TestLookAt:
    """Tests for look_at() forward derivation."""

    def test_scenario_straight_up(self) -> None:
        """origin=(100,100), FOV 46.4, look at (100,0)."""
        f = make_frustum()
        f.look_at((100.0, 0.0))

        assert f.gaze_angle_deg == pytest.approx(-90.0)
        hypot_length = 100.0 / math.cos(HALF_FOV_RAD)
        assert hypot_length == pytest.approx(108.8, abs=0.1)

        a, b = f.edge_target_a, f.edge_target_b
        assert distance(f.origin, a) == pytest.approx(hypot_length)
        assert distance(f.origin, b) == pytest.approx(hypot_length)

        # Symmetric about the vertical x=100, both on the line y=0
        assert a[0] + b[0] == pytest.approx(200.0)
        assert a[1] == pytest.approx(0.0, abs=1e-9)
        assert b[1] == pytest.approx(0.0, abs=1e-9)

    def test_edge_a_at_smaller_angle(self) -> None:
        """Corner A sits at gaze - fov/2, corner B at gaze + fov/2."""
        f = make_frustum()
        f.look_at((300.0, 100.0))  # gaze 0
        assert f.edge_target_a[1] < 100.0
        assert f.edge_target_b[1] > 100.0

    @pytest.mark.parametrize(
        "target",
        [(250.0, 100.0), (100.0, 300.0), (-40.0, -20.0), (101.0, 99.0), (512.5, 480.25)],
    )
    def test_isosceles_with_fov_apex(self, target: tuple) -> None:
        f = make_frustum()
        f.look_at(target)
        assert_consistent(f)
        assert_allclose(f.primary_target, target)

    def test_corners_project_onto_primary_perpendicular(self) -> None:
        """Midpoint of the corners is the primary target."""
        f = make_frustum((20.0, -30.0))
        f.look_at((180.0, 75.0))
        midpoint = (f.edge_target_a + f.edge_target_b) / 2.0
        assert_allclose(midpoint, f.primary_target, atol=1e-9)

    def test_degenerate_target_at_origin(self) -> None:
        f = make_frustum()
        f.look_at((100.0, 100.0))
        assert f.gaze_angle_deg == 0.0
        assert_allclose(f.edge_target_a, [100.0, 100.0])
        assert_allclose(f.edge_target_b, [100.0, 100.0])


# =============================================================================
# Tests: inverse derivation
# =============================================================================


class TestSetEdgeTarget:
    """Tests for set_edge_target() inverse solve."""

    def test_round_trip_recovers_origin(self) -> None:
        f = make_frustum((50.0, 80.0))
        f.look_at((200.0, 30.0))
        origin = f.origin
        primary = f.primary_target

        solution = f.set_edge_target(EdgeTarget.A, f.edge_target_a, central_pivot=False)

        assert solution
        assert_allclose(solution.point, origin, atol=1e-9)
        # Other candidate is the origin mirrored across the corner-to-corner chord
        assert_allclose(solution.alternative, 2.0 * primary - origin, atol=1e-9)

    def test_round_trip_edge_b(self) -> None:
        f = make_frustum((-10.0, 5.0))
        f.look_at((-60.0, 140.0))
        origin = f.origin
        solution = f.set_edge_target(EdgeTarget.B, f.edge_target_b, central_pivot=True)
        assert_allclose(solution.point, origin, atol=1e-9)

    def test_does_not_move_origin(self) -> None:
        f = make_frustum()
        f.set_edge_target(EdgeTarget.A, (40.0, 0.0), central_pivot=True)
        assert_allclose(f.origin, [100.0, 100.0])

    def test_central_pivot_mirrors_other_edge(self) -> None:
        f = make_frustum()
        a = f.edge_target_a
        new_a = a - np.array([10.0, 0.0])

        solution = f.set_edge_target(EdgeTarget.A, new_a, central_pivot=True)

        assert_allclose(f.primary_target, [100.0, 0.0])
        assert_allclose(f.edge_target_a, new_a)
        assert_allclose(f.edge_target_b, 2.0 * np.array([100.0, 0.0]) - new_a)

        # Wider base -> the apex must sit farther from the base
        half_base = distance(f.edge_target_a, f.edge_target_b) / 2.0
        expected_y = half_base / math.tan(HALF_FOV_RAD)
        assert_allclose(solution.point, [100.0, expected_y], atol=1e-9)
        assert expected_y > 100.0

    def test_edge_pivot_moves_primary_to_midpoint(self) -> None:
        f = make_frustum()
        a = f.edge_target_a
        new_b = f.edge_target_b + np.array([0.0, 20.0])

        solution = f.set_edge_target(EdgeTarget.B, new_b, central_pivot=False)

        assert_allclose(f.edge_target_a, a)
        assert_allclose(f.edge_target_b, new_b)
        assert_allclose(f.primary_target, (a + new_b) / 2.0)

        # The solved apex reproduces the corners
        assert solution
        assert distance(solution.point, a) == pytest.approx(distance(solution.point, new_b))

    def test_gaze_recomputed_from_current_origin(self) -> None:
        f = make_frustum()
        f.set_edge_target(EdgeTarget.B, f.edge_target_b + np.array([0.0, 30.0]), central_pivot=False)
        p = f.primary_target
        expected = math.degrees(math.atan2(p[1] - 100.0, p[0] - 100.0))
        assert f.gaze_angle_deg == pytest.approx(expected)

    def test_chooses_candidate_closest_to_origin(self) -> None:
        f = make_frustum()
        solution = f.set_edge_target(EdgeTarget.A, f.edge_target_a, central_pivot=False)
        assert distance(solution.point, f.origin) <= distance(solution.alternative, f.origin)

    def test_no_solution_when_corners_coincide(self) -> None:
        f = make_frustum()
        solution = f.set_edge_target(EdgeTarget.A, f.edge_target_b, central_pivot=False)
        assert not solution
        assert solution.point is None
        assert solution.alternative is None
        assert_allclose(f.origin, [100.0, 100.0])

    def test_no_solution_restores_targets(self) -> None:
        """An edge pivot that collapses the corners leaves the triangle intact."""
        f = make_frustum()
        before = f.snapshot()

        assert not f.set_edge_target(EdgeTarget.A, f.edge_target_b, central_pivot=False)

        assert_allclose(f.primary_target, before.primary_target)
        assert_allclose(f.edge_target_a, before.edge_target_a)
        assert_allclose(f.edge_target_b, before.edge_target_b)
        assert f.gaze_angle_deg == pytest.approx(before.gaze_angle_deg)
        assert_consistent(f)

    def test_no_solution_with_central_pivot_restores_targets(self) -> None:
        """Dragging a corner onto the primary target mirrors the other onto it too."""
        f = make_frustum()
        f.look_at((220.0, 40.0))
        before = f.snapshot()

        solution = f.set_edge_target(EdgeTarget.A, f.primary_target, central_pivot=True)

        assert not solution
        assert_allclose(f.origin, before.origin)
        assert_allclose(f.primary_target, before.primary_target)
        assert_allclose(f.edge_target_a, before.edge_target_a)
        assert_allclose(f.edge_target_b, before.edge_target_b)
        assert f.gaze_angle_deg == pytest.approx(before.gaze_angle_deg)
        assert apex_angle_deg(f) == pytest.approx(NAO.horizontal_fov_deg)
        assert_consistent(f)

    def test_rejects_non_edge(self) -> None:
        with pytest.raises(ValidationError, match="EdgeTarget"):
            make_frustum().set_edge_target("a", (0.0, 0.0), central_pivot=True)  # type: ignore[arg-type]

    def test_apply_solution_gives_consistent_frustum(self) -> None:
        f = make_frustum()
        solution = f.set_edge_target(EdgeTarget.A, (30.0, -20.0), central_pivot=True)
        f.move_to(solution.point, track_target=False)
        assert_consistent(f)


class TestOriginFromTargets:
    """Tests for origin_from_targets()."""

    def test_matches_look_at(self) -> None:
        f = make_frustum((320.0, 240.0))
        f.look_at((400.0, 100.0))
        a, b = f.edge_target_a, f.edge_target_b

        other = make_frustum((0.0, 0.0))
        solution = other.origin_from_targets(a, b, reference=(300.0, 250.0))
        assert_allclose(solution.point, [320.0, 240.0], atol=1e-9)

    def test_does_not_mutate(self) -> None:
        f = make_frustum()
        before = f.snapshot()
        f.origin_from_targets((0.0, 0.0), (50.0, 0.0))
        assert f.snapshot() == before

    def test_default_reference_is_origin(self) -> None:
        f = make_frustum()
        solution = f.origin_from_targets(f.edge_target_a, f.edge_target_b)
        assert_allclose(solution.point, f.origin, atol=1e-9)

    def test_agrees_with_set_edge_target(self) -> None:
        f = make_frustum()
        pure = f.origin_from_targets((20.0, 10.0), f.edge_target_b)
        solved = f.set_edge_target(EdgeTarget.A, (20.0, 10.0), central_pivot=False)
        assert_allclose(pure.point, solved.point)

    def test_same_point_has_no_solution(self) -> None:
        result = make_frustum().origin_from_targets((5.0, 5.0), (5.0, 5.0))
        assert isinstance(result, OriginSolution)
        assert not result


# =============================================================================
# Tests: transforms
# =============================================================================


class TestMove:
    """Tests for move(), move_to(), rotate() and reset()."""

    def test_rigid_move(self) -> None:
        f = make_frustum()
        f.look_at((170.0, 20.0))
        before = f.snapshot()

        f.move(15.0, -7.0, track_target=False)

        shift = np.array([15.0, -7.0])
        assert_allclose(f.origin, np.array(before.origin) + shift)
        assert_allclose(f.primary_target, np.array(before.primary_target) + shift)
        assert_allclose(f.edge_target_a, np.array(before.edge_target_a) + shift)
        assert_allclose(f.edge_target_b, np.array(before.edge_target_b) + shift)
        assert f.gaze_angle_deg == before.gaze_angle_deg

    def test_tracking_move(self) -> None:
        f = make_frustum()
        f.move(50.0, 0.0, track_target=True)

        assert_allclose(f.origin, [150.0, 100.0])
        assert_allclose(f.primary_target, [100.0, 0.0])
        expected = math.degrees(math.atan2(-100.0, -50.0))
        assert f.gaze_angle_deg == pytest.approx(expected)
        assert_consistent(f)

    def test_move_to_tracking(self) -> None:
        f = make_frustum()
        f.move_to((0.0, 0.0), track_target=True)
        assert_allclose(f.primary_target, [100.0, 0.0])
        assert f.gaze_angle_deg == pytest.approx(0.0)
        assert_consistent(f)

    def test_move_to_without_tracking_keeps_targets(self) -> None:
        f = make_frustum()
        before = f.snapshot()
        f.move_to((110.0, 100.0), track_target=False)
        assert f.snapshot().primary_target == before.primary_target
        assert f.snapshot().edge_target_a == before.edge_target_a
        expected = math.degrees(math.atan2(-100.0, -10.0))
        assert f.gaze_angle_deg == pytest.approx(expected)

    def test_rotate_adds_without_wrapping(self) -> None:
        f = make_frustum()
        f.rotate(400.0)
        assert f.gaze_angle_deg == pytest.approx(310.0)

    def test_rotate_swings_targets(self) -> None:
        f = make_frustum()
        f.rotate(90.0)
        assert_allclose(f.primary_target, [200.0, 100.0], atol=1e-9)
        assert_consistent(f)

    def test_reset(self) -> None:
        f = make_frustum()
        f.move(30.0, 40.0, track_target=False)
        f.look_at((0.0, 0.0))
        f.reset()
        assert_allclose(f.origin, [100.0, 100.0])
        assert_allclose(f.primary_target, [100.0, 0.0])
        assert f.gaze_angle_deg == pytest.approx(-90.0)
        assert_allclose(f.initial_origin, [100.0, 100.0])


# =============================================================================
# Tests: pivot and hit testing
# =============================================================================


class TestPivotAndHitTesting:
    """Tests for set_pivot(), target_contains() and vertex_at()."""

    @pytest.mark.parametrize("vertex", list(PivotVertex))
    def test_set_pivot(self, vertex: PivotVertex) -> None:
        f = make_frustum()
        f.set_pivot(PivotVertex.EDGE_A)
        f.set_pivot(vertex)
        assert f.pivot is vertex

    def test_set_pivot_rejects_bool(self) -> None:
        with pytest.raises(ValidationError):
            make_frustum().set_pivot(True)  # type: ignore[arg-type]

    def test_pivot_does_not_change_geometry(self) -> None:
        f = make_frustum()
        before = f.snapshot()
        f.set_pivot(PivotVertex.PRIMARY)
        after = f.snapshot()
        assert after.origin == before.origin
        assert after.edge_target_b == before.edge_target_b

    def test_target_contains(self) -> None:
        f = make_frustum()
        assert f.target_contains(PivotVertex.PRIMARY, (100.0 + TARGET_RADIUS, 0.0))
        assert not f.target_contains(PivotVertex.PRIMARY, (100.0 + TARGET_RADIUS + 0.5, 0.0))

    def test_vertex_at(self) -> None:
        f = make_frustum()
        assert f.vertex_at((102.0, 1.0)) is PivotVertex.PRIMARY
        assert f.vertex_at(f.edge_target_a + 2.0) is PivotVertex.EDGE_A
        assert f.vertex_at(f.edge_target_b - 2.0) is PivotVertex.EDGE_B
        assert f.vertex_at((100.0, 100.0)) is PivotVertex.NONE

    def test_target_rejects_none(self) -> None:
        with pytest.raises(ValidationError):
            make_frustum().target(PivotVertex.NONE)


# =============================================================================
# Tests: derived quantities
# =============================================================================


class TestDerived:
    """Tests for blind zone distance, polygons, bearings and snapshots."""

    def test_distance_to_visible_ground(self) -> None:
        expected = 63.0 * math.tan(math.radians((180.0 - 34.8) / 2.0))
        assert make_frustum().distance_to_visible_ground() == pytest.approx(expected)

    def test_polygon_shapes(self) -> None:
        f = make_frustum()
        assert f.blind_zone_polygon().shape == (3, 2)
        assert f.visible_polygon().shape == (4, 2)
        assert f.beyond_range_polygon().shape == (4, 2)

    def test_blind_zone_starts_at_origin(self) -> None:
        f = make_frustum()
        polygon = f.blind_zone_polygon()
        assert_allclose(polygon[0], f.origin)
        near = f.distance_to_visible_ground()
        assert distance(polygon[1], f.origin) == pytest.approx(near)
        assert distance(polygon[2], f.origin) == pytest.approx(near)

    def test_visible_polygon_ends_at_edges(self) -> None:
        f = make_frustum()
        polygon = f.visible_polygon()
        assert_allclose(polygon[2], f.edge_target_b)
        assert_allclose(polygon[3], f.edge_target_a)

    def test_beyond_range_far_points(self) -> None:
        f = make_frustum()
        polygon = f.beyond_range_polygon(far_range=500.0)
        assert distance(polygon[1], f.origin) == pytest.approx(500.0)
        assert distance(polygon[2], f.origin) == pytest.approx(500.0)

    def test_bearing_of_primary_target_is_zero(self) -> None:
        result = make_frustum().possible_bearings((100.0, 0.0), radius=25.0)
        assert result.nominal_deg == pytest.approx(0.0, abs=1e-9)
        assert result.spread_deg == pytest.approx(0.0, abs=1e-9)

    def test_bearing_range_brackets_nominal(self) -> None:
        result = make_frustum().possible_bearings((150.0, 0.0), radius=25.0)
        assert result.nominal_deg == pytest.approx(math.degrees(math.atan2(50.0, 100.0)))
        assert result.min_deg < result.nominal_deg < result.max_deg
        assert result.min_deg == pytest.approx(
            math.degrees(math.atan2(-100.0, 75.0)) - math.degrees(math.atan2(-100.0, 25.0))
        )

    def test_bearing_spread_grows_with_radius(self) -> None:
        f = make_frustum()
        small = f.possible_bearings((150.0, 0.0), radius=5.0)
        large = f.possible_bearings((150.0, 0.0), radius=40.0)
        assert large.spread_deg > small.spread_deg

    def test_bearing_range_behind_robot_stays_contiguous(self) -> None:
        """A point straight behind the robot straddles +/-180 without wrapping."""
        result = make_frustum().possible_bearings((100.0, 300.0), radius=25.0)
        # Relative bearing seen from the lateral point (75, 100)
        lateral = math.degrees(math.atan2(200.0, 25.0)) - math.degrees(math.atan2(-100.0, 25.0))
        expected_spread = 2.0 * (180.0 - lateral)

        assert result.nominal_deg == pytest.approx(-180.0)
        assert result.min_deg <= result.nominal_deg <= result.max_deg
        assert result.spread_deg == pytest.approx(expected_spread)
        assert result.spread_deg == pytest.approx(42.32, abs=0.01)
        assert result.min_deg == pytest.approx(-180.0 - expected_spread / 2.0)
        assert result.max_deg == pytest.approx(-180.0 + expected_spread / 2.0)

    def test_snapshot(self) -> None:
        f = make_frustum()
        f.set_pivot(PivotVertex.EDGE_B)
        snap = f.snapshot()
        assert isinstance(snap, FrustumSnapshot)
        assert snap.origin == (100.0, 100.0)
        assert snap.pivot is PivotVertex.EDGE_B
        assert snap.gaze_angle_deg == f.gaze_angle_deg
