import logging
import math
import unittest

import numpy as np

from bubblepack.config import ForceConfig
from bubblepack.force_simulation import gravity_forces, pair_forces, simulate_forces
from bubblepack.overlap import overlap_report
from bubblepack.strategy import LayoutStatus


class TestPairForces(unittest.TestCase):
    def test_overlapping_pair_repels(self):
        P = np.array([[40.0, 50.0], [60.0, 50.0]])
        r = np.array([15.0, 15.0])
        I, J = np.array([0, 1]), np.array([1, 0])
        config = ForceConfig()

        F = pair_forces(P, r, I, J, max_spacing=90.0, config=config)

        # Overlap of 10, scaled by the reduced mass of two equal circles.
        expected = config.base_repulsion * 10 * math.pi * 15**2 / 2
        np.testing.assert_allclose(F, [[-expected, 0.0], [expected, 0.0]])

    def test_distant_pair_attracts(self):
        P = np.array([[0.0, 0.0], [0.0, 100.0]])
        r = np.array([1.0, 1.0])
        I, J = np.array([0, 1]), np.array([1, 0])
        config = ForceConfig(attraction_strength=0.5, attraction_growth=0.1)

        F = pair_forces(P, r, I, J, max_spacing=90.0, config=config)

        expected = 0.5 + 0.1 * 10
        np.testing.assert_allclose(F, [[0.0, expected], [0.0, -expected]])

    def test_pair_in_between_feels_nothing(self):
        P = np.array([[0.0, 0.0], [50.0, 0.0]])
        r = np.array([1.0, 1.0])
        F = pair_forces(P, r, np.array([0, 1]), np.array([1, 0]), max_spacing=90.0, config=ForceConfig())

        np.testing.assert_array_equal(F, np.zeros((2, 2)))

    def test_coincident_pair_is_pushed_apart(self):
        P = np.array([[50.0, 50.0], [50.0, 50.0]])
        r = np.array([10.0, 10.0])
        F = pair_forces(P, r, np.array([0, 1]), np.array([1, 0]), max_spacing=90.0, config=ForceConfig())

        self.assertTrue(np.all(np.isfinite(F)))
        self.assertLess(F[0, 0], 0)
        self.assertGreater(F[1, 0], 0)

    def test_no_candidates(self):
        F = pair_forces(np.zeros((3, 2)), np.ones(3), np.array([], int), np.array([], int), 90.0, ForceConfig())
        np.testing.assert_array_equal(F, np.zeros((3, 2)))


def test_gravity_grows_with_the_distance_to_the_center():
    P = np.array([[50.0, 50.0], [60.0, 50.0], [50.0, 30.0]])
    F = gravity_forces(P, 100, 100, gravity=0.01)

    np.testing.assert_allclose(F, [[0.0, 0.0], [-0.1, 0.0], [0.0, 0.2]])


def test_single_circle_settles_at_once():
    outcome = simulate_forces(np.array([[253.0, 247.0]]), np.array([225.0]), 500, 500)

    assert outcome.status == LayoutStatus.converged
    assert outcome.iterations == 1
    assert outcome.radii[0] == 225.0
    np.testing.assert_allclose(outcome.positions[0], [250.0, 250.0], atol=5.0)


def test_overlapping_pair_separates_without_shrinking():
    P = np.array([[210.0, 250.0], [290.0, 250.0]])
    r = np.array([50.0, 50.0])
    outcome = simulate_forces(P, r, 500, 500)

    assert outcome.status == LayoutStatus.converged
    assert outcome.iterations < 100
    assert not overlap_report(outcome.positions, outcome.radii).overlaps
    np.testing.assert_array_equal(outcome.radii, r)
    assert outcome.adjustments == 0
    # The input is left untouched.
    np.testing.assert_array_equal(P, [[210.0, 250.0], [290.0, 250.0]])


def test_circles_are_clamped_into_the_rectangle():
    outcome = simulate_forces(np.array([[5.0, 50.0]]), np.array([10.0]), 100, 100)

    assert outcome.positions[0, 0] == 10.0
    assert outcome.velocities[0, 0] == 0.0
    assert outcome.adjustments >= 1


def test_oversized_circles_report_overlaps_when_capped():
    rng = np.random.default_rng(0)
    P = 250 + rng.uniform(-5, 5, size=(5, 2))
    r = np.full(5, 200.0)
    outcome = simulate_forces(P, r, 500, 500, config=ForceConfig(max_iterations=5))

    assert outcome.status == LayoutStatus.capped
    assert outcome.iterations == 5
    assert overlap_report(outcome.positions, outcome.radii).overlaps


def test_non_finite_state_is_reset_to_the_center(caplog):
    with caplog.at_level(logging.WARNING, logger="bubblepack.force_simulation"):
        outcome = simulate_forces(np.array([[math.nan, 40.0]]), np.array([10.0]), 100, 100)

    np.testing.assert_allclose(outcome.positions[0], [50.0, 50.0], atol=1e-6)
    assert np.all(np.isfinite(outcome.velocities))
    assert outcome.adjustments >= 1
    assert "numeric_anomaly" in caplog.text


def test_cancellation_keeps_the_current_state():
    P = np.array([[240.0, 250.0], [260.0, 250.0]])
    r = np.array([50.0, 50.0])
    outcome = simulate_forces(P, r, 500, 500, should_stop=lambda: True)

    assert outcome.status == LayoutStatus.cancelled
    assert outcome.iterations == 0
    np.testing.assert_array_equal(outcome.positions, P)


def test_empty_input():
    outcome = simulate_forces(np.empty((0, 2)), np.empty(0), 500, 500)

    assert outcome.status == LayoutStatus.converged
    assert outcome.positions.shape == (0, 2)


def test_circles_which_do_not_fit_are_shrunk_until_they_do():
    # Two circles of 40% of the area each cannot sit side by side in the square.
    allocated = math.sqrt(0.4 * 500 * 500 / math.pi)
    P = np.array([[247.0, 248.0], [253.0, 252.0]])
    outcome = simulate_forces(P, np.full(2, allocated), 500, 500)

    assert outcome.status == LayoutStatus.converged
    assert np.all(outcome.radii < allocated)
    assert not overlap_report(outcome.positions, outcome.radii).overlaps
    d = np.linalg.norm(outcome.positions[0] - outcome.positions[1])
    assert d >= outcome.radii[0] + outcome.radii[1] - 1e-9


def test_relaxation_budget_forces_a_shrink_while_circles_still_move():
    P = np.array([[240.0, 250.0], [260.0, 250.0]])
    r = np.array([100.0, 100.0])
    config = ForceConfig(relaxation_steps=1, max_iterations=3)
    outcome = simulate_forces(P, r, 500, 500, config=config)

    # Shrinks after the first two steps; the step cap is reached before the third one.
    assert outcome.status == LayoutStatus.capped
    assert outcome.iterations == 3
    np.testing.assert_allclose(outcome.radii, 100.0 * 0.95**2)
    assert outcome.adjustments == 2
    assert overlap_report(outcome.positions, outcome.radii).overlaps
