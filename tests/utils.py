from typing import List, Tuple

import numpy as np

from bubblepack.result import PackingResult

EPSILON = 1e-6

# GEOMETRY


def selected_arrays(result: PackingResult) -> Tuple[np.ndarray, np.ndarray]:
    """Centers (n, 2) and radii (n,) of the circles kept by the selector."""
    circles = result.selected_circles
    P = np.array([[c.x, c.y] for c in circles], dtype=float).reshape(-1, 2)
    r = np.array([c.radius for c in circles], dtype=float)
    return P, r


def overlapping_pairs(P: np.ndarray, r: np.ndarray, epsilon: float = EPSILON) -> List[Tuple[int, int]]:
    pairs = []
    for i in range(len(r)):
        for j in range(i + 1, len(r)):
            if np.hypot(*(P[i] - P[j])) < r[i] + r[j] - epsilon:
                pairs.append((i, j))
    return pairs


def assert_within_bounds(result: PackingResult, epsilon: float = EPSILON):
    P, r = selected_arrays(result)
    assert np.all(P[:, 0] >= r - epsilon), "A circle crosses the left border."
    assert np.all(P[:, 0] <= result.width - r + epsilon), "A circle crosses the right border."
    assert np.all(P[:, 1] >= r - epsilon), "A circle crosses the top border."
    assert np.all(P[:, 1] <= result.height - r + epsilon), "A circle crosses the bottom border."


def assert_no_overlap(result: PackingResult, epsilon: float = EPSILON):
    P, r = selected_arrays(result)
    pairs = overlapping_pairs(P, r, epsilon=epsilon)
    assert not pairs, f"Overlapping pairs left: {pairs}."
