import math
from typing import NamedTuple, Tuple

import numpy as np


class OverlapReport(NamedTuple):
    overlaps: bool
    total_area: float
    overlapping_pairs: int


def circle_overlap_area(distance: float, r1: float, r2: float, tol: float = 1e-9) -> float:
    """Exact area of the intersection of two circles whose centers are `distance` apart."""
    return float(lens_areas(np.array([distance]), np.array([r1]), np.array([r2]), tol=tol)[0])


def lens_areas(d: np.ndarray, r1: np.ndarray, r2: np.ndarray, tol: float = 1e-9) -> np.ndarray:
    """Vectorized intersection areas of circle pairs.

    - disjoint or touching (d >= r1 + r2 - tol): 0
    - one circle inside the other (d <= |r1 - r2|): area of the smaller circle
    - otherwise the lens formed by two circular segments:
        r1² acos((d² + r1² - r2²) / 2 d r1) + r2² acos((d² + r2² - r1²) / 2 d r2)
        - 1/2 sqrt((-d + r1 + r2)(d + r1 - r2)(d - r1 + r2)(d + r1 + r2))
    """
    d, r1, r2 = np.broadcast_arrays(
        np.atleast_1d(np.asarray(d, float)),
        np.atleast_1d(np.asarray(r1, float)),
        np.atleast_1d(np.asarray(r2, float)),
    )
    area = np.zeros(d.shape, float)

    disjoint = d >= r1 + r2 - tol
    contained = ~disjoint & (d <= np.abs(r1 - r2))
    lens = ~disjoint & ~contained

    area[contained] = math.pi * np.minimum(r1, r2)[contained] ** 2

    if np.any(lens):
        dl, a, b = d[lens], r1[lens], r2[lens]
        cos1 = np.clip((dl**2 + a**2 - b**2) / (2 * dl * a), -1.0, 1.0)
        cos2 = np.clip((dl**2 + b**2 - a**2) / (2 * dl * b), -1.0, 1.0)
        heron = (-dl + a + b) * (dl + a - b) * (dl - a + b) * (dl + a + b)
        area[lens] = a**2 * np.arccos(cos1) + b**2 * np.arccos(cos2) - 0.5 * np.sqrt(np.maximum(heron, 0.0))

    return area


def pairwise_overlap_areas(P: np.ndarray, r: np.ndarray, tol: float = 1e-9) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Overlap area of every pair of circles.

    Returns
    -------
        iu, ju: Indices of the pairs (iu < ju).
        areas: Overlap area of each pair.
    """
    P = np.asarray(P, float).reshape(-1, 2)
    r = np.asarray(r, float).reshape(-1)
    iu, ju = np.triu_indices(len(r), k=1)
    d = np.linalg.norm(P[iu] - P[ju], axis=1)
    return iu, ju, lens_areas(d, r[iu], r[ju], tol=tol)


def overlap_report(P: np.ndarray, r: np.ndarray, tol: float = 1e-9) -> OverlapReport:
    _, _, areas = pairwise_overlap_areas(P, r, tol=tol)
    overlapping = areas > 0
    return OverlapReport(
        overlaps=bool(np.any(overlapping)),
        total_area=float(np.sum(areas)),
        overlapping_pairs=int(np.count_nonzero(overlapping)),
    )


def out_of_bounds(P: np.ndarray, r: np.ndarray, width: float, height: float, tol: float = 1e-9) -> np.ndarray:
    """Boolean mask of the circles crossing the border of the [0, width] x [0, height] rectangle."""
    P = np.asarray(P, float).reshape(-1, 2)
    r = np.asarray(r, float).reshape(-1)
    return (
        (P[:, 0] - r < -tol)
        | (P[:, 0] + r > width + tol)
        | (P[:, 1] - r < -tol)
        | (P[:, 1] + r > height + tol)
    )


def boundary_violations(P: np.ndarray, r: np.ndarray, width: float, height: float, tol: float = 1e-9) -> int:
    return int(np.count_nonzero(out_of_bounds(P, r, width, height, tol=tol)))


def clamp_into_bounds(P: np.ndarray, r: np.ndarray, width: float, height: float) -> np.ndarray:
    """Clip every center into [r, width - r] x [r, height - r]."""
    P = np.array(P, float).reshape(-1, 2)
    r = np.asarray(r, float).reshape(-1)
    P[:, 0] = np.clip(P[:, 0], r, width - r)
    P[:, 1] = np.clip(P[:, 1], r, height - r)
    return P
