import logging
import math
from typing import Optional, Tuple

import numpy as np
from tqdm import tqdm

from bubblepack.config import ForceConfig, QuadtreeConfig
from bubblepack.overlap import boundary_violations, clamp_into_bounds, overlap_report
from bubblepack.quadtree import Quadtree
from bubblepack.strategy import LayoutOutcome, LayoutStatus, StopCallback, stop_requested

logger = logging.getLogger(__name__)

MIN_DISTANCE = 1e-6


def masses_from_radii(r: np.ndarray) -> np.ndarray:
    return math.pi * np.asarray(r, float) ** 2


def pair_forces(
    P: np.ndarray,
    r: np.ndarray,
    I: np.ndarray,
    J: np.ndarray,
    max_spacing: float,
    config: ForceConfig,
) -> np.ndarray:
    """Accumulated force on circle I[k] caused by circle J[k], for all candidate pairs.

    Overlapping pairs repel with a force proportional to their overlap and to their reduced mass, so that big and
    small circles separate at the same pace. Pairs further apart than `max_spacing` attract, more strongly the
    further they are.
    """
    n = len(r)
    F = np.zeros((n, 2), float)
    if I.size == 0:
        return F

    dvec = P[I] - P[J]
    dist = np.linalg.norm(dvec, axis=1)

    u = np.zeros_like(dvec)
    nz = dist >= MIN_DISTANCE
    u[nz] = dvec[nz] / dist[nz][:, None]
    if np.any(~nz):  # coincident centers: push the pair apart horizontally
        u[~nz, 0] = np.where(I[~nz] < J[~nz], -1.0, 1.0)
    dist = np.maximum(dist, MIN_DISTANCE)

    touch = r[I] + r[J]
    magnitude = np.zeros_like(dist)

    repel = dist < touch
    m = masses_from_radii(r)
    reduced = m[I] * m[J] / (m[I] + m[J] + 1e-12)
    magnitude[repel] = config.base_repulsion * (touch[repel] - dist[repel]) * reduced[repel]

    attract = ~repel & (dist > max_spacing)
    magnitude[attract] = -(config.attraction_strength + config.attraction_growth * (dist[attract] - max_spacing))

    f = magnitude[:, None] * u
    F[:, 0] = np.bincount(I, weights=f[:, 0], minlength=n)
    F[:, 1] = np.bincount(I, weights=f[:, 1], minlength=n)
    return F


def gravity_forces(P: np.ndarray, width: float, height: float, gravity: float) -> np.ndarray:
    """Pull towards the rectangle center with a magnitude of gravity * distance from the center."""
    center = np.array([width / 2, height / 2])
    return gravity * (center[None, :] - P)


def _integrate(
    P: np.ndarray,
    V: np.ndarray,
    F: np.ndarray,
    r: np.ndarray,
    width: float,
    height: float,
    damping: float,
) -> Tuple[int, int]:
    """One explicit Euler step, in place. Returns (numeric corrections, boundary clamps)."""
    V += F / (masses_from_radii(r)[:, None] + 1e-12)
    V *= damping
    P += V

    broken = ~(np.all(np.isfinite(V), axis=1) & np.all(np.isfinite(P), axis=1))
    n_broken = int(np.count_nonzero(broken))
    if n_broken:
        logger.warning(
            "numeric_anomaly circles=%s action=reset_to_center", np.flatnonzero(broken).tolist()
        )
        V[broken] = 0.0
        P[broken] = (width / 2, height / 2)

    clamped = clamp_into_bounds(P, r, width, height)
    hit = clamped != P
    V[hit] = 0.0
    P[:] = clamped
    n_clamped = int(np.count_nonzero(np.any(hit, axis=1)))

    return n_broken, n_clamped


def simulate_forces(
    P0: np.ndarray,
    r0: np.ndarray,
    width: float,
    height: float,
    config: ForceConfig = ForceConfig(),
    quadtree_config: QuadtreeConfig = QuadtreeConfig(),
    V0: Optional[np.ndarray] = None,
    tol: float = 1e-9,
    should_stop: StopCallback = None,
    verbose: bool = False,
) -> LayoutOutcome:
    """Physics based layout: circles are bodies with mass pi * r² pushed apart by overlap forces and pulled to
    the rectangle center.

    A relaxation runs until no circle is moving or `config.relaxation_steps` steps have passed. If the layout still
    has overlaps or circles crossing the border, all radii shrink by `config.shrink_factor` and a new relaxation
    starts from the current positions. A valid layout which is still moving keeps relaxing without a shrink.
    `config.max_iterations` bounds the total number of steps over all relaxations. The spatial index is rebuilt
    on every step.
    """
    P = np.array(P0, float).reshape(-1, 2)
    r = np.array(r0, float).reshape(-1)
    V = np.zeros_like(P) if V0 is None else np.array(V0, float).reshape(-1, 2)
    n = len(r)
    if n == 0:
        return LayoutOutcome(P, r, 0, 0, LayoutStatus.converged, V)

    max_spacing = config.max_spacing_fraction * min(width, height)
    quadtree = Quadtree(width, height, capacity=quadtree_config.capacity, max_depth=quadtree_config.max_depth)

    steps = 0
    adjustments = 0
    relaxations = 0
    status = LayoutStatus.capped

    with tqdm(total=config.max_iterations, desc="force simulation", disable=not verbose) as pbar:
        while steps < config.max_iterations:
            relaxations += 1
            relaxation_step = 0
            moving = True
            while moving and steps < config.max_iterations and relaxation_step < config.relaxation_steps:
                if stop_requested(should_stop):
                    status = LayoutStatus.cancelled
                    break

                quadtree.rebuild(P, r)
                I, J = quadtree.candidate_pairs()
                F = pair_forces(P, r, I, J, max_spacing, config) + gravity_forces(P, width, height, config.gravity)

                n_broken, n_clamped = _integrate(P, V, F, r, width, height, config.damping)
                adjustments += n_broken + n_clamped
                steps += 1
                relaxation_step += 1
                pbar.update(1)

                n_moving = int(np.count_nonzero(np.any(np.abs(V) > config.velocity_epsilon, axis=1)))
                moving = n_moving > 0
                logger.debug(
                    "force_step step=%d relaxation=%d pairs=%d moving=%d clamped=%d",
                    steps,
                    relaxations,
                    I.size,
                    n_moving,
                    n_clamped,
                )

            if status == LayoutStatus.cancelled:
                break

            report = overlap_report(P, r, tol=tol)
            outside = boundary_violations(P, r, width, height, tol=tol)
            clean = not report.overlaps and outside == 0
            if clean and not moving:
                status = LayoutStatus.converged
                break
            if clean or steps >= config.max_iterations:
                continue

            logger.debug(
                "force_shrink relaxation=%d moving=%s overlap_area=%.4f outside=%d factor=%.3f",
                relaxations,
                moving,
                report.total_area,
                outside,
                config.shrink_factor,
            )
            r *= config.shrink_factor
            V[:] = 0.0
            adjustments += 1

    logger.info(
        "force_simulation status=%s steps=%d relaxations=%d adjustments=%d",
        status.value,
        steps,
        relaxations,
        adjustments,
    )
    return LayoutOutcome(P, r, steps, adjustments, status, V)
