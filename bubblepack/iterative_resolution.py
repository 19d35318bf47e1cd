import logging
import math
from typing import List, Optional

import numpy as np
from tqdm import tqdm

from bubblepack.config import ResolverConfig
from bubblepack.strategy import LayoutOutcome, LayoutStatus, StopCallback, stop_requested

logger = logging.getLogger(__name__)


def _clamp(value: float, radius: float, size: float) -> float:
    return min(max(value, radius), size - radius)


def _random_direction(rng: np.random.Generator):
    angle = rng.uniform(0.0, 2 * math.pi)
    return math.cos(angle), math.sin(angle)


def resolve_sweep(
    x: List[float],
    y: List[float],
    r: List[float],
    width: float,
    height: float,
    rng: np.random.Generator,
    tol: float = 1e-9,
) -> int:
    """One pass over all pairs i < j. Every overlapping pair is pushed apart by half the overlap on each side.

    Positions are updated in place and sequentially, so a later pair sees the shifts of the earlier ones.
    Returns the number of shifted pairs.
    """
    n = len(r)
    shifts = 0
    for i in range(n):
        for j in range(i + 1, n):
            dx = x[j] - x[i]
            dy = y[j] - y[i]
            distance = math.hypot(dx, dy)
            min_distance = r[i] + r[j]
            if distance >= min_distance - tol:
                continue

            half = (min_distance - distance) / 2
            if distance == 0.0:
                ux, uy = _random_direction(rng)
            else:
                ux, uy = dx / distance, dy / distance

            x[i] = _clamp(x[i] - ux * half, r[i], width)
            y[i] = _clamp(y[i] - uy * half, r[i], height)
            x[j] = _clamp(x[j] + ux * half, r[j], width)
            y[j] = _clamp(y[j] + uy * half, r[j], height)
            shifts += 1
    return shifts


def shrink_to_fit(
    x: List[float],
    y: List[float],
    r: List[float],
    width: float,
    height: float,
    shrink_factor: float = 0.95,
    max_passes: int = 10_000,
    tol: float = 1e-9,
) -> int:
    """Shrink circles crossing the border, and both circles of every overlapping pair, until a pass changes nothing.

    Radii are updated in place. Returns the number of shrink operations.
    """
    n = len(r)
    shrinks = 0
    for _ in range(max_passes):
        shrink = [False] * n
        for i in range(n):
            if (
                x[i] - r[i] < -tol
                or x[i] + r[i] > width + tol
                or y[i] - r[i] < -tol
                or y[i] + r[i] > height + tol
            ):
                shrink[i] = True
        for i in range(n):
            for j in range(i + 1, n):
                if math.hypot(x[j] - x[i], y[j] - y[i]) < r[i] + r[j] - tol:
                    shrink[i] = shrink[j] = True

        changed = 0
        for i in range(n):
            if shrink[i]:
                r[i] *= shrink_factor
                changed += 1
        if changed == 0:
            break
        shrinks += changed
    else:
        logger.warning("shrink_to_fit reached max_passes=%d with overlaps left", max_passes)
    return shrinks


def resolve_overlaps(
    P0: np.ndarray,
    r0: np.ndarray,
    width: float,
    height: float,
    config: ResolverConfig = ResolverConfig(),
    rng: Optional[np.random.Generator] = None,
    tol: float = 1e-9,
    should_stop: StopCallback = None,
    verbose: bool = False,
) -> LayoutOutcome:
    """Geometric layout: repeat pairwise separation sweeps until a sweep finds no overlapping pair or
    `config.max_iterations` sweeps were done, then shrink whatever still overlaps or crosses the border.

    Adjustments count the pair shifts plus the shrink operations.
    """
    if rng is None:
        rng = np.random.default_rng()

    P = np.array(P0, float).reshape(-1, 2)
    x = P[:, 0].tolist()
    y = P[:, 1].tolist()
    r = np.array(r0, float).reshape(-1).tolist()

    sweeps = 0
    adjustments = 0
    status = LayoutStatus.capped
    with tqdm(total=config.max_iterations, desc="iterative resolution", disable=not verbose) as pbar:
        while sweeps < config.max_iterations:
            if stop_requested(should_stop):
                status = LayoutStatus.cancelled
                break
            shifts = resolve_sweep(x, y, r, width, height, rng, tol=tol)
            sweeps += 1
            pbar.update(1)
            logger.debug("resolver_sweep sweep=%d shifts=%d", sweeps, shifts)
            if shifts == 0:
                status = LayoutStatus.converged
                break
            adjustments += shifts

    if status != LayoutStatus.cancelled:
        shrinks = shrink_to_fit(
            x,
            y,
            r,
            width,
            height,
            shrink_factor=config.shrink_factor,
            max_passes=config.max_shrink_passes,
            tol=tol,
        )
        if shrinks:
            logger.debug("resolver_shrink shrinks=%d", shrinks)
        adjustments += shrinks

    logger.info("iterative_resolution status=%s sweeps=%d adjustments=%d", status.value, sweeps, adjustments)
    positions = np.column_stack([x, y]) if r else np.empty((0, 2), float)
    return LayoutOutcome(positions, np.asarray(r, float), sweeps, adjustments, status)
