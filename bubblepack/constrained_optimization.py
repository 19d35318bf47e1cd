import logging
import math
from typing import Optional

import numpy as np
from scipy.optimize import Bounds, minimize

from bubblepack.config import OptimizerConfig
from bubblepack.errors import OptimizerFailure
from bubblepack.overlap import out_of_bounds
from bubblepack.strategy import LayoutOutcome, LayoutStatus, StopCallback, stop_requested

logger = logging.getLogger(__name__)


def grid_initial_guess(r: np.ndarray, width: float, height: float) -> np.ndarray:
    """Lay the circles out row by row on a grid of ceil(sqrt(n)) columns.

    The grid spans the rectangle inset by the largest radius. A single column (row) sits on the vertical
    (horizontal) center line.
    """
    r = np.asarray(r, float).reshape(-1)
    n = len(r)
    if n == 0:
        return np.empty((0, 2), float)

    cols = math.ceil(math.sqrt(n))
    rows = math.ceil(n / cols)
    margin = float(np.max(r))

    xs = np.linspace(margin, width - margin, cols) if cols > 1 else np.array([width / 2])
    ys = np.linspace(margin, height - margin, rows) if rows > 1 else np.array([height / 2])
    gx, gy = np.meshgrid(xs, ys)
    return np.column_stack([gx.ravel(), gy.ravel()])[:n]


def packing_objective(
    flat_positions: np.ndarray,
    r: np.ndarray,
    width: float,
    height: float,
    boundary_penalty: float = 1000.0,
) -> float:
    """Sum of (min_distance² - distance²)² over the overlapping pairs plus a flat penalty per circle crossing
    the border."""
    P = np.asarray(flat_positions, float).reshape(-1, 2)
    iu, ju = np.triu_indices(len(r), k=1)
    d2 = np.sum((P[iu] - P[ju]) ** 2, axis=1)
    min_d2 = (r[iu] + r[ju]) ** 2
    overlapping = d2 < min_d2
    value = np.sum((min_d2[overlapping] - d2[overlapping]) ** 2)
    value += boundary_penalty * np.count_nonzero(out_of_bounds(P, r, width, height))
    return float(value)


def _minimize_positions(
    x0: np.ndarray,
    r: np.ndarray,
    width: float,
    height: float,
    config: OptimizerConfig,
    should_stop: StopCallback,
):
    lower = np.repeat(r, 2)
    upper = np.column_stack([width - r, height - r]).ravel()

    def callback(intermediate_result):
        if stop_requested(should_stop):
            raise StopIteration

    try:
        res = minimize(
            packing_objective,
            np.clip(x0.ravel(), lower, upper),
            args=(r, width, height, config.boundary_penalty),
            method="COBYQA",
            bounds=Bounds(lower, upper),
            callback=callback,
            options={"maxfev": config.max_evaluations},
        )
    except Exception as e:
        raise OptimizerFailure(f"COBYQA raised {type(e).__name__}: {e}") from e

    if not np.all(np.isfinite(res.x)):
        raise OptimizerFailure("COBYQA returned non finite positions.")
    return res


def optimize_positions(
    r0: np.ndarray,
    width: float,
    height: float,
    config: OptimizerConfig = OptimizerConfig(),
    initial_positions: Optional[np.ndarray] = None,
    should_stop: StopCallback = None,
) -> LayoutOutcome:
    """Place circles of fixed radii by minimizing `packing_objective` with SciPy's COBYQA, a derivative free
    trust region method honoring the per axis bounds [r, dim - r].

    Any failure of the minimizer is recovered: the grid initial guess is returned with a `fallback` status.
    Radii are never changed.
    """
    r = np.array(r0, float).reshape(-1)
    n = len(r)
    x0 = grid_initial_guess(r, width, height) if initial_positions is None else np.asarray(initial_positions, float)
    if n == 0:
        return LayoutOutcome(x0, r, 0, 0, LayoutStatus.converged)
    if stop_requested(should_stop):
        return LayoutOutcome(x0, r, 0, 0, LayoutStatus.cancelled)

    try:
        res = _minimize_positions(x0, r, width, height, config, should_stop)
        iterations = int(getattr(res, "nit", 0))
        evaluations = int(getattr(res, "nfev", 0))
        if stop_requested(should_stop):
            status = LayoutStatus.cancelled
        elif not res.success:
            raise OptimizerFailure(f"COBYQA did not converge: {res.message}")
        else:
            status = LayoutStatus.converged
        positions = res.x.reshape(-1, 2)
    except OptimizerFailure as e:
        logger.warning("constrained_optimization fallback=grid reason=%s", e)
        return LayoutOutcome(x0, r, 0, 0, LayoutStatus.fallback)

    logger.info(
        "constrained_optimization status=%s iterations=%d evaluations=%d objective=%.6g",
        status.value,
        iterations,
        evaluations,
        float(res.fun),
    )
    return LayoutOutcome(positions, r, iterations, evaluations, status)
