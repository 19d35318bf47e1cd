import math
from typing import Sequence

import numpy as np

from bubblepack.errors import EmptySet, InvalidRatio


def validate_ratio(ratio: float) -> float:
    try:
        ratio = float(ratio)
    except (TypeError, ValueError):
        raise InvalidRatio(f"The ratio should be a real number, got {ratio!r}.")
    if not (math.isfinite(ratio) and ratio > 0):
        raise InvalidRatio(f"The ratio should be positive and finite, got {ratio}.")
    return ratio


def area_budget(width: float, height: float, density: float = 0.8) -> float:
    return density * width * height


def allocate_radii(
    ratios: Sequence[float],
    width: float,
    height: float,
    density: float = 0.8,
    max_radius_fraction: float = 0.45,
) -> np.ndarray:
    """Convert ratios to radii so that circle areas are proportional to the ratios and sum up to the area budget.

    Parameters
    ----------
        ratios: Array of dimensions (n, ) with the positive weights of the circles.
        width, height: Dimensions of the bounding rectangle.
        density: Portion of the rectangle area shared by all circles.
        max_radius_fraction: Radii are capped to this fraction of min(width, height), which keeps a single big
            circle from taking over the rectangle.

    Returns
    -------
        radii: A (n, ) array. Capping only ever shrinks a circle, so the total area never exceeds the budget.
    """
    ratios = np.asarray(ratios, dtype=float).reshape(-1)
    if ratios.size == 0:
        return np.empty(0, float)
    if not np.all(np.isfinite(ratios)) or np.any(ratios <= 0):
        raise InvalidRatio(f"All ratios should be positive and finite, got {ratios.tolist()}.")

    total = float(np.sum(ratios))
    if not (math.isfinite(total) and total > 0):
        raise EmptySet(f"Cannot allocate radii for {ratios.size} circles with a total ratio of {total}.")

    areas = ratios / total * area_budget(width, height, density)
    radii = np.sqrt(areas / math.pi)
    return np.minimum(radii, max_radius_fraction * min(width, height))


def select_within_budget(
    ratios: Sequence[float],
    areas: Sequence[float],
    budget: float,
) -> np.ndarray:
    """Greedy knapsack heuristic choosing which circles to keep when their areas do not fit in the budget.

    Circles are visited by descending ratio (ties keep their original order) and accepted while the accumulated
    area stays within the budget. The first circle which would overflow the budget is rejected together with all
    circles following it, even if a later, smaller one would still fit.

    This is an approximation and not an optimal subset-sum solution: it favors the heaviest circles instead of
    maximizing the covered area. It is deterministic for a fixed ratio ordering.

    Returns
    -------
        selected: The indices of the accepted circles in visiting order.
    """
    ratios = np.asarray(ratios, float).reshape(-1)
    areas = np.asarray(areas, float).reshape(-1)
    if ratios.shape != areas.shape:
        raise ValueError(f"Got {ratios.size} ratios but {areas.size} areas.")

    order = np.argsort(-ratios, kind="stable")
    accumulated = np.cumsum(areas[order])
    overflow = accumulated > budget
    n_accepted = int(np.argmax(overflow)) if np.any(overflow) else len(order)
    return order[:n_accepted]
