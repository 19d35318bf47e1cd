import logging
import math
from timeit import default_timer as timer
from typing import List, Optional, Tuple, Union

import numpy as np

from bubblepack.allocator import allocate_radii, area_budget, select_within_budget, validate_ratio
from bubblepack.circles import Circle, CircleArena, CircleHandle, gather_state, scatter_state
from bubblepack.config import PackingConfig
from bubblepack.constrained_optimization import optimize_positions
from bubblepack.errors import CircleNotFound, InvalidDimension
from bubblepack.force_simulation import simulate_forces
from bubblepack.iterative_resolution import resolve_overlaps
from bubblepack.overlap import overlap_report
from bubblepack.result import CircleSnapshot, PackingResult
from bubblepack.strategy import LayoutOutcome, LayoutStrategy, StopCallback, normalize_layout_strategy

logger = logging.getLogger(__name__)


def _validate_dimension(name: str, value: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidDimension(f"The {name} should be a real number, got {value!r}.")
    if not (math.isfinite(value) and value > 0):
        raise InvalidDimension(f"The {name} should be positive and finite, got {value}.")
    return value


class Chart:
    """A rectangle holding weighted circles, packed so that circle areas are proportional to their ratios.

    Every change of the circle set or of the dimensions triggers a full recompute: radii are reallocated from
    the ratios, the selector drops the lightest circles if the requested areas exceed the budget, and every
    selected circle is placed around the rectangle center with a small random jitter. A layout strategy then
    moves the circles apart.

    Parameters
    ----------
    width, height: float (default 500)
        Dimensions of the rectangle. The origin is the top-left corner and y grows downwards.

    config: Optional[PackingConfig] (default None)
        Tunable constants of the allocator, the spatial index and the layout strategies.

    random_state: Optional[int] (default None)
        Seed of the random source used for the placement jitter and the separation of coincident circles.
        Runs are reproducible for a fixed seed and sequence of operations.

    Examples
    --------
    >>> chart = Chart(500, 500, random_state=0)
    >>> handles = [chart.add_circle(ratio) for ratio in (1.0, 0.5, 0.2)]
    >>> result = chart.run_layout("iterative")
    >>> result.overlaps_exist
    False
    """

    def __init__(
        self,
        width: float = 500.0,
        height: float = 500.0,
        config: Optional[PackingConfig] = None,
        random_state: Optional[int] = None,
    ):
        self._width = _validate_dimension("width", width)
        self._height = _validate_dimension("height", height)
        self.config = PackingConfig() if config is None else config
        self.random_state = random_state
        self._rng = np.random.default_rng(random_state)
        self._arena = CircleArena()

    # ---------- introspection ----------

    @property
    def width(self) -> float:
        return self._width

    @property
    def height(self) -> float:
        return self._height

    @property
    def circles(self) -> Tuple[CircleSnapshot, ...]:
        return tuple(CircleSnapshot.of(c) for c in self._arena)

    def get(self, handle: CircleHandle) -> CircleSnapshot:
        return CircleSnapshot.of(self._arena.get(handle))

    def __len__(self) -> int:
        return len(self._arena)

    def __contains__(self, handle) -> bool:
        return handle in self._arena

    def __repr__(self) -> str:
        return f"Chart(width={self._width}, height={self._height}, circles={len(self)})"

    # ---------- mutations ----------

    def add_circle(self, ratio: float) -> CircleHandle:
        ratio = validate_ratio(ratio)
        ratios = [c.ratio for c in self._arena] + [ratio]
        radii, selected = self._allocate(ratios, self._width, self._height)

        circle = self._arena.add(ratio)
        self._apply(radii, selected)
        logger.debug("add_circle handle=%s ratio=%g circles=%d", tuple(circle.handle), ratio, len(self))
        return circle.handle

    def remove_circle(self, handle: CircleHandle, missing_ok: bool = True):
        if handle not in self._arena:
            if missing_ok:
                return
            raise CircleNotFound(f"No circle with handle {tuple(handle)}.")
        self._arena.remove(CircleHandle(*handle))
        self._recompute()
        logger.debug("remove_circle handle=%s circles=%d", tuple(handle), len(self))

    def set_dimensions(self, width: float, height: float):
        width = _validate_dimension("width", width)
        height = _validate_dimension("height", height)
        radii, selected = self._allocate([c.ratio for c in self._arena], width, height)

        self._width, self._height = width, height
        self._apply(radii, selected)
        logger.debug("set_dimensions width=%g height=%g", width, height)

    def clear(self):
        self._arena.clear()

    # ---------- layout ----------

    def run_force_simulation(self, should_stop: StopCallback = None, verbose: bool = False) -> PackingResult:
        return self.run_layout(LayoutStrategy.force, should_stop=should_stop, verbose=verbose)

    def run_iterative_resolution(self, should_stop: StopCallback = None, verbose: bool = False) -> PackingResult:
        return self.run_layout(LayoutStrategy.iterative, should_stop=should_stop, verbose=verbose)

    def run_constrained_optimization(self, should_stop: StopCallback = None) -> PackingResult:
        return self.run_layout(LayoutStrategy.optimizer, should_stop=should_stop)

    def run_layout(
        self,
        strategy: Union[str, LayoutStrategy] = LayoutStrategy.force,
        should_stop: StopCallback = None,
        verbose: bool = False,
    ) -> PackingResult:
        """Recompute radii and start positions, then move the circles with the requested strategy.

        Parameters
        ----------
        strategy: A LayoutStrategy or one of the names 'force', 'iterative', 'optimizer' (or a synonym).
        should_stop: Optional callable polled between iterations. Returning True stops the run, which keeps its
            current state and reports a `cancelled` status.
        verbose: Show a progress bar.
        """
        strategy = normalize_layout_strategy(strategy)
        start = timer()

        self._recompute()
        circles = self._selected_circles()
        P, r, V = gather_state(circles)
        tol = self.config.overlap_tolerance

        if strategy == LayoutStrategy.force:
            outcome = simulate_forces(
                P,
                r,
                self._width,
                self._height,
                config=self.config.force,
                quadtree_config=self.config.quadtree,
                V0=V,
                tol=tol,
                should_stop=should_stop,
                verbose=verbose,
            )
        elif strategy == LayoutStrategy.iterative:
            outcome = resolve_overlaps(
                P,
                r,
                self._width,
                self._height,
                config=self.config.resolver,
                rng=self._rng,
                tol=tol,
                should_stop=should_stop,
                verbose=verbose,
            )
        else:
            outcome = optimize_positions(
                r,
                self._width,
                self._height,
                config=self.config.optimizer,
                should_stop=should_stop,
            )

        scatter_state(circles, outcome.positions, outcome.radii, outcome.velocities)
        seconds = timer() - start
        return self._result(strategy, outcome, seconds)

    def check_overlap(self) -> Tuple[bool, float]:
        """Whether any two selected circles overlap, and their total overlap area. Does not change the chart."""
        P, r, _ = gather_state([c for c in self._selected_circles() if c.is_placed])
        report = overlap_report(P, r, tol=self.config.overlap_tolerance)
        return report.overlaps, report.total_area

    # ---------- internals ----------

    def _selected_circles(self) -> List[Circle]:
        return [c for c in self._arena if c.selected]

    def _allocate(self, ratios: List[float], width: float, height: float) -> Tuple[np.ndarray, np.ndarray]:
        """Radii for the given ratios and the mask of the circles kept by the selector.

        Raises before anything is changed, so a rejected operation leaves the chart untouched.
        """
        allocator = self.config.allocator
        radii = allocate_radii(
            ratios,
            width,
            height,
            density=allocator.density,
            max_radius_fraction=allocator.max_radius_fraction,
        )
        selected = np.ones(len(radii), dtype=bool)
        if allocator.min_radius <= 0 or len(radii) == 0:
            return radii, selected

        cap = allocator.max_radius_fraction * min(width, height)
        radii = np.minimum(np.maximum(radii, allocator.min_radius), cap)
        areas = math.pi * radii**2
        budget = area_budget(width, height, allocator.density)
        if np.sum(areas) > budget:
            kept = select_within_budget(ratios, areas, budget)
            selected[:] = False
            selected[kept] = True
            radii[~selected] = 0.0
            logger.info(
                "selector budget=%.2f requested=%.2f kept=%d dropped=%d",
                budget,
                float(np.sum(areas)),
                len(kept),
                len(radii) - len(kept),
            )
        return radii, selected

    def _apply(self, radii: np.ndarray, selected: np.ndarray):
        """Write an allocation into the circles (in slot order) and place them around the center."""
        circles = list(self._arena)
        jitter = self.config.jitter
        offsets = self._rng.uniform(-jitter, jitter, size=(len(circles), 2))
        cx, cy = self._width / 2, self._height / 2
        for circle, radius, keep, (dx, dy) in zip(circles, radii, selected, offsets):
            circle.radius = float(radius)
            circle.selected = bool(keep)
            circle.vx = circle.vy = 0.0
            if keep:
                circle.x = min(max(cx + dx, circle.radius), self._width - circle.radius)
                circle.y = min(max(cy + dy, circle.radius), self._height - circle.radius)
            else:
                circle.x = circle.y = math.nan

    def _recompute(self):
        radii, selected = self._allocate([c.ratio for c in self._arena], self._width, self._height)
        self._apply(radii, selected)

    def _result(self, strategy: LayoutStrategy, outcome: LayoutOutcome, seconds: float) -> PackingResult:
        report = overlap_report(outcome.positions, outcome.radii, tol=self.config.overlap_tolerance)
        result = PackingResult(
            circles=self.circles,
            strategy=strategy,
            status=outcome.status,
            computation_time=seconds,
            iterations=outcome.iterations,
            overlaps_exist=report.overlaps,
            total_overlap_area=report.total_area,
            adjustments_made=outcome.adjustments,
            width=self._width,
            height=self._height,
        )
        logger.info(
            "run_layout strategy=%s status=%s circles=%d seconds=%.4f overlaps=%s overlap_area=%.4f",
            strategy.value,
            outcome.status.value,
            len(result.selected_circles),
            seconds,
            report.overlaps,
            report.total_area,
        )
        return result
