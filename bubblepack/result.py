import math
from dataclasses import dataclass
from typing import NamedTuple, Tuple

import pandas as pd

from bubblepack.circles import Circle, CircleHandle
from bubblepack.strategy import LayoutStatus, LayoutStrategy


class CircleSnapshot(NamedTuple):
    handle: CircleHandle
    ratio: float
    radius: float
    x: float
    y: float
    selected: bool

    @classmethod
    def of(cls, circle: Circle) -> "CircleSnapshot":
        return cls(circle.handle, circle.ratio, circle.radius, circle.x, circle.y, circle.selected)


@dataclass(frozen=True)
class PackingResult:
    """Immutable outcome of one layout run.

    Attributes
    ----------
    circles: Snapshot of every circle of the chart once the run finished, dropped circles included.
    strategy: The layout strategy which produced this result.
    status: Converged, capped (iteration budget exhausted), fallback (optimizer failure recovered with its
        initial grid) or cancelled.
    computation_time: Seconds spent in the strategy.
    iterations: Iterations (steps, sweeps or optimizer iterations) performed.
    overlaps_exist: Whether any pair of circles still overlaps.
    total_overlap_area: Summed intersection area over all pairs.
    adjustments_made: Corrective adjustments, e.g. pair shifts, clamps, shrinks or objective evaluations.
    width, height: Dimensions of the chart the run was computed for.
    """

    circles: Tuple[CircleSnapshot, ...]
    strategy: LayoutStrategy
    status: LayoutStatus
    computation_time: float
    iterations: int
    overlaps_exist: bool
    total_overlap_area: float
    adjustments_made: int
    width: float
    height: float

    @property
    def converged(self) -> bool:
        return self.status == LayoutStatus.converged

    @property
    def selected_circles(self) -> Tuple[CircleSnapshot, ...]:
        return tuple(c for c in self.circles if c.selected)

    @property
    def packing_density(self) -> float:
        """Portion of the rectangle covered by circles (overlaps counted twice)."""
        area = sum(math.pi * c.radius**2 for c in self.selected_circles)
        return area / (self.width * self.height)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "index": [c.handle.index for c in self.circles],
                "generation": [c.handle.generation for c in self.circles],
                "ratio": [c.ratio for c in self.circles],
                "radius": [c.radius for c in self.circles],
                "x": [c.x for c in self.circles],
                "y": [c.y for c in self.circles],
                "selected": [c.selected for c in self.circles],
            }
        )

    def summary(self) -> pd.Series:
        return pd.Series(
            {
                "strategy": self.strategy.value,
                "status": self.status.value,
                "circles": len(self.circles),
                "selected": len(self.selected_circles),
                "computation_time_s": self.computation_time,
                "iterations": self.iterations,
                "overlaps_exist": self.overlaps_exist,
                "total_overlap_area": self.total_overlap_area,
                "adjustments_made": self.adjustments_made,
                "packing_density": self.packing_density,
            }
        )
