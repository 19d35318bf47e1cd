import math
from dataclasses import dataclass
from typing import Iterator, List, NamedTuple, Optional, Tuple

import numpy as np

from bubblepack.errors import CircleNotFound


class CircleHandle(NamedTuple):
    """Stable identifier of a circle: a slot in the arena plus the generation of that slot."""

    index: int
    generation: int


@dataclass
class Circle:
    handle: CircleHandle
    ratio: float
    radius: float = 0.0
    x: float = math.nan
    y: float = math.nan
    vx: float = 0.0
    vy: float = 0.0
    selected: bool = True

    @property
    def mass(self) -> float:
        return math.pi * self.radius**2

    @property
    def position(self) -> Tuple[float, float]:
        return self.x, self.y

    @property
    def is_placed(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)


class CircleArena:
    """Owns the circles of a chart.

    Circles live in slots. Removing a circle frees its slot and bumps the slot generation, so a handle of a
    removed circle never resolves to a circle added later in the same slot. Iteration follows the slot order,
    which makes every layout run deterministic for a fixed random state.
    """

    def __init__(self):
        self._slots: List[Optional[Circle]] = []
        self._generations: List[int] = []
        self._free: List[int] = []

    def add(self, ratio: float) -> Circle:
        if self._free:
            index = self._free.pop()
        else:
            index = len(self._slots)
            self._slots.append(None)
            self._generations.append(0)
        circle = Circle(handle=CircleHandle(index, self._generations[index]), ratio=float(ratio))
        self._slots[index] = circle
        return circle

    def remove(self, handle: CircleHandle) -> Circle:
        circle = self.get(handle)
        self._slots[handle.index] = None
        self._generations[handle.index] += 1
        self._free.append(handle.index)
        return circle

    def get(self, handle: CircleHandle) -> Circle:
        index, generation = handle
        if (
            0 <= index < len(self._slots)
            and self._generations[index] == generation
            and self._slots[index] is not None
        ):
            return self._slots[index]
        raise CircleNotFound(f"No circle with handle {tuple(handle)}.")

    def clear(self):
        for index, circle in enumerate(self._slots):
            if circle is not None:
                self._slots[index] = None
                self._generations[index] += 1
                self._free.append(index)

    def __contains__(self, handle) -> bool:
        try:
            self.get(CircleHandle(*handle))
        except (CircleNotFound, TypeError, ValueError):
            return False
        return True

    def __iter__(self) -> Iterator[Circle]:
        return (circle for circle in self._slots if circle is not None)

    def __len__(self) -> int:
        return len(self._slots) - len(self._free)


# ---------- array views used by the layout strategies ----------


def gather_state(circles: List[Circle]) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Pack the circles into (centers (n, 2), radii (n,), velocities (n, 2)) arrays."""
    n = len(circles)
    P = np.empty((n, 2), float)
    r = np.empty(n, float)
    V = np.empty((n, 2), float)
    for i, c in enumerate(circles):
        P[i] = c.x, c.y
        r[i] = c.radius
        V[i] = c.vx, c.vy
    return P, r, V


def scatter_state(
    circles: List[Circle],
    P: np.ndarray,
    r: np.ndarray,
    V: Optional[np.ndarray] = None,
):
    """Write arrays produced by a layout strategy back into the circle records."""
    for i, c in enumerate(circles):
        c.x, c.y = float(P[i, 0]), float(P[i, 1])
        c.radius = float(r[i])
        if V is not None:
            c.vx, c.vy = float(V[i, 0]), float(V[i, 1])
