from typing import List, Tuple

import numpy as np

# Child order inside a split node: top-right, top-left, bottom-left, bottom-right (y grows downwards).
TOP_RIGHT, TOP_LEFT, BOTTOM_LEFT, BOTTOM_RIGHT = range(4)


class Quadtree:
    """Quadtree over circles, stored as a flat arena of nodes.

    Nodes are preallocated for the full depth and addressed by index; the 4 children of a split node are stored
    contiguously starting at `first_child[node]`. Clearing only resets the node counter, so the tree is meant to
    be rebuilt from scratch whenever the circles move.

    A circle is stored in the deepest node whose quadrant fully contains its bounding square. Circles straddling
    a midpoint of a node stay in that node. `retrieve` walks from the root towards the quadrant of the query and
    collects the circles of every node on the way. Circles in sibling subtrees are never returned, so the result
    is a candidate set for circles sharing a node or an ancestor, not an exhaustive neighbor search.

    Parameters
    ----------
    width, height: Size of the indexed rectangle, whose top-left corner is (x, y).
    capacity: A node splits once it holds more than this many circles.
    max_depth: Nodes at this depth never split.
    """

    def __init__(
        self,
        width: float,
        height: float,
        capacity: int = 10,
        max_depth: int = 5,
        x: float = 0.0,
        y: float = 0.0,
    ):
        self.capacity = capacity
        self.max_depth = max_depth
        self.max_nodes = (4 ** (max_depth + 1) - 1) // 3

        self._bounds: List[Tuple[float, float, float, float]] = [(0.0, 0.0, 0.0, 0.0)] * self.max_nodes
        self._levels: List[int] = [0] * self.max_nodes
        self._first_child: List[int] = [-1] * self.max_nodes
        self._objects: List[List[int]] = [[] for _ in range(self.max_nodes)]
        self._n_nodes = 0

        self._x: List[float] = []
        self._y: List[float] = []
        self._r: List[float] = []

        self.resize(width, height, x=x, y=y)

    @property
    def node_count(self) -> int:
        return self._n_nodes

    def resize(self, width: float, height: float, x: float = 0.0, y: float = 0.0):
        self._bounds[0] = (float(x), float(y), float(width), float(height))
        self.clear()

    def clear(self):
        self._n_nodes = 1
        self._levels[0] = 0
        self._first_child[0] = -1
        self._objects[0].clear()

    def rebuild(self, centers: np.ndarray, radii: np.ndarray):
        """Clear the tree and insert every circle. Circles are referred to by their row in `centers`."""
        centers = np.asarray(centers, float)
        self._x = centers[:, 0].tolist()
        self._y = centers[:, 1].tolist()
        self._r = np.asarray(radii, float).tolist()
        self.clear()
        for i in range(len(self._r)):
            self._insert(i, 0)

    def retrieve(self, i: int) -> List[int]:
        """Indices of the circles sharing a node or an ancestor node with circle i (i itself included)."""
        found: List[int] = []
        node = 0
        while True:
            found.extend(self._objects[node])
            child = self._first_child[node]
            if child < 0:
                return found
            quadrant = self._quadrant(node, i)
            if quadrant < 0:
                return found
            node = child + quadrant

    def candidate_pairs(self) -> Tuple[np.ndarray, np.ndarray]:
        """Directed pairs (i, j), i != j, with j among the retrieved candidates of i."""
        I_list: List[int] = []
        J_list: List[int] = []
        for i in range(len(self._r)):
            neighbors = [j for j in self.retrieve(i) if j != i]
            I_list.extend([i] * len(neighbors))
            J_list.extend(neighbors)
        return np.asarray(I_list, dtype=int), np.asarray(J_list, dtype=int)

    def level_of(self, i: int) -> int:
        """Depth of the node holding circle i."""
        node = 0
        while i not in self._objects[node]:
            child = self._first_child[node]
            quadrant = self._quadrant(node, i) if child >= 0 else -1
            if quadrant < 0:
                raise KeyError(f"Circle {i} is not indexed.")
            node = child + quadrant
        return self._levels[node]

    # ---------- internals ----------

    def _quadrant(self, node: int, i: int) -> int:
        bx, by, bw, bh = self._bounds[node]
        vertical_mid = bx + bw / 2
        horizontal_mid = by + bh / 2
        x, y, r = self._x[i], self._y[i], self._r[i]

        top = y + r < horizontal_mid
        bottom = y - r > horizontal_mid
        if x + r < vertical_mid:
            if top:
                return TOP_LEFT
            if bottom:
                return BOTTOM_LEFT
        elif x - r > vertical_mid:
            if top:
                return TOP_RIGHT
            if bottom:
                return BOTTOM_RIGHT
        return -1

    def _split(self, node: int):
        bx, by, bw, bh = self._bounds[node]
        sw, sh = bw / 2, bh / 2
        first = self._n_nodes
        self._n_nodes += 4
        self._first_child[node] = first

        quadrant_bounds = {
            TOP_RIGHT: (bx + sw, by, sw, sh),
            TOP_LEFT: (bx, by, sw, sh),
            BOTTOM_LEFT: (bx, by + sh, sw, sh),
            BOTTOM_RIGHT: (bx + sw, by + sh, sw, sh),
        }
        for quadrant, bounds in quadrant_bounds.items():
            child = first + quadrant
            self._bounds[child] = bounds
            self._levels[child] = self._levels[node] + 1
            self._first_child[child] = -1
            self._objects[child].clear()

    def _insert(self, i: int, node: int):
        while True:
            child = self._first_child[node]
            if child >= 0:
                quadrant = self._quadrant(node, i)
                if quadrant >= 0:
                    node = child + quadrant
                    continue
            break

        objects = self._objects[node]
        objects.append(i)
        if len(objects) <= self.capacity or self._levels[node] >= self.max_depth:
            return

        if self._first_child[node] < 0:
            self._split(node)
        child = self._first_child[node]
        staying = []
        for j in objects:
            quadrant = self._quadrant(node, j)
            if quadrant < 0:
                staying.append(j)
            else:
                self._insert(j, child + quadrant)
        self._objects[node] = staying
