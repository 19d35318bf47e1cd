from enum import Enum
from typing import Callable, NamedTuple, Optional, Union

import numpy as np

from bubblepack.errors import InvalidStrategy

StopCallback = Optional[Callable[[], bool]]


class LayoutStrategy(str, Enum):
    force = "force"
    iterative = "iterative"
    optimizer = "optimizer"


class LayoutStatus(str, Enum):
    converged = "converged"
    capped = "capped"
    fallback = "fallback"
    cancelled = "cancelled"


class LayoutOutcome(NamedTuple):
    """What a layout strategy hands back to the chart."""

    positions: np.ndarray
    radii: np.ndarray
    iterations: int
    adjustments: int
    status: LayoutStatus
    velocities: Optional[np.ndarray] = None


_STRATEGY_SYNONYMS = {
    LayoutStrategy.force: {"force", "force_simulation", "physics", "simulation"},
    LayoutStrategy.iterative: {"iterative", "iterative_resolution", "resolver", "geometric"},
    LayoutStrategy.optimizer: {"optimizer", "constrained_optimization", "optimization", "cobyqa"},
}


def normalize_layout_strategy(strategy: Union[str, LayoutStrategy]) -> LayoutStrategy:
    if isinstance(strategy, LayoutStrategy):
        return strategy
    s = str(strategy).lower().strip().replace("-", "_")
    for layout_strategy, names in _STRATEGY_SYNONYMS.items():
        if s in names:
            return layout_strategy
    raise InvalidStrategy(
        f"Invalid layout strategy: {strategy}. "
        f'Please select one from: {", ".join(option.value for option in LayoutStrategy)}.'
    )


def stop_requested(should_stop: StopCallback) -> bool:
    return should_stop is not None and bool(should_stop())
