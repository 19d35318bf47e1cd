from enum import Enum
from typing import Callable, Dict, List, Optional

import numpy as np


class Scenario(str, Enum):
    single = "single"
    two_equal = "two-equal"
    many_small = "many-small"
    large_and_small = "large-and-small"
    identical_50 = "identical-50"
    random_ratios = "random-ratios"
    oversized = "oversized"


def _random_ratios(rng: np.random.Generator) -> List[float]:
    return rng.uniform(0.1, 1.0, size=20).tolist()


_SCENARIOS: Dict[Scenario, Callable[[np.random.Generator], List[float]]] = {
    Scenario.single: lambda rng: [1.0],
    Scenario.two_equal: lambda rng: [1.0, 1.0],
    Scenario.many_small: lambda rng: [0.1] * 30,
    Scenario.large_and_small: lambda rng: [1.0, 0.5, 0.2],
    Scenario.identical_50: lambda rng: [1.0] * 50,
    Scenario.random_ratios: _random_ratios,
    Scenario.oversized: lambda rng: [100.0] * 5,
}


def scenario_ratios(scenario, random_state: Optional[int] = None) -> List[float]:
    """Ratios of one of the edge case presets used to exercise the layout strategies."""
    try:
        scenario = Scenario(scenario)
    except ValueError:
        raise ValueError(
            f"Invalid scenario: {scenario}. Please select one from: {', '.join(s.value for s in Scenario)}."
        )
    return _SCENARIOS[scenario](np.random.default_rng(random_state))
