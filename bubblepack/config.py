from dataclasses import dataclass, field


def _check_positive(name: str, value: float):
    if not value > 0:
        raise ValueError(f"{name} should be positive, got {value}.")


def _check_fraction(name: str, value: float, upper: float = 1.0):
    if not 0 < value <= upper:
        raise ValueError(f"{name} should be in (0, {upper}], got {value}.")


@dataclass(frozen=True)
class AllocatorConfig:
    """Parameters of the ratio -> radius allocation.

    Parameters
    ----------
    density: float (default 0.8)
        Portion of the rectangle area which the circles are allowed to cover in total.

    max_radius_fraction: float (default 0.45)
        No radius exceeds this fraction of min(width, height). Must be at most 0.5 so that every circle fits.

    min_radius: float (default 0.0)
        Smallest radius a circle requests. When the requested discs exceed the area budget, the greedy selector
        drops the circles with the smallest ratios. 0 disables the selection.
    """

    density: float = 0.8
    max_radius_fraction: float = 0.45
    min_radius: float = 0.0

    def __post_init__(self):
        _check_fraction("density", self.density)
        _check_fraction("max_radius_fraction", self.max_radius_fraction, upper=0.5)
        if self.min_radius < 0:
            raise ValueError(f"min_radius should be non-negative, got {self.min_radius}.")


@dataclass(frozen=True)
class QuadtreeConfig:
    capacity: int = 10
    max_depth: int = 5

    def __post_init__(self):
        if self.capacity < 1:
            raise ValueError(f"capacity should be at least 1, got {self.capacity}.")
        if self.max_depth < 0:
            raise ValueError(f"max_depth should be non-negative, got {self.max_depth}.")


@dataclass(frozen=True)
class ForceConfig:
    """Parameters of the force simulation.

    Parameters
    ----------
    base_repulsion: float (default 0.5)
        Repulsion between two overlapping circles is base_repulsion * overlap * m_i * m_j / (m_i + m_j). Scaling
        by the reduced mass makes the pair close base_repulsion * overlap of relative velocity per step, whatever
        the size of the circles.

    attraction_strength: float (default 0.001)
        Base attraction between two circles further apart than the maximum spacing.

    attraction_growth: float (default 0.01)
        Attraction grows linearly by this much per unit of distance beyond the maximum spacing.

    gravity: float (default 0.001)
        Pull towards the rectangle center per unit of distance from it.

    damping: float (default 0.53)
        Multiplier applied to every velocity once per step. Values close to 1 (e.g. 0.98) give a slower, more
        fluid settling.

    max_spacing_fraction: float (default 0.9)
        The maximum spacing as a fraction of min(width, height).

    velocity_epsilon: float (default 0.01)
        A circle is moving while the absolute value of any of its velocity components exceeds this threshold.

    shrink_factor: float (default 0.95)
        Radii multiplier applied after a relaxation which ended with overlaps or boundary violations left.

    relaxation_steps: int (default 100)
        A relaxation ends after this many steps even if circles are still moving. Jammed circles then get shrunk
        instead of pushing against each other until the step cap.

    max_iterations: int (default 1000)
        Total number of simulation steps over all relaxations, including the ones after a shrink.
    """

    base_repulsion: float = 0.5
    attraction_strength: float = 0.001
    attraction_growth: float = 0.01
    gravity: float = 0.001
    damping: float = 0.53
    max_spacing_fraction: float = 0.9
    velocity_epsilon: float = 0.01
    shrink_factor: float = 0.95
    relaxation_steps: int = 100
    max_iterations: int = 1000

    def __post_init__(self):
        _check_positive("base_repulsion", self.base_repulsion)
        _check_fraction("damping", self.damping)
        _check_positive("max_spacing_fraction", self.max_spacing_fraction)
        _check_positive("velocity_epsilon", self.velocity_epsilon)
        _check_fraction("shrink_factor", self.shrink_factor)
        _check_positive("relaxation_steps", self.relaxation_steps)
        _check_positive("max_iterations", self.max_iterations)
        if self.attraction_strength < 0 or self.attraction_growth < 0 or self.gravity < 0:
            raise ValueError("Attraction and gravity constants should be non-negative.")


@dataclass(frozen=True)
class ResolverConfig:
    max_iterations: int = 1000
    shrink_factor: float = 0.95
    max_shrink_passes: int = 10_000

    def __post_init__(self):
        _check_positive("max_iterations", self.max_iterations)
        _check_fraction("shrink_factor", self.shrink_factor)
        _check_positive("max_shrink_passes", self.max_shrink_passes)


@dataclass(frozen=True)
class OptimizerConfig:
    max_evaluations: int = 5000
    boundary_penalty: float = 1000.0

    def __post_init__(self):
        _check_positive("max_evaluations", self.max_evaluations)
        if self.boundary_penalty < 0:
            raise ValueError(f"boundary_penalty should be non-negative, got {self.boundary_penalty}.")


@dataclass(frozen=True)
class PackingConfig:
    """All the tunable constants of a chart.

    jitter: half-width of the uniform offset around the rectangle center used to place circles after a recompute.
    overlap_tolerance: pairs closer than r_i + r_j by less than this are considered touching, not overlapping.
    """

    allocator: AllocatorConfig = field(default_factory=AllocatorConfig)
    quadtree: QuadtreeConfig = field(default_factory=QuadtreeConfig)
    force: ForceConfig = field(default_factory=ForceConfig)
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    optimizer: OptimizerConfig = field(default_factory=OptimizerConfig)
    jitter: float = 5.0
    overlap_tolerance: float = 1e-9

    def __post_init__(self):
        if self.jitter < 0:
            raise ValueError(f"jitter should be non-negative, got {self.jitter}.")
        if self.overlap_tolerance < 0:
            raise ValueError(f"overlap_tolerance should be non-negative, got {self.overlap_tolerance}.")
