import logging

from bubblepack.chart import Chart
from bubblepack.circles import CircleHandle
from bubblepack.config import (
    AllocatorConfig,
    ForceConfig,
    OptimizerConfig,
    PackingConfig,
    QuadtreeConfig,
    ResolverConfig,
)
from bubblepack.errors import (
    BubblePackError,
    CircleNotFound,
    EmptySet,
    InvalidDimension,
    InvalidRatio,
    InvalidStrategy,
    OptimizerFailure,
)
from bubblepack.overlap import circle_overlap_area
from bubblepack.result import CircleSnapshot, PackingResult
from bubblepack.strategy import LayoutStatus, LayoutStrategy

logging.getLogger(__name__).addHandler(logging.NullHandler())
