class BubblePackError(Exception):
    """Base class of every error raised by bubblepack."""


class InvalidDimension(BubblePackError, ValueError):
    pass


class InvalidRatio(BubblePackError, ValueError):
    pass


class EmptySet(BubblePackError, ValueError):
    pass


class InvalidStrategy(BubblePackError, ValueError):
    pass


class CircleNotFound(BubblePackError, KeyError):
    pass


class OptimizerFailure(BubblePackError, RuntimeError):
    """The constrained optimizer did not produce a usable point.

    Never escapes a layout run: the optimizer strategy catches it and falls back to its initial grid.
    """
