"""Domain exceptions for the analysis pipeline."""


class EmptySeriesError(ValueError):
    """Raised when the pipeline is invoked on a zero-length price series."""


class DegenerateRatioError(ArithmeticError):
    """Raised when a ratio's denominator is zero.

    Callers that can degrade gracefully catch it and clamp the ratio.
    """
