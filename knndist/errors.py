# knndist/errors.py
"""
Error taxonomy. Every error is a KNNDistError and also the built-in
exception a caller would expect (ValueError / TypeError).
"""


class KNNDistError(Exception):
    """Base class for all knndist errors."""


class InvalidMetric(KNNDistError, ValueError):
    pass


class DimensionMismatch(KNNDistError, ValueError):
    pass


class InvalidTiePolicy(KNNDistError, ValueError):
    pass


class InvalidK(KNNDistError, ValueError):
    pass


class InvalidIndexSet(KNNDistError, ValueError):
    pass


class ResponseLengthMismatch(KNNDistError, ValueError):
    pass


class UnknownAggregationMethod(KNNDistError, ValueError):
    pass


class AggregationTypeError(KNNDistError, TypeError):
    """A numeric reducer was asked to aggregate categorical responses."""


class NotCategorical(KNNDistError, TypeError):
    """Class probabilities were requested for continuous responses."""


class EmptyNeighborSet(KNNDistError, ValueError):
    """No training case satisfied rank <= k for some test case."""
