"""
knndist - K-Nearest-Neighbor prediction from precomputed distances.

Usage:
    from knndist import build_distance_matrix, predict, predict_probabilities
    D = build_distance_matrix(X)
    preds = predict(train, test, y, D, k=3)
"""
from .errors import (  # noqa: F401
    AggregationTypeError,
    DimensionMismatch,
    EmptyNeighborSet,
    InvalidIndexSet,
    InvalidK,
    InvalidMetric,
    InvalidTiePolicy,
    KNNDistError,
    NotCategorical,
    ResponseLengthMismatch,
    UnknownAggregationMethod,
)
from .models.knn import KNNDistModel  # noqa: F401
from .predict import predict, predict_probabilities  # noqa: F401
from .utils.aggregation import majority, register_aggregator  # noqa: F401
from .utils.distance import DistanceMatrix, build_distance_matrix, register_metric  # noqa: F401
from .utils.probability import class_probabilities  # noqa: F401
from .utils.ranking import TIE_METHODS, rank_matrix, rank_row  # noqa: F401
from .utils.responses import ResponseVector  # noqa: F401
from .utils.tally import tally  # noqa: F401
