# utils/aggregation.py
"""
Reducers that turn the responses of a neighbor set into one prediction.

Reducers are looked up by name in AGGREGATORS. "majority" votes over the
category universe and breaks ties between top categories at random; the
numeric reducers work on the response values directly.
"""

import logging

import numpy as np
from sklearn.utils import check_random_state

from knndist.errors import AggregationTypeError, UnknownAggregationMethod
from knndist.utils.responses import ResponseVector
from knndist.utils.tally import tally_codes

log = logging.getLogger(__name__)

MAJORITY = "majority"

AGGREGATORS = {
    "mean": np.mean,
    "median": np.median,
    "min": np.min,
    "max": np.max,
    "sum": np.sum,
}

# built-ins that only make sense for numbers
NUMERIC_REDUCERS = frozenset(AGGREGATORS)


def register_aggregator(name, func):
    """Register ``func(values) -> prediction`` under ``name``."""
    if not callable(func):
        raise TypeError(f"Aggregator {name!r} must be callable")
    if name == MAJORITY or name in NUMERIC_REDUCERS:
        raise ValueError(f"{name!r} is built in and cannot be replaced")
    AGGREGATORS[name] = func


def default_agg_method(responses: ResponseVector):
    return MAJORITY if responses.is_categorical else "mean"


def resolve_agg_method(agg_method, responses: ResponseVector):
    """Validate ``agg_method`` against the registry and the response kind."""
    if agg_method is None:
        agg_method = default_agg_method(responses)
    if callable(agg_method) or agg_method == MAJORITY:
        return agg_method
    if agg_method not in AGGREGATORS:
        raise UnknownAggregationMethod(
            f"Unknown aggregation method: {agg_method!r}. "
            f"Expected one of {[MAJORITY] + sorted(AGGREGATORS)} or a callable"
        )
    if responses.is_categorical and agg_method in NUMERIC_REDUCERS:
        raise AggregationTypeError(f"{agg_method!r} cannot aggregate categorical responses")
    return agg_method


def vote(codes, n_categories, random_state=None):
    """Position of the most frequent category; ties are broken uniformly at random."""
    counts = tally_codes(codes, n_categories)
    top = np.flatnonzero(counts == counts.max())
    if top.shape[0] == 1:
        return int(top[0])
    rng = check_random_state(random_state)
    log.debug(f"Majority tie between {top.shape[0]} categories, choosing at random")
    return int(top[rng.randint(top.shape[0])])


def majority(values, random_state=None):
    """
    Most frequent value of ``values`` treated as categorical.

    If two or more categories tie, one of them is selected at random.
    """
    responses = values if isinstance(values, ResponseVector) else ResponseVector(values)
    categories = responses.categories
    return categories[vote(responses.codes, len(categories), random_state)]


def predict_one(selected: ResponseVector, agg_method, random_state=None):
    """Aggregate the responses of one neighbor set."""
    if agg_method == MAJORITY:
        return majority(selected, random_state)
    func = agg_method if callable(agg_method) else AGGREGATORS[agg_method]
    return func(selected.values)
