# utils/probability.py
"""Per-class vote proportions among a neighbor set."""

from knndist.utils.responses import ResponseVector, as_categorical_responses
from knndist.utils.tally import tally_codes


def probabilities_one(selected: ResponseVector):
    """
    Share of each category among ``selected``.

    The denominator is the size of the neighbor set actually used, which can
    exceed k under the "min" tie policy. Returns an array in category order.
    """
    counts = tally_codes(selected.codes, len(selected.categories))
    return counts / len(selected)


def class_probabilities(values):
    """
    Prevalence of each class in ``values`` (treated as categorical).

    Returns a dict keyed by category in sorted order. Categories supplied to a
    ResponseVector but absent from its values are kept, with probability 0.
    """
    responses = as_categorical_responses(values)
    return dict(zip(responses.categories.tolist(), probabilities_one(responses).tolist()))
