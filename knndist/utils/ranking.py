# utils/ranking.py
"""
Rank the distances from each test case to every training case.

Selecting ``rank <= k`` gives the neighbor set, so the tie policy decides
who is in at the k-th boundary:

- min:     tied distances share the lowest rank; may admit more than k
- max:     tied distances share the highest rank; may admit fewer than k
- first:   ties broken by training-index order; exactly k
- last:    ties broken by reverse training-index order; exactly k
- random:  ties broken by a random permutation; exactly k
- average: tied distances share the mean of their ranks
"""

import logging

import numpy as np
from scipy.stats import rankdata
from sklearn.utils import check_random_state

from knndist.errors import InvalidTiePolicy

log = logging.getLogger(__name__)

TIE_METHODS = ("min", "max", "first", "last", "random", "average")

_RANKDATA_METHODS = {"min": "min", "max": "max", "first": "ordinal", "average": "average"}


def check_ties_method(ties_method):
    if ties_method not in TIE_METHODS:
        raise InvalidTiePolicy(
            f"Unknown ties method: {ties_method!r}. Expected one of {list(TIE_METHODS)}"
        )
    return ties_method


def _rank_by_order(d, tiebreak):
    # sort by distance, then by the tiebreak key; position in that order is the rank
    order = np.lexsort((tiebreak, d))
    ranks = np.empty(d.shape[0], dtype=np.int64)
    ranks[order] = np.arange(1, d.shape[0] + 1)
    return ranks


def rank_row(distances, ties_method="min", random_state=None):
    """
    Rank one row of distances (one test case against all training cases).

    Returns 1-based ranks aligned with ``distances``. ``random_state`` is only
    consumed by the "random" policy.
    """
    check_ties_method(ties_method)
    d = np.asarray(distances, dtype=np.float64).ravel()

    if ties_method in _RANKDATA_METHODS:
        return rankdata(d, method=_RANKDATA_METHODS[ties_method])
    if ties_method == "last":
        return _rank_by_order(d, -np.arange(d.shape[0]))

    rng = check_random_state(random_state)
    return _rank_by_order(d, rng.permutation(d.shape[0]))


def rank_matrix(distances, ties_method="min", random_state=None):
    """Rank every row of a (test x train) distance sub-matrix independently."""
    check_ties_method(ties_method)
    d = np.atleast_2d(np.asarray(distances, dtype=np.float64))

    if ties_method in _RANKDATA_METHODS:
        return rankdata(d, method=_RANKDATA_METHODS[ties_method], axis=1)

    rng = check_random_state(random_state)
    log.debug(f"Ranking {d.shape[0]} rows with ties_method={ties_method!r}")
    return np.vstack([rank_row(row, ties_method, rng) for row in d])
