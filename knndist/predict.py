# knndist/predict.py
"""
KNN prediction from a precomputed distance matrix.

Both entry points slice the matrix to (sorted test) x (sorted train), rank
each row under the tie policy, keep the training cases with rank <= k, and
aggregate their responses. Results follow the ascending order of the test
indices.
"""

import logging
import numbers

import numpy as np
from sklearn.utils import check_random_state

from knndist.errors import EmptyNeighborSet, InvalidIndexSet, InvalidK, ResponseLengthMismatch
from knndist.utils.aggregation import predict_one, resolve_agg_method
from knndist.utils.distance import as_distance_matrix
from knndist.utils.probability import probabilities_one
from knndist.utils.ranking import check_ties_method, rank_matrix
from knndist.utils.responses import as_categorical_responses, as_response_vector

log = logging.getLogger(__name__)


def check_indices(indices, n_cases, name):
    """Sorted copy of ``indices``; they must be unique integers in [0, n_cases)."""
    idx = np.asarray(indices)
    if idx.ndim == 0:
        idx = idx.reshape(1)
    if idx.ndim != 1 or idx.shape[0] == 0:
        raise InvalidIndexSet(f"{name} indices must be a non-empty 1-D sequence")
    if idx.dtype.kind not in "iu":
        raise InvalidIndexSet(f"{name} indices must be integers, got dtype {idx.dtype}")
    if idx.min() < 0 or idx.max() >= n_cases:
        raise InvalidIndexSet(f"{name} indices must lie in [0, {n_cases})")
    order = np.argsort(idx, kind="stable")
    idx = idx[order]
    if np.any(idx[1:] == idx[:-1]):
        raise InvalidIndexSet(f"{name} indices contain duplicates")
    return idx, order


def check_k(k, n_train):
    if isinstance(k, numbers.Real) and not isinstance(k, numbers.Integral) and float(k).is_integer():
        k = int(k)
    if isinstance(k, bool) or not isinstance(k, numbers.Integral):
        raise InvalidK(f"k must be an integer, got {k!r}")
    if k < 1 or k >= n_train:
        raise InvalidK(f"k must satisfy 1 <= k < {n_train} (number of training cases), got {k}")
    return int(k)


def _train_responses(responses, train, train_order, n_cases):
    # train-length responses follow the caller's train order; full-length ones are indexed by case
    if len(responses) == train.shape[0]:
        return responses.take(train_order)
    if len(responses) == n_cases:
        return responses.take(train)
    raise ResponseLengthMismatch(
        f"Responses have length {len(responses)}; expected {n_cases} (all cases) "
        f"or {train.shape[0]} (training cases)"
    )


def _prepare(train, test, dist_matrix, k, ties_method):
    dist_matrix = as_distance_matrix(dist_matrix)
    check_ties_method(ties_method)
    train, train_order = check_indices(train, dist_matrix.n_cases, "train")
    test, _ = check_indices(test, dist_matrix.n_cases, "test")
    k = check_k(k, train.shape[0])
    return dist_matrix, train, train_order, test, k


def _neighbor_masks(dist_matrix, train, test, k, ties_method, rng):
    ranks = rank_matrix(dist_matrix.submatrix(test, train), ties_method, rng)
    masks = ranks <= k
    sizes = masks.sum(axis=1)
    if np.any(sizes == 0):
        empty = test[sizes == 0].tolist()
        raise EmptyNeighborSet(
            f"No training case has rank <= {k} for test cases {empty} "
            f"under ties_method={ties_method!r}"
        )
    return masks


def predict(train, test, y, dist_matrix, k=1, agg_method=None, ties_method="min", random_state=None):
    """
    Predict the response of each test case from its k nearest training cases.

    Args:
        train: indices of the training cases in ``dist_matrix``
        test: indices of the cases to predict
        y: responses for all cases, or for the training cases only (in the
           order ``train`` is given); a ResponseVector or array-like
        dist_matrix: output of build_distance_matrix (or any square array)
        k: number of nearest neighbors, 1 <= k < len(train)
        agg_method: reducer name or callable; defaults to "majority" for
            categorical responses and "mean" for continuous ones
        ties_method: one of ranking.TIE_METHODS; "min" keeps every case tied
            at the k-th distance, so a neighbor set may hold more than k cases
        random_state: seed or RandomState for the "random" tie policy and for
            breaking majority ties

    Returns:
        ndarray with one prediction per test index, in ascending index order.
    """
    responses = as_response_vector(y)
    agg_method = resolve_agg_method(agg_method, responses)
    dist_matrix, train, train_order, test, k = _prepare(train, test, dist_matrix, k, ties_method)
    train_y = _train_responses(responses, train, train_order, dist_matrix.n_cases)
    rng = check_random_state(random_state)

    log.debug(
        f"Predicting {test.shape[0]} cases from {train.shape[0]} training cases "
        f"(k={k}, agg_method={agg_method!r}, ties_method={ties_method!r})"
    )
    masks = _neighbor_masks(dist_matrix, train, test, k, ties_method, rng)
    return np.asarray([predict_one(train_y.take(mask), agg_method, rng) for mask in masks])


def predict_probabilities(train, test, y, dist_matrix, k=1, ties_method="min", random_state=None):
    """
    Class probabilities of each test case among its k nearest training cases.

    Responses are treated as categorical; continuous responses raise
    NotCategorical. Each row is a dict keyed by every category of ``y`` in
    sorted order, including categories no neighbor votes for.

    Returns:
        list of dicts, one per test index in ascending index order.
    """
    responses = as_categorical_responses(y)
    dist_matrix, train, train_order, test, k = _prepare(train, test, dist_matrix, k, ties_method)
    train_y = _train_responses(responses, train, train_order, dist_matrix.n_cases)
    rng = check_random_state(random_state)

    log.debug(
        f"Class probabilities for {test.shape[0]} cases from {train.shape[0]} training cases "
        f"(k={k}, ties_method={ties_method!r})"
    )
    masks = _neighbor_masks(dist_matrix, train, test, k, ties_method, rng)
    categories = train_y.categories.tolist()
    return [
        dict(zip(categories, probabilities_one(train_y.take(mask)).tolist()))
        for mask in masks
    ]
