# utils/distance.py
"""
Pairwise distances between every case of a dataset.

All pairs are computed, train-train and test-test included, so one matrix
can be reused for any number of train/test splits and values of k.
Built-in metrics follow the names accepted by R's ``dist``.
"""

import logging
from typing import Any, Callable, Dict, Union

import numpy as np
from scipy.spatial.distance import pdist, squareform
from sklearn.utils import check_array

from knndist.errors import DimensionMismatch, InvalidMetric

log = logging.getLogger(__name__)

# 15 decimal places; below that, float noise splits distances that should tie
ROUND_DECIMALS = 15


# ---------------------------------------------------------
# Built-in metrics: each returns a condensed distance vector
# ---------------------------------------------------------

def _scipy_metric(name: str) -> Callable[..., np.ndarray]:
    def compute(X, p=2, **metric_params):
        return pdist(X, metric=name, **metric_params)
    return compute


def _minkowski(X, p=2, **metric_params):
    p = float(p)
    if not p > 0:
        raise ValueError(f"Minkowski power p must be positive, got {p}")
    return pdist(X, metric="minkowski", p=p, **metric_params)


def _binary(X, p=2, **metric_params):
    # non-zero features are "on"; all-zero pairs are at distance 0
    return pdist(X != 0, metric="jaccard")


def _pairwise(func: Callable[..., float]) -> Callable[..., np.ndarray]:
    def compute(X, p=2, **metric_params):
        return pdist(X, lambda u, v: float(func(u, v, **metric_params)))
    return compute


METRICS: Dict[str, Callable[..., np.ndarray]] = {
    "euclidean": _scipy_metric("euclidean"),
    "maximum": _scipy_metric("chebyshev"),
    "chebyshev": _scipy_metric("chebyshev"),
    "manhattan": _scipy_metric("cityblock"),
    "cityblock": _scipy_metric("cityblock"),
    "canberra": _scipy_metric("canberra"),
    "binary": _binary,
    "minkowski": _minkowski,
}


def register_metric(name: str, func: Callable[..., float]) -> None:
    """
    Register a pairwise metric under ``name``.

    ``func(u, v, **metric_params)`` receives two 1-D feature vectors and must
    return a non-negative float; it should be symmetric in its arguments.
    """
    if not callable(func):
        raise TypeError(f"Metric {name!r} must be callable")
    METRICS[name.lower()] = _pairwise(func)


def resolve_metric(metric: Union[str, Callable[..., float]]) -> Callable[..., np.ndarray]:
    if callable(metric):
        return _pairwise(metric)
    if not isinstance(metric, str):
        raise InvalidMetric(f"Metric must be a name or a callable, got {type(metric).__name__}")
    try:
        return METRICS[metric.lower()]
    except KeyError:
        raise InvalidMetric(
            f"Unknown metric: {metric!r}. Expected one of {sorted(METRICS)}"
        ) from None


# ---------------------------------------------------------
# Dataset validation
# ---------------------------------------------------------

def as_dataset(dataset: Any) -> np.ndarray:
    """Coerce ``dataset`` to a float (n_cases, n_features) array."""
    if not hasattr(dataset, "shape"):
        rows = list(dataset)
    elif np.asarray(dataset).dtype == object:
        # object arrays can hold ragged rows
        rows = list(np.asarray(dataset))
    else:
        rows = None

    if rows is not None:
        widths = sorted({int(np.size(row)) for row in rows})
        if len(widths) > 1:
            raise DimensionMismatch(f"Cases have inconsistent feature counts: {widths}")
        dataset = rows

    X = np.asarray(dataset)
    if X.ndim == 1:
        # a plain vector is n cases of one feature
        X = X.reshape(-1, 1)
    elif X.ndim != 2:
        raise DimensionMismatch(f"Dataset must be 2-D (cases x features), got {X.ndim}-D")

    return check_array(X, dtype=np.float64)


# ---------------------------------------------------------
# DistanceMatrix
# ---------------------------------------------------------

class DistanceMatrix:
    """Read-only square matrix of distances between all cases of a dataset."""

    def __init__(self, values, metric="precomputed"):
        values = np.array(values, dtype=np.float64)
        if values.ndim != 2 or values.shape[0] != values.shape[1]:
            raise DimensionMismatch(f"Distance matrix must be square, got shape {values.shape}")
        values.setflags(write=False)
        self._values = values
        self.metric = metric

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def shape(self):
        return self._values.shape

    @property
    def n_cases(self) -> int:
        return self._values.shape[0]

    def __len__(self):
        return self.n_cases

    def __getitem__(self, key):
        return self._values[key]

    def __array__(self, dtype=None, copy=None):
        if copy:
            return np.array(self._values, dtype=dtype)
        return np.asarray(self._values, dtype=dtype)

    def __repr__(self):
        return f"DistanceMatrix(n_cases={self.n_cases}, metric={self.metric!r})"

    def submatrix(self, rows, cols) -> np.ndarray:
        """Rows x cols slice, e.g. test cases x training cases."""
        return self._values[np.ix_(np.asarray(rows), np.asarray(cols))]


def as_distance_matrix(dist_matrix) -> DistanceMatrix:
    if isinstance(dist_matrix, DistanceMatrix):
        return dist_matrix
    return DistanceMatrix(dist_matrix)


def build_distance_matrix(dataset, metric="euclidean", p=2, **metric_params) -> DistanceMatrix:
    """
    Compute the distances between all cases of ``dataset``.

    Args:
        dataset: array-like (n_cases, n_features); a 1-D vector is one feature
        metric: a name from METRICS or a callable ``metric(u, v, **metric_params)``
        p: power of the Minkowski distance (ignored by other metrics)
        **metric_params: forwarded to the metric

    Returns:
        DistanceMatrix whose diagonal is 0 and whose off-diagonal entries are >= 0,
        rounded to 15 decimal places.
    """
    compute = resolve_metric(metric)
    X = as_dataset(dataset)
    name = metric if isinstance(metric, str) else getattr(metric, "__name__", "custom")

    log.info(f"Computing {name} distances for {X.shape[0]} cases x {X.shape[1]} features")
    condensed = np.asarray(compute(X, p=p, **metric_params), dtype=np.float64)
    if np.isnan(condensed).any() or (condensed < 0).any():
        raise ValueError(f"Metric {name!r} produced negative or NaN distances")

    D = np.round(squareform(condensed, checks=False), decimals=ROUND_DECIMALS)
    return DistanceMatrix(D, metric=name)
