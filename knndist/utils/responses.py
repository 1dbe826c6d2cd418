# utils/responses.py
"""
Response vectors tagged with their kind.

The kind ("categorical" or "continuous") is fixed when the vector is built
and selects the default aggregation. For categorical responses the category
universe (sorted distinct values, via LabelEncoder) is also fixed here and
never shrinks when the vector is restricted to a subset of cases.
"""

import numpy as np
from sklearn.preprocessing import LabelEncoder
from sklearn.utils.validation import column_or_1d

from knndist.errors import NotCategorical

CATEGORICAL = "categorical"
CONTINUOUS = "continuous"
KINDS = (CATEGORICAL, CONTINUOUS)


def _is_continuous_only(values):
    """Floats with a non-integral (or NaN) value cannot be read as classes."""
    if values.dtype.kind != "f":
        return False
    return not (np.isfinite(values).all() and np.all(np.mod(values, 1) == 0))


def infer_kind(values):
    values = np.asarray(values)
    if values.dtype.kind in "fiu":
        return CONTINUOUS
    return CATEGORICAL


class ResponseVector:
    def __init__(self, values, kind=None, categories=None):
        values = column_or_1d(np.asarray(values), warn=True)
        kind = infer_kind(values) if kind is None else kind
        if kind not in KINDS:
            raise ValueError(f"Unknown response kind: {kind!r}. Expected one of {list(KINDS)}")
        if kind == CATEGORICAL and _is_continuous_only(values):
            raise NotCategorical("Responses contain non-integral values and cannot be categorical")
        if kind == CONTINUOUS and values.dtype.kind not in "fiub":
            raise TypeError(f"Continuous responses must be numeric, got dtype {values.dtype}")

        self.values = values
        self.kind = kind
        self._encoder = None
        if categories is not None:
            self._encoder = LabelEncoder().fit(np.asarray(categories))
            unknown = np.setdiff1d(values, self._encoder.classes_)
            if unknown.size:
                raise ValueError(f"Responses contain values outside the categories: {unknown.tolist()}")

    @classmethod
    def categorical(cls, values, categories=None):
        return cls(values, kind=CATEGORICAL, categories=categories)

    @classmethod
    def continuous(cls, values):
        return cls(values, kind=CONTINUOUS)

    @property
    def is_categorical(self):
        return self.kind == CATEGORICAL

    def _fitted_encoder(self):
        if self._encoder is None:
            self._encoder = LabelEncoder().fit(self.values)
        return self._encoder

    @property
    def categories(self):
        """Category universe in sorted order."""
        return self._fitted_encoder().classes_

    @property
    def codes(self):
        """Position of each response in ``categories``."""
        return self._fitted_encoder().transform(self.values)

    def __len__(self):
        return self.values.shape[0]

    def __repr__(self):
        return f"ResponseVector(n={len(self)}, kind={self.kind!r})"

    def take(self, positions):
        """Subset of the responses; the category universe is kept whole."""
        subset = ResponseVector.__new__(ResponseVector)
        subset.values = self.values[np.asarray(positions)]
        subset.kind = self.kind
        subset._encoder = self._fitted_encoder() if self.is_categorical else None
        return subset

    def as_categorical(self):
        """Categorical view for class probabilities; continuous data is rejected."""
        if self.is_categorical:
            return self
        raise NotCategorical("Class probabilities need categorical responses, got continuous ones")


def as_response_vector(y, kind=None):
    """
    Wrap raw responses in a ResponseVector.

    A ResponseVector is returned as-is. Raw numeric values default to
    continuous, anything else to categorical, unless ``kind`` says otherwise.
    """
    if isinstance(y, ResponseVector):
        return y
    return ResponseVector(y, kind=kind)


def as_categorical_responses(y):
    """Coerce to categorical: raw integral numbers become classes, real-valued ones are rejected."""
    if isinstance(y, ResponseVector):
        return y.as_categorical()
    values = np.asarray(y)
    if _is_continuous_only(values):
        raise NotCategorical("Class probabilities need categorical responses, got continuous ones")
    return ResponseVector(values, kind=CATEGORICAL)
