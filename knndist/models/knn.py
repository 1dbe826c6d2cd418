# models/knn.py
"""
KNN wrapper over a precomputed distance matrix. fit() computes all pairwise
distances once; predict and predict_proba then take train/test indices, so
any number of splits and values of k reuse the same matrix.
"""
import numpy as np

from knndist.predict import predict, predict_probabilities
from knndist.utils.distance import build_distance_matrix
from knndist.utils.responses import as_categorical_responses


class KNNDistModel:
    def __init__(self, hyperparams=None):
        hyperparams = hyperparams or {}
        self.metric = hyperparams.get("metric", "euclidean")
        self.p = float(hyperparams.get("p", 2))
        self.k = int(hyperparams.get("n_neighbors", 1))
        self.agg_method = hyperparams.get("agg_method", None)
        self.ties_method = hyperparams.get("ties_method", "min")
        self.random_state = hyperparams.get("random_state", None)

        self.dist_matrix = None
        self.classes_ = None
        self.fitted = False

    def fit(self, X):
        # All cases, training and test alike
        self.dist_matrix = build_distance_matrix(X, metric=self.metric, p=self.p)
        self.fitted = True
        return self

    def _check_fitted(self):
        if not self.fitted:
            raise RuntimeError("KNN model not fitted. Call fit first.")

    def predict(self, train, test, y, k=None):
        self._check_fitted()
        return predict(
            train, test, y, self.dist_matrix,
            k=self.k if k is None else k,
            agg_method=self.agg_method,
            ties_method=self.ties_method,
            random_state=self.random_state,
        )

    def predict_proba(self, train, test, y, k=None):
        """Rows follow the sorted test indices, columns follow classes_."""
        self._check_fitted()
        responses = as_categorical_responses(y)
        rows = predict_probabilities(
            train, test, responses, self.dist_matrix,
            k=self.k if k is None else k,
            ties_method=self.ties_method,
            random_state=self.random_state,
        )
        self.classes_ = responses.categories
        return np.array([list(row.values()) for row in rows])
