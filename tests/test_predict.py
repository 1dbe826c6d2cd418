"""
Tests for predict: neighbor selection, aggregation and input validation.
"""

import numpy as np
import pytest

from knndist import (
    EmptyNeighborSet,
    InvalidIndexSet,
    InvalidK,
    InvalidTiePolicy,
    ResponseLengthMismatch,
    ResponseVector,
    UnknownAggregationMethod,
    build_distance_matrix,
    predict,
    register_aggregator,
)
from knndist.utils.aggregation import AGGREGATORS


class TestScenarios:
    """Cases on a line at 0, 1, 2, 10 (plus a far extra case at 50)."""

    def test_majority_tie_between_two_neighbors(self, line_dist):
        # distances from 10 are [10, 9, 8]; k=2 keeps indices 1 and 2 (A, B)
        pred = predict([0, 1, 2], [3], ["A", "A", "B"], line_dist, k=2)
        assert pred.shape == (1,)
        assert pred[0] in {"A", "B"}

    def test_majority_over_three_neighbors(self, wide_line_dist):
        pred = predict([0, 1, 2, 4], [3], ["A", "A", "B", "B"], wide_line_dist, k=3)
        assert pred[0] == "A"

    def test_mean_over_three_neighbors(self, wide_line_dist):
        pred = predict([0, 1, 2, 4], [3], [1.0, 2.0, 3.0, 100.0], wide_line_dist, k=3, agg_method="mean")
        assert pred[0] == 2.0

    def test_nearest_neighbor(self, line_dist):
        pred = predict([0, 1, 2], [3], ["A", "A", "B"], line_dist, k=1)
        assert pred[0] == "B"

    @pytest.mark.parametrize(
        "method, expected",
        [("median", 2.0), ("min", 1.0), ("max", 3.0), ("sum", 6.0)],
    )
    def test_numeric_reducers(self, wide_line_dist, method, expected):
        pred = predict([0, 1, 2, 4], [3], [1.0, 2.0, 3.0, 100.0], wide_line_dist, k=3, agg_method=method)
        assert pred[0] == expected

    def test_callable_reducer(self, wide_line_dist):
        pred = predict([0, 1, 2, 4], [3], [1.0, 2.0, 3.0, 100.0], wide_line_dist, k=3, agg_method=len)
        assert pred[0] == 3

    def test_registered_reducer(self, wide_line_dist):
        register_aggregator("spread", lambda values: np.max(values) - np.min(values))
        try:
            pred = predict([0, 1, 2, 4], [3], [1.0, 2.0, 3.0, 100.0], wide_line_dist, k=3, agg_method="spread")
            assert pred[0] == 2.0
        finally:
            AGGREGATORS.pop("spread")


class TestTies:
    """Training cases at 2, 4, 6 and a test case at 3: the two nearest tie."""

    Y = [1.0, 3.0, 100.0]

    def test_min_includes_whole_tie(self, tied_line_dist):
        assert predict([0, 1, 2], [3], self.Y, tied_line_dist, k=1, ties_method="min")[0] == 2.0

    def test_first_takes_lowest_index(self, tied_line_dist):
        assert predict([0, 1, 2], [3], self.Y, tied_line_dist, k=1, ties_method="first")[0] == 1.0

    def test_last_takes_highest_index(self, tied_line_dist):
        assert predict([0, 1, 2], [3], self.Y, tied_line_dist, k=1, ties_method="last")[0] == 3.0

    def test_random_takes_one_of_the_tie(self, tied_line_dist):
        preds = {predict([0, 1, 2], [3], self.Y, tied_line_dist, k=1, ties_method="random", random_state=s)[0]
                 for s in range(40)}
        assert preds == {1.0, 3.0}

    def test_max_excludes_straddling_tie(self, tied_line_dist):
        with pytest.raises(EmptyNeighborSet, match="No training case"):
            predict([0, 1, 2], [3], self.Y, tied_line_dist, k=1, ties_method="max")

    def test_max_includes_tie_when_k_covers_it(self, tied_line_dist):
        assert predict([0, 1, 2], [3], self.Y, tied_line_dist, k=2, ties_method="max")[0] == 2.0


class TestOrdering:
    """Results follow the sorted test indices; responses follow the train order given."""

    def test_output_in_sorted_test_order(self):
        D = build_distance_matrix([0, 1, 2, 10, 11])
        y = [100.0, 1.0, 2.0, 3.0, 200.0]

        np.testing.assert_array_equal(predict([1, 2, 3], [4, 0], y, D, k=1), [1.0, 3.0])
        np.testing.assert_array_equal(predict([3, 1, 2], [0, 4], y, D, k=1), [1.0, 3.0])

    def test_train_length_responses_follow_given_train_order(self, line_dist):
        # index 2 -> B, index 1 -> A, index 0 -> A
        pred = predict([2, 1, 0], [3], ["B", "A", "A"], line_dist, k=1)
        assert pred[0] == "B"

    def test_responses_follow_train_order_when_train_covers_every_case(self, line_dist):
        # y is as long as both train and the dataset; it pairs with train as given
        pred = predict([3, 2, 1, 0], [0], ["d", "c", "b", "a"], line_dist, k=1)
        assert pred[0] == "a"

    def test_full_length_responses_are_restricted_to_train(self, line_dist):
        pred = predict([0, 1, 2], [3], ["A", "A", "B", "Z"], line_dist, k=1)
        assert pred[0] == "B"

    def test_idempotent(self, random_points):
        D = build_distance_matrix(random_points)
        y = np.arange(30, dtype=float)
        a = predict(range(20), range(20, 30), y, D, k=4, ties_method="first")
        b = predict(range(20), range(20, 30), y, D, k=4, ties_method="first")
        np.testing.assert_array_equal(a, b)

    def test_seeded_random_is_repeatable(self, random_points):
        D = build_distance_matrix(np.round(random_points))
        y = np.array(list("abc") * 10)
        a = predict(range(20), range(20, 30), y, D, k=3, ties_method="random", random_state=7)
        b = predict(range(20), range(20, 30), y, D, k=3, ties_method="random", random_state=7)
        np.testing.assert_array_equal(a, b)

    def test_precomputed_array_is_accepted(self):
        D = np.array([[0, 1, 5], [1, 0, 4], [5, 4, 0]])
        assert predict([0, 1], [2], ["a", "b"], D, k=1)[0] == "b"


class TestValidation:
    @pytest.mark.parametrize("k", [0, -1, 3, 4])
    def test_k_out_of_range(self, line_dist, k):
        with pytest.raises(InvalidK, match="1 <= k < 3"):
            predict([0, 1, 2], [3], ["A", "A", "B"], line_dist, k=k)

    @pytest.mark.parametrize("k", [1.5, True, "2"])
    def test_k_not_integer(self, line_dist, k):
        with pytest.raises(InvalidK, match="integer"):
            predict([0, 1, 2], [3], ["A", "A", "B"], line_dist, k=k)

    @pytest.mark.parametrize("k", [1.0, np.float64(2.0)])
    def test_integral_float_k(self, line_dist, k):
        pred = predict([0, 1, 2], [3], [1.0, 2.0, 3.0], line_dist, k=k)
        assert pred[0] == (3.0 if k == 1 else 2.5)

    def test_numpy_integer_k(self, line_dist):
        assert predict([0, 1, 2], [3], ["A", "A", "B"], line_dist, k=np.int64(1))[0] == "B"

    def test_unknown_ties_method(self, line_dist):
        with pytest.raises(InvalidTiePolicy):
            predict([0, 1, 2], [3], ["A", "A", "B"], line_dist, k=1, ties_method="dense")

    def test_unknown_agg_method(self, line_dist):
        with pytest.raises(UnknownAggregationMethod):
            predict([0, 1, 2], [3], [1.0, 2.0, 3.0], line_dist, k=1, agg_method="mode")

    @pytest.mark.parametrize(
        "train, match",
        [([0, 1, 4], r"\[0, 4\)"), ([0, 0, 1], "duplicates"), ([], "non-empty"), ([0.0, 1.0], "integers")],
    )
    def test_bad_train_indices(self, line_dist, train, match):
        with pytest.raises(InvalidIndexSet, match=match):
            predict(train, [3], [1.0, 2.0, 3.0, 4.0], line_dist, k=1)

    def test_response_length(self, line_dist):
        with pytest.raises(ResponseLengthMismatch, match="length 2"):
            predict([0, 1, 2], [3], [1.0, 2.0], line_dist, k=1)

    def test_explicit_continuous_tag(self, line_dist):
        # the tag, not the integer dtype, picks majority vs mean
        y = ResponseVector.categorical([0, 0, 1])
        assert predict([0, 1, 2], [3], y, line_dist, k=1)[0] == 1
        y = ResponseVector.continuous([0, 0, 1])
        assert predict([0, 1, 2], [3], y, line_dist, k=2)[0] == 0.5
