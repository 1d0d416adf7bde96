"""Tests for bucket parsing, normalization, quantile generation and natural sort."""

import numpy as np
import pandas as pd
import pytest

from loanscope.buckets import (
    CategoryList,
    Range,
    Scalar,
    classify_interval,
    entry_label,
    interval_mask,
    natural_key,
    natural_sort,
    normalize_buckets,
    normalize_categories,
    parse_entry,
    parse_shorthand,
    quantile_buckets,
)
from loanscope.exceptions import ClassificationError


class TestParsing:

    def test_shorthand_plus_is_lower_exclusive(self):
        assert parse_shorthand("1+") == Range(1, "max", lower_inclusive=False)

    @pytest.mark.parametrize("text", ["3+=", "3=+"])
    def test_shorthand_plus_equals_is_lower_inclusive(self, text):
        assert parse_shorthand(text) == Range(3, "max", lower_inclusive=True)

    def test_shorthand_digits_is_scalar(self):
        assert parse_shorthand("4") == Scalar(4)

    def test_shorthand_unrecognized_returns_none(self):
        assert parse_shorthand("low") is None

    def test_parse_entry_forms(self):
        assert parse_entry(7) == Scalar(7)
        assert parse_entry(np.int64(7)) == Scalar(7)
        assert parse_entry([0, "max"]) == Range(0, "max")
        assert parse_entry((1, 2)) == Range(1, 2)
        assert parse_entry("2+") == Range(2, "max", lower_inclusive=False)

    @pytest.mark.parametrize("value", ["abc", [1, 2, 3], True, None])
    def test_parse_entry_rejects_unknown_forms(self, value):
        with pytest.raises(ValueError):
            parse_entry(value)

    def test_entry_label(self):
        assert entry_label(Scalar(0)) == "[0,0]"
        assert entry_label(Range(1, "max", lower_inclusive=False)) == "(1,max]"
        assert entry_label(Range("min", 2.5)) == "[min,2.5]"


class TestNormalize:

    def test_keyword_keys(self):
        buckets = normalize_buckets({"0": [0, 0], "1+": [1, "max"]}, 0.0, 5.0)

        assert list(buckets) == ["[0,0]", "(1,max]"]
        assert buckets["[0,0]"] == [0, 0]
        assert buckets["(1,max]"] == [1, 5.0]

    def test_shorthand_values(self):
        buckets = normalize_buckets(
            {"zero": 0, "some": "2+=", "many": "4=+", "three": "3"}, 0.0, 9.0
        )

        assert buckets == {
            "[0,0]": [0, 0],
            "[2,max]": [2, 9.0],
            "[4,max]": [4, 9.0],
            "[3,3]": [3, 3],
        }

    def test_bracketed_keys_kept_and_keywords_resolved(self):
        buckets = normalize_buckets({"[min,2)": ["min", 2], "[2,max]": [2, "max"]}, -1.0, 8.0)

        assert buckets == {"[min,2)": [-1.0, 2], "[2,max]": [2, 8.0]}

    def test_plain_key_with_explicit_bounds_is_kept(self):
        buckets = normalize_buckets({"low": [0, 3]}, 0.0, 9.0)

        assert buckets == {"low": [0, 3]}

    def test_large_values_keep_integer_labels(self):
        buckets = normalize_buckets(
            {"1000000": [1e6, 1e6], "2000000+": [2e6, "max"], "big": 12000000}, 0.0, 5e7
        )

        assert list(buckets) == ["[1000000,1000000]", "(2000000,max]", "[12000000,12000000]"]
        assert natural_sort(reversed(list(buckets))) == list(buckets)

    def test_fractional_labels_avoid_scientific_notation(self):
        assert entry_label(Scalar(0.00001)) == "[0.00001,0.00001]"
        assert entry_label(Range(1234567.5, "max")) == "[1234567.5,max]"

    def test_categories(self):
        buckets = normalize_categories({"A/B": ["A", "B"], "C": "C", 36: 36})

        assert buckets == {"A/B": ["A", "B"], "C": ["C"], "36": [36]}


class TestQuantiles:

    def test_partition_is_complete_and_contiguous(self):
        values = pd.Series(np.arange(100, dtype=float))
        buckets = quantile_buckets(values, 4)

        assert len(buckets) == 4
        labels = list(buckets)
        assert all(label.endswith(")") for label in labels[:-1])
        assert labels[-1].endswith("]")

        bounds = list(buckets.values())
        assert bounds[0][0] == values.min()
        assert bounds[-1][1] == values.max()
        for current, following in zip(bounds, bounds[1:]):
            assert current[1] == following[0]

        hits = sum(interval_mask(values, label, b).astype(int) for label, b in buckets.items())
        assert (hits == 1).all()

    def test_labels_use_number_format(self):
        values = pd.Series([0.0, 25.0, 50.0, 75.0, 100.0])

        assert list(quantile_buckets(values, 2, "int")) == ["[0,50)", "[50,100]"]
        assert list(quantile_buckets(values, 2, "float")) == ["[0.00,50.00)", "[50.00,100.00]"]

    def test_single_bucket_is_closed(self):
        buckets = quantile_buckets(pd.Series([1.0, 2.0, 3.0]), 1, "int")

        assert buckets == {"[1,3]": [1.0, 3.0]}

    def test_int_labels_widen_for_fractional_edges(self):
        values = pd.Series(np.linspace(0, 1, 101))
        buckets = quantile_buckets(values, 5, "int")

        assert len(buckets) == 5
        assert list(buckets)[0] == "[0.0,0.2)"
        assert list(buckets)[-1] == "[0.8,1.0]"
        hits = sum(interval_mask(values, label, b).astype(int) for label, b in buckets.items())
        assert (hits == 1).all()

    def test_float_labels_widen_on_narrow_range(self):
        values = pd.Series(np.random.default_rng(1).uniform(0.05, 0.06, 200))
        buckets = quantile_buckets(values, 10, "float")

        assert len(buckets) == 10
        hits = sum(interval_mask(values, label, b).astype(int) for label, b in buckets.items())
        assert (hits == 1).all()
        for label, (lower, upper) in buckets.items():
            low_text, high_text = label[1:-1].split(",")
            assert float(low_text) == pytest.approx(lower, abs=10 ** -(len(low_text.split(".")[1])))
            assert float(high_text) == pytest.approx(upper, abs=10 ** -(len(high_text.split(".")[1])))

    def test_tied_boundaries_are_merged(self):
        values = pd.Series([1.0, 1.0, 1.0, 1.0, 2.0])
        buckets = quantile_buckets(values, 4, "int")

        assert buckets == {"[1,2]": [1.0, 2.0]}

    def test_constant_values_give_one_closed_bucket(self):
        buckets = quantile_buckets(pd.Series([3.0, 3.0, 3.0]), 4, "int")

        assert buckets == {"[3,3]": [3.0, 3.0]}

    def test_rejects_zero(self):
        with pytest.raises(ValueError):
            quantile_buckets(pd.Series([1.0]), 0)


class TestIntervals:

    @pytest.mark.parametrize(
        "label, expected",
        [("[0,5]", "both"), ("(0,5]", "right"), ("[0,5)", "left"), ("(0,5)", "neither")],
    )
    def test_classify(self, label, expected):
        assert classify_interval(label) == expected

    @pytest.mark.parametrize("label", ["0-5", "{0,5}", "[0,5", "low", ""])
    def test_classify_rejects_unknown_brackets(self, label):
        with pytest.raises(ClassificationError):
            classify_interval(label)

    def test_mask_respects_inclusion(self):
        values = pd.Series([0.0, 2.5, 5.0])

        assert interval_mask(values, "[0,5)", [0, 5]).tolist() == [True, True, False]
        assert interval_mask(values, "(0,5]", [0, 5]).tolist() == [False, True, True]
        assert interval_mask(values, "(0,5)", [0, 5]).tolist() == [False, True, False]


class TestNaturalSort:

    def test_numeric_runs_compare_as_integers(self):
        assert natural_sort(["[10,99]", "[2,9]"]) == ["[2,9]", "[10,99]"]

    def test_brackets_are_ignored(self):
        assert natural_key("[2,9)") == natural_key("(2,9]")

    def test_mixed_labels(self):
        assert natural_sort(["item10", "item2", "Item1"]) == ["Item1", "item2", "item10"]

    def test_category_list_is_a_variant(self):
        assert CategoryList(("A",)) != Scalar(0)
