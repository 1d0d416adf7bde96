"""Tests for ExploreConfig validation."""

import pytest

from loanscope.config import ExploreConfig


def test_defaults():
    config = ExploreConfig()

    assert config.outcome_column == "loan_status"
    assert config.default_quantiles == 10
    assert config.number_format == "float"
    assert config.p_value == 0.05
    assert config.positive_outcome is None
    assert config.missing_threshold == 0.5


@pytest.mark.parametrize(
    "kwargs",
    [
        {"outcome_column": ""},
        {"default_quantiles": 0},
        {"number_format": "percent"},
        {"p_value": 0.0},
        {"p_value": 1.5},
        {"missing_threshold": -0.1},
        {"missing_threshold": 1.1},
    ],
)
def test_invalid_values(kwargs):
    with pytest.raises(ValueError):
        ExploreConfig(**kwargs)
