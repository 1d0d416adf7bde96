"""
Configuration classes for loanscope.

This module defines the configuration structure for feature exploration.
"""

from dataclasses import dataclass
from typing import Optional


NUMBER_FORMATS = ("float", "int")


@dataclass
class ExploreConfig:
    """
    Configuration class for feature exploration parameters.

    This class holds all analysis-related parameters with sensible defaults.
    Dataset-specific inputs (the DataFrame, the feature name) are handled separately.

    Attributes:
        outcome_column: Name of the binary outcome column used when no
            outcome is given explicitly. Default: "loan_status"
        default_quantiles: Number of equal-depth buckets used when a feature
            is bucketized without an explicit bucket specification. Default: 10
        number_format: Formatting of quantile bucket labels, "float"
            (two decimals) or "int". Default: "float"
        p_value: P-value threshold for flagging a comparison as
            significant. Default: 0.05
        positive_outcome: Outcome value counted by category rate plots.
            None means the second outcome encountered. Default: None
        missing_threshold: Columns with a larger fraction of missing values
            are dropped by column pruning. Default: 0.5
    """

    outcome_column: str = "loan_status"
    default_quantiles: int = 10
    number_format: str = "float"
    p_value: float = 0.05
    positive_outcome: Optional[str] = None
    missing_threshold: float = 0.5

    def __post_init__(self):
        """Validate configuration parameters."""
        if not self.outcome_column:
            raise ValueError("outcome_column must be a non-empty string")
        if self.default_quantiles < 1:
            raise ValueError("default_quantiles must be >= 1")
        if self.number_format not in NUMBER_FORMATS:
            raise ValueError(f"number_format must be one of {NUMBER_FORMATS}")
        if not 0 < self.p_value <= 1:
            raise ValueError("p_value must be in (0, 1]")
        if not 0 <= self.missing_threshold <= 1:
            raise ValueError("missing_threshold must be in [0, 1]")
