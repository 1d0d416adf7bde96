"""
Core FeatureExplorer class for loanscope.

This module compares one feature against a binary outcome: it drops rows with
a missing feature value, optionally assigns every row to a labeled bucket,
and runs a significance test between the two outcome groups. Plot rendering
lives in loanscope.visuals; this module only decides which plots apply.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from scipy import stats

from loanscope.buckets import (
    interval_mask,
    natural_key,
    natural_sort,
    normalize_buckets,
    normalize_categories,
    quantile_buckets,
)
from loanscope.config import ExploreConfig
from loanscope.exceptions import InsufficientDataError, InvalidDataError
from loanscope.visuals import (
    plot_category_counts,
    plot_category_rates,
    plot_distribution,
    plot_group_box,
)

logger = logging.getLogger(__name__)

BUCKET_COLUMN = "bucket"
LOG_COLUMN = "log"
ONLY_BUCKETS = "only"

# transform prefix -> derived column; "" is the raw feature
PREFIXES = ("", "l", "b")

BucketSpec = Union[int, Dict[Any, Any], None]


@dataclass
class ComparisonResult:
    """Outcome of one statistical comparison between the two outcome groups."""

    feature: str
    column: str
    test: str  # "mannwhitneyu" or "chi2_contingency"
    statistic: float
    p_value: float
    significant: bool
    median_diff: Optional[float] = None
    group_sizes: Tuple[int, int] = (0, 0)


@dataclass
class AutoReport:
    """Container for the results of FeatureExplorer.auto()."""

    feature: str
    kind: str
    results: Dict[str, ComparisonResult] = field(default_factory=dict)
    figures: List[Tuple[str, str, plt.Figure]] = field(default_factory=list)  # (prefix, kind, figure)


class FeatureExplorer:
    """
    Bucketize one feature and compare it across a binary outcome.

    Example:
        >>> import pandas as pd
        >>> from loanscope import FeatureExplorer
        >>>
        >>> loans = pd.read_csv("loans.csv", low_memory=False)
        >>> explorer = FeatureExplorer(loans, "int_rate", buckets=5)
        >>> explorer.stats()       # Mann-Whitney U on the raw values
        >>> explorer.stats("b")    # chi-squared on the buckets
        >>> explorer.stats("l")    # Mann-Whitney U on log(value + 1)
    """

    def __init__(
        self,
        data: pd.DataFrame,
        feature: str,
        outcome: Optional[str] = None,
        buckets: BucketSpec = None,
        categorical: bool = False,
        config: Optional[ExploreConfig] = None
    ):
        """
        Initialize the FeatureExplorer.

        Args:
            data: Source DataFrame. It is never modified.
            feature: Name of the feature column.
            outcome: Name of the binary outcome column. If None, uses
                config.outcome_column.
            buckets: Number of equal-depth buckets, a bucket dictionary, or None.
            categorical: Treat the feature as categorical even if it is numeric.
            config: ExploreConfig instance. If None, uses default configuration.

        Raises:
            KeyError: If the feature or outcome column is missing.
            InvalidDataError: If the outcome does not have exactly two values.
        """
        self.config = config if config is not None else ExploreConfig()
        self.feature = feature
        self.outcome = outcome if outcome is not None else self.config.outcome_column

        for column in (self.feature, self.outcome):
            if column not in data.columns:
                raise KeyError(f"Column '{column}' not found in DataFrame")

        subset = data[[self.feature, self.outcome]].copy()
        n_rows = len(subset)
        self.n_missing = int(subset[self.feature].isna().sum())
        self.missing_pct = 100.0 * self.n_missing / n_rows if n_rows else 0.0
        self.subset = subset.dropna(subset=[self.feature]).copy()
        logger.info(
            f"{self.feature}: dropped {self.n_missing} rows with missing values "
            f"({self.missing_pct:.2f}%)"
        )

        self.categorical = categorical
        is_float = pd.api.types.is_float_dtype(self.subset[self.feature])
        self.kind = "numeric" if is_float and not categorical else "categorical"

        outcomes = self.subset[self.outcome].dropna().unique().tolist()
        if len(outcomes) != 2:
            raise InvalidDataError(
                f"Outcome '{self.outcome}' must have exactly two values, found {len(outcomes)}"
            )
        self.outcomes: Tuple[Any, Any] = (outcomes[0], outcomes[1])

        self.buckets: Optional[Dict[str, List]] = None
        if buckets is not None:
            self.set_buckets(buckets)

        logger.info(
            f"FeatureExplorer initialized for '{self.feature}' ({self.kind}) "
            f"with {len(self.subset)} rows, outcomes {self.outcomes}"
        )

    # ------------------------------------------------------------------
    # Buckets
    # ------------------------------------------------------------------

    def set_buckets(self, buckets: Union[int, Dict[Any, Any]]) -> Dict[str, List]:
        """
        Install a bucket specification and assign every row.

        Args:
            buckets: Number of equal-depth buckets or a bucket dictionary.

        Returns:
            The normalized bucket dictionary.
        """
        values = self.subset[self.feature]
        if isinstance(buckets, dict):
            if self.kind == "numeric":
                self.buckets = normalize_buckets(buckets, values.min(), values.max())
            else:
                self.buckets = normalize_categories(buckets)
        elif isinstance(buckets, (int, np.integer)) and not isinstance(buckets, bool):
            if self.kind != "numeric":
                raise ValueError("Quantile buckets require a numeric feature")
            self.buckets = quantile_buckets(values, int(buckets), self.config.number_format)
        else:
            raise ValueError(f"Unsupported bucket specification: {buckets!r}")

        self.bucketize(force=True)
        return self.buckets

    def _default_buckets(self) -> Dict[str, List]:
        values = self.subset[self.feature]
        if self.kind == "numeric":
            return quantile_buckets(
                values, self.config.default_quantiles, self.config.number_format
            )
        return {str(value): [value] for value in natural_sort(values.unique())}

    def bucketize(self, force: bool = False) -> pd.Series:
        """
        Assign each row the label of the bucket containing its value.

        When several buckets match a value, the later one in dictionary order
        wins. Rows matching no bucket stay missing.

        Args:
            force: Recompute even if a bucket column already exists.

        Returns:
            The bucket column.
        """
        if BUCKET_COLUMN in self.subset.columns and not force:
            return self.subset[BUCKET_COLUMN]

        if self.buckets is None:
            self.buckets = self._default_buckets()

        values = self.subset[self.feature]
        assigned = pd.Series(np.nan, index=self.subset.index, dtype=object)
        for label, members in self.buckets.items():
            if self.kind == "numeric":
                mask = interval_mask(values, label, members)
            else:
                mask = values.isin(members)
            assigned[mask] = label

        self.subset[BUCKET_COLUMN] = assigned
        logger.debug(
            f"{self.feature}: {int(assigned.notna().sum())}/{len(assigned)} rows "
            f"assigned to {len(self.buckets)} buckets"
        )
        return self.subset[BUCKET_COLUMN]

    # ------------------------------------------------------------------
    # Transforms
    # ------------------------------------------------------------------

    def log_transform(self) -> pd.Series:
        """Natural log of (value + 1), computed once."""
        if self.kind != "numeric":
            raise ValueError(f"Log transform requires a numeric feature, '{self.feature}' is categorical")
        if LOG_COLUMN not in self.subset.columns:
            self.subset[LOG_COLUMN] = np.log1p(self.subset[self.feature])
        return self.subset[LOG_COLUMN]

    def resolve(self, prefix: str = "") -> str:
        """
        Map a transform prefix to the column it refers to.

        "" is the raw feature, "l" the log-transformed feature and "b" the
        bucket labels. Derived columns are created on first use.
        """
        if prefix == "":
            return self.feature
        if prefix == "l":
            self.log_transform()
            return LOG_COLUMN
        if prefix == "b":
            self.bucketize()
            return BUCKET_COLUMN
        raise ValueError(f"Unknown transform prefix {prefix!r}, expected one of {PREFIXES}")

    def _is_numeric(self, column: str) -> bool:
        return column != BUCKET_COLUMN and self.kind == "numeric"

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def _groups(self, column: str) -> Tuple[pd.Series, pd.Series]:
        groups = []
        for outcome in self.outcomes:
            values = self.subset.loc[self.subset[self.outcome] == outcome, column].dropna()
            if values.empty:
                raise InsufficientDataError(
                    f"No '{column}' values for outcome '{outcome}'"
                )
            groups.append(values)
        return groups[0], groups[1]

    def stats(self, prefix: str = "") -> ComparisonResult:
        """
        Compare the resolved column between the two outcome groups.

        Numeric columns get a two-sided Mann-Whitney U test and the median
        difference (group 0 minus group 1). Bucket labels and categorical
        features get a chi-squared test on the outcome x category table.

        Args:
            prefix: Transform prefix, see resolve().

        Returns:
            ComparisonResult.

        Raises:
            InsufficientDataError: If an outcome group has no values.
        """
        column = self.resolve(prefix)
        group0, group1 = self._groups(column)

        if self._is_numeric(column):
            median_diff = float(group0.median() - group1.median())
            statistic, p_value = stats.mannwhitneyu(group0, group1, alternative="two-sided")
            test = "mannwhitneyu"
        else:
            median_diff = None
            table = pd.crosstab(self.subset[self.outcome], self.subset[column])
            statistic, p_value, _, _ = stats.chi2_contingency(table)
            test = "chi2_contingency"

        result = ComparisonResult(
            feature=self.feature,
            column=column,
            test=test,
            statistic=float(statistic),
            p_value=float(p_value),
            significant=bool(p_value < self.config.p_value),
            median_diff=median_diff,
            group_sizes=(len(group0), len(group1)),
        )
        logger.info(
            f"{self.feature} [{column}] {test}: statistic={result.statistic:.4f}, "
            f"p={result.p_value:.5g}"
            + (f", median diff={median_diff:.4f}" if median_diff is not None else "")
        )
        return result

    def positive_outcome(self) -> Any:
        if self.config.positive_outcome is not None:
            return self.config.positive_outcome
        return self.outcomes[1]

    def category_rates(self, prefix: str = "") -> pd.DataFrame:
        """
        Row count and positive-outcome share for each category of the resolved column.

        Returns:
            DataFrame with columns ['category', 'count', 'rate'] in natural order.
        """
        column = self.resolve(prefix)
        data = self.subset[[column, self.outcome]].dropna()
        positive = data[self.outcome] == self.positive_outcome()
        grouped = positive.groupby(data[column])
        rates = pd.DataFrame({
            "category": grouped.size().index,
            "count": grouped.size().to_numpy(),
            "rate": grouped.mean().to_numpy(),
        })
        order = sorted(range(len(rates)), key=lambda i: natural_key(rates["category"].iloc[i]))
        return rates.iloc[order].reset_index(drop=True)

    # ------------------------------------------------------------------
    # Plots
    # ------------------------------------------------------------------

    def plot_kinds(self, prefix: str = "") -> List[str]:
        """Names of the plots that apply to the resolved column."""
        column = self.resolve(prefix)
        if self._is_numeric(column):
            return ["hist", "box"]
        return ["count", "rate"]

    def plot(self, prefix: str = "") -> List[Tuple[str, plt.Figure]]:
        """
        Render the plots that apply to the resolved column.

        Returns:
            List of (plot kind, figure) pairs.
        """
        column = self.resolve(prefix)
        figures = []
        for kind in self.plot_kinds(prefix):
            if kind == "hist":
                fig, _ = plot_distribution(self.subset[column], column)
            elif kind == "box":
                fig, _ = plot_group_box(self.subset, column, self.outcome, order=list(self.outcomes))
            elif kind == "count":
                order = natural_sort(self.subset[column].dropna().unique())
                fig, _ = plot_category_counts(self.subset, column, self.outcome, order=order)
            else:
                fig, _ = plot_category_rates(self.category_rates(prefix), column, str(self.positive_outcome()))
            figures.append((kind, fig))
        return figures

    # ------------------------------------------------------------------
    # Editing and orchestration
    # ------------------------------------------------------------------

    def delete_values(self, values: List[Any]) -> int:
        """
        Remove rows from the working subset.

        Args:
            values: Scalars remove rows equal to them; two-element lists remove
                rows inside the closed range [a, b].

        Returns:
            Number of removed rows.
        """
        column = self.subset[self.feature]
        drop = pd.Series(False, index=self.subset.index)
        for value in values:
            match value:
                case [lower, upper]:
                    drop |= column.between(lower, upper, inclusive="both")
                case _:
                    drop |= column == value

        removed = int(drop.sum())
        self.subset = self.subset.loc[~drop].copy()
        logger.info(f"{self.feature}: deleted {removed} rows")
        return removed

    def auto(self, log: bool = False, buckets: Union[BucketSpec, str] = None) -> AutoReport:
        """
        Run the usual comparison and plots in one call.

        Args:
            log: Compare and plot log(value + 1) instead of the raw values.
            buckets: Number of quantile buckets or a bucket dictionary to
                install before bucket stats and plots. "only" skips the
                raw-feature plots and uses the existing (or default) buckets.

        Returns:
            AutoReport with results keyed by transform prefix and the figures.
        """
        if log and self.kind != "numeric":
            logger.warning(f"{self.feature} is categorical, ignoring log=True")
            log = False
        prefix = "l" if log else ""
        only_buckets = isinstance(buckets, str) and buckets == ONLY_BUCKETS

        report = AutoReport(feature=self.feature, kind=self.kind)
        report.results[prefix] = self.stats(prefix)

        if buckets is not None and not only_buckets:
            self.set_buckets(buckets)

        if not only_buckets:
            for kind, fig in self.plot(prefix):
                report.figures.append((prefix, kind, fig))

        if buckets is not None:
            report.results["b"] = self.stats("b")
            for kind, fig in self.plot("b"):
                report.figures.append(("b", kind, fig))

        return report
