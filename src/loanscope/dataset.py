"""
Dataset helpers for loanscope.

Loading the loan CSV, auditing missing values and pruning sparse columns
before individual features are explored.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

import pandas as pd

from loanscope.exceptions import InvalidDataError

logger = logging.getLogger(__name__)


def load_loans(
    path: Union[str, Path],
    columns: Optional[Sequence[str]] = None,
    nrows: Optional[int] = None
) -> pd.DataFrame:
    """
    Read the loan dataset from a CSV file.

    Args:
        path: Path to the CSV file.
        columns: Optional subset of columns to read.
        nrows: Optional number of rows to read.

    Returns:
        The loaded DataFrame.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dataset not found: {path}")

    df = pd.read_csv(path, usecols=columns, nrows=nrows, low_memory=False)
    logger.info(f"Loaded {df.shape[0]} rows and {df.shape[1]} columns from {path}")
    return df


def missing_summary(df: pd.DataFrame) -> pd.DataFrame:
    """
    Count missing values per column.

    Returns:
        DataFrame with columns ['column', 'n_missing', 'pct_missing'], only
        columns with at least one missing value, most missing first.
    """
    n_missing = df.isna().sum()
    n_missing = n_missing[n_missing > 0].sort_values(ascending=False, kind="stable")
    pct = 100.0 * n_missing / max(len(df), 1)
    return pd.DataFrame({
        "column": n_missing.index.tolist(),
        "n_missing": n_missing.to_numpy(),
        "pct_missing": pct.to_numpy(),
    })


def prune_columns(
    df: pd.DataFrame,
    threshold: float = 0.5,
    keep: Iterable[str] = ()
) -> pd.DataFrame:
    """
    Drop columns whose fraction of missing values exceeds the threshold.

    Args:
        df: Source DataFrame. It is not modified.
        threshold: Maximum tolerated fraction of missing values, in [0, 1].
        keep: Columns that are never dropped.

    Returns:
        A new DataFrame without the sparse columns.
    """
    if not 0 <= threshold <= 1:
        raise ValueError("threshold must be in [0, 1]")

    keep = set(keep)
    fractions = df.isna().mean() if len(df) else pd.Series(0.0, index=df.columns)
    dropped: List[str] = [
        col for col, frac in fractions.items() if frac > threshold and col not in keep
    ]
    if dropped:
        logger.info(f"Dropping {len(dropped)} columns above {threshold:.0%} missing: {dropped}")
    return df.drop(columns=dropped)


def restrict_outcome(df: pd.DataFrame, outcome: str, values: Sequence) -> pd.DataFrame:
    """
    Keep only the rows whose outcome is one of two given values.

    Raises:
        KeyError: If the outcome column is missing.
        InvalidDataError: If values does not hold exactly two distinct entries.
    """
    if outcome not in df.columns:
        raise KeyError(f"Column '{outcome}' not found in DataFrame")
    if len(set(values)) != 2:
        raise InvalidDataError(f"Expected exactly two outcome values, got {list(values)}")

    restricted = df[df[outcome].isin(values)].copy()
    logger.info(
        f"Restricted '{outcome}' to {list(values)}: kept {len(restricted)} of {len(df)} rows"
    )
    return restricted
