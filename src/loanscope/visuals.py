"""
Visualization module for loanscope.

This module contains all matplotlib and seaborn plotting functions.
All functions return figure and axis objects without saving files.
"""

from typing import Optional, Tuple, List

import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns


def _figure(ax: Optional[plt.Axes]) -> Tuple[plt.Figure, plt.Axes]:
    if ax is None:
        fig, ax = plt.subplots(figsize=(6, 4))
    else:
        fig = ax.figure
    return fig, ax


def plot_distribution(
    values: pd.Series,
    feature_name: str,
    bins: int = 30,
    ax: Optional[plt.Axes] = None
) -> Tuple[plt.Figure, plt.Axes]:
    """
    Plot a histogram of a numeric feature.

    Args:
        values: Feature values.
        feature_name: Name shown on the x axis.
        bins: Number of histogram bins.
        ax: Optional matplotlib axis. If None, creates new figure.

    Returns:
        Tuple of (figure, axis).
    """
    fig, ax = _figure(ax)

    sns.histplot(x=values.to_numpy(), bins=bins, kde=True, color="steelblue", ax=ax)
    ax.set_title(f"Distribution of {feature_name}", fontsize=10)
    ax.set_xlabel(feature_name, fontsize=9)
    ax.set_ylabel("count", fontsize=9)
    ax.tick_params(labelsize=8)
    plt.tight_layout()

    return fig, ax


def plot_group_box(
    data: pd.DataFrame,
    column: str,
    outcome: str,
    order: Optional[List] = None,
    ax: Optional[plt.Axes] = None
) -> Tuple[plt.Figure, plt.Axes]:
    """
    Plot boxplots of a numeric column for each outcome group.

    Args:
        data: Table holding the column and the outcome.
        column: Numeric column to compare.
        outcome: Outcome column defining the groups.
        order: Order of the outcome groups on the x axis.
        ax: Optional matplotlib axis. If None, creates new figure.

    Returns:
        Tuple of (figure, axis).
    """
    fig, ax = _figure(ax)

    sns.boxplot(
        data=data,
        x=outcome,
        y=column,
        order=order,
        flierprops={"marker": "o", "markersize": 2},
        medianprops=dict(color="black"),
        ax=ax
    )
    ax.set_title(f"{column} by {outcome}", fontsize=10)
    ax.set_xlabel(outcome, fontsize=9)
    ax.set_ylabel(column, fontsize=9)
    ax.tick_params(labelsize=8)
    plt.tight_layout()

    return fig, ax


def plot_category_counts(
    data: pd.DataFrame,
    column: str,
    outcome: str,
    order: Optional[List] = None,
    ax: Optional[plt.Axes] = None
) -> Tuple[plt.Figure, plt.Axes]:
    """
    Plot row counts per category, split by outcome.

    Args:
        data: Table holding the column and the outcome.
        column: Categorical (or bucket label) column.
        outcome: Outcome column used as hue.
        order: Category order on the x axis.
        ax: Optional matplotlib axis. If None, creates new figure.

    Returns:
        Tuple of (figure, axis).
    """
    fig, ax = _figure(ax)

    sns.countplot(data=data, x=column, hue=outcome, order=order, ax=ax)
    ax.set_title(f"{column} counts", fontsize=10)
    ax.set_xlabel(column, fontsize=9)
    ax.set_ylabel("count", fontsize=9)
    ax.tick_params(axis="x", labelrotation=45, labelsize=7)
    ax.legend(fontsize=8)
    plt.tight_layout()

    return fig, ax


def plot_category_rates(
    rates: pd.DataFrame,
    column: str,
    positive: str,
    ax: Optional[plt.Axes] = None
) -> Tuple[plt.Figure, plt.Axes]:
    """
    Plot the share of rows with the positive outcome per category.

    Args:
        rates: Table with 'category' and 'rate' columns, already ordered.
        column: Name of the categorized column, used in labels.
        positive: The outcome value the rate refers to.
        ax: Optional matplotlib axis. If None, creates new figure.

    Returns:
        Tuple of (figure, axis).
    """
    fig, ax = _figure(ax)

    labels = [str(c) for c in rates["category"]]
    sns.barplot(x=labels, y=rates["rate"].to_numpy(), order=labels, color="steelblue", ax=ax)
    ax.set_title(f"Rate of '{positive}' by {column}", fontsize=10)
    ax.set_xlabel(column, fontsize=9)
    ax.set_ylabel(f"share {positive}", fontsize=9)
    ax.set_ylim(0, 1)
    ax.tick_params(axis="x", labelrotation=45, labelsize=7)
    plt.tight_layout()

    return fig, ax
