"""
Bucket specifications for loanscope.

A bucket maps a display label to either a numeric interval or a list of raw
category values. Interval labels carry their inclusion type in their brackets,
e.g. "[0,5)" includes 0 and excludes 5.

User-supplied bucket dictionaries may use shorthand instead of explicit
[lower, upper] pairs:

    3          -> "[3,3]"
    "3"        -> "[3,3]"
    "3+"       -> "(3,max]"
    "3+=", "3=+" -> "[3,max]"
    [0, "max"] -> [0, <observed maximum>]

Raw values are parsed once into a small set of entry types (Scalar, Range,
CategoryList) and everything after that dispatches on the entry type.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from loanscope.exceptions import ClassificationError

logger = logging.getLogger(__name__)

Bound = Union[float, str]

_PLUS_PATTERN = re.compile(r"^(-?\d+)(\+=|=\+|\+)$")
_DIGIT_PATTERN = re.compile(r"^-?\d+$")
_BRACKETS = re.compile(r"[\[\]()]")
_DIGIT_RUNS = re.compile(r"(\d+)")

# (opening, closing) bracket -> pandas Series.between() inclusive argument
INTERVAL_TYPES = {
    ("[", "]"): "both",
    ("(", "]"): "right",
    ("[", ")"): "left",
    ("(", ")"): "neither",
}


@dataclass(frozen=True)
class Scalar:
    """A single value, i.e. the closed interval [value, value]."""

    value: float


@dataclass(frozen=True)
class Range:
    """An interval whose bounds may be the keywords "min" or "max"."""

    lower: Bound
    upper: Bound
    lower_inclusive: bool = True


@dataclass(frozen=True)
class CategoryList:
    """Raw categorical values grouped under one label."""

    values: Tuple[Any, ...]


BucketEntry = Union[Scalar, Range, CategoryList]


def parse_shorthand(text: str) -> Optional[BucketEntry]:
    """Parse "<int>", "<int>+", "<int>+=" or "<int>=+". Returns None if no match."""
    text = text.strip()
    plus = _PLUS_PATTERN.match(text)
    if plus:
        return Range(int(plus.group(1)), "max", lower_inclusive="=" in plus.group(2))
    if _DIGIT_PATTERN.match(text):
        return Scalar(int(text))
    return None


def parse_entry(value: Any) -> BucketEntry:
    """
    Parse a raw numeric bucket value into a bucket entry.

    Args:
        value: An int/float, a shorthand string or a [lower, upper] pair.

    Returns:
        Scalar or Range entry.

    Raises:
        ValueError: If the value is not a recognized bucket form.
    """
    match value:
        case Scalar() | Range():
            return value
        case bool():
            raise ValueError(f"Unsupported bucket value: {value!r}")
        case str():
            entry = parse_shorthand(value)
            if entry is None:
                raise ValueError(f"Unrecognized bucket shorthand: {value!r}")
            return entry
        case [lower, upper]:
            return Range(lower, upper)
        case int() | float() | np.integer() | np.floating():
            return Scalar(value)
        case _:
            raise ValueError(f"Unsupported bucket value: {value!r}")


def parse_categories(value: Any) -> CategoryList:
    """Wrap a categorical bucket value into a CategoryList."""
    match value:
        case CategoryList():
            return value
        case str():
            return CategoryList((value,))
        case list() | tuple() | set() | frozenset():
            return CategoryList(tuple(value))
        case _:
            return CategoryList((value,))


def format_number(value: Bound, number_format: Optional[str] = None) -> str:
    """
    Format a bucket bound for display.

    Keywords ("min", "max") are returned unchanged. number_format "float"
    gives two decimals, "int" gives no decimals. With None, whole numbers are
    printed as integers and fractions in positional notation, never in
    scientific notation.
    """
    if isinstance(value, str):
        return value
    if number_format == "float":
        return f"{value:.2f}"
    if number_format == "int":
        return f"{value:.0f}"
    if float(value).is_integer():
        return str(int(value))
    return np.format_float_positional(float(value), trim="-")


def entry_label(entry: BucketEntry) -> str:
    """Build the bracketed display label of an interval entry."""
    match entry:
        case Scalar(value=value):
            text = format_number(value)
            return f"[{text},{text}]"
        case Range(lower=lower, upper=upper, lower_inclusive=inclusive):
            opening = "[" if inclusive else "("
            return f"{opening}{format_number(lower)},{format_number(upper)}]"
        case _:
            raise ValueError(f"Category buckets have no interval label: {entry!r}")


def _resolve_bound(bound: Bound, minimum: float, maximum: float) -> float:
    if isinstance(bound, str):
        if bound == "min":
            return minimum
        if bound == "max":
            return maximum
        raise ValueError(f"Unknown bound keyword: {bound!r}")
    return bound


def entry_bounds(entry: BucketEntry, minimum: float, maximum: float) -> List[float]:
    """Explicit [lower, upper] of an interval entry, keywords resolved."""
    match entry:
        case Scalar(value=value):
            return [value, value]
        case Range(lower=lower, upper=upper):
            return [
                _resolve_bound(lower, minimum, maximum),
                _resolve_bound(upper, minimum, maximum),
            ]
        case _:
            raise ValueError(f"Category buckets have no bounds: {entry!r}")


def is_interval_label(label: Any) -> bool:
    label = str(label).strip()
    return len(label) >= 2 and (label[0], label[-1]) in INTERVAL_TYPES


def normalize_buckets(
    buckets: Dict[Any, Any], minimum: float, maximum: float
) -> Dict[str, List[float]]:
    """
    Rewrite a numeric bucket dictionary into bracketed labels and explicit bounds.

    Bracketed keys are kept verbatim. A shorthand key ("0", "1+", ...) decides
    the label and inclusion type while the value supplies the bounds. With any
    other key, a shorthand value decides the label; an explicit [lower, upper]
    value keeps the key as given.

    Args:
        buckets: Label -> value mapping as supplied by the user.
        minimum: Observed minimum of the feature, substituted for "min".
        maximum: Observed maximum of the feature, substituted for "max".

    Returns:
        Ordered mapping label -> [lower, upper].
    """
    normalized: Dict[str, List[float]] = {}
    for key, value in buckets.items():
        entry = parse_entry(value)
        bounds = entry_bounds(entry, minimum, maximum)

        key_text = str(key).strip()
        key_entry = parse_shorthand(key_text)
        if is_interval_label(key_text):
            label = key_text
        elif key_entry is not None:
            label = entry_label(key_entry)
        else:
            match value:
                case [_, _]:
                    label = key_text
                case _:
                    label = entry_label(entry)

        logger.debug(f"Bucket {key!r}: {value!r} -> {label} {bounds}")
        normalized[label] = bounds
    return normalized


def normalize_categories(buckets: Dict[Any, Any]) -> Dict[str, List[Any]]:
    """Categorical buckets keep their labels; lone values become one-item lists."""
    return {str(key): list(parse_categories(value).values) for key, value in buckets.items()}


_BASE_DECIMALS = {"int": 0, "float": 2}
_MAX_DECIMALS = 12


def _edge_texts(edges: List[float], number_format: str) -> List[str]:
    """Format quantile edges, adding decimals until distinct edges get distinct text."""
    decimals = _BASE_DECIMALS.get(number_format, 2)
    while decimals <= _MAX_DECIMALS:
        texts = [f"{edge:.{decimals}f}" for edge in edges]
        if len(set(texts)) == len(texts):
            if decimals != _BASE_DECIMALS.get(number_format, 2):
                logger.debug(f"Quantile labels widened to {decimals} decimals")
            return texts
        decimals += 1
    return [repr(float(edge)) for edge in edges]


def quantile_buckets(
    values: pd.Series, numq: int, number_format: str = "float"
) -> Dict[str, List[float]]:
    """
    Split a numeric series into numq equal-depth buckets.

    Boundaries are the quantiles at k/numq for k = 0..numq. Every bucket is
    right-open except the last one, which is closed, so each observed value
    falls into exactly one bucket. Bounds keep full precision; labels are
    formatted with number_format, widened with extra decimals whenever two
    distinct boundaries would otherwise print the same. Tied boundaries are
    merged, which yields fewer than numq buckets.

    Args:
        values: Numeric values without missing entries.
        numq: Number of buckets.
        number_format: "float" or "int" label formatting.

    Returns:
        Ordered mapping label -> [lower, upper].
    """
    if numq < 1:
        raise ValueError("numq must be >= 1")

    quantiles = values.quantile([k / numq for k in range(numq + 1)]).tolist()
    edges = sorted(set(quantiles))
    if len(edges) < len(quantiles):
        logger.info(f"{len(quantiles) - len(edges)} tied quantile boundaries merged")
    if len(edges) == 1:
        text = _edge_texts(edges, number_format)[0]
        return {f"[{text},{text}]": [edges[0], edges[0]]}

    texts = _edge_texts(edges, number_format)
    buckets: Dict[str, List[float]] = {}
    last = len(edges) - 2
    for k in range(len(edges) - 1):
        closing = "]" if k == last else ")"
        buckets[f"[{texts[k]},{texts[k + 1]}{closing}"] = [edges[k], edges[k + 1]]
    return buckets


def classify_interval(label: Any) -> str:
    """
    Classify the inclusion type of an interval label.

    Returns:
        "both" for [..], "right" for (..], "left" for [..), "neither" for (..).

    Raises:
        ClassificationError: If the label does not use one of these bracket pairs.
    """
    text = str(label).strip()
    if len(text) < 2 or (text[0], text[-1]) not in INTERVAL_TYPES:
        raise ClassificationError(f"Cannot classify bucket label {label!r}")
    return INTERVAL_TYPES[(text[0], text[-1])]


def interval_mask(values: pd.Series, label: str, bounds: List[float]) -> pd.Series:
    """Boolean mask of the values inside the interval described by label/bounds."""
    lower, upper = bounds
    return values.between(lower, upper, inclusive=classify_interval(label))


def natural_key(label: Any) -> Tuple:
    """
    Sort key comparing digit runs as integers.

    Interval brackets are removed first, so "[2,9]" sorts before "[10,99]".
    """
    text = _BRACKETS.sub("", str(label))
    return tuple(
        int(part) if part.isdigit() else part.lower()
        for part in _DIGIT_RUNS.split(text)
    )


def natural_sort(labels: Iterable[Any]) -> List[Any]:
    return sorted(labels, key=natural_key)
