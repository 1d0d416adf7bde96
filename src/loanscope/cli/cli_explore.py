"""
CLI entry point for exploring a single loan feature.

Given a CSV file and a feature name, prints the outcome comparison and
optionally saves the plots.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from loanscope.analyzer import ONLY_BUCKETS, ComparisonResult, FeatureExplorer
from loanscope.config import ExploreConfig
from loanscope.dataset import load_loans

logger = logging.getLogger(__name__)


def parse_delete(text: str):
    """'5' -> 5.0, '5:10' -> [5.0, 10.0]; non-numeric text is kept as a string."""
    if ":" in text:
        lower, upper = text.split(":", 1)
        return [float(lower), float(upper)]
    try:
        return float(text)
    except ValueError:
        return text


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="loanscope: compare one feature against the outcome")
    parser.add_argument("--data", type=str, required=True, help="Path to the loan CSV")
    parser.add_argument("--feature", type=str, required=True, help="Feature column to explore")
    parser.add_argument("--outcome", type=str, default=None, help="Binary outcome column")

    buckets = parser.add_mutually_exclusive_group()
    buckets.add_argument("--buckets", type=int, default=None, help="Number of quantile buckets")
    buckets.add_argument("--buckets-json", type=str, default=None, help="Bucket dictionary as JSON")
    buckets.add_argument("--only-buckets", action="store_true", help="Skip raw-feature plots")

    parser.add_argument("--log", action="store_true", help="Use log(value + 1)")
    parser.add_argument("--categorical", action="store_true", help="Treat the feature as categorical")
    parser.add_argument("--delete", action="append", default=[], type=parse_delete,
                        help="Value (5) or closed range (5:10) to remove; repeatable")
    parser.add_argument("--number-format", choices=["float", "int"], default="float")
    parser.add_argument("--p-value", type=float, default=0.05)
    parser.add_argument("--output", type=str, default=None, help="Directory for plots")
    return parser.parse_args(argv)


def format_result(result: ComparisonResult) -> str:
    line = (
        f"{result.column}: {result.test} statistic={result.statistic:.4f} "
        f"p={result.p_value:.5g} n={result.group_sizes[0]}/{result.group_sizes[1]}"
    )
    if result.median_diff is not None:
        line += f" median_diff={result.median_diff:.4f}"
    if result.significant:
        line += " *"
    return line


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    config = ExploreConfig(number_format=args.number_format, p_value=args.p_value)

    if args.buckets_json:
        buckets = json.loads(args.buckets_json)
    elif args.only_buckets:
        buckets = ONLY_BUCKETS
    else:
        buckets = args.buckets

    try:
        data = load_loans(Path(args.data))
        explorer = FeatureExplorer(
            data, args.feature, outcome=args.outcome, categorical=args.categorical, config=config
        )
        if args.delete:
            explorer.delete_values(args.delete)
        report = explorer.auto(log=args.log, buckets=buckets)
    except (FileNotFoundError, KeyError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(f"{args.feature} ({explorer.kind}): {len(explorer.subset)} rows, "
          f"{explorer.n_missing} missing ({explorer.missing_pct:.2f}%)")
    for result in report.results.values():
        print(format_result(result))

    if args.output:
        out_dir = Path(args.output)
        out_dir.mkdir(parents=True, exist_ok=True)
        for prefix, kind, fig in report.figures:
            fig.savefig(out_dir / f"{args.feature}_{prefix or 'raw'}_{kind}.png", dpi=150, bbox_inches="tight")
            plt.close(fig)
        print(f"Plots saved to {out_dir}")
    else:
        plt.close("all")
    return 0


if __name__ == "__main__":
    sys.exit(main())
