"""
CLI entry point for loanscope PDF report generation.

Explores several features of a loan CSV, writes their plots and a PDF report.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import matplotlib
from pandas.api.types import is_float_dtype

matplotlib.use("Agg")

from loanscope.config import ExploreConfig
from loanscope.dataset import load_loans, prune_columns, restrict_outcome
from loanscope.survey import LoanSurvey

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="loanscope: generate plots and a PDF report")
    parser.add_argument("--data", type=str, required=True, help="Path to the loan CSV")
    parser.add_argument("--features", type=str, nargs="+", required=True, help="Feature columns")
    parser.add_argument("--output", type=str, required=True, help="Output directory for plots/report")
    parser.add_argument("--label", type=str, default="Loan dataset", help="Label shown in the report")
    parser.add_argument("--outcome", type=str, default="loan_status")
    parser.add_argument("--keep-outcome", type=str, nargs=2, default=None,
                        help="Restrict the outcome to these two values")
    parser.add_argument("--buckets", type=int, default=None, help="Quantile buckets for numeric features")
    parser.add_argument("--categorical", type=str, nargs="*", default=[],
                        help="Features to treat as categorical")
    parser.add_argument("--missing-threshold", type=float, default=0.5)
    parser.add_argument("--p-value", type=float, default=0.05)
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    config = ExploreConfig(
        outcome_column=args.outcome,
        p_value=args.p_value,
        missing_threshold=args.missing_threshold,
    )

    try:
        data = load_loans(Path(args.data))
        if args.keep_outcome:
            data = restrict_outcome(data, args.outcome, args.keep_outcome)
        data = prune_columns(data, config.missing_threshold, keep=[args.outcome])
    except (FileNotFoundError, KeyError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    plan = {}
    for feature in args.features:
        if feature not in data.columns:
            logger.warning(f"!! '{feature}' not in dataset (missing or pruned). Skipping...")
            continue
        categorical = feature in args.categorical
        plan[feature] = {"categorical": categorical}
        if args.buckets and not categorical and is_float_dtype(data[feature]):
            plan[feature]["buckets"] = args.buckets

    out_dir = Path(args.output)
    out_dir.mkdir(parents=True, exist_ok=True)

    survey = LoanSurvey(data, config=config)
    try:
        reports = survey.run(plan)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    if not reports:
        print("error: no feature could be explored", file=sys.stderr)
        return 1

    survey.save_plots(out_dir)
    report_path = survey.generate_report(out_dir / "loanscope_report.pdf", label=args.label)
    print(f"PDF report saved to {report_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
