"""
High-level LoanSurvey class for loanscope.

This class runs FeatureExplorer over several features of one dataset and
handles the I/O side: saving plots and writing the PDF report.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd
import matplotlib.pyplot as plt

from loanscope.analyzer import AutoReport, FeatureExplorer
from loanscope.config import ExploreConfig
from loanscope.exceptions import ClassificationError, InsufficientDataError, InvalidDataError

logger = logging.getLogger(__name__)

# options accepted by FeatureExplorer() vs. FeatureExplorer.auto()
_EXPLORER_OPTIONS = ("categorical", "delete")
_AUTO_OPTIONS = ("log", "buckets")


class LoanSurvey:
    """
    Coordinator for exploring several features against the same outcome.

    Example:
        >>> loans = load_loans("loans.csv")
        >>> survey = LoanSurvey(loans)
        >>> survey.run({
        ...     "int_rate": {"buckets": 5},
        ...     "annual_inc": {"log": True},
        ...     "grade": {"categorical": True},
        ...     "inq_last_6mths": {"buckets": {"0": [0, 0], "1+": [1, "max"]}},
        ... })
        >>> survey.save_plots("./output")
        >>> survey.generate_report("./output/loanscope_report.pdf")
    """

    def __init__(
        self,
        data: pd.DataFrame,
        config: Optional[ExploreConfig] = None,
        outcome: Optional[str] = None
    ):
        """
        Initialize the LoanSurvey.

        Args:
            data: Source DataFrame shared (read-only) by all explorers.
            config: ExploreConfig instance. If None, uses default configuration.
            outcome: Outcome column. If None, uses config.outcome_column.
        """
        self.data = data
        self.config = config if config is not None else ExploreConfig()
        self.outcome = outcome if outcome is not None else self.config.outcome_column
        self.explorers: Dict[str, FeatureExplorer] = {}
        self.reports: Dict[str, AutoReport] = {}
        self._plot_paths: Dict[str, List[Path]] = {}

        logger.info(f"LoanSurvey initialized with {data.shape[0]} rows, outcome '{self.outcome}'")

    def explore(self, feature: str, categorical: bool = False) -> FeatureExplorer:
        """
        Return the FeatureExplorer of a feature, creating it on first use.

        A cached explorer built with a different categorical flag is replaced.
        """
        cached = self.explorers.get(feature)
        if cached is None or cached.categorical != categorical:
            if cached is not None:
                logger.info(f"Rebuilding explorer for '{feature}' with categorical={categorical}")
            self.explorers[feature] = FeatureExplorer(
                self.data,
                feature,
                outcome=self.outcome,
                categorical=categorical,
                config=self.config,
            )
        return self.explorers[feature]

    def run(self, plan: Dict[str, Optional[Dict[str, Any]]]) -> Dict[str, AutoReport]:
        """
        Run FeatureExplorer.auto() for each feature of the plan.

        Args:
            plan: Mapping feature -> options. Recognized options are
                'categorical' and 'delete' (list passed to delete_values)
                for the explorer, 'log' and 'buckets' for auto().

        Returns:
            Dictionary mapping feature names to AutoReport.
        """
        for feature, options in plan.items():
            options = dict(options or {})
            unknown = set(options) - set(_EXPLORER_OPTIONS) - set(_AUTO_OPTIONS)
            if unknown:
                raise ValueError(f"Unknown options for '{feature}': {sorted(unknown)}")

            logger.info(f">> Exploring feature: {feature}")
            try:
                explorer = self.explore(feature, categorical=options.get("categorical", False))
                if options.get("delete"):
                    explorer.delete_values(options["delete"])
                self.reports[feature] = explorer.auto(
                    log=options.get("log", False),
                    buckets=options.get("buckets"),
                )
            except (InvalidDataError, InsufficientDataError, ClassificationError) as e:
                logger.warning(f"!! Skipping '{feature}': {e}")
                continue

        logger.info(f"Survey complete: {len(self.reports)} of {len(plan)} features explored")
        return self.reports

    def save_plots(self, output_dir: Union[str, Path], dpi: int = 150) -> List[Path]:
        """
        Save all figures of the stored reports to disk and close them.

        Files are named <feature>_<prefix>_<kind>.png, with "raw" as the
        prefix of untransformed plots.

        Returns:
            Paths of the written files.
        """
        if not self.reports:
            raise ValueError("No results available. Call run() first.")

        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Saving plots to {output_dir}")

        written = []
        for feature, report in self.reports.items():
            paths = self._plot_paths[feature] = []
            for prefix, kind, fig in report.figures:
                path = output_dir / f"{feature}_{prefix or 'raw'}_{kind}.png"
                fig.savefig(path, dpi=dpi, bbox_inches="tight")
                plt.close(fig)
                paths.append(path)
                written.append(path)
        return written

    def generate_report(
        self,
        output_path: Union[str, Path],
        label: str = "Loan dataset"
    ) -> Path:
        """
        Generate a PDF report from the stored reports and saved plots.

        Args:
            output_path: Path to save the PDF report.
            label: Label for the dataset.

        Returns:
            Path of the written PDF.
        """
        from loanscope.report_generator import generate_pdf_report

        if not self.reports:
            raise ValueError("No results available. Call run() first.")

        return generate_pdf_report(
            self.reports,
            output_path,
            label,
            self.config,
            plot_paths=self._plot_paths,
            n_rows=len(self.data),
        )
