"""
PDF report generation for loanscope.

This module turns the AutoReports of a LoanSurvey into a PDF summary.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union
from datetime import datetime

from fpdf import FPDF

from loanscope.analyzer import AutoReport, ComparisonResult
from loanscope.config import ExploreConfig

logger = logging.getLogger(__name__)

_PREFIX_NAMES = {"": "raw values", "l": "log(value + 1)", "b": "buckets"}


def _format_p_value(p_val: float, threshold: float = 0.05) -> str:
    """
    Format p-value according to the rule:
    - If p < threshold: display as "p < {threshold}"
    - If p >= threshold: display as "p = {value}" (rounded to 5 decimal places)
    """
    if p_val is None or p_val != p_val:  # NaN
        return "p = 1.00000"
    if p_val < threshold:
        return f"p < {threshold}"
    return f"p = {p_val:.5f}"


def _describe(result: ComparisonResult, outcomes: str, config: ExploreConfig) -> str:
    """Generate a human-readable sentence for one comparison."""
    p_val_str = _format_p_value(result.p_value, config.p_value)

    if result.test == "mannwhitneyu":
        direction = ""
        if result.median_diff is not None and result.median_diff != 0:
            side = "higher" if result.median_diff > 0 else "lower"
            direction = (
                f" The median of the first outcome group is {side} by "
                f"{abs(result.median_diff):.4g}."
            )
        if result.significant:
            return (
                f"'{result.column}' is distributed differently across {outcomes} "
                f"(Mann-Whitney U = {result.statistic:.1f}, {p_val_str}).{direction}"
            )
        return (
            f"'{result.column}' shows no significant difference across {outcomes} "
            f"(Mann-Whitney U = {result.statistic:.1f}, {p_val_str}).{direction}"
        )

    if result.significant:
        return (
            f"The categories of '{result.column}' are associated with the outcome "
            f"(chi-squared = {result.statistic:.2f}, {p_val_str})."
        )
    return (
        f"The categories of '{result.column}' show no significant association with the "
        f"outcome (chi-squared = {result.statistic:.2f}, {p_val_str})."
    )


class LoanScopePDF(FPDF):
    """Custom PDF class for loanscope reports."""

    def header(self):
        self.set_font("Helvetica", "B", 15)
        self.cell(0, 10, "Loan Feature Exploration Report", 0, 1, "C")
        self.ln(5)

    def footer(self):
        self.set_y(-15)
        self.set_font("Helvetica", "I", 8)
        self.cell(0, 10, f"Page {self.page_no()}", 0, 0, "C")


def generate_pdf_report(
    reports: Dict[str, AutoReport],
    output_path: Union[str, Path],
    label: str,
    config: ExploreConfig,
    plot_paths: Optional[Dict[str, List[Path]]] = None,
    n_rows: Optional[int] = None,
) -> Path:
    """Generate PDF report from feature reports, embedding saved plots when available."""
    pdf = LoanScopePDF()
    pdf.add_page()
    plot_paths = plot_paths or {}

    # Summary page
    pdf.set_font("Helvetica", "B", 16)
    pdf.cell(0, 10, f"Results for {label}", 0, 1, "C")
    pdf.ln(2)

    pdf.set_font("Helvetica", "", 9)
    pdf.cell(0, 4, f"Date: {datetime.today().strftime('%Y-%m-%d')}", 0, 1)
    pdf.ln(5)

    pdf.set_font("Helvetica", "B", 10)
    pdf.cell(0, 5, "Dataset Summary", 0, 1)
    pdf.set_font("Helvetica", "", 8)
    if n_rows is not None:
        pdf.cell(0, 4, f"Rows: {n_rows} | Features explored: {len(reports)}", 0, 1)
    else:
        pdf.cell(0, 4, f"Features explored: {len(reports)}", 0, 1)
    pdf.cell(0, 4, f"Significance threshold: p < {config.p_value}", 0, 1)
    pdf.ln(3)

    pdf.set_font("Helvetica", "B", 9)
    for header, width in (("feature", 60), ("type", 30), ("column", 30), ("test", 40), ("p-value", 30)):
        pdf.cell(width, 5, header, 1, 0, "C")
    pdf.ln()
    pdf.set_font("Helvetica", "", 8)
    for feature, report in reports.items():
        for result in report.results.values():
            pdf.cell(60, 5, feature[:40], 1, 0)
            pdf.cell(30, 5, report.kind, 1, 0)
            pdf.cell(30, 5, result.column[:20], 1, 0)
            pdf.cell(40, 5, result.test, 1, 0)
            pdf.cell(30, 5, _format_p_value(result.p_value, config.p_value), 1, 1)

    # One section per feature
    for feature, report in reports.items():
        pdf.add_page()
        pdf.set_font("Helvetica", "B", 12)
        pdf.cell(0, 8, f"{feature} ({report.kind})", 0, 1)
        pdf.ln(2)

        for prefix, result in report.results.items():
            pdf.set_font("Helvetica", "B", 10)
            pdf.cell(0, 5, _PREFIX_NAMES.get(prefix, prefix), 0, 1)
            pdf.set_font("Helvetica", "", 8)
            outcomes = f"the two outcome groups (n = {result.group_sizes[0]} / {result.group_sizes[1]})"
            pdf.multi_cell(pdf.epw, 4, _describe(result, outcomes, config), 0, "L")
            pdf.ln(2)

        images = [p for p in plot_paths.get(feature, []) if Path(p).exists()]
        if not images:
            pdf.set_font("Helvetica", "I", 8)
            pdf.cell(0, 4, "[Plots not available]", 0, 1, "C")
            continue

        img_width = 90
        for i, image in enumerate(images):
            if i % 2 == 0:
                row_y = pdf.get_y() + 2
                if row_y + 65 > 280:
                    pdf.add_page()
                    row_y = pdf.get_y() + 2
            img_x = 10 if i % 2 == 0 else 10 + img_width + 10
            pdf.image(str(image), x=img_x, y=row_y, w=img_width, h=0)
            if i % 2 == 1 or i == len(images) - 1:
                pdf.set_y(row_y + 65)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    pdf.output(str(output_path))
    logger.info(f"PDF report saved to {output_path}")
    return output_path
