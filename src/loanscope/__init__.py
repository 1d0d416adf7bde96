"""
loanscope: exploratory comparison of loan features against a binary outcome.

A Python package for bucketizing a loan dataset's features into labeled
ranges and testing them against a two-valued outcome such as loan_status.
"""

__version__ = "1.0.0"

from loanscope.config import ExploreConfig
from loanscope.exceptions import ClassificationError, InsufficientDataError, InvalidDataError
from loanscope.analyzer import AutoReport, ComparisonResult, FeatureExplorer
from loanscope.survey import LoanSurvey

__all__ = [
    "ExploreConfig",
    "FeatureExplorer",
    "ComparisonResult",
    "AutoReport",
    "LoanSurvey",
    "InvalidDataError",
    "InsufficientDataError",
    "ClassificationError",
]
