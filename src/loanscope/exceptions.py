"""Errors raised by loanscope."""


class InvalidDataError(ValueError):
    """The outcome column does not hold exactly two distinct values."""


class InsufficientDataError(ValueError):
    """An outcome group is empty when a statistical test is requested."""


class ClassificationError(ValueError):
    """A bucket label does not use a recognized bracket pattern."""
