"""
Segmentation-layer exceptions.
"""

from __future__ import annotations


class InvalidInputError(ValueError):
    """
    Raised when a partition request cannot be run.

    Covers an empty point set, inconsistent or zero dimensionality,
    non-numeric or non-finite values, and a cluster count or iteration cap that is
    not a positive integer. Always raised before the first iteration.
    """


class CSVHeaderValidationError(ValueError):
    """
    Raised when CSV shape/header validation fails.
    """


class EmptyDatasetError(ValueError):
    """
    Raised when a customer table yields no valid rows to segment.
    """
