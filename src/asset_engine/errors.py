from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    NORMALIZATION_FALLBACK = "NormalizationFallback"
    OUT_OF_RANGE_CLAMPED = "OutOfRangeClamped"
    UNSUPPORTED_TYPE = "UnsupportedType"
    DUPLICATE_PDF = "DuplicatePdf"
    MULTIPLE_PDF_IN_BATCH = "MultiplePdfInBatch"
    SIZE_EXCEEDED = "SizeExceeded"
    STALE_OR_MISSING_CONTAINER = "StaleOrMissingContainer"


class InvalidFitModeError(ValueError):
    pass


class UnknownItemError(ValueError):
    pass


class ReorderInProgressError(RuntimeError):
    """Raised when a gesture starts before the previous reorder commit settled."""


__all__ = [
    "ErrorKind",
    "InvalidFitModeError",
    "UnknownItemError",
    "ReorderInProgressError",
]
