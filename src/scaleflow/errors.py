"""Error types raised by the scaleflow pipeline stages."""

from __future__ import annotations


class ScaleFlowError(Exception):
    """Base class for all fatal pipeline errors."""


class DataAccessError(ScaleFlowError):
    """Raised when a corpus source or sink cannot be read or written."""


class EmptyVocabularyError(ScaleFlowError, ValueError):
    """Raised when trimming leaves no features to score on."""


class InsufficientReferenceDataError(ScaleFlowError, ValueError):
    """Raised when reference documents or seed terms cannot calibrate a model."""


class AmbiguousJoinKeyError(ScaleFlowError, ValueError):
    """Raised when duplicate document identifiers break a one-to-one merge."""
