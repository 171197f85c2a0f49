"""Text scaling and lexicon scoring pipeline for resolution corpora."""

__version__ = "0.1.0"
