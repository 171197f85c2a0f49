"""Dictionary sentiment scoring against fixed term -> polarity tables."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

import pandas as pd
from loguru import logger

from ..errors import DataAccessError
from ..io_utils import read_json
from .base import ScoreResult, ScoringInput

Weighting = Literal["intersection", "frequency"]

POSITIVE = "positive"
NEGATIVE = "negative"


@dataclass(frozen=True)
class Lexicon:
    """Either numeric weights (AFINN style) or category sets (Bing/NRC/Loughran style)."""

    name: str
    weights: dict[str, float] = field(default_factory=dict)
    categories: dict[str, frozenset[str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if bool(self.weights) == bool(self.categories):
            raise ValueError("A lexicon holds exactly one of numeric weights or categories.")

    @property
    def is_numeric(self) -> bool:
        return bool(self.weights)

    @property
    def terms(self) -> frozenset[str]:
        return frozenset(self.weights or self.categories)

    def category_names(self) -> list[str]:
        return sorted({name for names in self.categories.values() for name in names})

    @classmethod
    def from_mapping(cls, name: str, mapping: Mapping[str, object]) -> "Lexicon":
        """Build from ``{term: number}`` or ``{term: category | [categories]}``."""
        if all(isinstance(value, (int, float)) and not isinstance(value, bool) for value in mapping.values()):
            return cls(name=name, weights={term.lower(): float(value) for term, value in mapping.items()})
        categories: dict[str, set[str]] = {}
        for term, value in mapping.items():
            if isinstance(value, str):
                labels = [value]
            elif isinstance(value, (list, tuple)) and all(isinstance(label, str) for label in value):
                labels = list(value)
            else:
                raise ValueError(
                    f"Lexicon entry '{term}' must be a category or list of categories when "
                    f"other entries are not numeric; got {value!r}."
                )
            categories.setdefault(term.lower(), set()).update(str(label).lower() for label in labels)
        return cls(name=name, categories={term: frozenset(labels) for term, labels in categories.items()})


@dataclass(frozen=True)
class LexiconTally:
    """Outcome of matching one token stream against a lexicon."""

    score: float
    matches: int
    categories: dict[str, int] = field(default_factory=dict)


def load_lexicon(path: str | Path, name: str | None = None) -> Lexicon:
    """Load a lexicon from JSON (``{term: value}``) or tidytext-style CSV.

    CSV files need a ``word`` column plus ``value`` (numeric) or ``sentiment``
    (category); a word may repeat with several categories.
    """
    source = Path(path)
    lexicon_name = name or source.stem
    if source.suffix.lower() == ".json":
        payload = read_json(source)
        if not isinstance(payload, dict):
            raise DataAccessError(f"Lexicon {source} must be a JSON object of term -> value.")
        try:
            return Lexicon.from_mapping(lexicon_name, payload)
        except ValueError as exc:
            raise DataAccessError(f"Invalid lexicon {source}: {exc}") from exc

    try:
        frame = pd.read_csv(source)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise DataAccessError(f"Could not read lexicon {source}: {exc}") from exc

    if "word" not in frame.columns:
        raise DataAccessError(f"Lexicon {source} needs a 'word' column.")
    frame = frame.dropna(subset=["word"])
    if "value" in frame.columns:
        weights = dict(zip(frame["word"].astype(str).str.lower(), frame["value"].astype(float)))
        return Lexicon(name=lexicon_name, weights=weights)
    if "sentiment" in frame.columns:
        grouped = frame.groupby(frame["word"].astype(str).str.lower())["sentiment"]
        categories = {word: frozenset(str(s).lower() for s in values) for word, values in grouped}
        return Lexicon(name=lexicon_name, categories=categories)
    raise DataAccessError(f"Lexicon {source} needs a 'value' or 'sentiment' column.")


def _matched_counts(tokens: Iterable[str], lexicon: Lexicon, weighting: Weighting) -> Counter[str]:
    counts = Counter(token.lower() for token in tokens)
    if weighting == "intersection":
        return counts & Counter(lexicon.terms)
    return Counter({term: count for term, count in counts.items() if term in lexicon.terms})


def score_tokens(
    tokens: Iterable[str],
    lexicon: Lexicon,
    weighting: Weighting = "intersection",
) -> LexiconTally:
    """Tally the lexicon entries found in ``tokens``.

    With ``"intersection"`` the token multiset is intersected with the lexicon's
    term set, so each entry counts at most once; ``"frequency"`` counts every
    occurrence. Numeric lexicons sum the matched weights; categorical ones
    score ``positive - negative`` and report per-category counts.
    """
    matched = _matched_counts(tokens, lexicon, weighting)
    total = sum(matched.values())
    if lexicon.is_numeric:
        score = sum(lexicon.weights[term] * count for term, count in matched.items())
        return LexiconTally(score=float(score), matches=total)

    categories = {name: 0 for name in lexicon.category_names()}
    for term, count in matched.items():
        for label in lexicon.categories[term]:
            categories[label] += count
    score = categories.get(POSITIVE, 0) - categories.get(NEGATIVE, 0)
    return LexiconTally(score=float(score), matches=total, categories=categories)


@dataclass
class LexiconStrategy:
    """Lookup strategy: no fitting, one tally per target document."""

    lexicon: Lexicon
    weighting: Weighting = "intersection"
    normalize: bool = False
    include_categories: bool = False
    name: str | None = None

    def produce_scores(self, data: ScoringInput) -> ScoreResult:
        column = self.name or self.lexicon.name
        scores: dict[str, float] = {}
        category_columns: dict[str, dict[str, float]] = {}
        matched_docs = 0

        for doc_id in data.targets():
            tokens = data.tokens.get(doc_id, ())
            tally = score_tokens(tokens, self.lexicon, self.weighting)
            matched_docs += tally.matches > 0
            value = tally.score
            if self.normalize:
                value = value / len(tokens) if tokens else 0.0
            scores[doc_id] = value
            if self.include_categories:
                for label, count in tally.categories.items():
                    category_columns.setdefault(f"{column}_{label}", {})[doc_id] = float(count)

        logger.debug("lexicon:scored | lexicon={} | documents={} | with_matches={}", self.lexicon.name, len(scores), matched_docs)
        return ScoreResult(
            strategy="lexicon",
            columns={column: scores, **category_columns},
            metadata={
                "lexicon": self.lexicon.name,
                "terms": len(self.lexicon.terms),
                "weighting": self.weighting,
                "normalized": self.normalize,
                "documents_with_matches": matched_docs,
            },
        )
