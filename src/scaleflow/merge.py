"""Left-join per-document scores back onto a corpus."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from numbers import Real
from typing import Any, Union

import pandas as pd
from loguru import logger

from .corpus import Corpus
from .errors import AmbiguousJoinKeyError

MISSING = pd.NA

ScoreSource = Union[Mapping[str, Any], Iterable[tuple[str, Any]], pd.Series, pd.DataFrame]


def _as_series(scores: ScoreSource) -> pd.Series:
    if isinstance(scores, pd.Series):
        series = scores.copy()
    elif isinstance(scores, pd.DataFrame):
        if scores.shape[1] != 2:
            raise ValueError("Score frames must have exactly two columns: id and score.")
        series = pd.Series(scores.iloc[:, 1].to_numpy(), index=scores.iloc[:, 0])
    elif isinstance(scores, Mapping):
        series = pd.Series(list(scores.values()), index=list(scores.keys()), dtype=object)
    else:
        pairs = list(scores)
        series = pd.Series([value for _, value in pairs], index=[key for key, _ in pairs], dtype=object)
    series.index = series.index.map(str)
    return series


def _is_numeric(values: pd.Series) -> bool:
    present = values.dropna()
    return all(isinstance(value, Real) and not isinstance(value, bool) for value in present)


def merge_scores(corpus: Corpus, scores: ScoreSource, column: str) -> Corpus:
    """Return a new corpus with ``column`` holding the score of each document.

    Documents without a score receive ``MISSING``. Duplicate identifiers in the
    corpus or in ``scores`` raise ``AmbiguousJoinKeyError``.
    """
    duplicates = corpus.duplicate_ids()
    if duplicates:
        raise AmbiguousJoinKeyError(f"Corpus has duplicate identifiers: {', '.join(duplicates[:5])}")

    series = _as_series(scores)
    repeated = sorted(set(series.index[series.index.duplicated()]))
    if repeated:
        raise AmbiguousJoinKeyError(f"Scores have duplicate identifiers: {', '.join(repeated[:5])}")

    ids = pd.Index(corpus.ids())
    unknown = series.index.difference(ids)
    if len(unknown):
        logger.debug("merge:unmatched_scores | column={} | count={}", column, len(unknown))

    aligned = series.reindex(ids)
    if _is_numeric(aligned):
        values = pd.array(pd.to_numeric(aligned, errors="coerce").to_numpy(), dtype="Float64")
    else:
        values = pd.array(aligned.to_numpy(), dtype="string")

    merged = corpus.with_column(column, values)
    logger.debug(
        "merge:done | column={} | scored={} | missing={}",
        column,
        int(aligned.notna().sum()),
        int(aligned.isna().sum()),
    )
    return merged
