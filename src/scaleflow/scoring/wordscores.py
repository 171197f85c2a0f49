"""Wordscores: supervised scaling from reference texts with known positions.

Each word used by a reference text receives the average position of the
reference texts, weighted by how much more often the word occurs in each one
(Laver, Benoit & Garry 2003). A document's raw score is the frequency-weighted
mean of the scores of its scorable words.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

import numpy as np
from loguru import logger

from ..errors import InsufficientReferenceDataError
from ..features import DocumentTermMatrix
from ..references import resolve_reference_scores
from ..schemas.config import RandomReferences, ReferenceDocuments
from .base import ScoreResult, ScoringInput

Rescaling = Literal["none", "lbg"]


@dataclass(frozen=True)
class WordscoresModel:
    """Fitted word scores over the reference vocabulary."""

    features: tuple[str, ...]
    word_scores: np.ndarray
    reference_ids: tuple[str, ...]
    reference_scores: np.ndarray
    smooth: float = 0.0

    def as_dict(self) -> dict[str, float]:
        return {feature: float(score) for feature, score in zip(self.features, self.word_scores)}


@dataclass(frozen=True)
class WordscoresPrediction:
    """Per-document raw scores; NaN marks documents without scorable words."""

    doc_ids: tuple[str, ...]
    raw: np.ndarray
    se: np.ndarray
    scored_words: np.ndarray
    lbg: np.ndarray | None = None


def fit_wordscores(
    matrix: DocumentTermMatrix,
    reference_scores: Mapping[str, float],
    smooth: float = 0.0,
) -> WordscoresModel:
    """Estimate word scores from the reference rows of ``matrix``."""
    if len(set(reference_scores.values())) < 2:
        raise InsufficientReferenceDataError(
            "Wordscores needs reference texts with at least 2 distinct scores."
        )
    index = matrix.row_index()
    missing = [doc_id for doc_id in reference_scores if doc_id not in index]
    if missing:
        raise InsufficientReferenceDataError(
            f"Reference document(s) not in feature matrix: {', '.join(missing)}"
        )

    ref_ids = tuple(reference_scores)
    ref_values = np.asarray([reference_scores[doc_id] for doc_id in ref_ids], dtype=float)
    counts = matrix.subset(ref_ids).counts.toarray().astype(float) + smooth

    totals = counts.sum(axis=1)
    empty = [ref_ids[i] for i in np.flatnonzero(totals == 0)]
    if empty:
        raise InsufficientReferenceDataError(
            f"Reference document(s) contain no features after trimming: {', '.join(empty)}"
        )

    relative = counts / totals[:, None]
    word_mass = relative.sum(axis=0)
    scorable = word_mass > 0
    if not scorable.any():
        raise InsufficientReferenceDataError("Reference texts share no features with the matrix.")

    probabilities = relative[:, scorable] / word_mass[scorable]
    word_scores = probabilities.T @ ref_values
    features = tuple(name for name, keep in zip(matrix.features, scorable) if keep)

    logger.debug("wordscores:fit | references={} | scored_words={}", len(ref_ids), len(features))
    return WordscoresModel(
        features=features,
        word_scores=word_scores,
        reference_ids=ref_ids,
        reference_scores=ref_values,
        smooth=smooth,
    )


def _lbg_rescale(raw: np.ndarray, reference_scores: np.ndarray) -> np.ndarray | None:
    scored = raw[~np.isnan(raw)]
    if len(scored) < 2 or np.std(scored, ddof=1) == 0:
        logger.warning("wordscores:lbg_skipped | scored_documents={}", len(scored))
        return None
    mean_virgin = scored.mean()
    ratio = np.std(reference_scores, ddof=1) / np.std(scored, ddof=1)
    return (raw - mean_virgin) * ratio + mean_virgin


def predict_wordscores(
    model: WordscoresModel,
    matrix: DocumentTermMatrix,
    rescaling: Rescaling = "none",
) -> WordscoresPrediction:
    """Score every row of ``matrix`` with the fitted word scores."""
    aligned = matrix.select_features(model.features).counts.toarray().astype(float)
    totals = aligned.sum(axis=1)
    if not (totals > 0).any():
        raise InsufficientReferenceDataError(
            "No prediction document shares a scored word with the reference texts."
        )

    with np.errstate(invalid="ignore", divide="ignore"):
        relative = aligned / totals[:, None]
        raw = relative @ model.word_scores
        spread = (relative * (model.word_scores[None, :] - raw[:, None]) ** 2).sum(axis=1)
        se = np.sqrt(spread) / np.sqrt(totals)
    raw[totals == 0] = np.nan
    se[totals == 0] = np.nan

    lbg = _lbg_rescale(raw, model.reference_scores) if rescaling == "lbg" else None
    return WordscoresPrediction(
        doc_ids=matrix.doc_ids,
        raw=raw,
        se=se,
        scored_words=totals,
        lbg=lbg,
    )


def _to_mapping(doc_ids: tuple[str, ...], values: np.ndarray) -> dict[str, float]:
    return {doc_id: float(value) for doc_id, value in zip(doc_ids, values) if not np.isnan(value)}


@dataclass
class WordscoresStrategy:
    """Reference-fit strategy: fit on reference documents, predict the targets."""

    references: ReferenceDocuments | RandomReferences
    rescaling: Rescaling = "none"
    smooth: float = 0.0
    name: str = "wordscores"

    def produce_scores(self, data: ScoringInput) -> ScoreResult:
        reference_scores = resolve_reference_scores(self.references, data.corpus)
        model = fit_wordscores(data.matrix, reference_scores, smooth=self.smooth)
        prediction = predict_wordscores(model, data.matrix.subset(data.targets()), self.rescaling)

        columns = {
            self.name: _to_mapping(prediction.doc_ids, prediction.raw),
            f"{self.name}_se": _to_mapping(prediction.doc_ids, prediction.se),
        }
        if prediction.lbg is not None:
            columns[f"{self.name}_lbg"] = _to_mapping(prediction.doc_ids, prediction.lbg)

        unscored = int(np.isnan(prediction.raw).sum())
        if unscored:
            logger.warning("wordscores:unscored | documents={}", unscored)
        return ScoreResult(
            strategy=self.name,
            columns=columns,
            metadata={
                "reference_mode": self.references.mode,
                "reference_scores": reference_scores,
                "scored_words": len(model.features),
                "rescaling": self.rescaling,
                "smooth": self.smooth,
                "unscored_documents": unscored,
            },
        )
