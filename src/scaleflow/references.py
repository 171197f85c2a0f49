"""Resolution of reference-document configurations into score mappings."""

from __future__ import annotations

import numpy as np
import pandas as pd
from loguru import logger

from .corpus import Corpus
from .errors import InsufficientReferenceDataError
from .schemas.config import RandomReferences, ReferenceDocuments, SeedTerms


def _check_distinct(scores: dict[str, float]) -> dict[str, float]:
    if len(set(scores.values())) < 2:
        raise InsufficientReferenceDataError(
            f"Reference set needs at least 2 distinct scores, got {sorted(set(scores.values()))}."
        )
    return scores


def _from_documents(config: ReferenceDocuments, corpus: Corpus) -> dict[str, float]:
    known = set(corpus.ids())
    missing = [doc_id for doc_id in config.scores if doc_id not in known]
    if missing:
        raise InsufficientReferenceDataError(
            f"Reference document(s) not found in corpus: {', '.join(missing)}"
        )
    return _check_distinct({doc_id: float(score) for doc_id, score in config.scores.items()})


def _from_random(config: RandomReferences, corpus: Corpus) -> dict[str, float]:
    frame = corpus.frame
    if config.score_column not in frame.columns:
        raise InsufficientReferenceDataError(
            f"Reference score column '{config.score_column}' not present in corpus."
        )
    scored = pd.to_numeric(frame[config.score_column], errors="coerce")
    eligible = frame.loc[scored.notna(), corpus.id_column].astype(str).tolist()
    if len(eligible) < config.size:
        raise InsufficientReferenceDataError(
            f"Requested {config.size} random references but only {len(eligible)} rows have "
            f"a '{config.score_column}' value."
        )

    rng = np.random.default_rng(config.seed)
    picks = sorted(rng.choice(len(eligible), size=config.size, replace=False).tolist())
    lookup = dict(zip(frame[corpus.id_column].astype(str), scored))
    chosen = {eligible[idx]: float(lookup[eligible[idx]]) for idx in picks}
    logger.info("references:random | seed={} | ids={}", config.seed, list(chosen))
    return _check_distinct(chosen)


def resolve_reference_scores(
    config: ReferenceDocuments | RandomReferences | SeedTerms,
    corpus: Corpus,
) -> dict[str, float]:
    """Map a document-mode reference configuration to ``{doc_id: score}``."""
    if isinstance(config, ReferenceDocuments):
        return _from_documents(config, corpus)
    if isinstance(config, RandomReferences):
        return _from_random(config, corpus)
    raise InsufficientReferenceDataError(
        "Seed terms calibrate term polarities, not reference documents."
    )
