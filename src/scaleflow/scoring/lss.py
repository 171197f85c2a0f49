"""Latent Semantic Scaling: polarity from seed words and word embeddings.

Word vectors come from a truncated SVD of a sentence-level document-term
matrix. Each word's polarity is its cosine similarity to the seed words,
weighted by seed polarity; documents are scored by the frequency-weighted mean
polarity of the words they contain (Watanabe 2020).
"""

from __future__ import annotations

import fnmatch
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

import numpy as np
from loguru import logger
from sklearn.decomposition import TruncatedSVD
from sklearn.metrics.pairwise import cosine_similarity
from sklearn.preprocessing import normalize

from ..errors import EmptyVocabularyError, InsufficientReferenceDataError
from ..features import DocumentTermMatrix, build_matrix
from ..schemas.config import SeedTerms
from ..tokens import split_sentences, tokenize
from .base import ScoreResult, ScoringInput


@dataclass(frozen=True)
class LSSModel:
    """Word polarity scores learned from seed words."""

    features: tuple[str, ...]
    polarity: np.ndarray
    seed_weights: dict[str, float]
    k: int

    def as_dict(self) -> dict[str, float]:
        return {feature: float(score) for feature, score in zip(self.features, self.polarity)}


def expand_seeds(seeds: Mapping[str, float], vocabulary: Sequence[str]) -> dict[str, float]:
    """Match seed keys (glob patterns allowed) against the vocabulary.

    A pattern's polarity is split evenly across the words it matches, then each
    side is normalised so positive and negative weights each sum to one.
    """
    matched: dict[str, float] = {}
    for pattern, value in seeds.items():
        words = fnmatch.filter(vocabulary, pattern.lower())
        if not words:
            logger.debug("lss:seed_unmatched | pattern={}", pattern)
            continue
        for word in words:
            matched[word] = matched.get(word, 0.0) + float(value) / len(words)

    if not matched:
        raise InsufficientReferenceDataError(
            f"None of the {len(seeds)} seed terms occur in the vocabulary."
        )

    positive = sum(weight for weight in matched.values() if weight > 0)
    negative = -sum(weight for weight in matched.values() if weight < 0)
    weights = {}
    for word, weight in matched.items():
        if weight > 0:
            weights[word] = weight / positive
        elif weight < 0:
            weights[word] = weight / negative
    if not weights:
        raise InsufficientReferenceDataError("Seed terms carry no non-zero polarity.")
    return weights


def fit_lss(
    sentence_matrix: DocumentTermMatrix,
    seeds: Mapping[str, float],
    k: int = 300,
    terms: Sequence[str] | None = None,
    random_state: int = 0,
) -> LSSModel:
    """Learn word polarities from ``seeds`` over the sentence-level matrix."""
    n_rows, n_features = sentence_matrix.shape
    components = min(k, n_features - 1, n_rows - 1)
    if components < 1:
        raise EmptyVocabularyError(
            f"LSS needs at least 2 sentences and 2 features, got {n_rows} x {n_features}."
        )

    weights = expand_seeds(seeds, sentence_matrix.features)

    svd = TruncatedSVD(n_components=components, random_state=random_state)
    svd.fit(normalize(sentence_matrix.counts.astype(float), norm="l1"))
    embeddings = svd.components_.T * svd.singular_values_

    index = sentence_matrix.column_index()
    seed_words = list(weights)
    seed_vectors = embeddings[[index[word] for word in seed_words]]
    seed_weight_vector = np.asarray([weights[word] for word in seed_words])

    if terms is not None:
        wanted = {term.lower() for term in terms}
        keep = [pos for pos, feature in enumerate(sentence_matrix.features) if feature in wanted]
        if not keep:
            raise EmptyVocabularyError("None of the requested model terms occur in the vocabulary.")
    else:
        keep = list(range(n_features))

    similarity = cosine_similarity(embeddings[keep], seed_vectors)
    polarity = similarity @ seed_weight_vector / len(seed_words)

    logger.debug(
        "lss:fit | sentences={} | features={} | k={} | seeds={}",
        n_rows,
        len(keep),
        components,
        len(seed_words),
    )
    return LSSModel(
        features=tuple(sentence_matrix.features[pos] for pos in keep),
        polarity=polarity,
        seed_weights=weights,
        k=components,
    )


def predict_lss(model: LSSModel, matrix: DocumentTermMatrix, rescale: bool = True) -> dict[str, float]:
    """Frequency-weighted mean polarity for each document with model words."""
    aligned = matrix.select_features(model.features).counts.astype(float)
    totals = np.asarray(aligned.sum(axis=1)).ravel()
    scored = totals > 0
    if not scored.any():
        raise InsufficientReferenceDataError("No document contains a word known to the LSS model.")

    raw = np.asarray(aligned @ model.polarity).ravel()
    values = raw[scored] / totals[scored]
    if rescale and len(values) > 1 and values.std() > 0:
        values = (values - values.mean()) / values.std()

    doc_ids = [doc_id for doc_id, keep in zip(matrix.doc_ids, scored) if keep]
    return {doc_id: float(value) for doc_id, value in zip(doc_ids, values)}


@dataclass
class LSSStrategy:
    """Seeded strategy: sentence embeddings calibrated by seed words."""

    seeds: SeedTerms
    k: int = 300
    terms: Sequence[str] | None = None
    rescale: bool = True
    random_state: int = 0
    name: str = "lss"

    def _sentence_matrix(self, data: ScoringInput) -> DocumentTermMatrix:
        streams: dict[str, tuple[str, ...]] = {}
        for doc_id, text in zip(data.corpus.ids(), data.corpus.texts()):
            for position, sentence in enumerate(split_sentences(text)):
                tokens = tokenize(sentence, data.tokenizer)
                if tokens:
                    streams[f"{doc_id}#{position}"] = tokens
        return build_matrix(streams, data.trim)

    def produce_scores(self, data: ScoringInput) -> ScoreResult:
        sentences = self._sentence_matrix(data)
        model = fit_lss(
            sentences,
            self.seeds.terms,
            k=self.k,
            terms=self.terms,
            random_state=self.random_state,
        )
        scores = predict_lss(model, data.matrix.subset(data.targets()), rescale=self.rescale)
        unscored = len(data.targets()) - len(scores)
        if unscored:
            logger.warning("lss:unscored | documents={}", unscored)
        return ScoreResult(
            strategy=self.name,
            columns={self.name: scores},
            metadata={
                "k": model.k,
                "sentences": sentences.shape[0],
                "model_features": len(model.features),
                "seed_weights": model.seed_weights,
                "rescaled": self.rescale,
                "unscored_documents": unscored,
            },
        )
