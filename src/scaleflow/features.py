"""Sparse document-term matrix construction and trimming."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

import numpy as np
import pandas as pd
from loguru import logger
from scipy import sparse
from sklearn.feature_extraction.text import CountVectorizer

from .errors import EmptyVocabularyError
from .schemas.config import TrimConfig


def _identity(tokens: Sequence[str]) -> Sequence[str]:
    return tokens


@dataclass(frozen=True)
class DocumentTermMatrix:
    """Term counts with one row per document and one column per feature."""

    doc_ids: tuple[str, ...]
    features: tuple[str, ...]
    counts: sparse.csr_matrix

    @property
    def shape(self) -> tuple[int, int]:
        return self.counts.shape

    def row_index(self) -> dict[str, int]:
        return {doc_id: idx for idx, doc_id in enumerate(self.doc_ids)}

    def column_index(self) -> dict[str, int]:
        return {feature: idx for idx, feature in enumerate(self.features)}

    def row_totals(self) -> np.ndarray:
        return np.asarray(self.counts.sum(axis=1)).ravel()

    def term_frequency(self) -> np.ndarray:
        return np.asarray(self.counts.sum(axis=0)).ravel()

    def document_frequency(self) -> np.ndarray:
        return np.asarray((self.counts > 0).sum(axis=0)).ravel()

    def subset(self, doc_ids: Iterable[str]) -> "DocumentTermMatrix":
        """Rows for ``doc_ids`` in the given order; the feature set is unchanged."""
        index = self.row_index()
        wanted = list(doc_ids)
        unknown = [doc_id for doc_id in wanted if doc_id not in index]
        if unknown:
            raise KeyError(f"Documents not in matrix: {', '.join(unknown[:5])}")
        rows = [index[doc_id] for doc_id in wanted]
        return DocumentTermMatrix(tuple(wanted), self.features, self.counts[rows].tocsr())

    def select_features(self, features: Iterable[str]) -> "DocumentTermMatrix":
        """Columns for ``features`` in the given order; unknown features become zero columns."""
        index = self.column_index()
        wanted = tuple(features)
        present = [(pos, index[name]) for pos, name in enumerate(wanted) if name in index]
        selector = sparse.lil_matrix((len(self.features), len(wanted)), dtype=self.counts.dtype)
        for pos, col in present:
            selector[col, pos] = 1
        return DocumentTermMatrix(self.doc_ids, wanted, (self.counts @ selector.tocsr()).tocsr())

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.counts.toarray(), index=list(self.doc_ids), columns=list(self.features))


def _max_docfreq_limit(trim: TrimConfig, n_docs: int) -> float:
    if trim.max_docfreq is None:
        return float("inf")
    if trim.max_docfreq <= 1:
        return trim.max_docfreq * n_docs
    return trim.max_docfreq


def build_matrix(
    token_streams: Mapping[str, Sequence[str]],
    trim: TrimConfig | None = None,
) -> DocumentTermMatrix:
    """Count tokens per document and drop terms failing the trim thresholds.

    Terms below ``min_termfreq`` or ``min_docfreq`` (or above ``max_docfreq``)
    are removed from the vocabulary entirely. Raises ``EmptyVocabularyError``
    when no term survives.
    """
    trim = trim or TrimConfig()
    doc_ids = tuple(str(doc_id) for doc_id in token_streams)
    streams = [list(tokens) for tokens in token_streams.values()]

    if not any(streams):
        raise EmptyVocabularyError("No tokens found in any document; nothing to count.")

    vectorizer = CountVectorizer(analyzer=_identity, lowercase=False)
    counts = vectorizer.fit_transform(streams).tocsr()
    vocabulary = vectorizer.get_feature_names_out()

    termfreq = np.asarray(counts.sum(axis=0)).ravel()
    docfreq = np.asarray((counts > 0).sum(axis=0)).ravel()
    keep = (
        (termfreq >= trim.min_termfreq)
        & (docfreq >= trim.min_docfreq)
        & (docfreq <= _max_docfreq_limit(trim, len(doc_ids)))
    )

    if not keep.any():
        raise EmptyVocabularyError(
            f"Trimming removed all {len(vocabulary)} terms "
            f"(min_termfreq={trim.min_termfreq}, min_docfreq={trim.min_docfreq}, "
            f"max_docfreq={trim.max_docfreq})."
        )

    kept_columns = np.flatnonzero(keep)
    matrix = DocumentTermMatrix(
        doc_ids=doc_ids,
        features=tuple(str(term) for term in vocabulary[kept_columns]),
        counts=counts[:, kept_columns].tocsr(),
    )
    logger.debug(
        "features:trim | vocabulary={} | kept={} | documents={}",
        len(vocabulary),
        len(matrix.features),
        len(doc_ids),
    )
    return matrix
