"""Tests for the document-term matrix builder."""

import numpy as np
import pytest

from scaleflow.errors import EmptyVocabularyError
from scaleflow.features import build_matrix
from scaleflow.schemas.config import TrimConfig

STREAMS = {
    "A": ("trade", "trade", "rights", "unique"),
    "B": ("trade", "rights", "sanctions"),
    "C": ("rights", "sanctions", "sanctions"),
    "D": (),
}


def test_build_matrix_counts_terms() -> None:
    matrix = build_matrix(STREAMS)

    assert matrix.doc_ids == ("A", "B", "C", "D")
    assert matrix.features == ("rights", "sanctions", "trade", "unique")
    frame = matrix.to_frame()
    assert frame.loc["A", "trade"] == 2
    assert frame.loc["C", "sanctions"] == 2
    assert frame.loc["D"].sum() == 0


def test_min_docfreq_drops_single_document_terms() -> None:
    matrix = build_matrix(STREAMS, TrimConfig(min_docfreq=2))

    assert "unique" not in matrix.features
    assert matrix.shape == (4, 3)


def test_min_termfreq_and_max_docfreq() -> None:
    matrix = build_matrix(STREAMS, TrimConfig(min_termfreq=3))
    assert matrix.features == ("rights", "sanctions", "trade")

    matrix = build_matrix(STREAMS, TrimConfig(max_docfreq=0.5))
    assert matrix.features == ("sanctions", "trade", "unique")


def test_trimming_everything_raises() -> None:
    with pytest.raises(EmptyVocabularyError):
        build_matrix(STREAMS, TrimConfig(min_docfreq=10))


def test_all_empty_documents_raise() -> None:
    with pytest.raises(EmptyVocabularyError):
        build_matrix({"A": (), "B": ()})


def test_build_matrix_is_idempotent() -> None:
    first = build_matrix(STREAMS, TrimConfig(min_docfreq=2))
    second = build_matrix(STREAMS, TrimConfig(min_docfreq=2))

    assert first.features == second.features
    assert first.doc_ids == second.doc_ids
    np.testing.assert_array_equal(first.counts.toarray(), second.counts.toarray())


def test_subset_and_select_features() -> None:
    matrix = build_matrix(STREAMS)

    sub = matrix.subset(["C", "A"])
    assert sub.doc_ids == ("C", "A")
    assert sub.to_frame().loc["A", "unique"] == 1

    aligned = matrix.select_features(["trade", "missing"])
    assert aligned.features == ("trade", "missing")
    np.testing.assert_array_equal(aligned.counts.toarray(), [[2, 0], [1, 0], [0, 0], [0, 0]])

    with pytest.raises(KeyError):
        matrix.subset(["Z"])
