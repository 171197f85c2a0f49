"""Tests for reference configuration resolution."""

import pandas as pd
import pytest

from scaleflow.corpus import Corpus
from scaleflow.errors import InsufficientReferenceDataError
from scaleflow.references import resolve_reference_scores
from scaleflow.schemas.config import RandomReferences, ReferenceDocuments, SeedTerms


def _corpus() -> Corpus:
    return Corpus(
        pd.DataFrame(
            {
                "resolution_code": ["A", "B", "C", "D", "E"],
                "text": ["a", "b", "c", "d", "e"],
                "reference_score": [-2.0, 2.0, None, -1.0, 1.0],
            }
        )
    )


def test_explicit_documents_resolve() -> None:
    scores = resolve_reference_scores(ReferenceDocuments(scores={"A": -2, "B": 2}), _corpus())

    assert scores == {"A": -2.0, "B": 2.0}


def test_unknown_reference_document_raises() -> None:
    with pytest.raises(InsufficientReferenceDataError, match="Z"):
        resolve_reference_scores(ReferenceDocuments(scores={"A": -2, "Z": 2}), _corpus())


def test_single_distinct_score_raises() -> None:
    with pytest.raises(InsufficientReferenceDataError):
        resolve_reference_scores(ReferenceDocuments(scores={"A": 1, "B": 1}), _corpus())


def test_random_references_are_reproducible_and_skip_unscored_rows() -> None:
    config = RandomReferences(size=3, seed=7)

    first = resolve_reference_scores(config, _corpus())
    second = resolve_reference_scores(config, _corpus())

    assert first == second
    assert len(first) == 3
    assert "C" not in first


def test_random_references_need_enough_rows() -> None:
    with pytest.raises(InsufficientReferenceDataError):
        resolve_reference_scores(RandomReferences(size=5), _corpus())


def test_seed_terms_are_not_document_references() -> None:
    with pytest.raises(InsufficientReferenceDataError):
        resolve_reference_scores(SeedTerms(terms={"good": 1}), _corpus())
