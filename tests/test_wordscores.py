"""Tests for Wordscores fitting and prediction."""

import math

import numpy as np
import pandas as pd
import pytest

from scaleflow.corpus import Corpus
from scaleflow.errors import InsufficientReferenceDataError
from scaleflow.features import build_matrix
from scaleflow.schemas.config import ReferenceDocuments
from scaleflow.scoring.base import ScoringInput
from scaleflow.scoring.wordscores import WordscoresStrategy, fit_wordscores, predict_wordscores

STREAMS = {
    "R1": ("left", "left", "centre"),
    "R2": ("right", "right", "centre"),
    "V1": ("left", "centre"),
    "V2": ("right", "right", "left"),
    "V3": ("elsewhere",),
}


def test_word_scores_follow_reference_positions() -> None:
    matrix = build_matrix(STREAMS)
    model = fit_wordscores(matrix, {"R1": -1.0, "R2": 1.0})

    scores = model.as_dict()
    assert scores == pytest.approx({"centre": 0.0, "left": -1.0, "right": 1.0})
    assert "elsewhere" not in scores


def test_predict_scores_and_leaves_unscorable_missing() -> None:
    matrix = build_matrix(STREAMS)
    model = fit_wordscores(matrix, {"R1": -1.0, "R2": 1.0})

    prediction = predict_wordscores(model, matrix.subset(["V1", "V2", "V3"]))

    assert prediction.raw[0] == pytest.approx(-0.5)
    assert prediction.raw[1] == pytest.approx(1 / 3)
    assert math.isnan(prediction.raw[2])
    assert prediction.scored_words.tolist() == [2.0, 3.0, 0.0]


def test_lbg_rescaling_preserves_order() -> None:
    matrix = build_matrix(STREAMS)
    model = fit_wordscores(matrix, {"R1": -1.0, "R2": 1.0})

    prediction = predict_wordscores(model, matrix.subset(["V1", "V2", "R1", "R2"]), rescaling="lbg")

    assert prediction.lbg is not None
    assert list(np.argsort(prediction.lbg)) == list(np.argsort(prediction.raw))


def test_single_distinct_reference_value_fails() -> None:
    matrix = build_matrix(STREAMS)

    with pytest.raises(InsufficientReferenceDataError):
        fit_wordscores(matrix, {"R1": 1.0, "R2": 1.0})


def test_reference_missing_from_matrix_fails() -> None:
    matrix = build_matrix(STREAMS)

    with pytest.raises(InsufficientReferenceDataError):
        fit_wordscores(matrix, {"R1": -1.0, "R9": 1.0})


def test_no_shared_vocabulary_with_target_fails() -> None:
    matrix = build_matrix(STREAMS)
    model = fit_wordscores(matrix, {"R1": -1.0, "R2": 1.0})

    with pytest.raises(InsufficientReferenceDataError):
        predict_wordscores(model, matrix.subset(["V3"]))


def test_strategy_produces_columns_for_targets() -> None:
    corpus = Corpus(pd.DataFrame({"resolution_code": list(STREAMS), "text": [" ".join(t) for t in STREAMS.values()]}))
    data = ScoringInput(
        corpus=corpus,
        tokens=STREAMS,
        matrix=build_matrix(STREAMS),
        target_ids=["V1", "V2", "V3"],
    )
    strategy = WordscoresStrategy(references=ReferenceDocuments(scores={"R1": -1, "R2": 1}), rescaling="lbg")

    result = strategy.produce_scores(data)

    assert result.primary_column == "wordscores"
    assert set(result.columns) == {"wordscores", "wordscores_se", "wordscores_lbg"}
    assert set(result.columns["wordscores"]) == {"V1", "V2"}
    assert result.metadata["unscored_documents"] == 1
