"""Tests for joining scores onto the corpus."""

import pandas as pd
import pytest

from scaleflow.corpus import Corpus
from scaleflow.errors import AmbiguousJoinKeyError
from scaleflow.merge import merge_scores


def _corpus(ids=("A", "B", "C")) -> Corpus:
    return Corpus(pd.DataFrame({"resolution_code": list(ids), "text": ["t"] * len(ids)}))


def test_merge_is_total_with_missing_sentinel() -> None:
    merged = merge_scores(_corpus(), {"A": 0.0, "B": -1.5}, "score")

    column = merged.frame["score"]
    assert str(column.dtype) == "Float64"
    assert column.iloc[0] == 0.0
    assert column.iloc[1] == -1.5
    assert column.iloc[2] is pd.NA
    assert len(merged) == 3


def test_merge_leaves_input_corpus_untouched() -> None:
    corpus = _corpus()
    merge_scores(corpus, {"A": 1.0}, "score")

    assert "score" not in corpus.columns


def test_merge_accepts_pairs_series_and_frames() -> None:
    corpus = _corpus()

    from_pairs = merge_scores(corpus, [("C", 3.0)], "s")
    from_series = merge_scores(corpus, pd.Series({"C": 3.0}), "s")
    from_frame = merge_scores(corpus, pd.DataFrame({"id": ["C"], "value": [3.0]}), "s")

    for merged in (from_pairs, from_series, from_frame):
        assert merged.frame["s"].iloc[2] == 3.0
        assert merged.frame["s"].isna().sum() == 2


def test_duplicate_score_ids_raise() -> None:
    with pytest.raises(AmbiguousJoinKeyError):
        merge_scores(_corpus(), [("A", 1.0), ("A", 2.0)], "score")

    with pytest.raises(AmbiguousJoinKeyError):
        merge_scores(_corpus(), pd.DataFrame({"id": ["B", "B"], "value": [1, 2]}), "score")


def test_duplicate_corpus_ids_raise() -> None:
    with pytest.raises(AmbiguousJoinKeyError):
        merge_scores(_corpus(("A", "A", "B")), {"A": 1.0}, "score")


def test_categorical_scores_and_column_replacement() -> None:
    merged = merge_scores(_corpus(), {"A": "positive"}, "label")
    assert merged.frame["label"].iloc[0] == "positive"
    assert merged.frame["label"].iloc[1] is pd.NA

    replaced = merge_scores(merged, {"B": 1.0}, "label")
    assert replaced.columns.count("label") == 1
    assert replaced.frame["label"].iloc[1] == 1.0
