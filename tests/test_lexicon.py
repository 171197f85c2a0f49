"""Tests for dictionary sentiment scoring."""

from pathlib import Path

import pandas as pd
import pytest

from scaleflow.corpus import Corpus
from scaleflow.errors import DataAccessError
from scaleflow.features import build_matrix
from scaleflow.schemas.config import TokenizerConfig
from scaleflow.scoring.base import ScoringInput
from scaleflow.scoring.lexicon import Lexicon, LexiconStrategy, load_lexicon, score_tokens
from scaleflow.tokens import tokenize_corpus

POLARITY = Lexicon.from_mapping("polarity", {"good": 1, "great": 1, "bad": -1, "terrible": -1})


def test_intersection_scoring_matches_reference_scenario() -> None:
    assert score_tokens(("good", "good", "great"), POLARITY).score == 2
    assert score_tokens(("bad", "terrible"), POLARITY).score == -2


def test_frequency_weighting_counts_every_occurrence() -> None:
    tally = score_tokens(("good", "good", "great"), POLARITY, weighting="frequency")

    assert tally.score == 3
    assert tally.matches == 3


def test_categorical_lexicon_from_tidy_csv(tmp_path: Path) -> None:
    path = tmp_path / "nrc.csv"
    pd.DataFrame(
        {
            "word": ["trust", "trust", "fear", "repression"],
            "sentiment": ["positive", "trust", "fear", "negative"],
        }
    ).to_csv(path, index=False)

    lexicon = load_lexicon(path)
    tally = score_tokens(("trust", "fear", "repression", "repression"), lexicon, weighting="frequency")

    assert lexicon.name == "nrc"
    assert lexicon.categories["trust"] == frozenset({"positive", "trust"})
    assert tally.score == -1
    assert tally.categories == {"fear": 1, "negative": 2, "positive": 1, "trust": 1}


def test_numeric_lexicon_from_csv_and_json(tmp_path: Path) -> None:
    csv_path = tmp_path / "afinn.csv"
    pd.DataFrame({"word": ["Abandon", "praise"], "value": [-2, 3]}).to_csv(csv_path, index=False)
    json_path = tmp_path / "custom.json"
    json_path.write_text('{"dialogue": 1.5}')

    assert load_lexicon(csv_path).weights == {"abandon": -2.0, "praise": 3.0}
    assert load_lexicon(json_path, name="mine").weights == {"dialogue": 1.5}


def test_lexicon_without_value_columns_fails(tmp_path: Path) -> None:
    path = tmp_path / "bad.csv"
    pd.DataFrame({"word": ["x"], "score": [1]}).to_csv(path, index=False)

    with pytest.raises(DataAccessError):
        load_lexicon(path)


def test_lexicon_requires_one_kind_of_entries() -> None:
    with pytest.raises(ValueError):
        Lexicon(name="empty")


def test_mixed_numeric_and_category_entries_are_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        Lexicon.from_mapping("mixed", {"trade": 1, "rights": "negative"})

    path = tmp_path / "mixed.json"
    path.write_text('{"trade": 1, "rights": "negative"}')
    with pytest.raises(DataAccessError):
        load_lexicon(path)


def test_strategy_scores_every_target() -> None:
    corpus = Corpus(
        pd.DataFrame(
            {
                "resolution_code": ["A", "B", "C"],
                "text": ["good good great", "bad terrible", "neutral wording"],
            }
        )
    )
    tokens = tokenize_corpus(corpus, TokenizerConfig())
    data = ScoringInput(corpus=corpus, tokens=tokens, matrix=build_matrix(tokens))

    result = LexiconStrategy(lexicon=POLARITY).produce_scores(data)

    assert result.columns["polarity"] == {"A": 2.0, "B": -2.0, "C": 0.0}
    assert result.metadata["documents_with_matches"] == 2
