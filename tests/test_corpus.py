"""Tests for the corpus loader and table wrapper."""

from pathlib import Path

import pandas as pd
import pytest

from scaleflow.corpus import Corpus, load_corpus
from scaleflow.errors import DataAccessError
from scaleflow.schemas.config import CorpusSchema


def _write_csv(tmp_path: Path, rows: list[dict], name: str = "corpus.csv") -> Path:
    path = tmp_path / name
    pd.DataFrame(rows).to_csv(path, index=False)
    return path


def test_load_corpus_reads_required_columns(tmp_path: Path) -> None:
    path = _write_csv(
        tmp_path,
        [
            {"resolution_code": "0001", "legislature": "EP8", "text": "Trade talks resume."},
            {"resolution_code": "0002", "legislature": "EP9", "text": None},
        ],
    )

    corpus = load_corpus(path)

    assert len(corpus) == 2
    assert corpus.ids() == ["0001", "0002"]
    assert corpus.texts() == ["Trade talks resume.", ""]
    assert corpus.group_column == "legislature"


def test_load_corpus_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(DataAccessError):
        load_corpus(tmp_path / "nope.csv")


def test_load_corpus_missing_text_column_raises(tmp_path: Path) -> None:
    path = _write_csv(tmp_path, [{"resolution_code": "A", "body": "no text column"}])

    with pytest.raises(DataAccessError, match="text"):
        load_corpus(path)


def test_load_corpus_custom_schema_without_group(tmp_path: Path) -> None:
    path = tmp_path / "semi.csv"
    path.write_text("doc;body\nA;first\nB;second\n")

    corpus = load_corpus(path, CorpusSchema(id_column="doc", text_column="body", group_column="party", sep=";"))

    assert corpus.ids() == ["A", "B"]
    assert corpus.group_column is None


def test_with_column_returns_new_corpus() -> None:
    frame = pd.DataFrame({"resolution_code": ["A", "B"], "text": ["x", "y"]})
    corpus = Corpus(frame)

    enriched = corpus.with_column("score", [1.0, 2.0])

    assert "score" in enriched.columns
    assert "score" not in corpus.columns
    assert list(frame.columns) == ["resolution_code", "text"]


def test_subset_filter_and_duplicates() -> None:
    corpus = Corpus(
        pd.DataFrame(
            {
                "resolution_code": ["A", "B", "C", "C"],
                "legislature": ["EP8", "EP9", "EP9", "EP9"],
                "text": ["a", "b", "c", "c"],
            }
        )
    )

    assert corpus.subset(["C", "A"]).ids() == ["A", "C", "C"]
    assert corpus.filter("legislature", ["EP8"]).ids() == ["A"]
    assert corpus.duplicate_ids() == ["C"]


def test_filter_on_unknown_column_is_a_data_error() -> None:
    corpus = Corpus(pd.DataFrame({"resolution_code": ["A"], "text": ["a"]}))

    with pytest.raises(DataAccessError, match="party"):
        corpus.filter("party", ["x"])
