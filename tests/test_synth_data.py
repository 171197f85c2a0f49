"""Tests for synthetic corpus generation."""

from pathlib import Path

import pandas as pd
import pytest

from scaleflow.synth_data import LEGISLATURES, generate_corpus


def test_generate_corpus_creates_expected_rows(tmp_path: Path) -> None:
    output = generate_corpus(tmp_path / "resolutions.csv", count=12, seed=42)

    frame = pd.read_csv(output)
    assert len(frame) == 12
    assert frame["resolution_code"].is_unique
    assert set(frame["legislature"]) <= set(LEGISLATURES)
    assert set(frame["reference_score"]) <= {-2.0, 0.0, 2.0}
    assert frame["text"].str.startswith("The European Parliament").all()


def test_generate_corpus_deterministic_seed(tmp_path: Path) -> None:
    first = generate_corpus(tmp_path / "first.csv", count=5, seed=7)
    second = generate_corpus(tmp_path / "second.csv", count=5, seed=7)

    assert first.read_text() == second.read_text()


def test_generate_corpus_negative_count(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        generate_corpus(tmp_path / "out.csv", count=-1)
