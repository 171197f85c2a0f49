"""Common interface shared by all scoring strategies."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from ..corpus import Corpus
from ..features import DocumentTermMatrix
from ..schemas.config import TokenizerConfig, TrimConfig


@dataclass(frozen=True)
class ScoringInput:
    """Materialised outputs of the stages that precede scoring."""

    corpus: Corpus
    tokens: Mapping[str, tuple[str, ...]]
    matrix: DocumentTermMatrix
    tokenizer: TokenizerConfig = field(default_factory=TokenizerConfig)
    trim: TrimConfig = field(default_factory=TrimConfig)
    target_ids: Sequence[str] | None = None

    def targets(self) -> list[str]:
        """Documents to score; defaults to every document in the corpus."""
        if self.target_ids is None:
            return self.corpus.ids()
        return list(self.target_ids)


@dataclass
class ScoreResult:
    """Per-document scores keyed by output column, plus run metadata."""

    strategy: str
    columns: dict[str, dict[str, Any]]
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def primary_column(self) -> str:
        return next(iter(self.columns))


class ScoringStrategy(Protocol):
    """Protocol implemented by every scoring strategy."""

    name: str

    def produce_scores(self, data: ScoringInput) -> ScoreResult:  # pragma: no cover - structural typing
        """Score the target documents of ``data``."""
