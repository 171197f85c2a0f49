"""End-to-end score-and-merge pipeline runner."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import matplotlib.pyplot as plt
from loguru import logger

from .corpus import Corpus, load_corpus
from .export import plot_distribution, summarize_scores, write_corpus
from .features import DocumentTermMatrix, build_matrix
from .io_utils import write_json
from .merge import merge_scores
from .schemas.config import PipelineConfig
from .scoring.base import ScoreResult, ScoringInput, ScoringStrategy
from .tokens import tokenize_corpus


@dataclass
class PipelineResult:
    """Artifacts and bookkeeping of one pipeline run."""

    corpus: Corpus
    scores: ScoreResult
    matrix: DocumentTermMatrix
    output_path: Path
    metadata_path: Path
    plot_path: Path | None = None
    plot_error: str | None = None
    timings: dict[str, float] = field(default_factory=dict)


class _StageTimer:
    def __init__(self) -> None:
        self.timings: dict[str, float] = {}

    def run(self, stage: str, func, *args, **kwargs):
        started = time.perf_counter()
        logger.info("pipeline:{}:start", stage)
        result = func(*args, **kwargs)
        self.timings[stage] = round(time.perf_counter() - started, 4)
        logger.info("pipeline:{}:done | seconds={}", stage, self.timings[stage])
        return result


def _target_ids(corpus: Corpus, config: PipelineConfig) -> list[str]:
    if config.target is None:
        return corpus.ids()
    return corpus.filter(config.target.column, config.target.values).ids()


def _merge_all(corpus: Corpus, result: ScoreResult) -> Corpus:
    for column, scores in result.columns.items():
        corpus = merge_scores(corpus, scores, column)
    return corpus


def _metadata(config: PipelineConfig, result: ScoreResult, matrix: DocumentTermMatrix, targets: list[str], timings) -> dict[str, Any]:
    return {
        "strategy": result.strategy,
        "columns": list(result.columns),
        "input_path": str(config.input_path),
        "output_path": str(config.output_path),
        "documents": len(matrix.doc_ids),
        "target_documents": len(targets),
        "features": len(matrix.features),
        "tokenizer": config.tokenizer.model_dump(),
        "trim": config.trim.model_dump(),
        "target": config.target.model_dump() if config.target else None,
        "strategy_metadata": result.metadata,
        "timings": timings,
    }


def run_pipeline(config: PipelineConfig, strategy: ScoringStrategy) -> PipelineResult:
    """Load, tokenise, count, score, merge, export and plot in that order.

    Any failure before the export aborts the run with nothing written. A
    failure while plotting is logged and reported on the result; the exported
    CSV and metadata stay in place.
    """
    timer = _StageTimer()
    corpus = timer.run("load", load_corpus, config.input_path, config.corpus)
    tokens = timer.run("tokenize", tokenize_corpus, corpus, config.tokenizer)
    matrix = timer.run("features", build_matrix, tokens, config.trim)

    targets = _target_ids(corpus, config)
    data = ScoringInput(
        corpus=corpus,
        tokens=tokens,
        matrix=matrix,
        tokenizer=config.tokenizer,
        trim=config.trim,
        target_ids=targets,
    )
    result = timer.run("score", strategy.produce_scores, data)
    if result.metadata.get("converged") is False:
        logger.warning("pipeline:not_converged | strategy={} | scores kept for exploratory use", result.strategy)

    enriched = timer.run("merge", _merge_all, corpus, result)
    output_path = timer.run("export", write_corpus, enriched, config.output_path)

    metadata_path = config.resolved_metadata_path()
    write_json(metadata_path, _metadata(config, result, matrix, targets, timer.timings))

    group_by = enriched.group_column
    summary = summarize_scores(enriched, result.primary_column, group_by)
    logger.info("pipeline:summary\n{}", summary.to_string())

    plot_error = None
    plot_path = config.plot_path
    if plot_path is not None:
        try:
            fig = plot_distribution(enriched, result.primary_column, plot_path, group_by)
            plt.close(fig)
        except Exception as exc:
            plot_error = f"{type(exc).__name__}: {exc}"
            logger.exception("pipeline:plot_failed | path={}", plot_path)
            plot_path = None

    return PipelineResult(
        corpus=enriched,
        scores=result,
        matrix=matrix,
        output_path=output_path,
        metadata_path=metadata_path,
        plot_path=plot_path,
        plot_error=plot_error,
        timings=timer.timings,
    )
