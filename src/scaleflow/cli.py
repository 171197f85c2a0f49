"""Typer CLI entry points for the scaleflow pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from .errors import ScaleFlowError
from .io_utils import read_json
from .logging_config import DEFAULT_LOG_LEVEL, LOG_LEVEL_CHOICES, configure_logger
from .pipeline import PipelineResult, run_pipeline
from .schemas.config import (
    CorpusSchema,
    PipelineConfig,
    RandomReferences,
    ReferenceDocuments,
    SeedTerms,
    TargetFilter,
    TokenizerConfig,
    TrimConfig,
)
from .scoring.base import ScoringStrategy
from .scoring.lexicon import LexiconStrategy, load_lexicon
from .scoring.lss import LSSStrategy
from .scoring.wordfish import WordfishStrategy
from .scoring.wordscores import WordscoresStrategy
from .synth_data import generate_corpus

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DATA_DIR = PROJECT_ROOT / "data"
DEFAULT_CORPUS = DATA_DIR / "resolutions.csv"
OUTPUT_DIR = DATA_DIR / "scores"

app = typer.Typer(help="scaleflow text scaling pipeline CLI.")

INPUT_OPTION = typer.Option(
    DEFAULT_CORPUS,
    "--input",
    "-i",
    exists=True,
    readable=True,
    dir_okay=False,
    resolve_path=True,
    help="Corpus CSV file.",
)
PLOT_OPTION = typer.Option(None, "--plot", "-p", resolve_path=True, help="Where to save the distribution plot.")
ID_COLUMN_OPTION = typer.Option("resolution_code", "--id-column", help="Document identifier column.")
TEXT_COLUMN_OPTION = typer.Option("text", "--text-column", help="Full text column.")
GROUP_COLUMN_OPTION = typer.Option("legislature", "--group-column", help="Grouping column for summaries.")
MIN_TERMFREQ_OPTION = typer.Option(1, "--min-termfreq", min=1, help="Drop terms with fewer total occurrences.")
MIN_DOCFREQ_OPTION = typer.Option(1, "--min-docfreq", min=1, help="Drop terms found in fewer documents.")
KEEP_STOPWORDS_OPTION = typer.Option(False, "--keep-stopwords", help="Do not remove English stopwords.")
TARGET_COLUMN_OPTION = typer.Option(None, "--target-column", help="Only score rows matching --target-value here.")
TARGET_VALUE_OPTION = typer.Option(None, "--target-value", help="Accepted value(s) of --target-column.")


def _output_option(name: str):
    return typer.Option(
        OUTPUT_DIR / f"{name}.csv",
        "--output",
        "-o",
        dir_okay=False,
        resolve_path=True,
        help="Destination CSV with the appended score column(s).",
    )


@app.callback()
def main(
    log_level: str = typer.Option(
        DEFAULT_LOG_LEVEL,
        "--log-level",
        case_sensitive=False,
        help=f"Log verbosity: {', '.join(LOG_LEVEL_CHOICES)}.",
    ),
) -> None:
    """scaleflow text scaling pipeline CLI."""
    if log_level.upper() not in LOG_LEVEL_CHOICES:
        raise typer.BadParameter(f"Unsupported log level '{log_level}'.", param_hint="--log-level")
    configure_logger(log_level)


def _pipeline_config(
    input_path: Path,
    output_path: Path,
    plot_path: Optional[Path],
    id_column: str,
    text_column: str,
    group_column: str,
    min_termfreq: int,
    min_docfreq: int,
    keep_stopwords: bool,
    target_column: Optional[str],
    target_values: Optional[List[str]],
) -> PipelineConfig:
    target = None
    if target_values and not target_column:
        raise typer.BadParameter("--target-value requires --target-column.")
    if target_column:
        if not target_values:
            raise typer.BadParameter("--target-column requires at least one --target-value.")
        target = TargetFilter(column=target_column, values=list(target_values))
    return PipelineConfig(
        input_path=input_path,
        output_path=output_path,
        plot_path=plot_path,
        corpus=CorpusSchema(id_column=id_column, text_column=text_column, group_column=group_column or None),
        tokenizer=TokenizerConfig(stopwords=None if keep_stopwords else "english"),
        trim=TrimConfig(min_termfreq=min_termfreq, min_docfreq=min_docfreq),
        target=target,
    )


def _execute(config: PipelineConfig, strategy: ScoringStrategy) -> PipelineResult:
    try:
        result = run_pipeline(config, strategy)
    except ScaleFlowError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(f"Wrote scores to {result.output_path}")
    typer.echo(f"Wrote run metadata to {result.metadata_path}")
    if result.plot_path is not None:
        typer.echo(f"Wrote plot to {result.plot_path}")
    if result.plot_error:
        typer.echo(f"warning: plot failed ({result.plot_error})", err=True)
    if result.scores.metadata.get("converged") is False:
        typer.echo("warning: model did not converge; scores kept for exploratory use", err=True)
    return result


def _load_score_file(path: Path) -> dict[str, float]:
    try:
        payload = read_json(path)
    except ScaleFlowError as exc:
        raise typer.BadParameter(str(exc)) from exc
    if not isinstance(payload, dict):
        raise typer.BadParameter(f"{path} must contain a JSON object.")
    return {str(key): float(value) for key, value in payload.items()}


@app.command("synth-data")
def synth_data_cli(
    count: int = typer.Option(60, "--count", "-n", min=0, help="Number of resolutions to generate."),
    seed: int = typer.Option(13, "--seed", help="Seed for deterministic generation."),
    output: Path = typer.Option(
        DEFAULT_CORPUS,
        "--output",
        "-o",
        dir_okay=False,
        resolve_path=True,
        help="Destination CSV file.",
    ),
) -> None:
    """Generate a synthetic resolution corpus."""
    generate_corpus(output_path=output, count=count, seed=seed)
    typer.echo(f"Wrote {count} resolutions to {output}")


@app.command("wordscores")
def wordscores_cli(
    input_path: Path = INPUT_OPTION,
    output_path: Path = _output_option("wordscores"),
    plot_path: Optional[Path] = PLOT_OPTION,
    references: Optional[Path] = typer.Option(
        None,
        "--references",
        "-r",
        exists=True,
        dir_okay=False,
        help="JSON object mapping reference document ids to scores.",
    ),
    random_references: Optional[int] = typer.Option(
        None, "--random-references", min=2, help="Draw this many reference documents at random."
    ),
    seed: int = typer.Option(13, "--seed", help="Seed for --random-references."),
    score_column: str = typer.Option(
        "reference_score", "--score-column", help="Column with reference scores for random draws."
    ),
    rescaling: str = typer.Option("none", "--rescaling", help="'none' or 'lbg'."),
    id_column: str = ID_COLUMN_OPTION,
    text_column: str = TEXT_COLUMN_OPTION,
    group_column: str = GROUP_COLUMN_OPTION,
    min_termfreq: int = MIN_TERMFREQ_OPTION,
    min_docfreq: int = MIN_DOCFREQ_OPTION,
    keep_stopwords: bool = KEEP_STOPWORDS_OPTION,
    target_column: Optional[str] = TARGET_COLUMN_OPTION,
    target_values: Optional[List[str]] = TARGET_VALUE_OPTION,
) -> None:
    """Scale documents against reference texts with Wordscores."""
    if (references is None) == (random_references is None):
        raise typer.BadParameter("Pass exactly one of --references or --random-references.")
    if rescaling not in ("none", "lbg"):
        raise typer.BadParameter(f"Unsupported rescaling '{rescaling}'.", param_hint="--rescaling")

    if references is not None:
        reference_config = ReferenceDocuments(scores=_load_score_file(references))
    else:
        reference_config = RandomReferences(size=random_references, seed=seed, score_column=score_column)

    config = _pipeline_config(
        input_path, output_path, plot_path, id_column, text_column, group_column,
        min_termfreq, min_docfreq, keep_stopwords, target_column, target_values,
    )
    _execute(config, WordscoresStrategy(references=reference_config, rescaling=rescaling))


@app.command("wordfish")
def wordfish_cli(
    input_path: Path = INPUT_OPTION,
    output_path: Path = _output_option("wordfish"),
    plot_path: Optional[Path] = PLOT_OPTION,
    direction: Optional[List[str]] = typer.Option(
        None,
        "--direction",
        help="Two document ids; the first is placed left of the second.",
    ),
    max_iter: int = typer.Option(500, "--max-iter", min=1, help="Maximum estimation iterations."),
    tol: float = typer.Option(1e-6, "--tol", help="Relative log-likelihood change that counts as converged."),
    id_column: str = ID_COLUMN_OPTION,
    text_column: str = TEXT_COLUMN_OPTION,
    group_column: str = GROUP_COLUMN_OPTION,
    min_termfreq: int = MIN_TERMFREQ_OPTION,
    min_docfreq: int = MIN_DOCFREQ_OPTION,
    keep_stopwords: bool = KEEP_STOPWORDS_OPTION,
    target_column: Optional[str] = TARGET_COLUMN_OPTION,
    target_values: Optional[List[str]] = TARGET_VALUE_OPTION,
) -> None:
    """Estimate latent document positions with Wordfish."""
    if direction and len(direction) != 2:
        raise typer.BadParameter("--direction takes exactly two document ids.")
    config = _pipeline_config(
        input_path, output_path, plot_path, id_column, text_column, group_column,
        min_termfreq, min_docfreq, keep_stopwords, target_column, target_values,
    )
    strategy = WordfishStrategy(
        direction=(direction[0], direction[1]) if direction else None,
        tol=tol,
        max_iter=max_iter,
    )
    _execute(config, strategy)


@app.command("lss")
def lss_cli(
    seeds: Path = typer.Option(
        ...,
        "--seeds",
        "-s",
        exists=True,
        dir_okay=False,
        help="JSON object mapping seed words (globs allowed) to polarity.",
    ),
    input_path: Path = INPUT_OPTION,
    output_path: Path = _output_option("lss"),
    plot_path: Optional[Path] = PLOT_OPTION,
    k: int = typer.Option(300, "--k", min=1, help="Number of SVD dimensions."),
    terms: Optional[List[str]] = typer.Option(None, "--term", help="Restrict model words to these terms."),
    no_rescale: bool = typer.Option(False, "--no-rescale", help="Keep raw polarity instead of z-scores."),
    random_state: int = typer.Option(0, "--random-state", help="Seed for the randomized SVD."),
    id_column: str = ID_COLUMN_OPTION,
    text_column: str = TEXT_COLUMN_OPTION,
    group_column: str = GROUP_COLUMN_OPTION,
    min_termfreq: int = MIN_TERMFREQ_OPTION,
    min_docfreq: int = MIN_DOCFREQ_OPTION,
    keep_stopwords: bool = KEEP_STOPWORDS_OPTION,
    target_column: Optional[str] = TARGET_COLUMN_OPTION,
    target_values: Optional[List[str]] = TARGET_VALUE_OPTION,
) -> None:
    """Score documents with Latent Semantic Scaling from seed words."""
    seed_config = SeedTerms(terms=_load_score_file(seeds))
    config = _pipeline_config(
        input_path, output_path, plot_path, id_column, text_column, group_column,
        min_termfreq, min_docfreq, keep_stopwords, target_column, target_values,
    )
    strategy = LSSStrategy(
        seeds=seed_config,
        k=k,
        terms=terms or None,
        rescale=not no_rescale,
        random_state=random_state,
    )
    _execute(config, strategy)


@app.command("lexicon")
def lexicon_cli(
    lexicon_path: Path = typer.Option(
        ...,
        "--lexicon",
        "-l",
        exists=True,
        dir_okay=False,
        help="Lexicon CSV (word + value/sentiment) or JSON object.",
    ),
    input_path: Path = INPUT_OPTION,
    output_path: Path = _output_option("lexicon"),
    plot_path: Optional[Path] = PLOT_OPTION,
    name: Optional[str] = typer.Option(None, "--name", help="Score column name; defaults to the file stem."),
    weighting: str = typer.Option("intersection", "--weighting", help="'intersection' or 'frequency'."),
    normalize: bool = typer.Option(False, "--normalize", help="Divide scores by document token count."),
    categories: bool = typer.Option(False, "--categories", help="Add one count column per lexicon category."),
    id_column: str = ID_COLUMN_OPTION,
    text_column: str = TEXT_COLUMN_OPTION,
    group_column: str = GROUP_COLUMN_OPTION,
    min_termfreq: int = MIN_TERMFREQ_OPTION,
    min_docfreq: int = MIN_DOCFREQ_OPTION,
    keep_stopwords: bool = KEEP_STOPWORDS_OPTION,
    target_column: Optional[str] = TARGET_COLUMN_OPTION,
    target_values: Optional[List[str]] = TARGET_VALUE_OPTION,
) -> None:
    """Tally dictionary sentiment per document."""
    if weighting not in ("intersection", "frequency"):
        raise typer.BadParameter(f"Unsupported weighting '{weighting}'.", param_hint="--weighting")
    try:
        lexicon = load_lexicon(lexicon_path, name=name)
    except ScaleFlowError as exc:
        raise typer.BadParameter(str(exc), param_hint="--lexicon") from exc

    config = _pipeline_config(
        input_path, output_path, plot_path, id_column, text_column, group_column,
        min_termfreq, min_docfreq, keep_stopwords, target_column, target_values,
    )
    strategy = LexiconStrategy(
        lexicon=lexicon,
        weighting=weighting,  # type: ignore[arg-type]
        normalize=normalize,
        include_categories=categories,
    )
    _execute(config, strategy)


def run() -> None:
    """Entrypoint when invoking via `python -m` or the console script."""
    app()


if __name__ == "__main__":
    run()
