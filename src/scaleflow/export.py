"""Write enriched corpora and summarise score distributions."""

from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pandas as pd
from loguru import logger
from matplotlib.figure import Figure

from .corpus import Corpus
from .errors import DataAccessError


def write_corpus(corpus: Corpus, path: str | Path) -> Path:
    """Write ``corpus`` as CSV, overwriting ``path``."""
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        corpus.frame.to_csv(target, index=False, sep=corpus.schema.sep)
    except OSError as exc:
        raise DataAccessError(f"Could not write corpus to {target}: {exc}") from exc
    logger.info("export:written | path={} | rows={}", target, len(corpus))
    return target


def _numeric(corpus: Corpus, column: str) -> pd.Series:
    if column not in corpus.frame.columns:
        raise KeyError(f"Column '{column}' not present in corpus.")
    return pd.to_numeric(corpus.frame[column], errors="coerce").astype(float)


def summarize_scores(corpus: Corpus, column: str, group_by: str | None = None) -> pd.DataFrame:
    """Count, missing count and location/spread of ``column``, optionally per group."""
    values = _numeric(corpus, column)
    frame = pd.DataFrame({"score": values})
    if group_by:
        frame["group"] = corpus.frame[group_by].astype(str).to_numpy()
    else:
        frame["group"] = "all"

    grouped = frame.groupby("group", sort=True)["score"]
    summary = pd.DataFrame(
        {
            "count": grouped.count(),
            "missing": grouped.apply(lambda s: int(s.isna().sum())),
            "mean": grouped.mean(),
            "std": grouped.std(),
            "min": grouped.min(),
            "median": grouped.median(),
            "max": grouped.max(),
        }
    )
    summary.index.name = group_by or "group"
    return summary


def plot_distribution(
    corpus: Corpus,
    column: str,
    path: str | Path | None = None,
    group_by: str | None = None,
    title: str | None = None,
) -> Figure:
    """Histogram of ``column`` next to a boxplot per group; saved when ``path`` is given."""
    values = _numeric(corpus, column)
    present = values.dropna()

    fig, (hist_ax, box_ax) = plt.subplots(1, 2, figsize=(11, 4.5))
    hist_ax.hist(present, bins=min(30, max(5, len(present) // 2)), color="slateblue", edgecolor="white")
    hist_ax.set_xlabel(column)
    hist_ax.set_ylabel("documents")
    hist_ax.set_title("Distribution")

    if group_by:
        groups = corpus.frame[group_by].astype(str)
        labels = sorted(groups[values.notna()].unique())
        data = [values[(groups == label) & values.notna()].to_numpy() for label in labels]
    else:
        labels = ["all"]
        data = [present.to_numpy()]
    box_ax.boxplot(data)
    box_ax.set_xticks(range(1, len(labels) + 1), labels, rotation=30, ha="right")
    box_ax.set_ylabel(column)
    box_ax.set_title(f"By {group_by}" if group_by else "Spread")

    fig.suptitle(title or f"{column} (n={len(present)}, missing={len(values) - len(present)})")
    fig.tight_layout()

    if path is not None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(target, dpi=150)
        logger.info("export:plot | path={}", target)
    return fig
