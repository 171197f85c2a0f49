"""Corpus table wrapper and CSV loader."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd
from loguru import logger

from .errors import DataAccessError
from .schemas.config import CorpusSchema


@dataclass(frozen=True)
class Corpus:
    """Ordered collection of documents sharing one column schema.

    The wrapped frame is treated as read-only: every transformation returns a
    new ``Corpus`` built from a copy, so earlier stages never observe later
    column additions.
    """

    frame: pd.DataFrame
    schema: CorpusSchema = field(default_factory=CorpusSchema)

    def __len__(self) -> int:
        return len(self.frame)

    @property
    def id_column(self) -> str:
        return self.schema.id_column

    @property
    def text_column(self) -> str:
        return self.schema.text_column

    @property
    def group_column(self) -> str | None:
        column = self.schema.group_column
        if column and column in self.frame.columns:
            return column
        return None

    @property
    def columns(self) -> list[str]:
        return list(self.frame.columns)

    def ids(self) -> list[str]:
        return [str(value) for value in self.frame[self.id_column]]

    def texts(self) -> list[str]:
        return ["" if pd.isna(value) else str(value) for value in self.frame[self.text_column]]

    def duplicate_ids(self) -> list[str]:
        ids = self.frame[self.id_column].astype(str)
        return sorted(set(ids[ids.duplicated(keep=False)]))

    def subset(self, doc_ids: Iterable[str]) -> "Corpus":
        """Rows whose identifier is in ``doc_ids``, in corpus order."""
        wanted = {str(doc_id) for doc_id in doc_ids}
        mask = self.frame[self.id_column].astype(str).isin(wanted)
        return Corpus(self.frame.loc[mask].reset_index(drop=True).copy(), self.schema)

    def filter(self, column: str, values: Sequence[str]) -> "Corpus":
        if column not in self.frame.columns:
            raise DataAccessError(f"Column '{column}' not present in corpus.")
        allowed = {str(value) for value in values}
        mask = self.frame[column].astype(str).isin(allowed)
        return Corpus(self.frame.loc[mask].reset_index(drop=True).copy(), self.schema)

    def with_column(self, name: str, values: Sequence[Any] | pd.Series) -> "Corpus":
        """Return a new corpus with ``name`` appended (or replaced)."""
        frame = self.frame.copy()
        frame[name] = values
        return Corpus(frame, self.schema)


def load_corpus(path: str | Path, schema: CorpusSchema | None = None) -> Corpus:
    """Read a delimited text file into a ``Corpus``.

    Raises ``DataAccessError`` when the file cannot be read or parsed, or when
    the identifier or text column is missing.
    """
    schema = schema or CorpusSchema()
    source = Path(path)
    logger.info("load:start | path={}", source)

    try:
        frame = pd.read_csv(source, sep=schema.sep, dtype={schema.id_column: str})
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise DataAccessError(f"Could not read corpus from {source}: {exc}") from exc

    missing = [col for col in (schema.id_column, schema.text_column) if col not in frame.columns]
    if missing:
        raise DataAccessError(f"Corpus {source} is missing required column(s): {', '.join(missing)}")

    if schema.group_column and schema.group_column not in frame.columns:
        logger.warning("load:no_group_column | column={} | grouping disabled", schema.group_column)

    frame[schema.text_column] = frame[schema.text_column].fillna("").astype(str)

    corpus = Corpus(frame, schema)
    duplicates = corpus.duplicate_ids()
    if duplicates:
        logger.warning("load:duplicate_ids | count={} | sample={}", len(duplicates), duplicates[:5])
    logger.info("load:done | documents={} | columns={}", len(corpus), len(frame.columns))
    return corpus
