"""Configuration models for each pipeline stage."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator


class CorpusSchema(BaseModel):
    """Column names the pipeline reads from the corpus table."""

    id_column: str = Field(default="resolution_code", description="Unique document identifier column.")
    text_column: str = Field(default="text", description="Column holding the full text.")
    group_column: Optional[str] = Field(
        default="legislature",
        description="Optional categorical column used to group summaries and plots.",
    )
    sep: str = Field(default=",", description="Field delimiter of the CSV file.")


class TokenizerConfig(BaseModel):
    """Normalisation switches applied by ``tokens.tokenize``."""

    lowercase: bool = Field(default=True, description="Case-fold tokens.")
    remove_punct: bool = Field(default=True, description="Drop punctuation tokens.")
    remove_numbers: bool = Field(default=True, description="Drop tokens made only of digits.")
    remove_symbols: bool = Field(default=True, description="Drop symbol tokens such as currency signs.")
    remove_urls: bool = Field(default=True, description="Drop URL tokens.")
    stopwords: Union[Literal["english"], list[str], None] = Field(
        default="english",
        description="'english' for the scikit-learn list, an explicit list, or None to keep all words.",
    )
    min_length: int = Field(default=1, ge=1, description="Minimum token length in characters.")


class TrimConfig(BaseModel):
    """Feature trimming thresholds for ``features.build_matrix``."""

    min_termfreq: int = Field(default=1, ge=1, description="Minimum total count of a term across the corpus.")
    min_docfreq: int = Field(default=1, ge=1, description="Minimum number of documents containing a term.")
    max_docfreq: Optional[float] = Field(
        default=None,
        gt=0,
        description="Maximum document frequency; values <= 1 are read as a proportion of documents.",
    )


class SeedTerms(BaseModel):
    """Inline term -> polarity mapping (LSS seeds)."""

    mode: Literal["terms"] = "terms"
    terms: dict[str, float] = Field(..., description="Seed term or glob pattern mapped to its polarity.")

    @field_validator("terms")
    @classmethod
    def _non_empty(cls, value: dict[str, float]) -> dict[str, float]:
        if not value:
            raise ValueError("at least one seed term is required")
        return value


class ReferenceDocuments(BaseModel):
    """Explicit reference document identifiers with assigned scores."""

    mode: Literal["documents"] = "documents"
    scores: dict[str, float] = Field(..., description="Document identifier mapped to its reference score.")


class RandomReferences(BaseModel):
    """Reproducible random sample of documents carrying a reference score."""

    mode: Literal["random"] = "random"
    size: int = Field(..., ge=2, description="Number of reference documents to draw.")
    seed: int = Field(default=13, description="Seed for numpy's default_rng.")
    score_column: str = Field(default="reference_score", description="Column holding the reference scores.")


ReferenceConfig = Annotated[
    Union[SeedTerms, ReferenceDocuments, RandomReferences],
    Field(discriminator="mode"),
]


class TargetFilter(BaseModel):
    """Restricts prediction to rows whose ``column`` takes one of ``values``."""

    column: str
    values: list[str] = Field(..., min_length=1)


class PipelineConfig(BaseModel):
    """Everything ``pipeline.run_pipeline`` needs besides the scoring strategy."""

    input_path: Path
    output_path: Path
    plot_path: Optional[Path] = None
    metadata_path: Optional[Path] = None
    corpus: CorpusSchema = Field(default_factory=CorpusSchema)
    tokenizer: TokenizerConfig = Field(default_factory=TokenizerConfig)
    trim: TrimConfig = Field(default_factory=TrimConfig)
    target: Optional[TargetFilter] = None

    @model_validator(mode="after")
    def _distinct_paths(self) -> "PipelineConfig":
        if self.output_path == self.input_path:
            raise ValueError("output_path must differ from input_path")
        return self

    def resolved_metadata_path(self) -> Path:
        if self.metadata_path is not None:
            return self.metadata_path
        return self.output_path.with_name(self.output_path.name + ".meta.json")
