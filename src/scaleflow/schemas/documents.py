"""Schemas for raw resolution records."""

from typing import Optional

from pydantic import BaseModel, Field


class ResolutionDocument(BaseModel):
    """Parliamentary resolution as stored in the corpus CSV."""

    doc_id: str = Field(..., description="Unique identifier, e.g. the resolution code.")
    text: str = Field(..., description="Full resolution text.")
    legislature: Optional[str] = Field(default=None, description="Legislature or category label.")
    title: Optional[str] = Field(default=None, description="Resolution title.")
    reference_score: Optional[float] = Field(
        default=None,
        description="Pre-assigned position used when the document serves as a reference text.",
    )
