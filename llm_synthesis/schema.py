"""Structured output schema for AI sales analysis."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field

ANALYSIS_SECTIONS = ("trends", "patterns", "predictions", "risks", "insights")


class SalesAnalysis(BaseModel):
    """Narrative analysis returned by the language model.

    Unknown keys are ignored; every list section must be an array of
    strings.
    """

    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        str_strip_whitespace=True,
    )

    trends: List[str] = Field(default_factory=list)
    patterns: List[str] = Field(default_factory=list)
    predictions: List[str] = Field(default_factory=list)
    risks: List[str] = Field(default_factory=list)
    insights: List[str] = Field(default_factory=list)
    summary: str = ""

    @classmethod
    def from_text(cls, raw_text: str) -> "SalesAnalysis":
        """Wrap unstructured model text as a summary-only analysis."""
        return cls(summary=raw_text or "")
