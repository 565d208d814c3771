# app/models.py
from __future__ import annotations

from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator


# ---------------------------
# Search service payloads
# ---------------------------
class SearchResult(BaseModel):
    """
    One entry of the search response's `results` array. Only the fields the
    export needs are declared; everything else in the payload is ignored.
    """
    title: Optional[str] = None
    uri: Optional[str] = None
    score: Optional[Union[int, float]] = None
    percent_score: Optional[Union[int, float]] = Field(None, alias="percentScore")
    ranking_modifier: Optional[str] = Field(None, alias="rankingModifier")
    is_recommendation: Optional[bool] = Field(None, alias="isRecommendation")
    # left untyped: the ranking-info parser treats anything but a string as empty
    ranking_info: Any = Field(None, alias="rankingInfo")

    class Config:
        populate_by_name = True
        extra = "ignore"

    @field_validator("title", "uri", "ranking_modifier", mode="before")
    @classmethod
    def _stringify(cls, v):
        if v is None or isinstance(v, str):
            return v
        return str(v)

    @field_validator("score", "percent_score", mode="before")
    @classmethod
    def _number_or_none(cls, v):
        if isinstance(v, bool):
            return int(v)
        if v is None or isinstance(v, (int, float)):
            return v
        try:
            return float(str(v))
        except ValueError:
            return None

    @field_validator("is_recommendation", mode="before")
    @classmethod
    def _flag_or_none(cls, v):
        if isinstance(v, bool) or v is None:
            return v
        if isinstance(v, str) and v.strip().lower() in ("true", "false"):
            return v.strip().lower() == "true"
        return None


class CapturedRequest(BaseModel):
    """The last outbound search request seen by the capture shim."""
    url: str = Field(..., min_length=1)
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Optional[str] = None


# ---------------------------
# Parsed ranking diagnostics
# ---------------------------
class DiagnosticRecord(BaseModel):
    """
    Structured view of one result's rankingInfo text.

    `doc_score` and `total_score` are derived on access, so
    total_score == doc_score + term_contributions always holds.
    """
    title_weight: int = 0
    quality: int = 0
    date: int = 0
    adjacency: int = 0
    source: int = 0
    custom: int = 0
    qre: int = 0
    ranking_functions: int = 0
    expression_scores: Dict[str, int] = Field(default_factory=dict)
    term_scores: Dict[str, int] = Field(default_factory=dict)
    term_contributions: int = 0

    class Config:
        frozen = True

    @property
    def doc_score(self) -> int:
        return (
            self.title_weight + self.quality + self.date + self.adjacency
            + self.source + self.custom + self.qre + self.ranking_functions
        )

    @property
    def total_score(self) -> int:
        return self.doc_score + self.term_contributions


# ---------------------------
# Export status (what the control panel shows)
# ---------------------------
StatusLevel = Literal["info", "success", "error"]


class ExportStatus(BaseModel):
    message: str
    status: StatusLevel = "info"


class ExportRequestIn(BaseModel):
    count: Optional[int] = Field(None, ge=1, le=5000)

