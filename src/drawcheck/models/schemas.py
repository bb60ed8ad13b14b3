"""Pydantic models for API requests and responses."""
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field, ConfigDict

from drawcheck.models.results import CheckSummary
from drawcheck.models.rules import Rule


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CheckTextRequest(BaseModel):
    """Request model for checking already-extracted drawing text."""
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(..., description="Drawing text from OCR/PDF extraction")
    authority: Optional[str] = Field(None, description="Authority whose stored rule set is used")
    rules: Optional[List[Any]] = Field(None, description="Inline rule set; takes precedence over the stored one")


class CheckReportResponse(BaseModel):
    """Compliance report for one drawing."""
    model_config = ConfigDict(populate_by_name=True)

    authority: Optional[str] = Field(None, description="Authority slug of the rule set used")
    summary: CheckSummary = Field(..., description="Pass/fail counts")
    results: List[Dict[str, Any]] = Field(default_factory=list, description="One result per rule, in rule-set order")


class RulesResponse(BaseModel):
    """Stored rule set for an authority."""
    model_config = ConfigDict(populate_by_name=True)

    authority: str = Field(..., description="Authority slug")
    count: int = Field(..., description="Number of rules")
    rules: List[Dict[str, Any]] = Field(default_factory=list, description="Rules as stored")


class ExtractFromUrlRequest(BaseModel):
    """Request model for extracting rules from a building-code PDF by URL."""
    model_config = ConfigDict(populate_by_name=True)

    pdf_url: str = Field(..., description="HTTP(S) URL of the building-code PDF")
    authority: str = Field("UNKNOWN", description="Issuing authority (e.g. 'DLF')")


class ExtractionResponse(BaseModel):
    """Result of a rule extraction run."""
    model_config = ConfigDict(populate_by_name=True)

    count: int = Field(..., description="Number of rules persisted")
    file: str = Field(..., description="Rule set file written")
    rules: List[Rule] = Field(default_factory=list, description="Normalized rules")


class HealthResponse(BaseModel):
    """Health check response."""
    model_config = ConfigDict(populate_by_name=True)

    status: str = Field(..., description="Overall health status")
    services: Dict[str, bool] = Field(..., description="Status of individual services")
    timestamp: datetime = Field(default_factory=_utcnow)
