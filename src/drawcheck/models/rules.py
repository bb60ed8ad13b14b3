"""Pydantic models for machine-readable building-code rules."""
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RuleType(str, Enum):
    """Rule types understood by the matching engine."""
    PRESENCE = "presence"
    KEYWORD = "keyword"
    NUMERIC = "numeric"


class TechnicalCheck(BaseModel):
    """Machine-checkable part of a rule."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    type: str = Field("keyword", description="presence, keyword or numeric")
    field_path: Optional[str] = Field(None, description="Drawing field the clause refers to (informational)")
    operator: Optional[str] = Field(None, description="Comparison operator for numeric checks")
    value: Optional[Any] = Field(None, description="Required magnitude for numeric checks")
    units: Optional[str] = Field("", description="mm, cm, m or empty (mm)")
    example_text_matches: List[str] = Field(default_factory=list, description="Phrases for presence/keyword checks")

    @field_validator("example_text_matches", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class Rule(BaseModel):
    """A normalized building-code rule as stored in a rule set file."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(..., description="Identifier, unique within a rule set")
    authority: Optional[str] = Field(None, description="Authority slug (e.g. 'DLF')")
    section_title: Optional[str] = None
    clause_reference: Optional[str] = None
    short_description: Optional[str] = None
    technical_check: TechnicalCheck
    human_review_required: bool = True
    severity: Optional[str] = None
    confidence: Optional[float] = Field(None, ge=0.0, le=1.0)
    raw_clause_text: Optional[str] = None
    notes_for_reviewer: Optional[str] = None
