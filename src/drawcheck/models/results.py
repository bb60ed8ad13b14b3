"""Evidence-first models for rule evaluation.

These models describe what the matching engine found for each rule: the
parsed numeric tokens of a drawing, the tokens that satisfied a numeric
requirement, the phrases found for a keyword rule, and the per-rule verdict.

JSON keys follow the report format consumed by the review UI (``valueMm``,
``foundMatches``, ``foundNumbers``, ``foundMm``); attribute names are
snake_case. Always serialize with ``by_alias=True``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class EvaluationStatus(str, Enum):
    """Verdict of a single rule evaluation."""

    PASSED = "passed"
    FAILED = "failed"
    # Rule was not evaluated (unknown type or malformed); never a pass or fail
    UNHANDLED = "unhandled"


class UnitToken(BaseModel):
    """A numeric literal with its unit, normalized to millimetres."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    raw: str = Field(..., description="Token text, trimmed and lower-cased")
    num: float = Field(..., description="Magnitude as written")
    unit: str = Field("mm", description="Unit symbol (mm when absent)")
    mm: float = Field(..., alias="valueMm", description="Canonical magnitude in millimetres")


class NumericToken(BaseModel):
    """A measurement located in document text."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    token: str
    parsed: UnitToken
    context: str
    start: int
    end: int

    @property
    def mm(self) -> float:
        return self.parsed.mm


class MatchedToken(BaseModel):
    """A token that satisfied a numeric requirement."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    token: str
    mm: float = Field(..., alias="foundMm")
    context: str


class EvaluationResult(BaseModel):
    """Outcome of evaluating one rule against one document."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, description="Rule identifier")
    type: Optional[str] = Field(None, description="technical_check.type of the rule")
    status: EvaluationStatus
    # None when the rule was not handled
    ok: Optional[bool] = None
    note: Optional[str] = Field(None, description="Why the rule was unhandled or could not be satisfied")

    # Keyword evidence
    found_matches: Optional[List[str]] = Field(None, alias="foundMatches")

    # Numeric evidence
    required: Optional[float] = Field(None, description="Requirement in millimetres")
    found_numbers: Optional[List[NumericToken]] = Field(None, alias="foundNumbers")
    matched: Optional[List[MatchedToken]] = None

    rule: Optional[Dict[str, Any]] = Field(None, description="The evaluated rule, echoed for review")

    @property
    def handled(self) -> bool:
        return self.status != EvaluationStatus.UNHANDLED

    def to_json_dict(self) -> Dict[str, Any]:
        """Serialize for reports; unset evidence (and ``ok`` when unhandled) is omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class CheckSummary(BaseModel):
    """Counts over a batch of evaluation results."""

    model_config = ConfigDict(populate_by_name=True)

    total_checks: int = Field(..., description="Number of rules evaluated")
    passed_checks: int = Field(..., description="Rules satisfied by the document")
    failed_checks: int = Field(..., description="Rules not satisfied by the document")
    unhandled_checks: int = Field(..., description="Rules with an unknown type or malformed definition")
