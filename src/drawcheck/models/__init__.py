"""Data models initialization."""
from drawcheck.models.results import (
    EvaluationStatus,
    UnitToken,
    NumericToken,
    MatchedToken,
    EvaluationResult,
    CheckSummary,
)
from drawcheck.models.rules import RuleType, TechnicalCheck, Rule
from drawcheck.models.schemas import (
    CheckTextRequest,
    CheckReportResponse,
    RulesResponse,
    ExtractFromUrlRequest,
    ExtractionResponse,
    HealthResponse,
)

__all__ = [
    "EvaluationStatus",
    "UnitToken",
    "NumericToken",
    "MatchedToken",
    "EvaluationResult",
    "CheckSummary",
    "RuleType",
    "TechnicalCheck",
    "Rule",
    "CheckTextRequest",
    "CheckReportResponse",
    "RulesResponse",
    "ExtractFromUrlRequest",
    "ExtractionResponse",
    "HealthResponse",
]
