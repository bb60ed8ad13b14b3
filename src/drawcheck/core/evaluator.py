"""Rule evaluator - decides whether drawing text satisfies a single rule."""
import math
import operator
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from drawcheck.core.units import to_millimetres
from drawcheck.models.results import (
    EvaluationResult,
    EvaluationStatus,
    MatchedToken,
    NumericToken,
)
from drawcheck.utils.logging import get_logger

logger = get_logger(__name__)

# Absorbs floating-point conversion noise only; it is not an engineering
# tolerance, so "within 5 mm" cannot be expressed with "=".
EQUALITY_TOLERANCE = 1e-6

KEYWORD_TYPES = frozenset({"presence", "keyword"})
NUMERIC_TYPE = "numeric"
DEFAULT_TYPE = "keyword"
DEFAULT_OPERATOR = ">="

_ORDERING: Dict[str, Callable[[float, float], bool]] = {
    ">=": operator.ge,
    "<=": operator.le,
    ">": operator.gt,
    "<": operator.lt,
}
SUPPORTED_OPERATORS = frozenset(_ORDERING) | {"="}
OPERATOR_ALIASES = {
    "==": "=",
    "≥": ">=",
    "≤": "<=",
}


def compare(found_mm: float, op: str, required_mm: float, tolerance: float = EQUALITY_TOLERANCE) -> bool:
    """Apply ``op`` between a found and a required magnitude (both in mm)."""
    if op == "=":
        return abs(found_mm - required_mm) <= tolerance
    return _ORDERING[op](found_mm, required_mm)


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _unhandled(
    rule_id: Optional[str],
    rule_type: Optional[str],
    note: str,
    rule: Optional[Dict[str, Any]],
) -> EvaluationResult:
    logger.debug("Rule not handled", rule_id=rule_id, rule_type=rule_type, note=note)
    return EvaluationResult(
        id=rule_id,
        type=rule_type,
        status=EvaluationStatus.UNHANDLED,
        note=note,
        rule=rule,
    )


def _evaluate_keyword(
    rule_id: Optional[str],
    rule_type: str,
    check: Mapping[str, Any],
    lowered_text: str,
    rule: Dict[str, Any],
) -> EvaluationResult:
    phrases = check.get("example_text_matches")
    if not isinstance(phrases, list) or not all(isinstance(p, str) for p in phrases):
        return _unhandled(rule_id, rule_type, "example_text_matches must be a list of strings", rule)

    # Blank phrases would match every document
    found = [p for p in phrases if p.strip() and p.lower() in lowered_text]
    ok = bool(found)
    return EvaluationResult(
        id=rule_id,
        type=rule_type,
        status=EvaluationStatus.PASSED if ok else EvaluationStatus.FAILED,
        ok=ok,
        found_matches=found,
        rule=rule,
    )


def _evaluate_numeric(
    rule_id: Optional[str],
    rule_type: str,
    check: Mapping[str, Any],
    tokens: Sequence[NumericToken],
    rule: Dict[str, Any],
    tolerance: float,
) -> EvaluationResult:
    if check.get("value") is None:
        return _unhandled(rule_id, rule_type, "numeric check without value", rule)

    op = str(check.get("operator") or DEFAULT_OPERATOR).strip()
    op = OPERATOR_ALIASES.get(op, op)
    if op not in SUPPORTED_OPERATORS:
        return _unhandled(rule_id, rule_type, f"unsupported operator: {op}", rule)

    required_value = _as_number(check.get("value"))
    if required_value is None:
        return EvaluationResult(
            id=rule_id,
            type=rule_type,
            status=EvaluationStatus.FAILED,
            ok=False,
            note="non-numeric required value",
            found_numbers=list(tokens),
            matched=[],
            rule=rule,
        )

    units = check.get("units")
    required_mm = to_millimetres(required_value, None if units is None else str(units))

    matched = [
        MatchedToken(token=token.token, mm=token.mm, context=token.context)
        for token in tokens
        if compare(token.mm, op, required_mm, tolerance)
    ]
    ok = bool(matched)
    return EvaluationResult(
        id=rule_id,
        type=rule_type,
        status=EvaluationStatus.PASSED if ok else EvaluationStatus.FAILED,
        ok=ok,
        required=required_mm,
        found_numbers=list(tokens),
        matched=matched,
        rule=rule,
    )


def evaluate_rule(
    rule: Any,
    tokens: Sequence[NumericToken],
    lowered_text: str,
    *,
    tolerance: float = EQUALITY_TOLERANCE,
) -> EvaluationResult:
    """Evaluate one rule against a document.

    Malformed rules and unknown rule types are reported as unhandled rather
    than raised, so that one bad rule never aborts a batch.

    Args:
        rule: Rule mapping (``id`` + ``technical_check``) as loaded from JSON
        tokens: Numeric tokens of the document, shared across rules
        lowered_text: Lower-cased document text, shared across rules
        tolerance: Absolute tolerance for the ``=`` operator, in mm

    Returns:
        EvaluationResult with type-specific evidence
    """
    if not isinstance(rule, Mapping):
        return _unhandled(None, None, "rule is not an object", None)

    raw_id = rule.get("id")
    rule_id = None if raw_id is None else str(raw_id)
    echo = dict(rule)

    check = rule.get("technical_check")
    if not isinstance(check, Mapping):
        return _unhandled(rule_id, None, "missing technical_check", echo)

    rule_type = check.get("type") or DEFAULT_TYPE
    if not isinstance(rule_type, str):
        return _unhandled(rule_id, None, "type not handled", echo)

    kind = rule_type.strip().lower()
    if kind in KEYWORD_TYPES:
        return _evaluate_keyword(rule_id, rule_type, check, lowered_text, echo)
    if kind == NUMERIC_TYPE:
        return _evaluate_numeric(rule_id, rule_type, check, tokens, echo, tolerance)
    return _unhandled(rule_id, rule_type, "type not handled", echo)
