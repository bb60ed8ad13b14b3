"""Rule-matching engine: unit normalization, token extraction, evaluation."""
from drawcheck.core.units import UnitParseError, normalize, to_millimetres, canonical_unit
from drawcheck.core.tokens import extract_numeric_tokens, iter_numeric_tokens
from drawcheck.core.evaluator import evaluate_rule, compare
from drawcheck.core.checker import RuleChecker, check_rules, summarize, get_rule_checker

__all__ = [
    "UnitParseError",
    "normalize",
    "to_millimetres",
    "canonical_unit",
    "extract_numeric_tokens",
    "iter_numeric_tokens",
    "evaluate_rule",
    "compare",
    "RuleChecker",
    "check_rules",
    "summarize",
    "get_rule_checker",
]
