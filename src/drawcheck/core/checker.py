"""Batch checker - runs a whole rule set against one drawing's text."""
from typing import Any, Iterable, List, Optional, Sequence

from drawcheck.config import settings
from drawcheck.core.evaluator import EQUALITY_TOLERANCE, evaluate_rule
from drawcheck.core.tokens import DEFAULT_CONTEXT_RADIUS, extract_numeric_tokens
from drawcheck.models.results import CheckSummary, EvaluationResult, EvaluationStatus
from drawcheck.utils.logging import get_logger

logger = get_logger(__name__)


def check_rules(
    rules: Optional[Iterable[Any]],
    text: Optional[str],
    *,
    context_radius: int = DEFAULT_CONTEXT_RADIUS,
    tolerance: float = EQUALITY_TOLERANCE,
) -> List[EvaluationResult]:
    """Evaluate every rule against ``text``.

    The text is lower-cased once and scanned for numeric tokens once; both
    are shared by all rules. Every rule is evaluated, whatever the outcome of
    the previous ones, and results keep the order of ``rules``.

    Args:
        rules: Rule mappings as loaded from a rule set file
        text: Drawing text from OCR/PDF extraction
        context_radius: Characters of context kept around each numeric token
        tolerance: Absolute tolerance for ``=`` comparisons, in mm

    Returns:
        One EvaluationResult per rule
    """
    rule_list = list(rules or [])
    document = text or ""
    lowered = document.lower()
    tokens = tuple(extract_numeric_tokens(document, context_radius=context_radius))

    results = [evaluate_rule(rule, tokens, lowered, tolerance=tolerance) for rule in rule_list]

    summary = summarize(results)
    logger.info(
        "Rule check completed",
        rule_count=len(rule_list),
        token_count=len(tokens),
        passed=summary.passed_checks,
        failed=summary.failed_checks,
        unhandled=summary.unhandled_checks,
    )
    return results


def summarize(results: Sequence[EvaluationResult]) -> CheckSummary:
    """Count passed, failed and unhandled results."""
    passed = sum(1 for r in results if r.status == EvaluationStatus.PASSED)
    failed = sum(1 for r in results if r.status == EvaluationStatus.FAILED)
    return CheckSummary(
        total_checks=len(results),
        passed_checks=passed,
        failed_checks=failed,
        unhandled_checks=len(results) - passed - failed,
    )


class RuleChecker:
    """Batch checker bound to the configured matching parameters."""

    def __init__(self, context_radius: int = DEFAULT_CONTEXT_RADIUS, tolerance: float = EQUALITY_TOLERANCE):
        self.context_radius = context_radius
        self.tolerance = tolerance

    def check(self, rules: Optional[Iterable[Any]], text: Optional[str]) -> List[EvaluationResult]:
        """Evaluate ``rules`` against ``text``."""
        return check_rules(rules, text, context_radius=self.context_radius, tolerance=self.tolerance)


# Global singleton instance
_rule_checker: Optional[RuleChecker] = None


def get_rule_checker() -> RuleChecker:
    """Get the global rule checker instance.

    Returns:
        RuleChecker configured from settings
    """
    global _rule_checker
    if _rule_checker is None:
        _rule_checker = RuleChecker(
            context_radius=settings.context_radius,
            tolerance=settings.equality_tolerance,
        )
    return _rule_checker
