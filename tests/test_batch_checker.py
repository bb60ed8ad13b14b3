import json

SAMPLE_TEXT = "Corridor width shall not be less than 900 mm.\nTitle block: Revision 02, Date: 01-Jan-2025"


def _rules():
    return [
        {"id": "R-1", "technical_check": {"type": "numeric", "operator": ">=", "value": 1, "units": "m"}},
        {"id": "R-2", "technical_check": {"type": "presence", "example_text_matches": ["title block", "revision"]}},
        {"id": "R-3", "technical_check": {"type": "area"}},
        {"id": "R-4", "technical_check": {"type": "numeric", "operator": ">=", "value": 900, "units": "mm"}},
    ]


def test_results_follow_rule_order_without_short_circuit() -> None:
    from drawcheck.core.checker import check_rules

    results = check_rules(_rules(), SAMPLE_TEXT)

    assert [r.id for r in results] == ["R-1", "R-2", "R-3", "R-4"]
    assert [r.ok for r in results] == [False, True, None, True]


def test_batch_output_is_deterministic() -> None:
    from drawcheck.core.checker import check_rules

    first = json.dumps([r.to_json_dict() for r in check_rules(_rules(), SAMPLE_TEXT)], sort_keys=True)
    second = json.dumps([r.to_json_dict() for r in check_rules(_rules(), SAMPLE_TEXT)], sort_keys=True)

    assert first == second


def test_summary_counts_each_status() -> None:
    from drawcheck.core.checker import check_rules, summarize

    summary = summarize(check_rules(_rules(), SAMPLE_TEXT))

    assert summary.total_checks == 4
    assert summary.passed_checks == 2
    assert summary.failed_checks == 1
    assert summary.unhandled_checks == 1


def test_malformed_rule_does_not_abort_batch() -> None:
    from drawcheck.core.checker import check_rules

    rules = [None, {"id": "R-5"}, {"id": "R-6", "technical_check": {"example_text_matches": ["revision"]}}]
    results = check_rules(rules, SAMPLE_TEXT)

    assert len(results) == 3
    assert [r.handled for r in results] == [False, False, True]
    assert results[2].ok is True


def test_empty_inputs() -> None:
    from drawcheck.core.checker import check_rules

    assert check_rules([], SAMPLE_TEXT) == []
    assert check_rules(None, None) == []

    results = check_rules(_rules()[:1], None)
    assert results[0].ok is False
    assert results[0].found_numbers == []


def test_rule_checker_applies_configured_tolerance() -> None:
    from drawcheck.core.checker import RuleChecker

    rules = [{"id": "EQ", "technical_check": {"type": "numeric", "operator": "=", "value": 900}}]

    assert RuleChecker().check(rules, "door 903 mm")[0].ok is False
    assert RuleChecker(tolerance=5.0).check(rules, "door 903 mm")[0].ok is True


def test_get_rule_checker_uses_settings() -> None:
    from drawcheck.config import settings
    from drawcheck.core.checker import get_rule_checker

    checker = get_rule_checker()

    assert checker is get_rule_checker()
    assert checker.context_radius == settings.context_radius
    assert checker.tolerance == settings.equality_tolerance
