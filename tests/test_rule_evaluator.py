import pytest


def _evaluate(rule, text: str):
    from drawcheck.core.evaluator import evaluate_rule
    from drawcheck.core.tokens import extract_numeric_tokens

    return evaluate_rule(rule, extract_numeric_tokens(text), text.lower())


def _numeric(value, operator=">=", units="mm", rule_id="N-1"):
    return {
        "id": rule_id,
        "technical_check": {"type": "numeric", "operator": operator, "value": value, "units": units},
    }


def test_keyword_rule_reports_only_found_phrases() -> None:
    from drawcheck.models import EvaluationStatus

    rule = {
        "id": "K-1",
        "technical_check": {"type": "presence", "example_text_matches": ["title block", "revision"]},
    }
    result = _evaluate(rule, "Revision 02")

    assert result.ok is True
    assert result.status == EvaluationStatus.PASSED
    assert result.found_matches == ["revision"]
    assert result.type == "presence"


def test_keyword_match_is_case_insensitive_and_keeps_configured_phrase() -> None:
    rule = {"id": "K-2", "technical_check": {"type": "keyword", "example_text_matches": ["Title Block"]}}
    result = _evaluate(rule, "TITLE BLOCK: sheet 1")

    assert result.ok is True
    assert result.found_matches == ["Title Block"]


def test_keyword_rule_fails_when_nothing_found() -> None:
    from drawcheck.models import EvaluationStatus

    rule = {"id": "K-3", "technical_check": {"type": "presence", "example_text_matches": ["fire exit"]}}
    result = _evaluate(rule, "Corridor width 900 mm")

    assert result.ok is False
    assert result.status == EvaluationStatus.FAILED
    assert result.found_matches == []


def test_blank_phrases_never_match() -> None:
    rule = {"id": "K-4", "technical_check": {"type": "presence", "example_text_matches": ["", "   "]}}
    assert _evaluate(rule, "anything").ok is False


def test_missing_type_defaults_to_keyword() -> None:
    rule = {"id": "K-5", "technical_check": {"example_text_matches": ["revision"]}}
    result = _evaluate(rule, "Revision 02")

    assert result.type == "keyword"
    assert result.ok is True


def test_numeric_rule_passes_on_matching_measurement() -> None:
    result = _evaluate(_numeric(900), "corridor width shall not be less than 900 mm")

    assert result.ok is True
    assert result.required == 900
    assert len(result.matched) >= 1
    assert result.matched[0].mm == 900
    assert result.matched[0].token == "900 mm"
    assert [t.token for t in result.found_numbers] == ["900 mm"]


def test_numeric_rule_converts_required_units() -> None:
    result = _evaluate(_numeric(1, units="m"), "corridor width 900 mm")

    assert result.ok is False
    assert result.required == 1000
    assert result.matched == []


@pytest.mark.parametrize(
    "operator,value,expected",
    [
        (">=", 900, True),
        (">", 900, False),
        ("<=", 900, True),
        ("<", 900, False),
        ("<", 901, True),
        ("=", 900, True),
        ("==", 900, True),
        ("≥", 90, True),
        ("≤", 899, False),
    ],
)
def test_numeric_operators(operator: str, value: float, expected: bool) -> None:
    assert _evaluate(_numeric(value, operator=operator), "width 900 mm").ok is expected


def test_equality_absorbs_floating_point_noise() -> None:
    result = _evaluate(_numeric(900, operator="="), "width 900.0000001 mm")
    assert result.ok is True


def test_equality_is_not_an_engineering_tolerance() -> None:
    result = _evaluate(_numeric(900, operator="="), "width 901 mm")
    assert result.ok is False


def test_compare_uses_tolerance_for_equality_only() -> None:
    from drawcheck.core.evaluator import compare

    assert compare(900.0000001, "=", 900) is True
    assert compare(905, "=", 900, tolerance=5) is True
    assert compare(900.0000001, ">", 900) is True


def test_missing_operator_defaults_to_at_least() -> None:
    rule = {"id": "N-2", "technical_check": {"type": "numeric", "value": 900}}
    assert _evaluate(rule, "width 950").ok is True
    assert _evaluate(rule, "width 850").ok is False


def test_numeric_value_given_as_string() -> None:
    assert _evaluate(_numeric("1.5", units="m"), "width 1500 mm").ok is True


def test_non_numeric_required_value_fails_with_note() -> None:
    from drawcheck.models import EvaluationStatus

    result = _evaluate(_numeric("wide"), "width 900 mm")

    assert result.status == EvaluationStatus.FAILED
    assert result.ok is False
    assert result.required is None
    assert result.matched == []
    assert result.note == "non-numeric required value"


@pytest.mark.parametrize(
    "rule,note",
    [
        ({"id": "U-1", "technical_check": {"type": "area", "value": 10}}, "type not handled"),
        ({"id": "U-2"}, "missing technical_check"),
        ({"id": "U-3", "technical_check": "numeric"}, "missing technical_check"),
        ({"id": "U-4", "technical_check": {"type": "presence", "example_text_matches": "title"}}, "example_text_matches must be a list of strings"),
        ({"id": "U-5", "technical_check": {"type": "numeric", "operator": ">="}}, "numeric check without value"),
        ({"id": "U-6", "technical_check": {"type": "numeric", "operator": "!=", "value": 900}}, "unsupported operator: !="),
    ],
)
def test_unhandled_rules_are_flagged_never_ok(rule, note) -> None:
    from drawcheck.models import EvaluationStatus

    result = _evaluate(rule, "width 900 mm title")

    assert result.status == EvaluationStatus.UNHANDLED
    assert result.handled is False
    assert result.ok is None
    assert result.note == note
    assert result.id == rule["id"]


def test_non_object_rule_is_unhandled() -> None:
    result = _evaluate("not a rule", "width 900 mm")

    assert result.handled is False
    assert result.note == "rule is not an object"


def test_bare_year_does_not_satisfy_high_threshold() -> None:
    result = _evaluate(_numeric(1000), "Issued 2025 for approval, see page2")

    assert result.ok is False
    assert result.found_numbers == []


def test_unknown_rule_unit_falls_back_to_millimetres() -> None:
    result = _evaluate(_numeric(900, units="ft"), "width 900 mm")

    assert result.required == 900
    assert result.ok is True


def test_result_json_uses_report_keys() -> None:
    payload = _evaluate(_numeric(900), "width 900 mm").to_json_dict()

    assert payload["id"] == "N-1"
    assert payload["ok"] is True
    assert payload["status"] == "passed"
    assert payload["matched"] == [{"token": "900 mm", "foundMm": 900.0, "context": "width 900 mm"}]
    assert payload["foundNumbers"][0]["parsed"]["valueMm"] == 900.0
    assert payload["rule"]["technical_check"]["value"] == 900


def test_unhandled_result_json_omits_ok() -> None:
    payload = _evaluate({"id": "U-7", "technical_check": {"type": "area"}}, "").to_json_dict()

    assert "ok" not in payload
    assert payload["status"] == "unhandled"
    assert payload["note"] == "type not handled"


def test_area_with_spaced_unit_does_not_satisfy_length_rule() -> None:
    result = _evaluate(_numeric(1000), "Floor area 1200 m2 and 1500 m²")

    assert result.ok is False
    assert result.found_numbers == []
