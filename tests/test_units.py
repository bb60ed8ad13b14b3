import pytest


def test_normalize_converts_supported_units_to_millimetres() -> None:
    from drawcheck.core.units import normalize

    assert normalize("1 m").mm == 1000
    assert normalize("10cm").mm == 100
    assert normalize("5").mm == 5
    assert normalize("0.9 m").mm == pytest.approx(900)


def test_normalize_is_case_insensitive_and_trims() -> None:
    from drawcheck.core.units import normalize

    token = normalize("  900 MM ")
    assert token.raw == "900 mm"
    assert token.num == 900
    assert token.unit == "mm"
    assert token.mm == 900


def test_normalize_defaults_to_millimetres_and_keeps_sign() -> None:
    from drawcheck.core.units import normalize

    assert normalize("42").unit == "mm"
    assert normalize("-12.5cm").mm == pytest.approx(-125)
    assert normalize("+3m").mm == 3000


@pytest.mark.parametrize("token", ["", "abc", "mm"])
def test_normalize_rejects_tokens_without_number(token: str) -> None:
    from drawcheck.core.units import UnitParseError, normalize

    with pytest.raises(UnitParseError, match="No numeric literal"):
        normalize(token)


@pytest.mark.parametrize("token", ["5 ft", "900mms", "12 km", "1e3"])
def test_normalize_rejects_unrecognized_units(token: str) -> None:
    from drawcheck.core.units import UnitParseError, normalize

    with pytest.raises(UnitParseError, match="Unrecognized unit"):
        normalize(token)


def test_unit_parse_error_is_a_value_error() -> None:
    from drawcheck.core.units import UnitParseError

    assert issubclass(UnitParseError, ValueError)


def test_canonical_unit_falls_back_to_millimetres() -> None:
    from drawcheck.core.units import canonical_unit, to_millimetres

    assert canonical_unit(None) == "mm"
    assert canonical_unit("") == "mm"
    assert canonical_unit(" CM ") == "cm"
    assert canonical_unit("ft") == "mm"
    assert to_millimetres(1.5, "m") == 1500
    assert to_millimetres(7, "inches") == 7


def test_unit_token_serializes_with_value_mm_alias() -> None:
    from drawcheck.core.units import normalize

    dumped = normalize("2 cm").model_dump(by_alias=True)
    assert dumped == {"raw": "2 cm", "num": 2.0, "unit": "cm", "valueMm": 20.0}


def test_normalize_accepts_line_break_before_unit() -> None:
    from drawcheck.core.units import normalize

    assert normalize("1.2\nm").mm == pytest.approx(1200)
    assert normalize("45\r\ncm").mm == 450
