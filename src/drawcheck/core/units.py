"""Unit normalizer - parses measurement tokens into millimetres."""
import re
from typing import Optional

from drawcheck.models.results import UnitToken
from drawcheck.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_UNIT = "mm"

# Conversion factors to millimetres. No other units are recognized.
UNIT_FACTORS = {
    "mm": 1.0,
    "cm": 10.0,
    "m": 1000.0,
}

_NUMBER_PATTERN = re.compile(r"\d", re.ASCII)
_TOKEN_PATTERN = re.compile(r"([+-]?\d+(?:\.\d+)?)[ \t]*(?:\r?\n[ \t]*)?(mm|cm|m)?", re.ASCII)


class UnitParseError(ValueError):
    """Raised when a token is not a number with an optional mm/cm/m suffix."""


def canonical_unit(unit: Optional[str]) -> str:
    """Map a declared unit onto the conversion table.

    Absent units mean millimetres. Unknown units also fall back to
    millimetres, with a warning, so that a rule declaring e.g. ``"ft"`` is
    still evaluated rather than dropped.

    Args:
        unit: Unit as declared by a rule (may be None or empty)

    Returns:
        One of ``mm``, ``cm`` or ``m``
    """
    cleaned = (unit or "").strip().lower()
    if not cleaned:
        return DEFAULT_UNIT
    if cleaned in UNIT_FACTORS:
        return cleaned
    logger.warning("Unknown unit, assuming millimetres", unit=unit)
    return DEFAULT_UNIT


def to_millimetres(value: float, unit: Optional[str]) -> float:
    """Convert a magnitude in ``unit`` to millimetres."""
    return value * UNIT_FACTORS[canonical_unit(unit)]


def normalize(token: str) -> UnitToken:
    """Parse a numeric token with an optional unit suffix.

    Accepts ``900``, ``900mm``, ``900 MM``, ``0.9 m``, ``-12.5cm``, and one
    line break between number and unit. The whole token must match: a
    suffix other than exactly ``mm``, ``cm`` or ``m`` is rejected rather than
    partially matched.

    Args:
        token: Token text

    Returns:
        UnitToken with the canonical magnitude in millimetres

    Raises:
        UnitParseError: If the token holds no numeric literal or carries an
            unrecognized unit
    """
    if token is None:
        raise UnitParseError("Empty token")

    raw = str(token).strip().lower()
    match = _TOKEN_PATTERN.fullmatch(raw)
    if match is None:
        if not _NUMBER_PATTERN.search(raw):
            raise UnitParseError(f"No numeric literal in token: {token!r}")
        raise UnitParseError(f"Unrecognized unit in token: {token!r}")

    num = float(match.group(1))
    unit = match.group(2) or DEFAULT_UNIT
    return UnitToken(raw=raw, num=num, unit=unit, mm=num * UNIT_FACTORS[unit])
