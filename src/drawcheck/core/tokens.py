"""Numeric token extractor - locates measurements in drawing text.

The extractor is a left-to-right scanner with explicit boundary rules:

* A token is a number (digits, optionally ``.`` and digits) with an optional
  sign and an optional ``mm``/``cm``/``m`` unit (case-insensitive), which may
  be separated from the number by spaces or tabs and at most one line
  break (PDF text often wraps between a value and its unit).
* Word characters are letters, digits (superscripts included) and ``_``.
* A sign counts only when the character before it is not a word character.
* A number attached to a word character, directly or through a joiner
  (``-``, ``/``, ``.``, ``,``), is part of a larger token and is skipped:
  ``page2``, ``rev.2``, ``01-jan-2025``, ``A-101``, ``1.2.3``, ``2025abc``.
  A ``.`` directly before a digit always attaches (``.5`` is skipped).
* A unit must be followed by a non-word character, so ``5m2`` and ``900mms``
  are skipped, as are areas and volumes written with a space (``1200 m2``,
  ``1500 m²``, ``3 cm3``). If the unit letters run on into more letters
  after whitespace (``900 ms``), the number stands alone without a unit.
* ``x``, ``X`` or ``×`` between digits separates a dimension pair:
  ``900x2100`` yields two tokens.
* A unitless, unsigned four-digit integer between 1900 and 2099 is read as
  a year and skipped, unless it is one side of a dimension pair
  (``900x2000``).

Matches never overlap and are returned in order of appearance.
"""
from typing import Iterator, List, Optional, Tuple

from drawcheck.core.units import UnitParseError, normalize
from drawcheck.models.results import NumericToken
from drawcheck.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CONTEXT_RADIUS = 30

SIGNS = frozenset("+-")
JOINERS = frozenset("-/.,")
DIMENSION_SEPARATORS = frozenset("xX×")
UNIT_SPACING = frozenset(" \t")
LINE_BREAKS = ("\r\n", "\n")
# Longest first so that "mm" is not read as "m"
UNITS = ("mm", "cm", "m")
YEAR_MIN, YEAR_MAX = 1900, 2099


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _is_word(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def _glued_left(text: str, pos: int) -> bool:
    """Whether the character(s) before ``pos`` attach it to a larger token."""
    if pos == 0:
        return False
    prev = text[pos - 1]
    if prev in DIMENSION_SEPARATORS and pos >= 2 and _is_digit(text[pos - 2]):
        return False
    if _is_word(prev) or prev == ".":
        return True
    return prev in JOINERS and pos >= 2 and _is_word(text[pos - 2])


def _glued_right(text: str, pos: int, after_unit: bool) -> bool:
    """Whether the character(s) from ``pos`` on attach the token to a larger one."""
    if pos >= len(text):
        return False
    nxt = text[pos]
    if nxt in DIMENSION_SEPARATORS and pos + 1 < len(text) and _is_digit(text[pos + 1]):
        return False
    if _is_word(nxt):
        return True
    if after_unit:
        return False
    return nxt in JOINERS and pos + 1 < len(text) and _is_word(text[pos + 1])


def _read_number(text: str, pos: int) -> int:
    """Return the end offset of the unsigned number starting at ``pos``."""
    end = pos
    length = len(text)
    while end < length and _is_digit(text[end]):
        end += 1
    if end + 1 < length and text[end] == "." and _is_digit(text[end + 1]):
        end += 1
        while end < length and _is_digit(text[end]):
            end += 1
    return end


def _skip_spacing(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] in UNIT_SPACING:
        pos += 1
    return pos


def _read_unit(text: str, pos: int) -> Tuple[Optional[str], int, bool]:
    """Look for a unit at ``pos``.

    Returns:
        Tuple of (unit or None, end offset of the unit, whether whitespace
        preceded it)
    """
    cursor = _skip_spacing(text, pos)
    for line_break in LINE_BREAKS:
        if text.startswith(line_break, cursor):
            cursor = _skip_spacing(text, cursor + len(line_break))
            break
    spaced = cursor > pos
    head = text[cursor:cursor + 2].lower()
    for unit in UNITS:
        if head.startswith(unit):
            return unit, cursor + len(unit), spaced
    return None, pos, spaced


def _is_year(literal: str) -> bool:
    return len(literal) == 4 and literal.isascii() and literal.isdigit() and YEAR_MIN <= int(literal) <= YEAR_MAX


def _in_dimension_pair(text: str, start: int, end: int) -> bool:
    return (start > 0 and text[start - 1] in DIMENSION_SEPARATORS) or (
        end < len(text) and text[end] in DIMENSION_SEPARATORS
    )


def context_window(text: str, start: int, end: int, radius: int = DEFAULT_CONTEXT_RADIUS) -> str:
    """Text within ``radius`` characters around ``text[start:end]``, trimmed."""
    return text[max(0, start - radius):min(len(text), end + radius)].strip()


def iter_numeric_tokens(text: str, *, context_radius: int = DEFAULT_CONTEXT_RADIUS) -> Iterator[NumericToken]:
    """Yield the measurements found in ``text``, left to right.

    Args:
        text: Original document text (not lower-cased, so context stays readable)
        context_radius: Characters of context kept on each side of a token

    Yields:
        NumericToken for every accepted match
    """
    if not text:
        return

    length = len(text)
    pos = 0
    while pos < length:
        ch = text[pos]

        if ch in SIGNS and pos + 1 < length and _is_digit(text[pos + 1]):
            if _glued_left(text, pos):
                pos += 1
                continue
            number_start = pos + 1
        elif _is_digit(ch):
            if _glued_left(text, pos):
                pos = _read_number(text, pos)
                continue
            number_start = pos
        else:
            pos += 1
            continue

        number_end = _read_number(text, number_start)
        unit, unit_end, spaced = _read_unit(text, number_end)
        end = number_end

        if unit is not None:
            if not _glued_right(text, unit_end, after_unit=True):
                end = unit_end
            elif spaced and text[unit_end].isalpha():
                unit = None
            else:
                # 5m2, 900mms, 1200 m2
                pos = unit_end
                continue

        if unit is None:
            if _glued_right(text, number_end, after_unit=False):
                pos = number_end
                continue
            if _is_year(text[pos:number_end]) and not _in_dimension_pair(text, pos, number_end):
                pos = number_end
                continue

        raw = text[pos:end]
        try:
            parsed = normalize(raw)
        except UnitParseError:
            logger.debug("Skipping unparseable token", token=raw)
            pos = end
            continue

        yield NumericToken(
            token=raw,
            parsed=parsed,
            context=context_window(text, pos, end, context_radius),
            start=pos,
            end=end,
        )
        pos = end


def extract_numeric_tokens(text: str, *, context_radius: int = DEFAULT_CONTEXT_RADIUS) -> List[NumericToken]:
    """Extract all measurements from ``text`` in order of appearance."""
    return list(iter_numeric_tokens(text, context_radius=context_radius))
