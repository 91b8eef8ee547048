# -----------------------------------------------------------------------------
# Units & Conversion Requests
# Purpose:
#   Resolve user-typed unit abbreviations to canonical unit names/categories
#   and parse "<value><unit> -> <unit>" requests into structured conversions.
# Scope:
#   - Only the outer request shape is parsed here; the numeric conversion
#     itself happens in converter.py over the per-category unit graphs.
# Safety:
#   - Raises ConversionError subclasses on malformed requests, unknown units
#     and units from different categories.
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

log = logging.getLogger(__name__)


class ConversionError(Exception):
    """Base class for every failure to service a conversion."""


class UnitNotFoundError(ConversionError):
    pass


class CategoryMismatchError(ConversionError):
    pass


class NoPathError(ConversionError):
    pass


class CategoryLookupError(ConversionError):
    pass


class ConversionSyntaxError(ConversionError):
    pass


@dataclass(frozen=True)
class UnitAbbreviation:
    unit: str       # canonical name, e.g. "Kilometer"
    abbrev: str     # user-facing abbreviation, e.g. "km"
    category: str   # e.g. "Length"


@dataclass(frozen=True)
class ConversionRequest:
    value: float
    from_unit: str
    to_unit: str
    category: str


# Numeric literal: sign, integer/decimal part, optional signed exponent
_NUM = r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?"

# "<number><unit> -> <unit>" or "<number> <unit> to <unit>"
CONVERSION_PATTERN = re.compile(
    rf"^\s*(?P<value>{_NUM})\s*(?P<from>[^\W\d_]+)(?:\s*->\s*|\s+to\s+)(?P<to>[^\W\d_]+)\s*$",
    re.IGNORECASE,
)


def looks_like_conversion(text: str) -> bool:
    """True when `text` has the outer shape of a conversion request."""
    return CONVERSION_PATTERN.match(text) is not None


def resolve_unit(abbreviations: Sequence[UnitAbbreviation], text: str) -> Optional[UnitAbbreviation]:
    """
    Resolve a user-typed unit to its table entry.
    Lookup order:
      1) exact abbreviation ("Mm" is Megameter, "mm" is Millimeter)
      2) case-insensitive abbreviation ("KM" → km)
      3) case-insensitive canonical name ("kilometer" → Kilometer)
    Returns None when nothing matches.
    """
    for entry in abbreviations:
        if entry.abbrev == text:
            return entry
    folded = text.casefold()
    for entry in abbreviations:
        if entry.abbrev.casefold() == folded:
            return entry
    for entry in abbreviations:
        if entry.unit.casefold() == folded:
            return entry
    return None


def abbreviations_for(abbreviations: Iterable[UnitAbbreviation], unit: str, category: str) -> list[str]:
    # All abbreviations registered for one canonical unit, in table order
    return [a.abbrev for a in abbreviations if a.unit == unit and a.category == category]


def parse_conversion(abbreviations: Sequence[UnitAbbreviation], text: str) -> ConversionRequest:
    """
    Parse a request such as "2km -> nmi", "20C to F" or "-5.6e-5nm -> pm".

    Raises
    ------
    ConversionSyntaxError   if the text is not "<number><unit> (->|to) <unit>"
    UnitNotFoundError       if either unit cannot be resolved
    CategoryMismatchError   if the two units belong to different categories
    """
    log.info("Attempting to parse conversion %r", text)
    m = CONVERSION_PATTERN.match(text)
    if not m:
        raise ConversionSyntaxError(
            f"'{text}' is not a valid conversion; expected '<value><unit> -> <unit>'"
        )

    value = float(m.group("value"))
    source = resolve_unit(abbreviations, m.group("from"))
    if source is None:
        log.warning("Unable to resolve %r to a known unit", m.group("from"))
        raise UnitNotFoundError(f"'{m.group('from')}' is not a valid unit")
    target = resolve_unit(abbreviations, m.group("to"))
    if target is None:
        log.warning("Unable to resolve %r to a known unit", m.group("to"))
        raise UnitNotFoundError(f"'{m.group('to')}' is not a valid unit")

    log.debug("Resolved %r → %s and %r → %s", m.group("from"), source.unit, m.group("to"), target.unit)
    if source.category != target.category:
        raise CategoryMismatchError(
            f"Cannot convert {source.unit} ({source.category}) to {target.unit} ({target.category})"
        )

    return ConversionRequest(value=value, from_unit=source.unit, to_unit=target.unit, category=source.category)
