import pytest
from unitconvert.units import (
    CategoryMismatchError,
    ConversionSyntaxError,
    UnitAbbreviation,
    UnitNotFoundError,
    abbreviations_for,
    looks_like_conversion,
    parse_conversion,
    resolve_unit,
)

TABLE = [
    UnitAbbreviation("Meter", "m", "Length"),
    UnitAbbreviation("Millimeter", "mm", "Length"),
    UnitAbbreviation("Megameter", "Mm", "Length"),
    UnitAbbreviation("Kilometer", "km", "Length"),
    UnitAbbreviation("NauticalMile", "nmi", "Length"),
    UnitAbbreviation("Nanometer", "nm", "Length"),
    UnitAbbreviation("Picometer", "pm", "Length"),
    UnitAbbreviation("Celsius", "C", "Temperature"),
    UnitAbbreviation("Fahrenheit", "F", "Temperature"),
    UnitAbbreviation("Liter", "l", "Capacity"),
    UnitAbbreviation("Liter", "L", "Capacity"),
]

def test_exact_abbreviation_wins_over_case_folding():
    assert resolve_unit(TABLE, "Mm").unit == "Megameter"
    assert resolve_unit(TABLE, "mm").unit == "Millimeter"

def test_case_insensitive_fallbacks():
    assert resolve_unit(TABLE, "KM").unit == "Kilometer"
    assert resolve_unit(TABLE, "kilometer").unit == "Kilometer"
    assert resolve_unit(TABLE, "c").unit == "Celsius"
    assert resolve_unit(TABLE, "parsec") is None

def test_abbreviations_for():
    assert abbreviations_for(TABLE, "Liter", "Capacity") == ["l", "L"]
    assert abbreviations_for(TABLE, "Liter", "Length") == []

@pytest.mark.parametrize("text, value, src, dst", [
    ("2km -> nmi", 2.0, "Kilometer", "NauticalMile"),
    ("20C->F", 20.0, "Celsius", "Fahrenheit"),
    ("-5.6e-5nm -> pm", -5.6e-5, "Nanometer", "Picometer"),
    ("3 km to m", 3.0, "Kilometer", "Meter"),
    ("  .5 KM TO M  ", 0.5, "Kilometer", "Meter"),
])
def test_parse_conversion(text, value, src, dst):
    req = parse_conversion(TABLE, text)
    assert (req.value, req.from_unit, req.to_unit) == (value, src, dst)

def test_parse_conversion_category():
    assert parse_conversion(TABLE, "100F -> C").category == "Temperature"

@pytest.mark.parametrize("text", ["km -> m", "2km m", "2km tom", "2 -> m", "2km -> m -> mm", "3 + 4"])
def test_parse_conversion_syntax_errors(text):
    assert not looks_like_conversion(text)
    with pytest.raises(ConversionSyntaxError):
        parse_conversion(TABLE, text)

def test_unknown_unit():
    with pytest.raises(UnitNotFoundError) as e:
        parse_conversion(TABLE, "2 furlong -> m")
    assert "furlong" in str(e.value)

def test_category_mismatch():
    with pytest.raises(CategoryMismatchError):
        parse_conversion(TABLE, "2km -> C")
