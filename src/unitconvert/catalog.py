# -----------------------------------------------------------------------------
# Catalog loader & accessor
# Purpose: Parse a YAML unit catalog (categories → units → abbreviations, and
# categories → from-unit → to-unit → multiplier|formula) into typed records
# consumed by the converter builder.
# - Depends on .units (UnitAbbreviation) for typed abbreviation entries.
# -----------------------------------------------------------------------------

from __future__ import annotations
import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Union
from .units import UnitAbbreviation

# Domain-specific error to signal malformed catalog inputs, bad formulas, etc.
class CatalogError(Exception): pass


@dataclass(frozen=True)
class ConversionDefinition:
    # One declared edge: `value` is a multiplier (float) or formula text (str)
    category: str
    from_unit: str
    to_unit: str
    value: Union[float, str]

    @property
    def is_formula(self) -> bool:
        return isinstance(self.value, str)


@dataclass
class Catalog:
    # Every (unit, abbreviation, category) triple, in file order
    units: List[UnitAbbreviation]
    # Every declared base conversion, in file order
    conversions: List[ConversionDefinition]

    @staticmethod
    def from_yaml_dict(d: Dict[str, Any]) -> "Catalog":
        """
        Build a Catalog from a pre-parsed YAML dictionary.
        Expected YAML high-level shape:
          units:
            Length:
              Kilometer: [km]          # list of abbreviations (or one string)
          conversions:
            Length:
              Kilometer:
                Meter: 1000            # number → multiplier edge
            Temperature:
              Celsius:
                Fahrenheit: "{C} * 9 / 5 + 32"   # string → formula edge
        """
        if not isinstance(d, dict):
            raise CatalogError("Catalog must be a mapping with 'units' and 'conversions'")

        units: List[UnitAbbreviation] = []
        # ---- Parse unit abbreviations ----------------------------------------
        for category, members in _mapping(d.get("units") or {}, "units").items():
            for unit, abbrevs in _mapping(members or {}, f"units.{category}").items():
                if isinstance(abbrevs, str):
                    abbrevs = [abbrevs]
                if not isinstance(abbrevs, list) or not all(isinstance(a, str) and a for a in abbrevs):
                    raise CatalogError(f"units.{category}.{unit} must be a list of abbreviations")
                for abbrev in abbrevs:
                    units.append(UnitAbbreviation(unit=str(unit), abbrev=abbrev, category=str(category)))

        conversions: List[ConversionDefinition] = []
        # ---- Drill into categories → from → to -------------------------------
        for category, sources in _mapping(d.get("conversions") or {}, "conversions").items():
            for from_unit, targets in _mapping(sources or {}, f"conversions.{category}").items():
                where = f"conversions.{category}.{from_unit}"
                for to_unit, value in _mapping(targets or {}, where).items():
                    conversions.append(ConversionDefinition(
                        category=str(category), from_unit=str(from_unit), to_unit=str(to_unit),
                        value=_definition_value(value, f"{where}.{to_unit}"),
                    ))
        return Catalog(units=units, conversions=conversions)

    @staticmethod
    def from_yaml_text(text: str) -> "Catalog":
        """
        Convenience: parse raw YAML string into a Catalog.
        Uses yaml.safe_load for security (no arbitrary object constructors).
        """
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise CatalogError(f"Invalid catalog YAML: {e}") from e
        return Catalog.from_yaml_dict(data or {})

    @staticmethod
    def from_file(path: Union[str, Path]) -> "Catalog":
        """Open a YAML catalog from disk (UTF-8) and parse it."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                return Catalog.from_yaml_text(f.read())
        except OSError as e:
            raise CatalogError(f"Unable to read catalog {path}: {e}") from e

    def categories(self) -> List[str]:
        seen: List[str] = []
        for u in self.units:
            if u.category not in seen:
                seen.append(u.category)
        return seen

    def list_units(self) -> List[Dict[str, Any]]:
        """UI-friendly listing: one row per canonical unit with all its abbreviations."""
        rows: Dict[tuple, Dict[str, Any]] = {}
        for u in self.units:
            row = rows.setdefault((u.category, u.unit), {"unit": u.unit, "category": u.category, "abbreviations": []})
            row["abbreviations"].append(u.abbrev)
        return list(rows.values())


def _mapping(value: Any, where: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise CatalogError(f"{where} must be a mapping")
    return value


def _definition_value(value: Any, where: str) -> Union[float, str]:
    # bool is an int subclass in Python; YAML `yes`/`true` is never a multiplier
    if isinstance(value, bool):
        raise CatalogError(f"{where}: expected a number or formula, got {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and value.strip():
        return value
    raise CatalogError(f"{where}: expected a number or formula, got {value!r}")
