# -----------------------------------------------------------------------------
# Converter: conversion orchestrator + graph builder
# Purpose:
#   Hold one unit graph per category and convert values along the shortest
#   route between two units, applying multiplier and formula edges in order.
# Flow:
#   1) category → graph, unit names → node indices
#   2) BFS for the fewest-hop path
#   3) walk the path: multipliers accumulate, formulas flush and evaluate
#   4) optionally memoize pure-multiplier multi-hop routes as direct edges
# Build:
#   UnitConverterBuilder turns catalog records into graphs (reverse edges,
#   build-time formula parsing, sympy-derived inverse formulas).
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple, Union

from .catalog import Catalog, CatalogError, ConversionDefinition
from .config import Settings, load_settings
from .expression import Expression, ExpressionContext
from .graph import Graph, NodeMissingError
from .inversion import invert_formula
from .tokenizer import ParseError
from .tracer import CACHE, FLUSH, FORMULA, MULTIPLY, PATH, Tracer
from .units import (
    CategoryLookupError,
    NoPathError,
    UnitAbbreviation,
    UnitNotFoundError,
    abbreviations_for,
    parse_conversion,
    resolve_unit,
)


# ---------------------------- Edge weights -----------------------------------

@dataclass(frozen=True)
class Multiplier:
    factor: float

    def __str__(self) -> str:
        return f"×{self.factor!r}"


@dataclass(frozen=True)
class FormulaEdge:
    expression: Expression
    # Names the formula may use for the edge's source unit (abbreviations + canonical name)
    source_names: Tuple[str, ...]

    def __str__(self) -> str:
        return self.expression.text


Weight = Union[Multiplier, FormulaEdge]
UnitGraph = Graph[str, Weight]


@dataclass
class ConversionResult:
    value: float
    from_unit: str
    to_unit: str
    category: str
    steps: List[Dict[str, Any]] = field(default_factory=list)


# ---------------------------- Orchestrator -----------------------------------

class UnitConverter:
    """
    Converts values between units of the same category.

    Parameters
    ----------
    graphs : Iterable[Graph]
        One graph per category; `graph.id` is the category name.
    abbreviations : List[UnitAbbreviation]
        Abbreviation table used by the request front-end and unit lookups.
    cache : bool
        Add a direct edge for every multi-hop, multiplier-only route converted.
    logger : logging.Logger, optional
        Where conversion diagnostics go; defaults to this module's logger.
    """

    def __init__(self, graphs: Iterable[UnitGraph], abbreviations: List[UnitAbbreviation],
                 cache: bool = True, logger: Optional[logging.Logger] = None):
        self.graphs: Dict[str, UnitGraph] = {g.id: g for g in graphs}
        self.abbreviations = list(abbreviations)
        self.cache = cache
        self.log = logger or logging.getLogger(__name__)

    # ---- lookups ---------------------------------------------------------
    def categories(self) -> List[str]:
        return list(self.graphs)

    def units(self) -> List[UnitAbbreviation]:
        return list(self.abbreviations)

    def unit_info(self, text: str) -> UnitAbbreviation:
        """Resolve a single abbreviation or unit name; raises UnitNotFoundError."""
        entry = resolve_unit(self.abbreviations, text.strip())
        if entry is None:
            raise UnitNotFoundError(f"'{text.strip()}' is not a valid unit")
        return entry

    # ---- conversions -----------------------------------------------------
    def convert_from_expression(self, text: str) -> ConversionResult:
        """Parse "<value><unit> -> <unit>" and convert it."""
        request = parse_conversion(self.abbreviations, text)
        tracer = Tracer()
        value = self.convert_from_definition(
            request.category, request.from_unit, request.to_unit, request.value, tracer=tracer
        )
        return ConversionResult(
            value=value,
            from_unit=request.from_unit,
            to_unit=request.to_unit,
            category=request.category,
            steps=tracer.steps(),
        )

    def convert_from_definition(self, category: str, from_unit: str, to_unit: str, value: float,
                                tracer: Optional[Tracer] = None) -> float:
        """
        Convert `value` from `from_unit` to `to_unit` inside `category`.

        Raises
        ------
        CategoryLookupError   unknown category
        UnitNotFoundError     unit not present in the category's graph
        NoPathError           no route between two distinct units
        """
        if tracer is None:
            tracer = Tracer()
        graph = self.graphs.get(category)
        if graph is None:
            raise CategoryLookupError(f"Unknown unit category '{category}'")

        source = graph.get_node_index(from_unit)
        if source is None:
            raise UnitNotFoundError(f"'{from_unit}' is not a {category} unit")
        target = graph.get_node_index(to_unit)
        if target is None:
            raise UnitNotFoundError(f"'{to_unit}' is not a {category} unit")

        path = graph.shortest_path(source, target)
        if not path and source != target:
            self.log.warning("No conversion path from %s to %s", from_unit, to_unit)
            raise NoPathError(f"No conversion path from {from_unit} to {to_unit}")
        self.log.debug("Conversion path %s → %s: %s", from_unit, to_unit,
                       " → ".join([from_unit] + [unit for unit, _ in path]))
        tracer.add(PATH, units=[from_unit] + [unit for unit, _ in path])

        result_value = float(value)
        multiplier = 1.0
        cacheable = True
        previous = from_unit

        for unit, weight in path:
            if isinstance(weight, Multiplier):
                multiplier *= weight.factor
                tracer.add(MULTIPLY, to=unit, factor=weight.factor, multiplier=multiplier)
            else:
                # Formulas see the real value, so pending factors are applied first
                if multiplier != 1.0:
                    result_value *= multiplier
                    tracer.add(FLUSH, multiplier=multiplier, value=result_value)
                    multiplier = 1.0
                ctx = ExpressionContext()
                for name in weight.source_names:
                    ctx.var(name, result_value)
                before = result_value
                result_value = weight.expression.eval(ctx)
                self.log.debug("Formula %s: %s(%r) → %s(%r)", weight, previous, before, unit, result_value)
                tracer.add(FORMULA, **{"from": previous}, to=unit, formula=weight.expression.text,
                           input=before, output=result_value)
                cacheable = False
            previous = unit

        result_value *= multiplier
        if multiplier != 1.0:
            tracer.add(FLUSH, multiplier=multiplier, value=result_value)

        if self.cache and cacheable and len(path) > 1:
            try:
                graph.add_edge(source, target, Multiplier(multiplier))
                self.log.info("Cached %s → %s as ×%r", from_unit, to_unit, multiplier)
                tracer.add(CACHE, **{"from": from_unit}, to=to_unit, multiplier=multiplier)
            except NodeMissingError as e:
                self.log.warning("Failed to cache conversion %s → %s: %s", from_unit, to_unit, e)

        return result_value


# ---------------------------- Builder ----------------------------------------

class UnitConverterBuilder:
    """
    Fluent construction of a UnitConverter from catalog records:

        converter = (UnitConverterBuilder()
                     .add_unit_definitions(catalog.units)
                     .add_base_conversions(catalog.conversions)
                     .build())
    """

    def __init__(self):
        self._reverse = True
        self._cache = True
        self._invert = True
        self._units: List[UnitAbbreviation] = []
        self._conversions: List[ConversionDefinition] = []
        self._logger: Optional[logging.Logger] = None

    def reverse_base_conversions(self, enabled: bool) -> "UnitConverterBuilder":
        self._reverse = enabled
        return self

    def cache_results(self, enabled: bool) -> "UnitConverterBuilder":
        self._cache = enabled
        return self

    def invert_formulas(self, enabled: bool) -> "UnitConverterBuilder":
        self._invert = enabled
        return self

    def add_unit_definitions(self, units: Iterable[UnitAbbreviation]) -> "UnitConverterBuilder":
        self._units.extend(units)
        return self

    def add_base_conversions(self, conversions: Iterable[ConversionDefinition]) -> "UnitConverterBuilder":
        self._conversions.extend(conversions)
        return self

    def with_logger(self, logger: logging.Logger) -> "UnitConverterBuilder":
        self._logger = logger
        return self

    def _names_for(self, unit: str, category: str) -> Tuple[str, ...]:
        return tuple(abbreviations_for(self._units, unit, category)) + (unit,)

    def build(self) -> UnitConverter:
        log = self._logger or logging.getLogger(__name__)

        graphs: Dict[str, UnitGraph] = {}
        for entry in self._units:
            graph = graphs.setdefault(entry.category, Graph(entry.category))
            graph.add_node(entry.unit)

        declared: Set[Tuple[str, str, str]] = {
            (c.category, c.from_unit, c.to_unit) for c in self._conversions
        }

        for definition in self._conversions:
            graph = graphs.get(definition.category)
            if graph is None:
                log.warning("Skipping %s → %s: category '%s' has no unit definitions",
                            definition.from_unit, definition.to_unit, definition.category)
                continue
            source = graph.add_node(definition.from_unit)
            target = graph.add_node(definition.to_unit)
            reverse_declared = (definition.category, definition.to_unit, definition.from_unit) in declared

            if definition.is_formula:
                edge = self._formula_edge(definition)
                graph.add_edge(source, target, edge)
                if self._reverse and self._invert and not reverse_declared:
                    inverse = self._inverse_edge(definition, edge)
                    if inverse is not None:
                        graph.add_edge(target, source, inverse)
                continue

            factor = float(definition.value)
            if factor == 0.0:
                raise CatalogError(
                    f"{definition.category}: {definition.from_unit} → {definition.to_unit} has a zero multiplier"
                )
            graph.add_edge(source, target, Multiplier(factor))
            if self._reverse and not reverse_declared:
                graph.add_edge(target, source, Multiplier(1.0 / factor))

        log.info("Built %d unit graph(s): %s", len(graphs),
                 ", ".join(f"{g.id} ({len(g)} units)" for g in graphs.values()))
        return UnitConverter(graphs.values(), self._units, cache=self._cache, logger=log)

    def _formula_edge(self, definition: ConversionDefinition) -> FormulaEdge:
        try:
            expression = Expression(str(definition.value))
        except ParseError as e:
            raise CatalogError(
                f"{definition.category}: invalid formula for {definition.from_unit} → {definition.to_unit}: {e}"
            ) from e
        names = self._names_for(definition.from_unit, definition.category)
        unknown = expression.variables - set(names)
        if unknown:
            raise CatalogError(
                f"{definition.category}: formula {definition.value!r} for {definition.from_unit} → "
                f"{definition.to_unit} references {sorted(unknown)}, expected one of {list(names)}"
            )
        return FormulaEdge(expression, names)

    def _inverse_edge(self, definition: ConversionDefinition, edge: FormulaEdge) -> Optional[FormulaEdge]:
        log = self._logger or logging.getLogger(__name__)
        if len(edge.expression.variables) != 1:
            log.warning("Not inverting constant formula %r", edge.expression.text)
            return None
        (variable,) = edge.expression.variables
        target_names = self._names_for(definition.to_unit, definition.category)
        inverse = invert_formula(edge.expression, variable, target_names[0])
        if inverse is None:
            return None
        return FormulaEdge(inverse, target_names)


def build_converter(settings: Optional[Settings] = None, logger: Optional[logging.Logger] = None,
                    catalog: Optional[Catalog] = None) -> UnitConverter:
    """Build a converter according to `settings`, loading the configured catalog unless one is given."""
    settings = settings or load_settings()
    catalog = catalog or Catalog.from_file(settings.catalog_path)
    builder = (UnitConverterBuilder()
               .reverse_base_conversions(settings.reverse_base_conversions)
               .cache_results(settings.cache_results)
               .invert_formulas(settings.invert_formulas)
               .add_unit_definitions(catalog.units)
               .add_base_conversions(catalog.conversions))
    if logger is not None:
        builder.with_logger(logger)
    return builder.build()
