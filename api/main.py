# --- unitconvert: Conversion & Expression API (FastAPI) -----------------------
# Purpose: Serve one shared UnitConverter over HTTP: evaluate arithmetic
# expressions, convert "<value><unit> -> <unit>" requests, list known units.
# ------------------------------------------------------------------------------

from __future__ import annotations
import math
import threading
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
from typing import Optional, Dict, Any
from unitconvert.catalog import Catalog
from unitconvert.config import load_settings
from unitconvert.converter import build_converter
from unitconvert.evaluator import UnresolvedVariableError
from unitconvert.expression import Expression
from unitconvert.log import configure_logging
from unitconvert.tokenizer import ParseError
from unitconvert.tracer import Tracer
from unitconvert.units import (
    CategoryLookupError,
    ConversionError,
    UnitNotFoundError,
    abbreviations_for,
)

# .env + environment → settings (catalog path, graph policies, log level)
_settings = load_settings()
_logger = configure_logging(_settings.log_level)

app = FastAPI(title="unitconvert API")

# One converter for the whole process; conversions may add cache edges,
# so they run under a lock
_catalog = Catalog.from_file(_settings.catalog_path)
_converter = build_converter(_settings, logger=_logger, catalog=_catalog)
_lock = threading.Lock()


def _number(value: float) -> Any:
    # JSON has no inf/nan; send them as strings
    return value if math.isfinite(value) else str(value)


def _json_safe(data: Any) -> Any:
    # Trace steps nest floats inside dicts and lists
    if isinstance(data, float):
        return _number(data)
    if isinstance(data, dict):
        return {k: _json_safe(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_json_safe(v) for v in data]
    return data


# ----------------------------- Schemas ----------------------------------------
class EvaluateRequest(BaseModel):
    expression: str
    variables: Dict[str, float] = {}


class ConvertRequest(BaseModel):
    # Either a free-text query ("2km -> nmi") ...
    query: Optional[str] = None
    # ... or a fully resolved definition using canonical unit names
    category: Optional[str] = None
    from_unit: Optional[str] = None
    to_unit: Optional[str] = None
    value: Optional[float] = None


# ----------------------------- Routes -----------------------------------------
@app.get("/health")
def health(): return {"ok": True}


@app.get("/units")
def list_units():
    """All units grouped by canonical name, plus the category list."""
    return {
        "categories": _converter.categories(),
        "count": len(_catalog.list_units()),
        "items": _catalog.list_units(),
    }


@app.get("/units/{name}")
def unit_info(name: str):
    try:
        entry = _converter.unit_info(name)
    except UnitNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {
        "unit": entry.unit,
        "abbrev": entry.abbrev,
        "category": entry.category,
        "abbreviations": abbreviations_for(_converter.units(), entry.unit, entry.category),
    }


@app.post("/evaluate")
def evaluate(req: EvaluateRequest):
    """Parse and evaluate an arithmetic expression with optional {variable} bindings."""
    try:
        expr = Expression(req.expression)
        value = expr.eval(req.variables)
    except ParseError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UnresolvedVariableError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ok": True, "expression": expr.text, "value": _number(value), "variables": sorted(expr.variables)}


@app.post("/convert")
def convert(req: ConvertRequest):
    """
    Two request shapes:
    1) {"query": "2km -> nmi"} → parsed and resolved through the abbreviation table.
    2) {"category", "from_unit", "to_unit", "value"} → canonical names, no parsing.
    """
    try:
        with _lock:
            if req.query is not None:
                res = _converter.convert_from_expression(req.query)
                payload = {
                    "value": res.value, "from_unit": res.from_unit, "to_unit": res.to_unit,
                    "category": res.category, "steps": res.steps,
                }
            else:
                missing = [f for f in ("category", "from_unit", "to_unit", "value") if getattr(req, f) is None]
                if missing:
                    raise HTTPException(status_code=400, detail=f"Missing field(s): {', '.join(missing)}")
                tracer = Tracer()
                value = _converter.convert_from_definition(
                    req.category, req.from_unit, req.to_unit, req.value, tracer=tracer
                )
                payload = {
                    "value": value, "from_unit": req.from_unit, "to_unit": req.to_unit,
                    "category": req.category, "steps": tracer.steps(),
                }
    except (UnitNotFoundError, CategoryLookupError) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConversionError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"ok": True, **_json_safe(payload)}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
