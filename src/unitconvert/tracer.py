# -----------------------------------------------------------------------------
# Conversion trace
# Purpose:
#   Append-only record of what a conversion did (path chosen, multipliers
#   applied, formulas evaluated, cache edges added). Exported as plain dicts
#   so the CLI can print it and the API can return it as JSON.
# -----------------------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Step kinds emitted by the converter
PATH, MULTIPLY, FORMULA, FLUSH, CACHE = "path", "multiply", "formula", "flush", "cache"


@dataclass
class TraceStep:
    kind: str
    detail: Dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "detail": dict(self.detail)}


class Tracer:
    def __init__(self):
        self._steps: List[TraceStep] = []

    def add(self, kind: str, **detail: Any) -> TraceStep:
        step = TraceStep(kind, detail)
        self._steps.append(step)
        return step

    def kinds(self) -> List[str]:
        return [s.kind for s in self._steps]

    def last(self, kind: Optional[str] = None) -> Optional[TraceStep]:
        for step in reversed(self._steps):
            if kind is None or step.kind == kind:
                return step
        return None

    def steps(self) -> List[Dict[str, Any]]:
        return [s.as_dict() for s in self._steps]

    def __len__(self) -> int:
        return len(self._steps)
