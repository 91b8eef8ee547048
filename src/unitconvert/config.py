# -----------------------------------------------------------------------------
# Settings
# Purpose:
#   Collect runtime configuration (catalog location, graph-building policies,
#   log level) from the environment, with a .env file loaded first.
# -----------------------------------------------------------------------------

from __future__ import annotations
import os
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

DEFAULT_CATALOG_PATH = Path(__file__).parent / "data" / "catalog_units.yaml"

# env var → Settings field
ENV_VARS = {
    "UNITCONVERT_CATALOG": "catalog_path",
    "UNITCONVERT_REVERSE": "reverse_base_conversions",
    "UNITCONVERT_CACHE": "cache_results",
    "UNITCONVERT_INVERT_FORMULAS": "invert_formulas",
    "LOG_LEVEL": "log_level",
}

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "WARNING", "ERROR")


class Settings(BaseModel):
    catalog_path: Path = DEFAULT_CATALOG_PATH
    reverse_base_conversions: bool = True   # add 1/m edges for declared multipliers
    cache_results: bool = True              # memoize multi-hop multipliers as direct edges
    invert_formulas: bool = True            # derive missing reverse formulas with sympy
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level == "WARN":
            level = "WARNING"
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level


def load_settings(**overrides: Any) -> Settings:
    """
    Build Settings from (in increasing priority) defaults, the environment
    (after loading .env) and explicit keyword overrides. None overrides are
    ignored so CLI flags that were not given fall through to the environment.
    """
    load_dotenv()
    values: Dict[str, Any] = {}
    for env_name, field_name in ENV_VARS.items():
        raw = os.getenv(env_name)
        if raw is not None and raw != "":
            values[field_name] = raw
    values.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**values)
