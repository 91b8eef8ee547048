import logging
import pytest
from pydantic import ValidationError
from unitconvert.config import DEFAULT_CATALOG_PATH, ENV_VARS, load_settings
from unitconvert.log import TRACE, configure_logging

@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)

def test_defaults():
    s = load_settings()
    assert s.catalog_path == DEFAULT_CATALOG_PATH
    assert s.reverse_base_conversions and s.cache_results and s.invert_formulas
    assert s.log_level == "WARNING"

def test_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("UNITCONVERT_CACHE", "false")
    monkeypatch.setenv("UNITCONVERT_CATALOG", str(tmp_path / "units.yaml"))
    monkeypatch.setenv("LOG_LEVEL", "warn")
    s = load_settings()
    assert s.cache_results is False
    assert s.catalog_path == tmp_path / "units.yaml"
    assert s.log_level == "WARNING"

def test_overrides_beat_environment(monkeypatch):
    monkeypatch.setenv("UNITCONVERT_REVERSE", "false")
    assert load_settings(reverse_base_conversions=True).reverse_base_conversions is True
    # None means "not given"
    assert load_settings(reverse_base_conversions=None).reverse_base_conversions is False

def test_invalid_values(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "loud")
    with pytest.raises(ValidationError):
        load_settings()

def test_trace_level():
    logger = configure_logging("trace")
    assert logger.level == TRACE
    assert logging.getLevelName(TRACE) == "TRACE"
    configure_logging("WARNING")
