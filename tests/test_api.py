import pytest
from fastapi.testclient import TestClient
from api.main import app

client = TestClient(app)

def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}

def test_units_listing():
    data = client.get("/units").json()
    assert data["categories"] == ["Length", "Temperature", "Weight", "Capacity"]
    assert data["count"] == len(data["items"])
    liter = next(it for it in data["items"] if it["unit"] == "Liter")
    assert liter["abbreviations"] == ["l", "L"]

def test_unit_info():
    r = client.get("/units/KM")
    assert r.status_code == 200
    assert r.json() == {"unit": "Kilometer", "abbrev": "km", "category": "Length", "abbreviations": ["km"]}
    assert client.get("/units/parsec").status_code == 404

@pytest.mark.parametrize("payload, expected", [
    ({"expression": "3 + 4 * 2"}, 11.0),
    ({"expression": "{x} * 3", "variables": {"x": 2}}, 6.0),
    ({"expression": "1 / 0"}, "inf"),
])
def test_evaluate(payload, expected):
    r = client.post("/evaluate", json=payload)
    assert r.status_code == 200
    assert r.json()["value"] == expected

@pytest.mark.parametrize("payload", [
    {"expression": "2 * (1 + 5"},
    {"expression": "{x} + 1"},
])
def test_evaluate_errors(payload):
    r = client.post("/evaluate", json=payload)
    assert r.status_code == 400
    assert r.json()["detail"]

def test_convert_query():
    r = client.post("/convert", json={"query": "20C -> F"})
    assert r.status_code == 200
    body = r.json()
    assert body["value"] == 68.0
    assert (body["from_unit"], body["to_unit"], body["category"]) == ("Celsius", "Fahrenheit", "Temperature")
    assert [s["kind"] for s in body["steps"]] == ["path", "formula"]

def test_convert_definition():
    r = client.post("/convert", json={"category": "Length", "from_unit": "Kilometer", "to_unit": "Meter", "value": 2})
    assert r.status_code == 200
    assert r.json()["value"] == 2000.0

@pytest.mark.parametrize("payload, status", [
    ({"query": "2km -> C"}, 400),
    ({"query": "two km -> m"}, 400),
    ({"query": "2 furlong -> m"}, 404),
    ({"category": "Time", "from_unit": "Second", "to_unit": "Minute", "value": 1}, 404),
    ({"category": "Length", "from_unit": "Meter"}, 400),
])
def test_convert_errors(payload, status):
    r = client.post("/convert", json=payload)
    assert r.status_code == status
    assert r.json()["detail"]

def test_convert_overflow_is_serializable():
    r = client.post("/convert", json={"query": "1e308km -> m"})
    assert r.status_code == 200
    body = r.json()
    assert body["value"] == "inf"
    flush = next(s for s in body["steps"] if s["kind"] == "flush")
    assert flush["detail"]["value"] == "inf"
