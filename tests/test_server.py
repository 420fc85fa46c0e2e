"""Tests for the Flask calculator backend."""

import pytest

from scicalc_pkg.config import VERSION
from scicalc_pkg.server import create_app


@pytest.fixture
def client():
    app = create_app({"TESTING": True})
    return app.test_client()


def test_calculate_addition(client):
    resp = client.post("/calculate", json={"expression": "8+4", "isRadians": True})
    assert resp.status_code == 200
    assert resp.get_json() == {"result": "12"}


def test_calculate_defaults_to_radians(client):
    resp = client.post("/calculate", json={"expression": "sin(0)"})
    assert resp.status_code == 200
    assert resp.get_json()["result"] == "0"


def test_calculate_degrees(client):
    resp = client.post("/calculate", json={"expression": "sin(30)", "isRadians": False})
    assert resp.status_code == 200
    assert resp.get_json()["result"] == "0.5"


def test_calculate_calculator_notation(client):
    for expression, expected in (("(9)^2", "81"), ("5!", "120"), ("√(16)", "4"), ("50%", "0.5")):
        resp = client.post("/calculate", json={"expression": expression, "isRadians": True})
        assert resp.status_code == 200, expression
        assert resp.get_json()["result"] == expected


def test_calculate_invalid_expression(client):
    resp = client.post("/calculate", json={"expression": "5/0", "isRadians": True})
    assert resp.status_code == 400
    body = resp.get_json()
    assert set(body) == {"error"}
    assert body["error"]


def test_calculate_oversized_power(client):
    resp = client.post("/calculate", json={"expression": "9^9^9", "isRadians": True})
    assert resp.status_code == 400
    assert "too large" in resp.get_json()["error"].lower()


def test_calculate_logs_evaluation_context(client, caplog):
    with caplog.at_level("INFO", logger="scicalc"):
        client.post("/calculate", json={"expression": "5/0", "isRadians": False})
    record = next(r for r in caplog.records if r.name == "scicalc.server")
    assert record.expression == "5/0"
    assert record.angle_mode == "Deg"
    assert record.error_code == "NOT_FINITE"
    assert record.elapsed_ms >= 0


def test_calculate_missing_expression(client):
    resp = client.post("/calculate", json={"isRadians": True})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Expression is required"}


def test_calculate_blank_expression(client):
    resp = client.post("/calculate", json={"expression": "   "})
    assert resp.status_code == 400


def test_calculate_rejects_non_json(client):
    resp = client.post("/calculate", data="8+4", content_type="text/plain")
    assert resp.status_code == 400
    assert "error" in resp.get_json()


def test_calculate_rejects_json_array(client):
    resp = client.post("/calculate", json=["8+4"])
    assert resp.status_code == 400


def test_calculate_only_post(client):
    assert client.get("/calculate").status_code == 405


def test_cors_header_present(client):
    resp = client.post(
        "/calculate",
        json={"expression": "1+1"},
        headers={"Origin": "http://localhost:3000"},
    )
    assert resp.headers.get("Access-Control-Allow-Origin") == "*"


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok", "version": VERSION}


def test_calculate_body_too_large(client):
    resp = client.post("/calculate", json={"expression": "1+" * 20000 + "1"})
    assert resp.status_code == 413
    assert "error" in resp.get_json()
