# tests/api/test_shipping_rates_calc_api.py
from __future__ import annotations

from typing import Any, Dict

from fastapi.testclient import TestClient

from tests._problem import as_problem


def _create(client: TestClient, seed: Dict[str, int], **kw: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "shipping_method_id": seed["standard"],
        "shipping_zone_id": seed["uk"],
        "min_weight": 0,
        "max_weight": 5000,
        "min_total": 0,
        "max_total": None,
        "rate": 500,
        "free_threshold": 5000,
    }
    body.update(kw)
    r = client.post("/shipping-rates", json=body)
    assert r.status_code == 201, r.text
    return r.json()


def test_calculate_in_grams_and_kg(client: TestClient, seed) -> None:
    rate = _create(client, seed)

    r = client.post(
        "/shipping-rates/calculate",
        json={"shipping_method_id": seed["standard"], "shipping_zone_id": seed["uk"], "weight": 2000, "total": 3000},
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["rate"]["id"] == rate["id"]
    assert (body["cost"], body["is_free"], body["free_threshold_met"]) == (500, False, False)

    r2 = client.post(
        "/shipping-rates/calculate",
        json={"shipping_method_id": seed["standard"], "shipping_zone_id": seed["uk"], "weight_kg": "2.5", "total": 5000},
    )
    assert r2.status_code == 200, r2.text
    body2 = r2.json()
    assert body2["weight"] == 2500
    assert (body2["cost"], body2["is_free"], body2["free_threshold_met"]) == (0, True, True)


def test_calculate_no_rate_returns_404(client: TestClient, seed) -> None:
    _create(client, seed)
    r = client.post(
        "/shipping-rates/calculate",
        json={"shipping_method_id": seed["standard"], "shipping_zone_id": seed["uk"], "weight": 5001, "total": 10},
    )
    assert r.status_code == 404, r.text
    assert as_problem(r.json())["error_code"] == "shipping_rate_not_found"


def test_calculate_requires_exactly_one_weight(client: TestClient, seed) -> None:
    r = client.post(
        "/shipping-rates/calculate",
        json={"shipping_method_id": seed["standard"], "shipping_zone_id": seed["uk"], "total": 10},
    )
    assert r.status_code == 422, r.text

    r2 = client.post(
        "/shipping-rates/calculate",
        json={
            "shipping_method_id": seed["standard"],
            "shipping_zone_id": seed["uk"],
            "weight": 1,
            "weight_kg": 1,
            "total": 10,
        },
    )
    assert r2.status_code == 422, r2.text


def test_zone_quotes(client: TestClient, seed) -> None:
    _create(client, seed, rate=450, free_threshold=None)
    _create(client, seed, shipping_method_id=seed["express"], rate=1100, free_threshold=None)

    r = client.get(f"/shipping-zones/{seed['uk']}/quotes", params={"weight": 1000, "total": 2000})
    assert r.status_code == 200, r.text
    body = r.json()
    assert [q["method_id"] for q in body["quotes"]] == [seed["standard"], seed["express"]]
    assert body["cheapest_method_id"] == seed["standard"]
    assert body["fastest_method_id"] == seed["express"]

    missing = client.get("/shipping-zones/999/quotes", params={"weight": 1, "total": 1})
    assert missing.status_code == 422, missing.text


def test_metrics_and_healthz(client: TestClient, seed) -> None:
    _create(client, seed)
    client.post(
        "/shipping-rates/calculate",
        json={"shipping_method_id": seed["standard"], "shipping_zone_id": seed["uk"], "weight": 10, "total": 10},
    )

    m = client.get("/metrics")
    assert m.status_code == 200, m.text
    assert "shipping_rate_quotes_total" in m.text

    h = client.get("/healthz")
    assert h.status_code == 200
    assert h.json() == {"ok": True}
