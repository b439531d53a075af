# tests/api/test_shipping_rates_bulk_api.py
from __future__ import annotations

from typing import Any, Dict, List

from fastapi.testclient import TestClient

from tests._problem import as_problem


def _row(seed: Dict[str, int], w: List[Any], **kw: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "shipping_method_id": seed["standard"],
        "shipping_zone_id": seed["uk"],
        "min_weight": w[0],
        "max_weight": w[1],
        "min_total": 0,
        "max_total": 5000,
        "rate": 500,
    }
    body.update(kw)
    return body


def test_bulk_create_ok(client: TestClient, seed) -> None:
    r = client.post(
        "/shipping-rates/bulk",
        json={"rates": [_row(seed, [0, 1000]), _row(seed, [1001, None], rate=900)]},
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["created_count"] == 2
    assert len(body["created_ids"]) == 2


def test_bulk_create_rejects_whole_batch_with_indexes(client: TestClient, seed) -> None:
    r = client.post(
        "/shipping-rates/bulk",
        json={
            "rates": [
                _row(seed, [0, 1000]),
                _row(seed, [500, 2000]),  # 与 #0 冲突
                _row(seed, [3000, 100]),  # max < min
            ]
        },
    )
    assert r.status_code == 422, r.text
    p = as_problem(r.json())
    assert p["error_code"] == "shipping_rates_bulk_rejected"
    assert [d["path"] for d in p["details"]] == ["rates[1]", "rates[2]"]
    assert [d["type"] for d in p["details"]] == ["conflict", "validation"]
    assert p["context"]["total_submitted"] == 3
    assert p["context"]["rejected_count"] == 2

    # 全有或全无
    assert client.get("/shipping-rates").json() == []


def test_bulk_update(client: TestClient, seed) -> None:
    ids = client.post(
        "/shipping-rates/bulk",
        json={"rates": [_row(seed, [0, 1000]), _row(seed, [1001, 2000])]},
    ).json()["created_ids"]

    r = client.patch("/shipping-rates/bulk", json={"rate_ids": ids + [9999], "updates": {"rate": 725}})
    assert r.status_code == 200, r.text
    assert r.json()["updated_count"] == 2
    assert {x["rate"] for x in client.get("/shipping-rates").json()} == {725}

    empty = client.patch("/shipping-rates/bulk", json={"rate_ids": ids, "updates": {}})
    assert empty.status_code == 422, empty.text
    assert as_problem(empty.json())["error_code"] == "shipping_rate_no_changes"

    none_hit = client.patch("/shipping-rates/bulk", json={"rate_ids": [8888], "updates": {"is_active": False}})
    assert none_hit.status_code == 200, none_hit.text
    assert none_hit.json()["updated_count"] == 0


def test_duplicate_into_zones(client: TestClient, seed) -> None:
    src = client.post("/shipping-rates", json=_row(seed, [0, 5000])).json()
    client.post("/shipping-rates", json=_row(seed, [0, 100], shipping_zone_id=seed["eu"]))

    r = client.post(
        f"/shipping-rates/{src['id']}/duplicate",
        json={"zone_ids": [seed["uk"], seed["eu"], seed["us"]]},
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["source_rate_id"] == src["id"]
    assert body["duplicated_count"] == 1
    assert [s["reason"] for s in body["skipped"]] == ["source_zone", "conflict"]

    copies = client.get("/shipping-rates", params={"shipping_zone_id": seed["us"]}).json()
    assert [c["id"] for c in copies] == body["duplicated_rate_ids"]

    missing = client.post("/shipping-rates/999999/duplicate", json={"zone_ids": [seed["us"]]})
    assert missing.status_code == 404, missing.text
