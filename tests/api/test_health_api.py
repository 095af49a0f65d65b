from __future__ import annotations


def test_health_reports_db_status(client, session):
    resp = client.get("/api/v1/health")

    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok", "db": "ok", "version": "dev"}


def test_unknown_route_is_problem_json(client):
    resp = client.get("/api/v1/nope")

    assert resp.status_code == 404
    assert resp.mimetype == "application/problem+json"
    body = resp.get_json()
    assert body["code"] == "not_found"
    assert body["request_id"]
