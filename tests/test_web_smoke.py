from __future__ import annotations

import time

from fastapi.testclient import TestClient

from teamdraw.config import Settings
from teamdraw.web.app import create_app


def _wait_for_reveal(client: TestClient, sid: str) -> dict:
    for _ in range(200):
        lottery = client.get(f"/api/v1/workspace/{sid}/lottery").json()
        if lottery["state"] != "spinning":
            return lottery
        time.sleep(0.01)
    raise AssertionError("draw never revealed")


def test_web_pages_and_draw_flow():
    app = create_app(Settings(reveal_seconds=0.05))
    with TestClient(app) as client:
        r = client.get("/healthz")
        assert r.status_code == 200
        assert r.json() == {"status": "ok", "workspaces": 0}

        r = client.get("/")
        assert r.status_code == 200
        assert "data-create-workspace" in r.text

        sid = client.post("/api/v1/workspace", json={}).json()["workspace"]
        client.post(f"/api/v1/workspace/{sid}/participants", json={"text": "Ann, Bo, Cy"})
        assert client.post(f"/api/v1/workspace/{sid}/lottery/draw").status_code == 202

        lottery = _wait_for_reveal(client, sid)
        assert lottery["state"] == "revealed"
        assert lottery["winners"][0]["name"] in {"Ann", "Bo", "Cy"}

        client.post(f"/api/v1/workspace/{sid}/groups", json={"size": 2})
        page = client.get(f"/workspace/{sid}")
        assert page.status_code == 200
        assert "Bo" in page.text
        assert page.text.count("data-copy-group=") == 2

        missing = client.get("/workspace/unknown")
        assert missing.status_code == 404
        assert "unknown" in missing.text

        assert client.get("/healthz").json()["workspaces"] == 1

    assert len(app.state.workspaces) == 0


def test_shutdown_cancels_pending_reveal():
    app = create_app(Settings(reveal_seconds=30.0))
    with TestClient(app) as client:
        sid = client.post("/api/v1/workspace", json={}).json()["workspace"]
        client.post(f"/api/v1/workspace/{sid}/participants", json={"text": "Ann"})
        client.post(f"/api/v1/workspace/{sid}/lottery/draw")
        workspace = app.state.workspaces.get(sid)

    assert workspace.engine.closed
    assert workspace.engine.winners == ()
