from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from teamdraw.config import Settings
from teamdraw.core.scheduler import ManualScheduler
from teamdraw.features.session import WorkspaceManager
from teamdraw.features.session.router import create_workspace_router
from teamdraw.naming import StaticNaming

BASE = "/api/v1/workspace"


def _client(naming=None) -> tuple[TestClient, WorkspaceManager, ManualScheduler]:
    scheduler = ManualScheduler()
    manager = WorkspaceManager(
        naming_factory=(lambda: naming) if naming is not None else None,
        scheduler_factory=lambda: scheduler,
    )
    app = FastAPI()
    app.include_router(create_workspace_router(manager, Settings(reveal_seconds=2.0)))
    return TestClient(app), manager, scheduler


def _create(client: TestClient, **body) -> str:
    response = client.post(BASE, json=body)
    assert response.status_code == 201
    return response.json()["workspace"]


def test_create_applies_request_and_settings():
    client, manager, _ = _client()
    sid = _create(client, allow_repeat=True, group_size=4, seed=3)
    config = manager.get(sid).config
    assert config.allow_repeat is True
    assert config.group_size == 4
    assert config.reveal_seconds == 2.0

    assert client.post(BASE, json={"group_size": 1}).status_code == 422


def test_unknown_workspace_is_404_everywhere():
    client, _, _ = _client()
    assert client.get(f"{BASE}/nope").status_code == 404
    assert client.post(f"{BASE}/nope/participants", json={"text": "Ann"}).status_code == 404
    assert client.post(f"{BASE}/nope/lottery/draw").status_code == 404
    assert client.delete(f"{BASE}/nope").status_code == 404


def test_participant_endpoints():
    client, _, _ = _client()
    sid = _create(client)

    data = client.post(f"{BASE}/{sid}/participants", json={"text": "Ann, Bo\nCy"}).json()
    assert [p["name"] for p in data["participants"]] == ["Ann", "Bo", "Cy"]

    data = client.post(f"{BASE}/{sid}/participants/upload", json={"content": "Dee,HR\nEd,IT\n"}).json()
    assert len(data["participants"]) == 5

    # No API key configured: extraction is a visible failure and nothing is added.
    response = client.post(f"{BASE}/{sid}/participants/extract", json={"text": "Fay and Gus"})
    assert response.status_code == 502
    assert len(client.get(f"{BASE}/{sid}").json()["participants"]) == 5

    pid = data["participants"][0]["id"]
    assert client.delete(f"{BASE}/{sid}/participants/{pid}").status_code == 200
    assert client.delete(f"{BASE}/{sid}/participants/{pid}").status_code == 404

    assert client.delete(f"{BASE}/{sid}/participants").status_code == 400
    cleared = client.delete(f"{BASE}/{sid}/participants", params={"confirm": "true"}).json()
    assert cleared["participants"] == []


def test_extract_with_capability_adds_names():
    client, _, _ = _client(StaticNaming(extracted=["Fay", "Gus"]))
    sid = _create(client)
    data = client.post(f"{BASE}/{sid}/participants/extract", json={"text": "Fay and Gus"}).json()
    assert [p["name"] for p in data["participants"]] == ["Fay", "Gus"]


def test_grouping_and_naming():
    client, _, _ = _client(StaticNaming(names=["Otters", "Owls", "Ants"]))
    sid = _create(client, seed=9)

    assert client.post(f"{BASE}/{sid}/groups", json={"size": 2}).status_code == 409
    assert client.post(f"{BASE}/{sid}/groups/names", json={"theme": "Animals"}).status_code == 409

    client.post(f"{BASE}/{sid}/participants", json={"text": "Ann, Bo, Cy, Dee, Ed"})
    assert client.post(f"{BASE}/{sid}/groups", json={"size": 1}).status_code == 422
    groups = client.post(f"{BASE}/{sid}/groups", json={"size": 2}).json()["groups"]
    assert [g["size"] for g in groups] == [2, 2, 1]
    assert [g["name"] for g in groups] == ["Group 1", "Group 2", "Group 3"]

    named = client.post(f"{BASE}/{sid}/groups/names", json={"theme": "Animals"}).json()["groups"]
    assert [g["name"] for g in named] == ["Otters", "Owls", "Ants"]
    assert [g["id"] for g in named] == [g["id"] for g in groups]
    for group in named:
        assert group["clipboard"] == "\n".join([group["name"], *(m["name"] for m in group["members"])])
    assert named[0]["clipboard"].startswith("Otters\n")


def test_lottery_endpoints():
    client, _, scheduler = _client()
    sid = _create(client)

    assert client.post(f"{BASE}/{sid}/lottery/draw").status_code == 409
    client.post(f"{BASE}/{sid}/participants", json={"text": "Ann, Bo"})

    response = client.post(f"{BASE}/{sid}/lottery/draw")
    assert response.status_code == 202
    assert response.json()["state"] == "spinning"
    assert client.post(f"{BASE}/{sid}/lottery/draw").status_code == 409

    scheduler.run_until_idle()
    lottery = client.get(f"{BASE}/{sid}/lottery").json()
    assert lottery["state"] == "revealed"
    assert lottery["remaining"] == 1
    assert lottery["current_winner"]["name"] == lottery["winners"][0]["name"]

    client.post(f"{BASE}/{sid}/lottery/draw")
    scheduler.run_until_idle()
    assert client.post(f"{BASE}/{sid}/lottery/draw").status_code == 409

    repeat = client.put(f"{BASE}/{sid}/lottery/repeat", json={"allow_repeat": True}).json()
    assert repeat["allow_repeat"] is True
    assert repeat["remaining"] == 2
    assert len(repeat["winners"]) == 2

    assert client.delete(f"{BASE}/{sid}/lottery/history").status_code == 400
    cleared = client.delete(f"{BASE}/{sid}/lottery/history", params={"confirm": True}).json()
    assert cleared["winners"] == []
    assert cleared["state"] == "idle"


def test_delete_workspace_cancels_spin():
    client, manager, scheduler = _client()
    sid = _create(client)
    client.post(f"{BASE}/{sid}/participants", json={"text": "Ann"})
    client.post(f"{BASE}/{sid}/lottery/draw")
    workspace = manager.get(sid)

    assert client.delete(f"{BASE}/{sid}").json() == {"closed": sid}
    scheduler.run_until_idle()
    assert workspace.engine.winners == ()
    assert client.get(f"{BASE}/{sid}").status_code == 404


def test_upload_keeps_lines_independent():
    client, _, _ = _client()
    sid = _create(client)
    content = '"Ann\nBo\n' + "C" * 200_000 + ",HR\n"
    response = client.post(f"{BASE}/{sid}/participants/upload", json={"content": content})
    assert response.status_code == 200
    names = [p["name"] for p in response.json()["participants"]]
    assert names == ['"Ann', "Bo", "C" * 200_000]
