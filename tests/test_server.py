"""Tests for the HTTP surface."""

import json

import pytest
from fastapi.testclient import TestClient

import server


@pytest.fixture()
def client(tmp_path, monkeypatch):
    scene_file = tmp_path / "scene.json"
    scene_file.write_text(json.dumps({
        "name": "Test",
        "objects": [{"name": "Speaker", "components": [{"type": "AudioSource"}]}],
    }), encoding="utf-8")

    monkeypatch.setattr(server.config.editor, "scene_file", str(scene_file))
    monkeypatch.setattr(server.config.editor, "layer_table_path", str(tmp_path / "TagManager.json"))

    with TestClient(server.app) as c:
        yield c


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "healthy", "main_thread_running": True}


def test_status_reports_scene(client):
    data = client.get("/status").json()
    assert data["scene"] == {"name": "Test", "objects": 1, "dirty": False}
    assert len(data["tools"]) == 10


def test_list_tools(client):
    r = client.get("/tools")
    assert r.status_code == 200
    tools = {t["name"]: t for t in r.json()}
    assert "set_audio_source_properties" in tools
    assert "volume" in tools["set_audio_source_properties"]["parameters"]["properties"]


def test_invoke_tool(client):
    r = client.post("/tools/set_audio_source_properties", json={"object_name": "Speaker", "volume": 5})
    assert r.status_code == 200, r.text
    assert r.json() == {
        "tool": "set_audio_source_properties",
        "result": "Successfully updated AudioSource on 'Speaker': volume: 1.00",
    }
    assert client.get("/status").json()["scene"]["dirty"] is True


def test_unknown_object_is_still_200(client):
    r = client.post("/tools/set_transform_properties", json={"object_name": "Ghost", "position": [0, 1, 0]})
    assert r.status_code == 200
    assert r.json()["result"] == "Error: GameObject 'Ghost' not found"


def test_layer_write_persists(client, tmp_path):
    r = client.post("/tools/manage_project_layers", json={
        "operation": "setlayername", "layer_index": 9, "layer_name": "Props",
    })
    assert r.json()["result"] == "Successfully set layer 9 name to 'Props'"

    stored = json.loads((tmp_path / "TagManager.json").read_text(encoding="utf-8"))
    assert stored["layers"][9] == "Props"


def test_unknown_tool(client):
    r = client.post("/tools/delete_everything", json={})
    assert r.status_code == 404


def test_invalid_parameters(client):
    r = client.post("/tools/set_audio_source_properties", json={"object_name": "Speaker", "volume": "loud"})
    assert r.status_code == 422
