"""HTTP surface, driven through the Flask test client on a simulated clock."""

import json

import pytest

from app import cleanup, create_app
from breath.audio import SimAudioPlayer
from breath.timers import ManualTimerFacility
from system import services


@pytest.fixture
def timers():
    return ManualTimerFacility()


@pytest.fixture
def player():
    return SimAudioPlayer()


@pytest.fixture
def prefs_file(tmp_path):
    return str(tmp_path / "user_prefs.json")


@pytest.fixture
def client(prefs_file, timers, player):
    app = create_app(prefs_file=prefs_file, timers=timers, audio_player=player)
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c
    cleanup()


def post(client, url, body=None):
    return client.post(url, data=json.dumps(body or {}), content_type="application/json")


# ---- Catalogue ----

def test_index(client):
    assert client.get("/").get_json() == {"service": "breathcycle", "ok": True}


def test_list_exercises(client):
    resp = client.get("/breath/api/exercises")
    assert resp.status_code == 200
    assert len(resp.get_json()) == 7


def test_list_exercises_by_category(client):
    ids = [ex["id"] for ex in client.get("/breath/api/exercises?category=energy").get_json()]
    assert ids == ["ujjayi", "surya_bhedana"]


def test_get_exercise(client):
    data = client.get("/breath/api/exercises/bhramari").get_json()
    assert [p["label"] for p in data["phases"]] == ["Inhale", "Exhale & Hum"]


def test_get_unknown_exercise(client):
    resp = client.get("/breath/api/exercises/nope")
    assert resp.status_code == 404
    assert resp.get_json()["ok"] is False


# ---- Session ----

def test_default_session_is_open(client):
    resp = client.get("/breath/api/session/state")
    assert resp.status_code == 200
    state = resp.get_json()["state"]
    assert state["exercise"] == "samavritti"
    assert state["running"] is False
    assert state["audio"]["status"] == "stopped"


def test_full_session_flow(client, timers):
    resp = post(client, "/breath/api/session/open", {"exercise": "bhramari"})
    assert resp.status_code == 200
    assert resp.get_json()["state"]["phase_key"] == "INHALE"

    resp = post(client, "/breath/api/session/start")
    assert resp.get_json()["ok"] is True

    timers.advance(4)
    state = client.get("/breath/api/session/state").get_json()["state"]
    assert state["phase_key"] == "EXHALE_HUM"
    assert state["remaining_seconds"] == 8
    assert state["audio"]["status"] == "playing"

    resp = post(client, "/breath/api/session/toggle_sound")
    assert resp.get_json()["message"] == "Sound off"
    state = client.get("/breath/api/session/state").get_json()["state"]
    assert state["sound_enabled"] is False
    assert state["audio"]["status"] == "paused"

    resp = post(client, "/breath/api/session/toggle")
    body = resp.get_json()
    assert body["ok"] is True
    assert body["state"]["running"] is False
    assert body["state"]["phase_index"] == 0


def test_start_twice(client):
    post(client, "/breath/api/session/start")
    resp = post(client, "/breath/api/session/start")
    assert resp.status_code == 200
    assert resp.get_json()["ok"] is False


def test_unknown_action(client):
    resp = post(client, "/breath/api/session/rewind")
    assert resp.status_code == 404


def test_open_custom(client):
    resp = post(client, "/breath/api/session/open", {
        "exercise": "custom", "durations": {"inhale": 6, "exhale": 8},
    })
    assert resp.status_code == 200
    assert resp.get_json()["state"]["phase_duration"] == 6


@pytest.mark.parametrize("body", [
    {"exercise": "nope"},
    {"exercise": "custom", "durations": {"inhale": 30}},
    {"exercise": "bhramari", "durations": {"inhale": 3}},
    {"exercise": "custom", "durations": [4, 4, 6]},
    {"exercise": "ujjayi", "sound_enabled": "false"},
])
def test_open_rejects_bad_config(client, body):
    resp = post(client, "/breath/api/session/open", body)
    assert resp.status_code == 400
    assert resp.get_json()["ok"] is False
    # previous session is still there
    assert client.get("/breath/api/session/state").status_code == 200


def test_close(client, player):
    post(client, "/breath/api/session/start")
    resp = post(client, "/breath/api/session/close")
    assert resp.get_json()["ok"] is True
    assert player.status == "stopped"

    assert client.get("/breath/api/session/state").status_code == 404
    assert post(client, "/breath/api/session/close").get_json()["ok"] is False
    assert post(client, "/breath/api/session/start").get_json()["message"] == "No open session"


def test_events_stream_mimetype(client):
    resp = client.get("/breath/api/session/events", buffered=False)
    assert resp.mimetype == "text/event-stream"
    resp.close()


# ---- Settings ----

def test_get_preferences(client):
    data = client.get("/settings/preferences").get_json()
    assert data["default_exercise"] == "samavritti"


def test_update_preferences(client, prefs_file):
    resp = post(client, "/settings/preferences", {
        "sound_enabled": False,
        "custom_durations": {"inhale": 5, "hold": 2, "exhale": 7},
    })
    body = resp.get_json()
    assert resp.status_code == 200
    assert sorted(body["updated"]) == ["custom_durations", "sound_enabled"]

    with open(prefs_file, encoding="utf-8") as f:
        assert json.load(f)["sound_enabled"] is False

    state = post(client, "/breath/api/session/open", {"exercise": "custom"}).get_json()["state"]
    assert state["sound_enabled"] is False
    assert state["phase_duration"] == 5


@pytest.mark.parametrize("body", [
    {"custom_durations": {"inhale": 20}},
    {"custom_durations": {"breathe": 4}},
    {"custom_durations": [4, 4, 6]},
    {"default_exercise": "nope"},
    {"sound_enabled": "yes"},
])
def test_update_preferences_rejects_bad_values(client, body):
    resp = post(client, "/settings/preferences", body)
    assert resp.status_code == 400
    assert services.preferences_service.get("default_exercise") == "samavritti"


def test_update_preferences_requires_object(client):
    resp = client.post("/settings/preferences", data="[1]", content_type="application/json")
    assert resp.status_code == 400


def test_invalid_saved_default_falls_back(tmp_path, timers, player):
    path = tmp_path / "prefs.json"
    path.write_text(json.dumps({"default_exercise": "custom", "custom_durations": {"inhale": 99}}))
    create_app(prefs_file=str(path), timers=timers, audio_player=player)
    try:
        assert services.session_manager.current.name == "samavritti"
    finally:
        cleanup()


def test_close_clears_live_status(client, timers):
    post(client, "/breath/api/session/start")
    timers.advance(2)
    progress, _ = services.live_status_service.get_live_snapshots()
    assert progress["running"] is True

    post(client, "/breath/api/session/close")
    progress, audio = services.live_status_service.get_live_snapshots()
    assert progress["running"] is False
    assert progress["exercise"] is None
    assert audio["status"] == "stopped"


def test_sound_preference_reaches_open_session(client, player):
    post(client, "/breath/api/session/start")
    assert player.status == "playing"

    post(client, "/settings/preferences", {"sound_enabled": False})
    state = client.get("/breath/api/session/state").get_json()["state"]
    assert state["sound_enabled"] is False
    assert state["running"] is True
    assert player.status == "paused"
