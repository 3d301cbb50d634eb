from breath import live_status_service
from breath.live_status_service import LiveStatusService
from breath.sse_utils import SseDeltaTracker
from system import services


def test_tracker_sends_audio_only_on_change():
    tracker = SseDeltaTracker()
    audio = {"status": "playing", "looping": True}

    first = tracker.build({"phase_key": "INHALE"}, audio)
    assert first == {"phase_key": "INHALE", "audio": audio}

    second = tracker.build({"phase_key": "HOLD"}, dict(audio))
    assert second == {"phase_key": "HOLD"}

    third = tracker.build({"phase_key": "HOLD"}, {"status": "paused", "looping": True})
    assert third["audio"]["status"] == "paused"


def test_build_state_does_not_mutate_progress():
    progress = {"running": True}
    state = SseDeltaTracker.build_state(progress, {"status": "stopped"})
    assert "audio" in state
    assert progress == {"running": True}


def test_build_state_without_progress():
    assert SseDeltaTracker.build_state(None, None) == {}


def test_service_without_sessions():
    svc = LiveStatusService()
    progress, audio = svc.get_live_snapshots()
    assert progress == {"exercise": None, "running": False}
    assert audio is None


def test_snapshot_is_a_copy():
    svc = LiveStatusService()
    progress, _ = svc.get_live_snapshots()
    progress["running"] = True
    assert svc.get_live_snapshots()[0]["running"] is False


def test_module_delegate(monkeypatch):
    monkeypatch.setattr(services, "live_status_service", None)
    assert live_status_service.get_live_snapshots() == ({}, None)

    svc = LiveStatusService()
    monkeypatch.setattr(services, "live_status_service", svc)
    assert live_status_service.get_live_snapshots()[0]["exercise"] is None
