from flask import Blueprint, jsonify, Response, stream_with_context, request
from system import services
from system.log_utils import verbose, debug, info, warn, error
from breath.actions import EngineActions
from breath.exercises import list_exercises, get_exercise
from breath.live_status_service import get_live_snapshots
from breath.phase import ConfigurationError
from breath.sse_utils import SseDeltaTracker

import time, json

breath_bp = Blueprint("breath", __name__)

SSE_POLL_SEC = 0.25
SSE_KEEPALIVE_SEC = 10


def _actions() -> EngineActions:
    return EngineActions(services.session_manager)

# ----------------------------------------------------------------------
# Exercise catalogue
# ----------------------------------------------------------------------
@breath_bp.route("/api/exercises")
def api_exercises() -> tuple[Response, int]:
    category = request.args.get("category")
    return jsonify([ex.to_dict() for ex in list_exercises(category)]), 200

@breath_bp.route("/api/exercises/<exercise_id>")
def api_exercise(exercise_id: str) -> tuple[Response, int]:
    try:
        return jsonify(get_exercise(exercise_id).to_dict()), 200
    except ConfigurationError as e:
        return jsonify({"ok": False, "error": str(e)}), 404

# ----------------------------------------------------------------------
# Session control
# ----------------------------------------------------------------------
@breath_bp.route("/api/session/open", methods=["POST"])
def open_session() -> tuple[Response, int]:
    data = request.get_json(silent=True) or {}
    try:
        engine = services.session_manager.open(
            data.get("exercise"),
            durations=data.get("durations"),
            sound_enabled=data.get("sound_enabled"),
        )
        return jsonify({"ok": True, "message": f"Opened {engine.name}", "state": engine.snapshot()}), 200

    except ConfigurationError as e:
        warn(f"[SESSION] open rejected: {e}")
        return jsonify({"ok": False, "error": str(e)}), 400
    except Exception as e:
        error(f"[SESSION] open failed: {e}")
        return jsonify({"ok": False, "error": str(e)}), 500

@breath_bp.route("/api/session/close", methods=["POST"])
def close_session() -> tuple[Response, int]:
    info("[SESSION] Close requested")
    closed = services.session_manager.close()
    if not closed:
        debug("[SESSION] close ignored, nothing open")
        return jsonify({"ok": False, "message": "No open session"}), 200
    return jsonify({"ok": True, "message": "Session closed"}), 200

@breath_bp.route("/api/session/state")
def session_state() -> tuple[Response, int]:
    engine = services.session_manager.current
    if engine is None:
        return jsonify({"ok": False, "message": "No open session"}), 404
    state = engine.snapshot()
    state["audio"] = services.session_manager.audio_player.state()
    return jsonify({"ok": True, "state": state}), 200

@breath_bp.route("/api/session/<action>", methods=["POST"])
def session_action(action: str) -> tuple[Response, int]:
    ok, msg = _actions().perform_action(action)
    if msg == "Unknown action":
        return jsonify({"ok": False, "message": msg}), 404

    engine = services.session_manager.current
    body = {"ok": ok, "message": msg}
    if engine is not None:
        body["state"] = engine.snapshot()
    return jsonify(body), 200

# ----------------------------------------------------------------------
# Server-Sent Events
# ----------------------------------------------------------------------
@breath_bp.route("/api/session/events")
def sse_events() -> Response:
    """SSE stream of session progress, with audio state whenever it changes."""
    def event_stream():
        last_payload = None
        last_beat = time.monotonic()
        tracker = SseDeltaTracker()

        while True:
            try:
                _progress, _audio = get_live_snapshots()

                state = tracker.build(_progress, _audio)
                payload = json.dumps(state, sort_keys=True)
                if payload != last_payload:
                    yield f"data: {payload}\n\n"
                    last_payload = payload
                    last_beat = time.monotonic()
                    verbose(f"[SSE] sent update: {state}")
                elif time.monotonic() - last_beat > SSE_KEEPALIVE_SEC:
                    yield ": keep-alive\n\n"
                    last_beat = time.monotonic()
                    verbose("[SSE] sent keep-alive")

                time.sleep(SSE_POLL_SEC)

            except GeneratorExit:
                debug("[SSE] client disconnected")
                break
            except Exception as e:
                warn(f"[SSE] stream error: {e}")
                time.sleep(1)

    return Response(stream_with_context(event_stream()), mimetype="text/event-stream")
