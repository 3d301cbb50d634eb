from flask import Blueprint, request, jsonify

from system import services
from system.log_utils import debug, info, warn
from system.preferences import (
    KEY_CUSTOM_DURATIONS,
    KEY_DEFAULT_EXERCISE,
    KEY_SOUND_ENABLED,
    VALID_PREF_KEYS,
)
from breath.exercises import build_custom_sequence, get_exercise
from breath.phase import ConfigurationError

settings_bp = Blueprint("settings", __name__)


def _validate(data: dict) -> None:
    """Raise ConfigurationError for values the session manager could not use."""
    if KEY_SOUND_ENABLED in data and not isinstance(data[KEY_SOUND_ENABLED], bool):
        raise ConfigurationError(f"{KEY_SOUND_ENABLED} must be true or false")

    if KEY_DEFAULT_EXERCISE in data:
        get_exercise(data[KEY_DEFAULT_EXERCISE])

    if KEY_CUSTOM_DURATIONS in data:
        durations = data[KEY_CUSTOM_DURATIONS]
        if not isinstance(durations, dict):
            raise ConfigurationError(f"{KEY_CUSTOM_DURATIONS} must be an object")
        unknown = set(durations) - {"inhale", "hold", "exhale"}
        if unknown:
            raise ConfigurationError(f"Unknown custom phases: {sorted(unknown)}")
        build_custom_sequence(**durations)


@settings_bp.get("/preferences")
def get_preferences():
    return jsonify(services.preferences_service.as_dict())


@settings_bp.post("/preferences")
def update_preferences():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"ok": False, "error": "Expected a JSON object"}), 400

    ignored = [k for k in data if k not in VALID_PREF_KEYS]
    if ignored:
        debug(f"[SETTINGS] ignoring unknown keys: {ignored}")

    try:
        _validate(data)
    except ConfigurationError as e:
        warn(f"[SETTINGS] rejected update: {e}")
        return jsonify({"ok": False, "error": str(e)}), 400

    updated = services.preferences_service.update_from_dict(data, write_disk=True)
    if updated:
        info(f"[SETTINGS] updated {updated}")
    return jsonify({"ok": True, "updated": updated, "preferences": services.preferences_service.as_dict()})
