from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, List
from system.log_utils import debug, warn, error

# --- Preference Keys ---
VALID_PREF_KEYS = [
        "sound_enabled",
        "default_exercise",
        "custom_durations",
    ]

KEY_SOUND_ENABLED     = VALID_PREF_KEYS[0]
KEY_DEFAULT_EXERCISE  = VALID_PREF_KEYS[1]
KEY_CUSTOM_DURATIONS  = VALID_PREF_KEYS[2]

DEFAULT_PREFS_FILE = "config/user_prefs.json"

# Expected JSON type per key; stored values of another type are replaced by the default
_PREF_TYPES = {
    KEY_SOUND_ENABLED: bool,
    KEY_DEFAULT_EXERCISE: str,
    KEY_CUSTOM_DURATIONS: dict,
}


class Preferences:
    """
    User preferences persisted as one JSON object.
    Missing or mistyped keys fall back to DEFAULTS; listeners can follow
    individual keys through register_callback().
    """

    DEFAULTS: Dict[str, Any] = {
        KEY_SOUND_ENABLED: True,
        KEY_DEFAULT_EXERCISE: "samavritti",
        KEY_CUSTOM_DURATIONS: {"inhale": 4, "hold": 4, "exhale": 6},
    }

    def __init__(self, filename: str | None = None):
        self.file = Path(filename or os.environ.get("BREATH_PREFS_FILE", DEFAULT_PREFS_FILE))
        self.data: Dict[str, Any] = self._read()
        self._callbacks: Dict[str, List[Callable[[Any], None]]] = {}

        if self._fill_defaults():
            self.save()

    # ------------------------------------------------------------------
    # Disk
    # ------------------------------------------------------------------

    def _read(self) -> Dict[str, Any]:
        if not self.file.exists():
            warn(f"[PREFS] {self.file} missing, creating it with defaults")
            return {}
        try:
            raw = json.loads(self.file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            error(f"[PREFS] could not read {self.file}: {e}")
            return {}
        if not isinstance(raw, dict):
            error(f"[PREFS] {self.file} does not hold an object, ignoring it")
            return {}
        return raw

    def _fill_defaults(self) -> bool:
        changed = False
        for key in VALID_PREF_KEYS:
            expected = _PREF_TYPES[key]
            if key in self.data and isinstance(self.data[key], expected):
                continue
            if key in self.data:
                warn(f"[PREFS] {key} has wrong type, resetting", value=self.data[key])
            self.data[key] = copy.deepcopy(self.DEFAULTS[key])
            changed = True
        return changed

    def save(self):
        """Write the whole store; the file is replaced in one step."""
        tmp = self.file.with_name(self.file.name + ".tmp")
        try:
            self.file.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(self.data, indent=2), encoding="utf-8")
            os.replace(tmp, self.file)
        except OSError as e:
            error(f"[PREFS] could not write {self.file}: {e}")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key, default)
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)

    def as_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self.data)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def update_from_dict(self, d: Dict[str, Any], write_disk: bool = False) -> List[str]:
        """Apply known keys from d and return the ones whose value changed.

        Unknown keys are skipped. With write_disk=False only memory changes.
        Listeners run after the (optional) save.
        """
        changed = [k for k, v in d.items() if k in VALID_PREF_KEYS and self.data.get(k) != v]
        skipped = [k for k in d if k not in VALID_PREF_KEYS]
        if skipped:
            debug(f"[PREFS] unknown keys skipped: {skipped}")
        if not changed:
            return []

        for k in changed:
            self.data[k] = copy.deepcopy(d[k])
        debug(f"[PREFS] changed: {changed}", saved=write_disk)

        if write_disk:
            self.save()
        for k in changed:
            self._notify(k, self.data[k])
        return changed

    def reset(self, write_disk: bool = True) -> List[str]:
        """Restore every key to its default."""
        return self.update_from_dict(copy.deepcopy(self.DEFAULTS), write_disk=write_disk)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def register_callback(self, key: str, cb: Callable[[Any], None]):
        self._callbacks.setdefault(key, []).append(cb)

    def _notify(self, key: str, value: Any):
        for cb in list(self._callbacks.get(key, ())):
            try:
                cb(value)
            except Exception as e:
                warn(f"[PREFS] listener for {key} raised: {e}")
