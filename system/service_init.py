# system/service_init.py
from __future__ import annotations

from system import services
from system.log_utils import info, debug, warn


def init_preferences_service(filename: str | None = None):
    from system.preferences import Preferences
    services.preferences_service = Preferences(filename)
    debug(f"[INIT] preferences from {services.preferences_service.file}")


def init_timer_facility(timers=None):
    from breath.timers import ThreadingTimerFacility
    services.timer_facility = timers or ThreadingTimerFacility()


def init_audio_service(player=None):
    from breath.audio import SimAudioPlayer
    services.audio_player = player or SimAudioPlayer()


def init_session_manager():
    from breath.session import SessionManager
    services.session_manager = SessionManager(
        services.timer_facility,
        services.audio_player,
        services.preferences_service,
    )


def init_live_status_service():
    from breath.live_status_service import LiveStatusService
    services.live_status_service = LiveStatusService()

    if services.session_manager is not None:
        services.live_status_service.attach_sessions(services.session_manager)


def open_default_session():
    from breath.phase import ConfigurationError
    from breath.session import DEFAULT_EXERCISE

    # A screen is always open; the client switches exercises through the API
    try:
        engine = services.session_manager.open()
    except ConfigurationError as e:
        warn(f"[INIT] saved default session invalid ({e}), using {DEFAULT_EXERCISE}")
        engine = services.session_manager.open(DEFAULT_EXERCISE, durations={})
    info(f"[INIT] default session '{engine.name}' ready")


def init_all(prefs_file: str | None = None, timers=None, audio_player=None):
    init_preferences_service(prefs_file)
    init_timer_facility(timers)
    init_audio_service(audio_player)
    init_session_manager()
    init_live_status_service()
    open_default_session()


def shutdown():
    if services.session_manager is not None:
        services.session_manager.close()
    debug("[INIT] services shut down")
