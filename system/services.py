# services.py
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from breath.audio import AudioPlayer
    from breath.live_status_service import LiveStatusService
    from breath.session import SessionManager
    from breath.timers import TimerFacility
    from system.preferences import Preferences

# ------------------------------------------------------------------------------
# Service singletons (initialized in order in service_init.py)
# ------------------------------------------------------------------------------

preferences_service: Preferences = None

timer_facility: TimerFacility = None

audio_player: AudioPlayer = None

session_manager: SessionManager = None

live_status_service: LiveStatusService = None
