from __future__ import annotations

from flask import Flask, jsonify

from system.log_utils import debug


def create_app(prefs_file: str | None = None, timers=None, audio_player=None) -> Flask:
    debug("starting service", version="1.0.0")

    from system.service_init import init_all
    init_all(prefs_file=prefs_file, timers=timers, audio_player=audio_player)

    from breath.routes import breath_bp
    from settings.routes import settings_bp

    app = Flask(__name__)

    app.register_blueprint(breath_bp, url_prefix="/breath")
    app.register_blueprint(settings_bp, url_prefix="/settings")

    @app.route('/')
    def index():
        return jsonify({"service": "breathcycle", "ok": True})

    return app


def cleanup():
    """Clean up resources before exit."""
    from system.service_init import shutdown
    debug("Cleaning up resources...")
    shutdown()
    debug("Cleanup complete")


if __name__ == '__main__':
    import atexit

    app = create_app()
    atexit.register(cleanup)

    app.run(host="0.0.0.0", port=5001, debug=False, use_reloader=False)
