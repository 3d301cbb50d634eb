import argparse
import threading

from breath.audio import AudioSync, SimAudioPlayer
from breath.composition import build_engine
from breath.exercises import list_exercises
from breath.phase import ConfigurationError
from breath.session_event import SessionEvent
from breath.timers import ThreadingTimerFacility
from system.utils import format_countdown, format_duration


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run a breathing exercise in the terminal.")
    parser.add_argument("exercise", nargs="?", default="samavritti", help="exercise id (see --list)")
    parser.add_argument("--cycles", type=int, default=3, help="stop after this many full cycles (0 = run until Ctrl+C)")
    parser.add_argument("--no-sound", action="store_true", help="start with background music off")
    parser.add_argument("--inhale", type=int, help="custom exercise: inhale seconds (1-12)")
    parser.add_argument("--hold", type=int, help="custom exercise: hold seconds (1-12)")
    parser.add_argument("--exhale", type=int, help="custom exercise: exhale seconds (1-12)")
    parser.add_argument("--list", action="store_true", help="list exercises and exit")
    return parser.parse_args(argv)


def build_session(args, timers, out=print):
    """Wire an engine to terminal output. Returns (engine, done_event)."""
    durations = {k: v for k, v in (("inhale", args.inhale), ("hold", args.hold), ("exhale", args.exhale)) if v is not None}
    done = threading.Event()

    engine = build_engine(
        args.exercise,
        timers,
        sound_enabled=not args.no_sound,
        durations=durations or None,
        on_phase_change=lambda phase: out(f"\n>> {phase.label:<14} {format_countdown(phase.duration_seconds)}s"),
        on_tick=lambda remaining: out(f"   {format_countdown(remaining)}"),
    )
    AudioSync(engine, SimAudioPlayer())

    def on_event(event):
        if event is SessionEvent.CYCLE_COMPLETED:
            out(f"-- cycle {engine.cycles_completed} complete ({format_duration(engine.progress.elapsed_seconds)})")
            if args.cycles and engine.cycles_completed >= args.cycles:
                engine.pause()
                done.set()

    engine.subscribe_session_event(on_event)
    return engine, done


def main(argv=None):
    args = parse_args(argv)

    if args.list:
        for ex in list_exercises():
            seq = ex.sequence()
            phases = ", ".join(f"{p.label} {p.duration_seconds:g}s" for p in seq)
            print(f"{ex.id:<16} {ex.name} ({ex.english_name}) - {phases}")
        return 0

    try:
        engine, done = build_session(args, ThreadingTimerFacility(name="sim-timer"))
    except ConfigurationError as e:
        print(f"[SIMULATOR CLI] {e}")
        return 2

    print(f"[SIMULATOR CLI] {engine.name}: {len(engine.sequence)} phases, "
          f"{engine.sequence.cycle_seconds:g}s per cycle (Ctrl+C to stop)")
    engine.start()
    try:
        # Short waits keep Ctrl+C responsive
        while not done.wait(timeout=0.5):
            pass
    except KeyboardInterrupt:
        print("\n[SIMULATOR CLI] Stopping...")
    finally:
        engine.dispose()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
