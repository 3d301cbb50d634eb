from sim.cli import build_session, main, parse_args


def test_custom_session_stops_after_requested_cycles(timers):
    lines = []
    args = parse_args(["custom", "--inhale", "2", "--hold", "1", "--exhale", "3", "--cycles", "1"])
    engine, done = build_session(args, timers, out=lines.append)

    engine.start()
    timers.advance(5)
    assert not done.is_set()

    timers.advance(1)
    assert done.is_set()
    assert engine.running is False
    assert engine.cycles_completed == 1

    assert lines[:6] == [
        "\n>> Inhale         2s",
        "   1",
        "\n>> Hold           1s",
        "\n>> Exhale         3s",
        "   2",
        "   1",
    ]
    assert lines[6].startswith("-- cycle 1 complete")

    timers.advance(30)
    assert len(lines) == 7
    engine.dispose()


def test_no_sound_flag(timers):
    engine, _ = build_session(parse_args(["ujjayi", "--no-sound"]), timers, out=lambda _: None)
    assert engine.sound_enabled is False


def test_list(capsys):
    assert main(["--list"]) == 0
    out = capsys.readouterr().out
    assert "bhramari" in out
    assert "Exhale & Hum 8s" in out


def test_unknown_exercise_exits_with_error(capsys):
    assert main(["nope"]) == 2
    assert "Unknown exercise" in capsys.readouterr().out


def test_custom_out_of_range(capsys):
    assert main(["custom", "--inhale", "40"]) == 2
