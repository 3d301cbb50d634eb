import pytest

from system.utils import format_countdown, format_duration


@pytest.mark.parametrize("seconds, expected", [
    (0, "00:00"),
    (65, "01:05"),
    (3600, "01:00:00"),
    (-1, "--:--"),
    (None, "--:--"),
    (True, "--:--"),
])
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


def test_format_duration_fixed():
    assert format_duration(65, fixed=True) == "00:01:05"


@pytest.mark.parametrize("remaining, expected", [
    (4, "4"),
    (4.0, "4"),
    (0.5, "0.5"),
    (-2, "0"),
    (None, "-"),
])
def test_format_countdown(remaining, expected):
    assert format_countdown(remaining) == expected
