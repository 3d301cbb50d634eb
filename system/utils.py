def format_duration(seconds, fixed=False):
    """Format seconds as duration.
    - If fixed=False: MM:SS for <1h, HH:MM:SS for >=1h
    - If fixed=True: always HH:MM:SS
    """
    if isinstance(seconds, bool) or not isinstance(seconds, (int, float)) or seconds < 0:
        return "--:--"
    elapsed = int(seconds)
    hours = elapsed // 3600
    minutes = (elapsed % 3600) // 60
    secs = elapsed % 60
    if fixed or hours > 0:
        return f"{hours:02}:{minutes:02}:{secs:02}"
    return f"{minutes:02}:{secs:02}"


def format_countdown(remaining):
    """Countdown label for the breathing circle: whole seconds, never negative."""
    if isinstance(remaining, bool) or not isinstance(remaining, (int, float)):
        return "-"
    value = max(0.0, float(remaining))
    if value.is_integer():
        return str(int(value))
    return f"{value:.1f}"
