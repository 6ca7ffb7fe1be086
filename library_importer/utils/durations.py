"""Human-readable duration formatting."""


def format_duration(seconds: float) -> str:
    """Format seconds as m:ss, or h:mm:ss for an hour or more.

    Negative values are clamped to zero.
    """
    total = int(round(max(0.0, seconds)))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
