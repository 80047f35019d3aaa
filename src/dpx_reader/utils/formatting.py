from __future__ import annotations

from fractions import Fraction


def format_timecode(hours: int, minutes: int, seconds: int, frame: int, drop_frame: bool = False) -> str:
    sep = ";" if drop_frame else ":"
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}{sep}{frame:02d}"


def format_dpx_datetime(value: str | None) -> str | None:
    """Render a DPX ``YYYY:MM:DD:HH:MM:SS[zone]`` stamp as ``YYYY:MM:DD HH:MM:SS``."""
    if not value:
        return None
    text = value[:19]
    if len(text) > 10:
        text = text[:10] + " " + text[11:]
    return text


def pixel_aspect_ratio(numerator: int | None, denominator: int | None) -> float:
    if not denominator or numerator is None:
        return 1.0
    return float(Fraction(numerator, denominator))
