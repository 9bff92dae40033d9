# videoinspector/common/units.py
from __future__ import annotations

from typing import Sequence

_SIZE_UNITS: Sequence[str] = ("B", "KB", "MB", "GB")


def format_size(size_bytes: int) -> str:
    """Binary (1024-based) units: 500 -> "500 B", 2048 -> "2.00 KB". GB is the largest unit."""
    if size_bytes < 0:
        raise ValueError("size_bytes must be >= 0")
    value = float(size_bytes)
    unit = 0
    # step on the displayed value; "1024.00 KB" is never printed
    while round(value, 2) >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    if unit == 0:
        return f"{int(size_bytes)} B"
    return f"{value:.2f} {_SIZE_UNITS[unit]}"


def format_resolution(width: int, height: int) -> str:
    return f"{width}x{height}"


def format_frame_rate(fps: float) -> str:
    return f"{fps:.2f}"


def format_duration(seconds: float) -> str:
    return f"{seconds:.2f}s"


def format_bitrate(bits_per_second: float) -> str:
    # kilobits here are 1024 bits, matching the size units
    return f"{bits_per_second / 1024:.2f} kbps"
