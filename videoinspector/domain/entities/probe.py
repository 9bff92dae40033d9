# videoinspector/domain/entities/probe.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ProbeResult:
    """
    Normalized, framework-free result of a media probe (e.g., ffprobe).
    Only technical attributes of the best video stream and its container.
    """
    width: int
    height: int
    duration_sec: float
    fps: float
    bitrate_bps: float = 0.0

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError("ProbeResult dimensions must be positive")
        if self.duration_sec < 0:
            raise ValueError("ProbeResult.duration_sec must be >= 0")
        if self.fps < 0 or self.bitrate_bps < 0:
            raise ValueError("ProbeResult rates must be >= 0")
