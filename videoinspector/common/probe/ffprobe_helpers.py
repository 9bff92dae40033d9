# videoinspector/common/probe/ffprobe_helpers.py
from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, List, Optional
import json
import math

from videoinspector.common.logging import get_logger
from videoinspector.domain.entities.probe import ProbeResult
from videoinspector.domain.errors import DivisionByZero, MalformedOutput, MalformedRate

logger = get_logger(__name__)


def build_ffprobe_cmd(input_path: str | Path, log_level: str = "error") -> List[str]:
    """
    Arguments (without the binary) for one JSON document holding the container
    ("format") and its video streams.
    """
    return [
        "-v", log_level,
        "-print_format", "json",
        "-show_format",
        "-show_streams",
        "-select_streams", "V",
        str(input_path),
    ]


def parse_rate(rate: str) -> float:
    """
    Parse an ffprobe rational such as "30000/1001" into a float.
    Raises MalformedRate unless there are exactly two numeric parts, and
    DivisionByZero when the denominator is zero.
    """
    if not isinstance(rate, str):
        raise MalformedRate(rate)
    parts = rate.split("/")
    if len(parts) != 2:
        raise MalformedRate(rate)
    try:
        num, den = float(parts[0]), float(parts[1])
    except ValueError as e:
        raise MalformedRate(rate) from e
    if not (math.isfinite(num) and math.isfinite(den)):
        raise MalformedRate(rate)
    if den == 0:
        raise DivisionByZero(rate)
    return num / den


def loads_ffprobe(stdout: str) -> Dict[str, Any]:
    """Decode ffprobe stdout; anything but a JSON object is MalformedOutput."""
    try:
        data = json.loads(stdout or "")
    except json.JSONDecodeError as e:
        raise MalformedOutput(f"not valid JSON ({e.msg} at pos {e.pos})") from e
    if not isinstance(data, dict):
        raise MalformedOutput(f"expected a JSON object, got {type(data).__name__}")
    return data


def parse_ffprobe(data: Dict[str, Any]) -> ProbeResult:
    """
    Map ffprobe JSON onto a ProbeResult. Safe to call in unit tests with
    fixture JSON. Width, height, frame rate and duration are mandatory; the
    bit rate falls back to 0 when missing or unparseable.
    """
    fmt = data.get("format") or {}
    if not isinstance(fmt, dict):
        raise MalformedOutput("'format' is not an object")
    streams = data.get("streams")
    if not isinstance(streams, list):
        raise MalformedOutput("missing 'streams' collection")

    vstream = _best_video_stream(streams)
    if vstream is None:
        raise MalformedOutput("no video stream")

    width = _required_dimension(vstream, "width")
    height = _required_dimension(vstream, "height")

    rate = _frame_rate_string(vstream)
    if rate is None:
        raise MalformedOutput("video stream has no frame rate")
    fps = parse_rate(rate)
    if fps < 0:
        raise MalformedOutput(f"negative frame rate {rate!r}")

    raw_duration = fmt.get("duration")
    if raw_duration is None:
        raw_duration = vstream.get("duration")
    if raw_duration is None:
        raise MalformedOutput("missing duration")
    duration = _parse_float(raw_duration)
    if duration is None or duration < 0:
        raise MalformedOutput(f"invalid duration {raw_duration!r}")

    bitrate = _parse_float(fmt.get("bit_rate"))
    if bitrate is None:
        bitrate = _parse_float(vstream.get("bit_rate"))
    if bitrate is None or bitrate < 0:
        bitrate = 0.0

    return ProbeResult(
        width=width,
        height=height,
        duration_sec=duration,
        fps=fps,
        bitrate_bps=bitrate,
    )


# ---- tiny parse helpers -------------------------------------------------------
def _best_video_stream(streams: List[Any]) -> Optional[Dict[str, Any]]:
    # default disposition first, else highest resolution; cover art never counts
    vstreams = [
        s for s in streams
        if isinstance(s, dict)
        and s.get("codec_type") == "video"
        and (s.get("disposition") or {}).get("attached_pic") != 1
    ]
    if not vstreams:
        return None
    for s in vstreams:
        if (s.get("disposition") or {}).get("default") == 1:
            return s

    def _res_key(s: Dict[str, Any]) -> int:
        w = _parse_int(s.get("width")) or 0
        h = _parse_int(s.get("height")) or 0
        return w * h

    return max(vstreams, key=_res_key)


def _frame_rate_string(stream: Dict[str, Any]) -> Optional[str]:
    # avg_frame_rate is "0/0" for some containers; r_frame_rate is the fallback
    avg = stream.get("avg_frame_rate")
    if avg and avg != "0/0":
        return avg
    return stream.get("r_frame_rate") or avg


def _required_dimension(stream: Dict[str, Any], key: str) -> int:
    if key not in stream:
        raise MalformedOutput(f"video stream has no {key}")
    v = _parse_int(stream.get(key))
    if v is None or v <= 0:
        raise MalformedOutput(f"invalid {key} {stream.get(key)!r}")
    return v


def _parse_float(x) -> Optional[float]:
    if x is None or isinstance(x, bool):
        return None
    try:
        v = float(x)
    except (TypeError, ValueError):
        return None
    return v if math.isfinite(v) else None


def _parse_int(x) -> Optional[int]:
    v = _parse_float(x)
    if v is None or v != int(v):
        return None
    return int(v)
