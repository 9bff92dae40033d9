# tests/conftest.py
from __future__ import annotations
import io
import json
import os
import stat
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest
from PIL import Image

from videoinspector.common.process.media_tool import ToolOutput


def ffprobe_payload(
    *,
    width: Any = 1920,
    height: Any = 1080,
    rate: Optional[str] = "30/1",
    duration: Any = "10.000000",
    bit_rate: Any = "4000000",
) -> Dict[str, Any]:
    stream: Dict[str, Any] = {"index": 0, "codec_type": "video", "codec_name": "h264"}
    if width is not None:
        stream["width"] = width
    if height is not None:
        stream["height"] = height
    if rate is not None:
        stream["avg_frame_rate"] = rate
        stream["r_frame_rate"] = rate
    fmt: Dict[str, Any] = {"format_name": "mov,mp4,m4a,3gp,3g2,mj2"}
    if duration is not None:
        fmt["duration"] = duration
    if bit_rate is not None:
        fmt["bit_rate"] = bit_rate
    return {"streams": [stream], "format": fmt}


@pytest.fixture()
def probe_payload():
    """Factory for ffprobe-shaped JSON dicts (1920x1080, 30fps, 10s by default)."""
    return ffprobe_payload


@pytest.fixture(scope="session")
def png_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (48, 27), (200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()


class FakeRunner:
    """
    Stand-in for MediaToolRunner. Records every call; `script` maps a call
    index to a ToolOutput, an exception to raise, or a callable(tool, args).
    ffmpeg calls default to writing `image` to the output path (last arg).
    """

    def __init__(self, *, probe_json: Optional[Dict[str, Any]] = None, image: bytes = b""):
        self.probe_json = probe_json or {}
        self.image = image
        self.calls: List[Dict[str, Any]] = []
        self.script: Dict[int, Any] = {}
        self.written: List[Path] = []

    def run(self, tool: str, args, *, timeout=None, cwd=None, cancel=None) -> ToolOutput:
        i = len(self.calls)
        self.calls.append({"tool": tool, "args": list(args), "timeout": timeout, "cancel": cancel})
        if i in self.script:
            val = self.script[i]
            if isinstance(val, Exception):
                raise val
            if callable(val):
                return val(tool, list(args))
            return val
        if tool == "ffprobe":
            return ToolOutput(tool=tool, returncode=0, stdout=json.dumps(self.probe_json), stderr="")
        out = Path(args[-1])
        out.write_bytes(self.image)
        self.written.append(out)
        return ToolOutput(tool=tool, returncode=0, stdout="", stderr="")

    def is_available(self, tool: str) -> bool:
        return True

    def tool_calls(self, tool: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["tool"] == tool]


@pytest.fixture()
def fake_runner_cls():
    return FakeRunner


@pytest.fixture()
def make_tool(tmp_path) -> Callable[[str, str], Path]:
    """
    Write an executable Python script standing in for ffprobe/ffmpeg.
    `body` is Python source; `sys` and `pathlib` are pre-imported.
    """
    bindir = tmp_path / "bin"
    bindir.mkdir(exist_ok=True)

    def _make(name: str, body: str) -> Path:
        p = bindir / name
        p.write_text(f"#!{sys.executable}\nimport sys, pathlib, time\n{body}\n", encoding="utf-8")
        p.chmod(p.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return p

    return _make


@pytest.fixture()
def clean_settings(monkeypatch):
    """Fresh get_settings() cache and no stray env config between tests."""
    from videoinspector.common import settings as s

    for key in list(os.environ):
        if key.upper().startswith(("FFPROBE__", "FFMPEG__", "THUMBS__", "API__")) or key.upper() in (
            "TEMP_DIR", "PARALLEL_POST_PROBE", "APP_ENV", "LOG_LEVEL",
        ):
            monkeypatch.delenv(key, raising=False)
    s.get_settings.cache_clear()
    yield s
    s.get_settings.cache_clear()
