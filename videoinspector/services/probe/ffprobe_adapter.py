# videoinspector/services/probe/ffprobe_adapter.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

from videoinspector.common.logging import get_logger
from videoinspector.common.probe.ffprobe_helpers import build_ffprobe_cmd, loads_ffprobe, parse_ffprobe
from videoinspector.common.process.media_tool import MediaToolRunner, stderr_excerpt
from videoinspector.domain.entities.probe import ProbeResult
from videoinspector.domain.errors import ToolExecutionFailed
from videoinspector.domain.ports.cancel import CancelToken
from videoinspector.domain.ports.probe import MediaProbePort

logger = get_logger(__name__)


class FFprobeAdapter(MediaProbePort):
    """
    Infrastructure adapter implementing MediaProbePort using `ffprobe`.
    One attempt per call, no retries. Safe for use from worker threads (I/O-bound).
    """

    TOOL = "ffprobe"

    def __init__(
        self,
        runner: MediaToolRunner,
        timeout_sec: Optional[float] = None,
        log_level: str = "error",
    ):
        self.runner = runner
        self.timeout_sec = timeout_sec
        self.log_level = log_level

    # ---- Port API -------------------------------------------------------------
    def probe(self, path: Path, cancel: CancelToken | None = None) -> ProbeResult:
        args = build_ffprobe_cmd(path, log_level=self.log_level)
        out = self.runner.run(self.TOOL, args, timeout=self.timeout_sec, cancel=cancel)
        if not out.ok:
            raise ToolExecutionFailed(self.TOOL, out.exit_info, stderr_excerpt(out.stderr))

        result = parse_ffprobe(loads_ffprobe(out.stdout))
        logger.debug(
            "probed %s: %dx%d %.3ffps %.3fs %.0fbps",
            path, result.width, result.height, result.fps, result.duration_sec, result.bitrate_bps,
        )
        return result
