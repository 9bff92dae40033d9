# videoinspector/common/process/media_tool.py
from __future__ import annotations

import os
import shlex
import shutil
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence

from videoinspector.common.logging import get_logger
from videoinspector.domain.errors import InspectionCancelled, ToolLaunchFailed, ToolTimedOut
from videoinspector.domain.ports.cancel import CancelToken

logger = get_logger(__name__)

STDERR_EXCERPT_LIMIT = 2000


def stderr_excerpt(text: Optional[str], limit: int = STDERR_EXCERPT_LIMIT) -> str:
    """Trim diagnostics to the tail, where ffmpeg puts the actual error."""
    s = (text or "").strip()
    if len(s) <= limit:
        return s
    return "..." + s[-limit:]


@dataclass(frozen=True)
class ToolOutput:
    tool: str
    returncode: int
    stdout: str = field(repr=False)
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def exit_info(self) -> str:
        if self.returncode < 0:
            return f"killed by signal {-self.returncode}"
        return f"exit code {self.returncode}"


class MediaToolRunner:
    """
    Single place where external media tools (ffprobe, ffmpeg) are spawned.
    Handles binary resolution, output capture, per-tool timeouts and
    cooperative cancellation. Stateless between calls; safe to share across threads.
    """

    def __init__(
        self,
        binaries: Optional[Mapping[str, str]] = None,
        timeouts: Optional[Mapping[str, float]] = None,
        poll_interval: float = 0.1,
    ) -> None:
        self._binaries: Dict[str, str] = dict(binaries or {})
        self._timeouts: Dict[str, float] = dict(timeouts or {})
        self._poll_interval = max(0.01, float(poll_interval))

    @classmethod
    def from_settings(cls, cfg) -> "MediaToolRunner":
        return cls(
            binaries={"ffprobe": cfg.ffprobe.bin, "ffmpeg": cfg.ffmpeg.bin},
            timeouts={"ffprobe": cfg.ffprobe.timeout_sec, "ffmpeg": cfg.ffmpeg.timeout_sec},
            poll_interval=cfg.tool_poll_interval_sec,
        )

    # ---- resolution -----------------------------------------------------------
    def resolve(self, tool: str) -> str:
        candidate = self._binaries.get(tool) or tool
        if os.sep in candidate or (os.altsep and os.altsep in candidate):
            p = Path(candidate)
            if p.is_file() and os.access(p, os.X_OK):
                return str(p)
            raise ToolLaunchFailed(tool, f"{candidate} is missing or not executable")
        resolved = shutil.which(candidate)
        if not resolved:
            raise ToolLaunchFailed(tool, f"{candidate!r} not found on PATH")
        return resolved

    def is_available(self, tool: str) -> bool:
        try:
            self.resolve(tool)
        except ToolLaunchFailed:
            return False
        return True

    # ---- execution ------------------------------------------------------------
    def run(
        self,
        tool: str,
        args: Sequence[str],
        *,
        timeout: Optional[float] = None,
        cwd: Optional[Path | str] = None,
        cancel: Optional[CancelToken] = None,
    ) -> ToolOutput:
        """
        Run `tool` with `args` and collect exit status and both streams.
        A non-zero exit is returned, not raised; callers decide what it means.

        Raises ToolLaunchFailed, ToolTimedOut or InspectionCancelled.
        """
        if cancel is not None and cancel.is_set():
            raise InspectionCancelled(f"{tool} was cancelled before start")

        exe = self.resolve(tool)
        cmd = [exe, *(str(a) for a in args)]
        if timeout is None:
            timeout = self._timeouts.get(tool)
        logger.debug("%s cmd: %s", tool, shlex.join(cmd))

        try:
            proc = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=str(cwd) if cwd else None,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise ToolLaunchFailed(tool, str(e)) from e

        deadline = time.monotonic() + timeout if timeout else None
        while True:
            wait = self._poll_interval
            if deadline is not None:
                wait = max(0.0, min(wait, deadline - time.monotonic()))
            try:
                stdout, stderr = proc.communicate(timeout=wait)
                break
            except subprocess.TimeoutExpired:
                if cancel is not None and cancel.is_set():
                    self._kill(proc)
                    raise InspectionCancelled(f"{tool} was cancelled")
                if deadline is not None and time.monotonic() >= deadline:
                    self._kill(proc)
                    raise ToolTimedOut(tool, timeout)

        out = ToolOutput(tool=tool, returncode=proc.returncode, stdout=stdout or "", stderr=stderr or "")
        if not out.ok:
            logger.debug("%s finished with %s", tool, out.exit_info)
        return out

    @staticmethod
    def _kill(proc: subprocess.Popen) -> None:
        proc.kill()
        # reap and drain pipes so no zombie or open fd is left behind
        proc.communicate()
