# videoinspector/services/inspection/service.py
from __future__ import annotations

import os
import stat
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import contextmanager
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

from videoinspector.common.logging import get_logger
from videoinspector.common.process.media_tool import MediaToolRunner
from videoinspector.common.settings import Settings, get_settings
from videoinspector.common.units import (
    format_bitrate,
    format_duration,
    format_frame_rate,
    format_resolution,
)
from videoinspector.domain.entities.inspection import EncodedImage, FileFingerprint, InspectionResult
from videoinspector.domain.errors import InspectionError, IoFailure
from videoinspector.domain.ports.cancel import CancelToken
from videoinspector.domain.ports.hashing import HashingPort
from videoinspector.domain.ports.probe import MediaProbePort
from videoinspector.domain.ports.thumbs import ThumbnailsPort
from videoinspector.services.hashing.simple_hashing import SimpleHashing
from videoinspector.services.probe.ffprobe_adapter import FFprobeAdapter
from videoinspector.services.thumbs.video_thumbnail import VideoThumbnail

logger = get_logger(__name__)


@dataclass
class InspectionContext:
    """Everything the inspection pipeline talks to, wired once by the caller."""
    probe: MediaProbePort
    hashing: HashingPort
    thumbs: ThumbnailsPort
    parallel_post_probe: bool = True

    @classmethod
    def from_settings(cls, cfg: Settings) -> "InspectionContext":
        runner = MediaToolRunner.from_settings(cfg)
        return cls(
            probe=FFprobeAdapter(
                runner,
                timeout_sec=cfg.ffprobe.timeout_sec,
                log_level=cfg.ffprobe.log_level,
            ),
            hashing=SimpleHashing(),
            thumbs=VideoThumbnail(
                runner,
                tmp_dir=cfg.temp_dir,
                fractions=cfg.thumbs.fractions,
                target_width=cfg.thumbs.width,
                target_height=cfg.thumbs.height,
                format=cfg.thumbs.format,
                timeout_sec=cfg.ffmpeg.timeout_sec,
            ),
            parallel_post_probe=cfg.parallel_post_probe,
        )


class _AnyOf:
    """Cancel token that is set when any of its members is."""

    def __init__(self, *tokens: Optional[CancelToken]) -> None:
        self._tokens = [t for t in tokens if t is not None]

    def is_set(self) -> bool:
        return any(t.is_set() for t in self._tokens)


class InspectionService:
    """
    Entry point of the pipeline: probe, then fingerprint + thumbnails, then
    assemble one InspectionResult. The first failure aborts the remaining work
    and is re-raised unchanged; no partial result is ever returned.
    """

    def __init__(self, ctx: InspectionContext):
        self.ctx = ctx
        # path -> [lock, waiters]; same-path inspections run one at a time
        self._locks: Dict[str, list] = {}
        self._guard = threading.Lock()

    # --- main ---------------------------------------------------------------

    def inspect(self, path: Union[str, Path], cancel: CancelToken | None = None) -> InspectionResult:
        p = self._validate(path)
        with self._serialized(str(p.resolve())):
            return self._run(os.fspath(path), p, cancel)

    def _run(self, file_path: str, p: Path, cancel: CancelToken | None) -> InspectionResult:
        t0 = time.monotonic()
        logger.info("Inspecting %s", p)
        try:
            probe = self.ctx.probe.probe(p, cancel=cancel)
            fingerprint, thumbs = self._post_probe(p, probe.duration_sec, cancel)
        except InspectionError as e:
            logger.warning("Inspection of %s failed: %s: %s", p, e.kind, e)
            raise

        result = InspectionResult(
            file_path=file_path,
            resolution=format_resolution(probe.width, probe.height),
            frame_rate=format_frame_rate(probe.fps),
            duration=format_duration(probe.duration_sec),
            bit_rate=format_bitrate(probe.bitrate_bps),
            file_size=fingerprint.size_text,
            file_hash=fingerprint.sha256,
            thumbnails=tuple(thumbs),
        )
        logger.info(
            "Inspected %s in %.2fs (%s, %d thumbnails)",
            p, time.monotonic() - t0, result.resolution, len(result.thumbnails),
        )
        return result

    def _post_probe(
        self, p: Path, duration_sec: float, cancel: CancelToken | None
    ) -> Tuple[FileFingerprint, List[EncodedImage]]:
        if not self.ctx.parallel_post_probe:
            fingerprint = self.ctx.hashing.fingerprint(p, cancel=cancel)
            thumbs = self.ctx.thumbs.generate_thumbnails(p, duration_sec, cancel=cancel)
            return fingerprint, thumbs

        # Neither step depends on the other; the first failure stops its sibling.
        abort = threading.Event()
        token = _AnyOf(cancel, abort)
        first_error: Optional[BaseException] = None
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="inspect") as pool:
            f_fp = pool.submit(self.ctx.hashing.fingerprint, p, cancel=token)
            f_th = pool.submit(self.ctx.thumbs.generate_thumbnails, p, duration_sec, cancel=token)
            for fut in as_completed((f_fp, f_th)):
                exc = fut.exception()
                if exc is not None and first_error is None:
                    first_error = exc
                    abort.set()

        if first_error is not None:
            raise first_error
        return f_fp.result(), f_th.result()

    # --- helpers -------------------------------------------------------------

    @staticmethod
    def _validate(path: Union[str, Path, None]) -> Path:
        if path is None or not str(path).strip():
            raise IoFailure("", "no path provided")
        p = Path(path).expanduser()
        try:
            st = p.stat()
        except OSError as e:
            raise IoFailure(p, e.strerror or str(e)) from e
        if not stat.S_ISREG(st.st_mode):
            raise IoFailure(p, "not a regular file")
        return p

    @contextmanager
    def _serialized(self, key: str) -> Iterator[None]:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    self._locks.pop(key, None)


@lru_cache(maxsize=1)
def get_default_service() -> InspectionService:
    """
    Process-wide service built from settings. Shared so that same-path
    inspections through any default entry point are serialized.
    """
    return InspectionService(InspectionContext.from_settings(get_settings()))


def get_video_metadata(
    path: Union[str, Path], service: Optional[InspectionService] = None
) -> Union[InspectionResult, str]:
    """
    Caller-facing wrapper: the result on success, a human-readable message on
    failure. Prefer InspectionService.inspect() when the error kind matters.
    """
    if service is None:
        service = get_default_service()
    try:
        return service.inspect(path)
    except InspectionError as e:
        return str(e)
