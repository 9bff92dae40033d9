# videoinspector/services/thumbs/video_thumbnail.py
from __future__ import annotations
import io
from pathlib import Path
from typing import List, Optional, Sequence
from PIL import Image, UnidentifiedImageError
from videoinspector.common.logging import get_logger
from videoinspector.common.path.artifacts import temporary_artifact
from videoinspector.common.process.media_tool import MediaToolRunner, stderr_excerpt
from videoinspector.domain.entities.inspection import EncodedImage, ThumbnailSpec
from videoinspector.domain.errors import ArtifactReadFailed, InspectionCancelled, ToolExecutionFailed
from videoinspector.domain.ports.cancel import CancelToken
from videoinspector.domain.ports.thumbs import ThumbnailsPort

logger = get_logger(__name__)

DEFAULT_FRACTIONS = (0.10, 0.30, 0.60, 0.90)

# output format -> (artifact suffix, extra encoder args)
_FORMATS = {
    "png": (".png", []),
    "jpg": (".jpg", ["-q:v", "2"]),
    "webp": (".webp", ["-quality", "90"]),
}


class VideoThumbnail(ThumbnailsPort):
    """
    Samples a fixed set of stills across the timeline with ffmpeg, one
    scratch file per still, and returns them in ascending offset order.
    The batch is all-or-nothing: the first failed still fails the call.
    """

    TOOL = "ffmpeg"

    def __init__(
        self,
        runner: MediaToolRunner,
        tmp_dir: Path | str,
        fractions: Sequence[float] = DEFAULT_FRACTIONS,
        target_width: int = 480,
        target_height: int = 270,
        format: str = "png",
        timeout_sec: Optional[float] = None,
    ):
        fmt = format.lower()
        if fmt == "jpeg":
            fmt = "jpg"
        if fmt not in _FORMATS:
            raise ValueError(f"Unsupported format: {format}")
        self.runner = runner
        self.tmp_dir = Path(tmp_dir)
        self.fractions = tuple(float(f) for f in fractions)
        self.target_width = int(target_width)
        self.target_height = int(target_height)
        self.format = fmt
        self.timeout_sec = timeout_sec

    # ---- Port API -------------------------------------------------------------
    def plan(self, duration_sec: float) -> List[ThumbnailSpec]:
        dur = duration_sec if duration_sec and duration_sec > 0 else 0.0
        return [
            ThumbnailSpec(
                index=i,
                offset_sec=max(0.0, min(dur, dur * f)),
                target_width=self.target_width,
                target_height=self.target_height,
            )
            for i, f in enumerate(self.fractions)
        ]

    def generate_thumbnails(
        self,
        video_path: Path,
        duration_sec: float,
        cancel: CancelToken | None = None,
    ) -> List[EncodedImage]:
        video_path = Path(video_path)
        if not duration_sec or duration_sec <= 0:
            logger.warning("No duration for %s; sampling every thumbnail at 0s", video_path)

        images: List[EncodedImage] = []
        for spec in self.plan(duration_sec):
            if cancel is not None and cancel.is_set():
                raise InspectionCancelled(f"thumbnails for {video_path} were cancelled")
            images.append(self._extract_frame(video_path, spec, cancel))
        return images

    # ---- internals ----
    def _ffmpeg_args(self, video_path: Path, spec: ThumbnailSpec, out_path: Path) -> List[str]:
        vf = (
            f"scale={spec.target_width}:{spec.target_height}"
            ":force_original_aspect_ratio=decrease"
        )
        _, codec_args = _FORMATS[self.format]
        return [
            "-hide_banner", "-loglevel", "error",
            "-ss", f"{spec.offset_sec:.3f}",
            "-i", str(video_path),
            "-frames:v", "1",
            "-an",
            "-vf", vf,
            *codec_args,
            "-f", "image2",
            "-y", str(out_path),
        ]

    def _extract_frame(self, video_path: Path, spec: ThumbnailSpec, cancel: CancelToken | None) -> EncodedImage:
        suffix, _ = _FORMATS[self.format]
        with temporary_artifact(self.tmp_dir, spec.index, suffix=suffix) as artifact:
            out = self.runner.run(
                self.TOOL,
                self._ffmpeg_args(video_path, spec, artifact),
                timeout=self.timeout_sec,
                cancel=cancel,
            )
            if not out.ok:
                raise ToolExecutionFailed(
                    self.TOOL, out.exit_info, stderr_excerpt(out.stderr), offset_sec=spec.offset_sec
                )
            try:
                data = artifact.read_bytes()
            except OSError as e:
                raise ArtifactReadFailed(artifact, e.strerror or str(e)) from e
        return self._encode(artifact, data)

    @staticmethod
    def _encode(artifact: Path, data: bytes) -> EncodedImage:
        if not data:
            raise ArtifactReadFailed(artifact, "file is empty")
        try:
            with Image.open(io.BytesIO(data)) as img:
                fmt = img.format
                img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
            raise ArtifactReadFailed(artifact, f"not a readable image ({e})") from e
        mime = Image.MIME.get(fmt or "", "application/octet-stream")
        return EncodedImage(mime_type=mime, data=data)
