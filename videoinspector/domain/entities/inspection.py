# videoinspector/domain/entities/inspection.py
from __future__ import annotations

import base64
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class ThumbnailSpec:
    """One requested still: where to seek and the box to fit the frame into."""
    index: int
    offset_sec: float
    target_width: int
    target_height: int


@dataclass(frozen=True)
class EncodedImage:
    mime_type: str
    data: bytes = field(repr=False)

    @property
    def data_uri(self) -> str:
        payload = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{payload}"


@dataclass(frozen=True)
class FileFingerprint:
    size_bytes: int
    size_text: str
    sha256: str


@dataclass(frozen=True)
class InspectionResult:
    """
    Summary of one inspected video. Built once by the inspection service and
    handed to the caller; every numeric field is already formatted for display.
    """
    file_path: str
    resolution: str
    frame_rate: str
    duration: str
    bit_rate: str
    file_size: str
    file_hash: str
    thumbnails: Tuple[EncodedImage, ...] = ()

    @property
    def thumbnail_uris(self) -> list[str]:
        return [t.data_uri for t in self.thumbnails]

    def as_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["thumbnails"] = self.thumbnail_uris
        return d
