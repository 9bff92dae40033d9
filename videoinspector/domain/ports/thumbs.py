from __future__ import annotations

from pathlib import Path
from typing import List, Protocol

from videoinspector.domain.entities.inspection import EncodedImage, ThumbnailSpec
from videoinspector.domain.ports.cancel import CancelToken


class ThumbnailsPort(Protocol):
    def plan(self, duration_sec: float) -> List[ThumbnailSpec]: ...

    def generate_thumbnails(
        self,
        video_path: Path,
        duration_sec: float,        # probed duration; 0 collapses every offset to 0
        cancel: CancelToken | None = None,
    ) -> List[EncodedImage]: ...
