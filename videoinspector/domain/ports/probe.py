from __future__ import annotations
from pathlib import Path
from typing import Protocol
from videoinspector.domain.entities.probe import ProbeResult
from videoinspector.domain.ports.cancel import CancelToken

class MediaProbePort(Protocol):
    def probe(self, path: Path, cancel: CancelToken | None = None) -> ProbeResult: ...
