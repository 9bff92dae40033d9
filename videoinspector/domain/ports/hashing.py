from __future__ import annotations
from pathlib import Path
from typing import Protocol
from videoinspector.domain.entities.inspection import FileFingerprint
from videoinspector.domain.ports.cancel import CancelToken

class HashingPort(Protocol):
    def sha256_file(self, path: Path, cancel: CancelToken | None = None) -> str: ...
    def file_size(self, path: Path) -> int: ...
    def fingerprint(self, path: Path, cancel: CancelToken | None = None) -> FileFingerprint: ...
