from __future__ import annotations

import hashlib
from pathlib import Path

from videoinspector.common.units import format_size
from videoinspector.domain.entities.inspection import FileFingerprint
from videoinspector.domain.errors import InspectionCancelled, IoFailure
from videoinspector.domain.ports.cancel import CancelToken
from videoinspector.domain.ports.hashing import HashingPort


class SimpleHashing(HashingPort):
    """
    Streaming SHA-256 file hasher plus size lookup. Memory efficient for large files.
    """

    def __init__(self, chunk_size: int = 1024 * 1024):
        self.chunk_size = chunk_size

    def file_size(self, path: Path) -> int:
        path = Path(path)
        try:
            st = path.stat()
        except OSError as e:
            raise IoFailure(path, e.strerror or str(e)) from e
        return st.st_size

    def sha256_file(self, path: Path, cancel: CancelToken | None = None) -> str:
        path = Path(path)
        h = hashlib.sha256()
        try:
            # Buffered read in fixed chunks
            with path.open("rb") as f:
                for chunk in iter(lambda: f.read(self.chunk_size), b""):
                    if cancel is not None and cancel.is_set():
                        raise InspectionCancelled(f"hashing of {path} was cancelled")
                    h.update(chunk)
        except OSError as e:
            raise IoFailure(path, e.strerror or str(e)) from e
        return h.hexdigest()

    def fingerprint(self, path: Path, cancel: CancelToken | None = None) -> FileFingerprint:
        size = self.file_size(path)
        return FileFingerprint(
            size_bytes=size,
            size_text=format_size(size),
            sha256=self.sha256_file(path, cancel=cancel),
        )
