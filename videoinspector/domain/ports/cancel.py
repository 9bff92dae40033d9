from __future__ import annotations
from typing import Protocol

class CancelToken(Protocol):
    """Anything with an Event-like is_set(); threading.Event satisfies it."""
    def is_set(self) -> bool: ...
