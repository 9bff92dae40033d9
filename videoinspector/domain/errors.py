# videoinspector/domain/errors.py
from __future__ import annotations

from pathlib import Path
from typing import Optional


class InspectionError(RuntimeError):
    """
    Base of the inspection error taxonomy. Every subclass is terminal for the
    inspection call that raised it; `kind` is the stable, transport-neutral name.
    """
    kind: str = "InspectionError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ToolLaunchFailed(InspectionError):
    kind = "ToolLaunchFailed"

    def __init__(self, tool: str, detail: str) -> None:
        super().__init__(f"Failed to launch {tool}: {detail}")
        self.tool = tool
        self.detail = detail


class ToolExecutionFailed(InspectionError):
    """The tool started but exited unsuccessfully."""
    kind = "ToolExecutionFailed"

    def __init__(
        self,
        tool: str,
        exit_info: str,
        stderr_excerpt: str = "",
        offset_sec: Optional[float] = None,
    ) -> None:
        where = f" at {offset_sec:.3f}s" if offset_sec is not None else ""
        msg = f"{tool} failed{where} ({exit_info})"
        if stderr_excerpt:
            msg = f"{msg}: {stderr_excerpt}"
        super().__init__(msg)
        self.tool = tool
        self.exit_info = exit_info
        self.stderr_excerpt = stderr_excerpt
        self.offset_sec = offset_sec


class ToolTimedOut(InspectionError):
    kind = "ToolTimedOut"

    def __init__(self, tool: str, timeout_sec: float) -> None:
        super().__init__(f"{tool} timed out after {timeout_sec:g}s")
        self.tool = tool
        self.timeout_sec = timeout_sec


class InspectionCancelled(InspectionError):
    kind = "InspectionCancelled"

    def __init__(self, message: str = "Inspection was cancelled") -> None:
        super().__init__(message)


class MalformedOutput(InspectionError):
    kind = "MalformedOutput"

    def __init__(self, detail: str) -> None:
        super().__init__(f"Malformed probe output: {detail}")
        self.detail = detail


class MalformedRate(InspectionError):
    kind = "MalformedRate"

    def __init__(self, rate: object) -> None:
        super().__init__(f"Malformed frame rate {rate!r}; expected 'N/D'")
        self.rate = rate


class DivisionByZero(InspectionError):
    kind = "DivisionByZero"

    def __init__(self, rate: object) -> None:
        super().__init__(f"Frame rate {rate!r} has a zero denominator")
        self.rate = rate


class ArtifactReadFailed(InspectionError):
    kind = "ArtifactReadFailed"

    def __init__(self, path: Path | str, detail: str) -> None:
        super().__init__(f"Could not read thumbnail artifact {path}: {detail}")
        self.path = Path(path)
        self.detail = detail


class IoFailure(InspectionError):
    kind = "IoFailure"

    def __init__(self, path: Path | str, detail: str) -> None:
        super().__init__(f"I/O failure on {path}: {detail}")
        self.path = Path(path) if path else Path()
        self.detail = detail
