# tests/services/conftest.py
from __future__ import annotations
import pytest
from starlette.testclient import TestClient

from videoinspector.services.api.app import create_app
from videoinspector.services.api.deps import get_inspection_service, get_tool_runner


class StubService:
    """Returns a canned result or raises a canned InspectionError; records paths."""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.paths = []

    def inspect(self, path, cancel=None):
        self.paths.append(path)
        if self.error is not None:
            raise self.error
        return self.result


class StubRunner:
    def __init__(self, available=("ffprobe", "ffmpeg")):
        self.available = set(available)

    def is_available(self, tool: str) -> bool:
        return tool in self.available


@pytest.fixture()
def stub_service():
    return StubService()


@pytest.fixture()
def stub_runner():
    return StubRunner()


@pytest.fixture()
def api_client(stub_service, stub_runner):
    """
    A TestClient whose inspection service and tool runner dependencies are
    overridden with the stubs above; tests mutate the stubs to steer behavior.
    """
    app = create_app()
    app.dependency_overrides[get_inspection_service] = lambda: stub_service
    app.dependency_overrides[get_tool_runner] = lambda: stub_runner
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()
