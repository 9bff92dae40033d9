# videoinspector/services/api/deps.py
from __future__ import annotations

from videoinspector.common.process.media_tool import MediaToolRunner
from videoinspector.common.settings import get_settings
from videoinspector.services.inspection.service import InspectionService, get_default_service


def get_inspection_service() -> InspectionService:
    """
    Provide the InspectionService via DI. The process-wide instance is shared
    with get_video_metadata() so same-path work is serialized across both;
    override in tests with fakes.
    """
    return get_default_service()


def get_tool_runner() -> MediaToolRunner:
    return MediaToolRunner.from_settings(get_settings())
