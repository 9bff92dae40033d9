# videoinspector/services/mappers/inspection.py
from __future__ import annotations

from http import HTTPStatus
from typing import Dict, Type

from videoinspector.domain.entities.inspection import InspectionResult
from videoinspector.domain.errors import (
    InspectionCancelled,
    InspectionError,
    IoFailure,
    ToolLaunchFailed,
    ToolTimedOut,
)
from videoinspector.services.schemas.inspection import InspectionErrorDetail, InspectionResponse

_STATUS_BY_ERROR: Dict[Type[InspectionError], HTTPStatus] = {
    IoFailure: HTTPStatus.NOT_FOUND,
    ToolLaunchFailed: HTTPStatus.SERVICE_UNAVAILABLE,
    ToolTimedOut: HTTPStatus.GATEWAY_TIMEOUT,
    InspectionCancelled: HTTPStatus.CONFLICT,
}


def to_inspection_response(result: InspectionResult) -> InspectionResponse:
    return InspectionResponse(
        file_path=result.file_path,
        resolution=result.resolution,
        frame_rate=result.frame_rate,
        duration=result.duration,
        bit_rate=result.bit_rate,
        file_size=result.file_size,
        file_hash=result.file_hash,
        thumbnails=result.thumbnail_uris,
    )


def to_error_detail(err: InspectionError) -> InspectionErrorDetail:
    return InspectionErrorDetail(kind=err.kind, message=str(err))


def status_for_error(err: InspectionError) -> HTTPStatus:
    """Remaining kinds (bad tool output, failed extraction) map to 422."""
    for cls, status in _STATUS_BY_ERROR.items():
        if isinstance(err, cls):
            return status
    return HTTPStatus.UNPROCESSABLE_ENTITY
