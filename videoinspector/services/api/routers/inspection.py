# videoinspector/services/api/routers/inspection.py
from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException

from videoinspector.common.process.media_tool import MediaToolRunner
from videoinspector.common.settings import get_settings
from videoinspector.domain.errors import InspectionError
from videoinspector.services.api.deps import get_inspection_service, get_tool_runner
from videoinspector.services.inspection.service import InspectionService
from videoinspector.services.mappers.inspection import (
    status_for_error,
    to_error_detail,
    to_inspection_response,
)
from videoinspector.services.schemas.inspection import (
    InspectRequest,
    InspectionErrorDetail,
    InspectionResponse,
    ToolsResponse,
)


cfg = get_settings()
router = APIRouter(prefix=cfg.api.prefix, tags=["inspect"])


# plain def: FastAPI runs it in its threadpool, one blocking unit per request
@router.post(
    "/inspect",
    response_model=InspectionResponse,
    responses={
        404: {"model": InspectionErrorDetail},
        409: {"model": InspectionErrorDetail},
        422: {"model": InspectionErrorDetail},
        503: {"model": InspectionErrorDetail},
        504: {"model": InspectionErrorDetail},
    },
)
def inspect_video(
    req: InspectRequest,
    svc: InspectionService = Depends(get_inspection_service),
) -> InspectionResponse:
    try:
        result = svc.inspect(req.path)
    except InspectionError as e:
        raise HTTPException(
            status_code=status_for_error(e),
            detail=to_error_detail(e).model_dump(),
        ) from e
    return to_inspection_response(result)


@router.get("/tools", response_model=ToolsResponse)
def tools(runner: MediaToolRunner = Depends(get_tool_runner)) -> ToolsResponse:
    return ToolsResponse(tools={t: runner.is_available(t) for t in ("ffprobe", "ffmpeg")})
