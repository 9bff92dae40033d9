from videoinspector.services.schemas.inspection import (
    InspectRequest,
    InspectionResponse,
    InspectionErrorDetail,
    ToolsResponse,
)
__all__ = [
    "InspectRequest",
    "InspectionResponse",
    "InspectionErrorDetail",
    "ToolsResponse",
]
