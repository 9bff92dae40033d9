# videoinspector/services/schemas/inspection.py
from __future__ import annotations
from typing import Dict, List
from pydantic import BaseModel, Field


class InspectRequest(BaseModel):
    path: str = Field(..., min_length=1, description="Absolute path to the video file",
                      examples=["/videos/clip.mp4"])


class InspectionResponse(BaseModel):
    file_path: str = Field(..., examples=["/videos/clip.mp4"])
    resolution: str = Field(..., examples=["1920x1080"])
    frame_rate: str = Field(..., examples=["29.97"])
    duration: str = Field(..., examples=["10.00s"])
    bit_rate: str = Field(..., examples=["4882.81 kbps"])
    file_size: str = Field(..., examples=["5.00 MB"])
    file_hash: str = Field(..., min_length=64, max_length=64, pattern="^[0-9a-f]{64}$")
    thumbnails: List[str] = Field(default_factory=list,
                                  description="data URIs, earliest sample first")


class InspectionErrorDetail(BaseModel):
    kind: str = Field(..., examples=["ToolExecutionFailed"])
    message: str


class ToolsResponse(BaseModel):
    tools: Dict[str, bool] = Field(default_factory=dict, examples=[{"ffprobe": True, "ffmpeg": True}])
