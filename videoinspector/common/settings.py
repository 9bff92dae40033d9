# videoinspector/common/settings.py
from __future__ import annotations

import tempfile
from functools import lru_cache
from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict
from videoinspector.common.strings.splitters import csv_to_floats, csv_to_list


def _to_bool(v: str | bool | int | None, default: bool = False) -> bool:
    if isinstance(v, bool):
        return v
    if v is None:
        return default
    s = str(v).strip().lower()
    return s in {"1", "true", "yes", "y", "on"}


class APIConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8000
    prefix: str = "/api"

    cors_allow_origins: List[str] = Field(default_factory=lambda: ["http://localhost:1420"])
    cors_allow_methods: List[str] = Field(default_factory=lambda: ["GET", "POST", "OPTIONS"])
    cors_allow_headers: List[str] = Field(default_factory=lambda: ["*"])

    @field_validator("cors_allow_origins", "cors_allow_methods", "cors_allow_headers", mode="before")
    @classmethod
    def _split_csv(cls, v):
        return csv_to_list(v)


class FFProbeConfig(BaseModel):
    bin: str = "ffprobe"
    timeout_sec: float = Field(30, gt=0)
    log_level: str = "error"  # quiet|panic|fatal|error|warning|info|verbose|debug|trace


class FFmpegConfig(BaseModel):
    bin: str = "ffmpeg"
    timeout_sec: float = Field(60, gt=0)


class ThumbnailConfig(BaseModel):
    # positions along the timeline, as fractions of the duration
    fractions: List[float] = Field(default_factory=lambda: [0.10, 0.30, 0.60, 0.90])
    width: int = Field(480, ge=16, le=4096, description="Bounding box width for thumbnails")
    height: int = Field(270, ge=16, le=4096, description="Bounding box height for thumbnails")
    format: str = Field("png", pattern="^(png|jpg|jpeg|webp)$")

    @field_validator("fractions", mode="before")
    @classmethod
    def _split_fractions(cls, v):
        return csv_to_floats(v)

    @field_validator("fractions")
    @classmethod
    def _check_fractions(cls, v: List[float]) -> List[float]:
        if not v:
            raise ValueError("at least one thumbnail fraction is required")
        if any(f < 0.0 or f > 1.0 for f in v):
            raise ValueError("thumbnail fractions must lie within [0, 1]")
        if any(b < a for a, b in zip(v, v[1:])):
            raise ValueError("thumbnail fractions must be ascending")
        return v

    @field_validator("format", mode="before")
    @classmethod
    def _normalize_format(cls, v):
        f = str(v or "png").strip().lower()
        return "jpg" if f == "jpeg" else f


class Settings(BaseSettings):
    # -------- App / Env --------
    app_name: str = "videoinspector"
    app_env: str = "development"  # development|test|production
    log_level: str = "INFO"

    # -------- Scratch space for frame extraction --------
    temp_dir_override: Optional[Path] = Field(default=None, alias="TEMP_DIR")

    # -------- Pipeline behaviour --------
    parallel_post_probe: bool = True
    tool_poll_interval_sec: float = Field(0.1, gt=0, le=5)

    # -------- Sub-configs --------
    api: APIConfig = APIConfig()
    ffprobe: FFProbeConfig = FFProbeConfig()
    ffmpeg: FFmpegConfig = FFmpegConfig()
    thumbs: ThumbnailConfig = ThumbnailConfig()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("parallel_post_probe", mode="before")
    @classmethod
    def _boolify(cls, v):
        return _to_bool(v, default=True)

    # ===== Derived paths =====
    @computed_field  # type: ignore[misc]
    @property
    def temp_dir(self) -> Path:
        if self.temp_dir_override:
            return Path(self.temp_dir_override)
        return Path(tempfile.gettempdir())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Global settings accessor (cached). Use this at the composition root only;
    components receive what they need through their constructors:
        from videoinspector.common.settings import get_settings
        cfg = get_settings()
    """
    s = Settings()  # pydantic_settings will read from .env automatically
    if s.app_env in ("development", "test"):
        s.temp_dir.mkdir(parents=True, exist_ok=True)
    return s
