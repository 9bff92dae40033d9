# videoinspector/services/api/routers/health.py
from __future__ import annotations
from fastapi import APIRouter

from videoinspector import __version__
from videoinspector.common.settings import get_settings

router = APIRouter(tags=["health"])


@router.get("/healthz")
def healthz():
    """Liveness only; tool availability lives under {prefix}/tools."""
    cfg = get_settings()
    return {"ok": True, "app": cfg.app_name, "env": cfg.app_env, "version": __version__}
