# apps/api/routers/health.py
from fastapi import APIRouter

from libs.connectors.config import get_settings
from libs.connectors.registry import list_sources

router = APIRouter(tags=["health"])


@router.get("/healthz")
def healthz():
    return {"status": "ok"}


@router.get("/sources")
def sources():
    """Configured quote / history sources and the ones available."""
    cfg = get_settings()
    return {
        "quote": cfg.QUOTE_SOURCE,
        "history": cfg.HISTORY_SOURCE,
        "available": list_sources(),
        "timeout_sec": cfg.TIMEOUT_SEC,
    }
