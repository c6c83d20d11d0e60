"""Health and readiness check routes."""

from fastapi import APIRouter, Depends

from config import settings
from state import AppState, get_state

router = APIRouter()


@router.get("/ready")
async def ready() -> dict:
    """Lightweight readiness check — no external calls."""
    return {"status": "ok", "service": "weather-proxy", "commit": settings.git_sha}


@router.get("/health")
async def health(state: AppState = Depends(get_state)) -> dict:
    """Cache and city database status. Does not call the weather provider."""
    stats = state.cache.stats
    return {
        "status": "ok",
        "service": "weather-proxy",
        "commit": settings.git_sha,
        "cities": len(state.resolver),
        "cache": {
            "entries": len(state.cache),
            "in_flight": state.cache.in_flight,
            "hits": stats.hits,
            "misses": stats.misses,
            "waits": stats.waits,
        },
    }
