"""Health check. Ping from Home Assistant / UptimeRobot."""

from fastapi import APIRouter, Request

from bin_collector.routers.views import get_cache, local_time

router = APIRouter(tags=["meta"])


@router.get("/health")
async def health(request: Request):
    cache = get_cache(request)
    _, ts = cache.read_with_ts()
    refreshed = local_time(ts)
    return {
        "status":             "healthy" if refreshed else "warming_up",
        "address":            request.app.state.address,
        "age_s":              cache.seconds_since(ts),
        "refreshed_at":       refreshed.isoformat() if refreshed else None,
        "refresh_interval_s": request.app.state.refresh_interval_s,
    }
