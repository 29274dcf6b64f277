"""
bin_collector/main.py  - Bin Collector
Startup: launches the refresh scheduler, which warms the cache immediately.
All endpoints are cache-read-only; nothing here ever calls Simbio directly.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from bin_collector.core.cache import SnapshotCache
from bin_collector.core.config import ADDRESS, LOG_LEVEL, REFRESH_INTERVAL_S
from bin_collector.core.http_client import close_all
from bin_collector.core.scheduler import RefreshScheduler
from bin_collector.errors import register_error_handlers
from bin_collector.routers import health, views
from bin_collector.scrapers.simbio import SimbioFetcher

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
log = logging.getLogger("main")

_PKG_DIR       = Path(__file__).resolve().parent
_STATIC_DIR    = _PKG_DIR / "static"
_TEMPLATES_DIR = _PKG_DIR / "templates"


@asynccontextmanager
async def lifespan(app: FastAPI):
    scheduler: Optional[RefreshScheduler] = app.state.scheduler
    log.info(f"🚀 Bin Collector starting for '{app.state.address}'...")
    if scheduler is not None:
        scheduler.start()
    yield
    log.info("🛑 Shutting down...")
    if scheduler is not None:
        await scheduler.stop()
    await close_all()


def create_app(
    cache: Optional[SnapshotCache] = None,
    *,
    scheduler: Optional[RefreshScheduler] = None,
    start_scheduler: bool = True,
    address: str = ADDRESS,
) -> FastAPI:
    """Build the app around one explicitly owned snapshot cell."""
    cache = cache if cache is not None else SnapshotCache()
    if scheduler is None and start_scheduler:
        scheduler = RefreshScheduler(SimbioFetcher(address), cache)

    app = FastAPI(
        title="Bin Collector",
        description=(
            "Next waste collection dates from Simbio (Celje region). "
            f"Refreshed every {REFRESH_INTERVAL_S / 60:g} min; "
            "stale data is served while the upstream is unreachable."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.cache              = cache
    app.state.scheduler          = scheduler if start_scheduler else None
    app.state.address            = address
    app.state.refresh_interval_s = scheduler.interval_s if scheduler else REFRESH_INTERVAL_S
    app.state.templates          = Jinja2Templates(directory=str(_TEMPLATES_DIR))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    # ── Routers ──────────────────────────────────────────────────────────────
    app.mount("/static", StaticFiles(directory=_STATIC_DIR), name="static")
    app.include_router(views.router)
    app.include_router(health.router)

    return app


app = create_app()
