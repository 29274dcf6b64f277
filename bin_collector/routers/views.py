"""
bin_collector/routers/views.py
Endpoints:
  GET /          → HTML schedule rendered from templates/index.html
  GET /api/data  → cached snapshot as a JSON object

All reads from the in-memory snapshot cell only. Zero upstream calls.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, Response
from jinja2 import TemplateError

from bin_collector.core.cache import SnapshotCache
from bin_collector.core.config import LOCAL_TZ
from bin_collector.errors import EncodeError, RenderError

router = APIRouter(tags=["schedule"])
log = logging.getLogger("views")


def get_cache(request: Request) -> SnapshotCache:
    return request.app.state.cache


def local_time(ts: Optional[float]) -> Optional[datetime]:
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc).astimezone(LOCAL_TZ)


@router.get("/", response_class=HTMLResponse)
async def index(request: Request):
    cache = get_cache(request)
    snapshot, ts = cache.read_with_ts()
    refreshed = local_time(ts)
    try:
        return request.app.state.templates.TemplateResponse(
            request,
            "index.html",
            {
                "data":       snapshot,
                "categories": snapshot.categories(),
                "refreshed":  refreshed.strftime("%d.%m.%Y %H:%M") if refreshed else "",
            },
        )
    except TemplateError as ex:
        raise RenderError(cause=ex) from ex


@router.get("/api/data")
async def api_data(request: Request):
    snapshot = get_cache(request).read()
    try:
        body = json.dumps(snapshot.as_dict(), ensure_ascii=False)
    except (TypeError, ValueError) as ex:
        raise EncodeError(cause=ex) from ex
    return Response(body, media_type="application/json")
