from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.status import HTTP_413_REQUEST_ENTITY_TOO_LARGE

from .api_models import (
    DiagnosticOut,
    GroupedRecords,
    GroupLayout,
    LayoutRequest,
    MAX_LAYOUT_ITEMS,
    LayoutResponse,
    PlacedItem,
    ZoomLevelOut,
    ZoomLevelsResponse,
    ZoomSelectRequest,
)
from .display import ItemDisplayConfig
from .engine import TimelineEngine, TimelineLayout
from .errors import MalformedItemError, TimelineLayoutError, ZoomOwnershipError
from .models import ZoomLevel
from .settings import Settings, settings
from .zoom import ZoomController, ZoomOwner

LOG_LEVEL = getattr(logging, settings.log_level.upper(), logging.INFO)
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger("timeline_layout.app")
logger.setLevel(LOG_LEVEL)


app = FastAPI(
    title=settings.app_title,
    description=settings.app_description,
    version="0.1.0",
)
app.state.settings = settings

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _uptime_seconds() -> float:
    started_at = getattr(app.state, "started_at", None)
    if not started_at:
        return 0.0
    return max(0.0, (datetime.now(timezone.utc) - started_at).total_seconds())


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or str(uuid4())


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid4())
    request.state.request_id = request_id
    start_time = time.perf_counter()
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id

    if app.state.settings.enable_request_logging:
        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "Request completed",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )

    return response


@app.exception_handler(MalformedItemError)
async def malformed_item_handler(request: Request, exc: MalformedItemError) -> JSONResponse:
    request_id = _request_id(request)
    logger.info(
        "Rejected malformed timeline input",
        extra={"request_id": request_id, "malformed_count": len(exc.diagnostics)},
    )
    return JSONResponse(
        status_code=422,
        content={
            "detail": str(exc),
            "diagnostics": [_diagnostic_out(d).model_dump() for d in exc.diagnostics],
            "request_id": request_id,
        },
        headers={"X-Request-ID": request_id},
    )


@app.exception_handler(ZoomOwnershipError)
async def zoom_ownership_handler(request: Request, exc: ZoomOwnershipError) -> JSONResponse:
    request_id = _request_id(request)
    return JSONResponse(
        status_code=409,
        content={"detail": str(exc), "request_id": request_id},
        headers={"X-Request-ID": request_id},
    )


@app.exception_handler(TimelineLayoutError)
async def layout_error_handler(request: Request, exc: TimelineLayoutError) -> JSONResponse:
    request_id = _request_id(request)
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc), "request_id": request_id},
        headers={"X-Request-ID": request_id},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = _request_id(request)
    logger.exception(
        "Unhandled server error",
        extra={"request_id": request_id, "path": request.url.path},
    )
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected internal error occurred.",
            "request_id": request_id,
        },
        headers={"X-Request-ID": request_id},
    )


def build_zoom_controller(config: Settings) -> ZoomController:
    return ZoomController(owner=ZoomOwner(config.zoom_owner))


@app.on_event("startup")
async def startup() -> None:
    app.state.started_at = datetime.now(timezone.utc)
    app.state.settings = settings
    app.state.zoom = build_zoom_controller(settings)


@app.get("/health")
async def health() -> Dict[str, Any]:
    return {
        "status": "ok",
        "uptime_seconds": round(_uptime_seconds(), 3),
        "version": app.version,
    }


def _zoom_out(level: ZoomLevel) -> ZoomLevelOut:
    return ZoomLevelOut(
        label=level.label,
        key=level.key,
        day_width=level.day_width,
        is_default=level.is_default,
    )


def _diagnostic_out(diagnostic) -> DiagnosticOut:
    return DiagnosticOut(index=diagnostic.index, item_id=diagnostic.item_id, reason=diagnostic.reason)


def _zoom_levels_response(zoom: ZoomController) -> ZoomLevelsResponse:
    active = zoom.active.key if zoom.owner is ZoomOwner.ENGINE else None
    return ZoomLevelsResponse(
        owner=zoom.owner.value,
        active=active,
        levels=[_zoom_out(level) for level in zoom.levels],
    )


@app.get("/api/zoom-levels", response_model=ZoomLevelsResponse)
async def zoom_levels() -> ZoomLevelsResponse:
    return _zoom_levels_response(app.state.zoom)


@app.post("/api/zoom", response_model=ZoomLevelsResponse)
async def select_zoom(request: ZoomSelectRequest) -> ZoomLevelsResponse:
    zoom: ZoomController = app.state.zoom
    zoom.select(request.label)
    return _zoom_levels_response(zoom)


def _build_display_config(raw: Optional[Dict[str, Any]]) -> Optional[ItemDisplayConfig]:
    if not raw:
        return None
    try:
        return ItemDisplayConfig.from_declarative(raw)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _group_layouts(layout: TimelineLayout, with_display: bool) -> List[GroupLayout]:
    geometry = layout.geometry
    if geometry is None:
        return []

    groups: List[GroupLayout] = []
    for index, group in enumerate(layout.groups):
        placed: List[PlacedItem] = []
        for placement in group.placements:
            box = geometry.box(index, placement)
            placed.append(
                PlacedItem(
                    item=placement.item.model_dump(mode="json"),
                    column=placement.column,
                    x=box["x"],
                    y=box["y"],
                    width=box["width"],
                    display=layout.display_for(placement.item) if with_display else None,
                )
            )
        groups.append(
            GroupLayout(
                title=group.title,
                column_count=group.column_count,
                top=geometry.group_top(index),
                height=geometry.group_height(index),
                is_end_spacer=group.is_end_spacer,
                placements=placed,
            )
        )
    return groups


@app.post("/api/layout", response_model=LayoutResponse)
async def layout_timeline(request: LayoutRequest) -> LayoutResponse:
    config: Settings = app.state.settings
    display_config = _build_display_config(request.display_config)
    engine = TimelineEngine(config=config, zoom=app.state.zoom, display_config=display_config)

    source = request.source
    if isinstance(source, GroupedRecords):
        if sum(len(group.items) for group in source.groups) > MAX_LAYOUT_ITEMS:
            raise HTTPException(
                status_code=HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"At most {MAX_LAYOUT_ITEMS} items can be laid out in one request.",
            )
        layout = await run_in_threadpool(
            engine.layout_grouped_records,
            [(group.title, group.items) for group in source.groups],
            sort_key=source.sort_key,
            window=request.window,
            zoom_label=request.zoom_label,
        )
    else:
        layout = await run_in_threadpool(
            engine.layout_records,
            source.items,
            group_by=source.group_by,
            window=request.window,
            zoom_label=request.zoom_label,
        )

    geometry = layout.geometry
    scroll_to_now = None
    if request.viewport_width is not None:
        scroll_to_now = layout.scroll_offset_for_now(request.viewport_width, now=request.now)

    return LayoutResponse(
        empty=layout.is_empty,
        sort_key=layout.sort_key,
        span=layout.span,
        groups=_group_layouts(layout, with_display=display_config is not None),
        total_width=geometry.total_width() if geometry else 0,
        total_height=geometry.total_height() if geometry else 0,
        has_rail=geometry.has_rail if geometry else False,
        rail_width=geometry.rail_offset if geometry else 0,
        zoom=_zoom_out(layout.zoom),
        scroll_to_now=scroll_to_now,
        display_config=request.display_config,
        dropped=[_diagnostic_out(d) for d in layout.diagnostics],
        generated_at=datetime.now(timezone.utc),
    )
