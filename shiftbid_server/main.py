# Copyright (C) 2024 ShiftBid Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""ShiftBid Server - Main FastAPI application."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from shiftbid_server.config import settings
from shiftbid_server.database import init_db
from shiftbid_server.errors import register_exception_handlers
from shiftbid_server.routers import auth, invite, pins, shift_windows, shifts, stats, users

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def _get_cors_origins() -> list[str]:
    raw = (settings.cors_origins or "*").strip()
    if raw == "*":
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logging.getLogger("shiftbid_server").setLevel(settings.log_level.upper())
    await init_db()
    logger.info("ShiftBid Server started (full-time quota: %s shifts)", settings.full_time_shifts)
    yield


app = FastAPI(
    title="ShiftBid Server",
    description="Shift bidding API: shift windows, pins and quota statistics",
    version=VERSION,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, status, and duration for each request (no body or auth headers)."""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info("%s %s %s %.1fms", request.method, request.url.path, response.status_code, duration_ms)
    return response

# API v1
app.include_router(auth.router, prefix="/api/v1")
app.include_router(invite.router, prefix="/api/v1")
app.include_router(users.router, prefix="/api/v1")
app.include_router(shift_windows.router, prefix="/api/v1")
app.include_router(shifts.router, prefix="/api/v1")
app.include_router(pins.router, prefix="/api/v1")
app.include_router(stats.router, prefix="/api/v1")


@app.get("/")
async def root():
    """Health check / API info."""
    return {
        "name": "ShiftBid Server",
        "version": VERSION,
        "api": "/api/v1",
        "docs": "/api/docs",
    }


@app.get("/api/v1/health")
async def health():
    """Health check for load balancers."""
    return {"status": "ok"}
