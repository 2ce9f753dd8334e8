"""FastAPI application — Overtime Analysis API."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router
from overtime_tool.logging_config import setup_logging
from overtime_tool.settings import get_allowed_origins, get_settings

_settings = get_settings()
setup_logging(_settings.log_level, _settings.log_json)

app = FastAPI(
    title="Overtime Analysis API",
    description="Per-user, per-day regular/overtime analysis with tiered premiums.",
    version="1.0.0",
)

# Set OVERTIME_ALLOWED_ORIGINS="*" to allow any origin (for standalone HTML usage)
ALLOWED_ORIGINS = get_allowed_origins()
_allow_all = "*" in ALLOWED_ORIGINS
if _allow_all:
    ALLOWED_ORIGINS = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=not _allow_all,  # credentials not allowed with wildcard
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600,
)

app.include_router(router)


@app.get("/")
async def root():
    return {
        "name": "Overtime Analysis API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
