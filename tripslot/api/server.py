"""
api/server.py
-------------
FastAPI application entry point.

Run dev server:
    uvicorn tripslot.api.server:app --reload --port 8000

Endpoints:
    GET  /v1/health
    POST /v1/schedule/auto
    POST /v1/schedule/overlaps
    POST /v1/schedule/alternatives
    POST /v1/preferences/infer
"""
from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tripslot import __version__, config
from tripslot.api.routes import health, preferences, schedule

app = FastAPI(
    title="tripslot Scheduling API",
    version=__version__,
    description=(
        "Constraint-based day scheduler for travel itineraries. "
        "Places activities into free time around fixed blocks, honouring "
        "opening hours, pace and travel time."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router,      prefix="/v1",             tags=["Health"])
app.include_router(schedule.router,    prefix="/v1/schedule",    tags=["Schedule"])
app.include_router(preferences.router, prefix="/v1/preferences", tags=["Preferences"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("tripslot.api.server:app", host=config.API_HOST, port=config.API_PORT, reload=True)
