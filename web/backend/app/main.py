"""FastAPI application for the GlowUp operator console.

Provides REST API endpoints wrapping the glowup package for:
- User message ingress with triage and routing
- Operator actions (tags, safety unlock, escalations, replies)
- Draft generation on the routed tier
"""

from __future__ import annotations

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from glowup import __version__
from glowup.config import configure_logging
from web.backend.app.routers import catalog, sessions

configure_logging(os.getenv("GLOWUP_LOG_LEVEL", "INFO"))

app = FastAPI(
    title="GlowUp API",
    description=(
        "Operator API for GlowUp coaching chat: message triage, safety lock, "
        "escalations, and tiered reply drafting."
    ),
    version=__version__,
)

# ---------------------------------------------------------------------------
# CORS middleware (allow all origins for development)
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Include routers
# ---------------------------------------------------------------------------
app.include_router(sessions.router)
app.include_router(catalog.router)


# ---------------------------------------------------------------------------
# Root and health-check endpoints
# ---------------------------------------------------------------------------


@app.get("/", tags=["meta"])
async def root():
    """Return basic API information."""
    return {
        "name": "GlowUp API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


@app.get("/health", tags=["meta"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
