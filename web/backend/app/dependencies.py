"""Shared service instance for the API routers."""

from __future__ import annotations

from typing import Optional

from glowup.config import load_settings
from glowup.service import SessionService, build_service

_service: Optional[SessionService] = None


def get_service() -> SessionService:
    """Return the singleton SessionService, built from settings on first use."""
    global _service
    if _service is None:
        _service = build_service(load_settings())
    return _service
