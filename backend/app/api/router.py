"""Master API router: mounts all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from app.api import field, generate, health, pins

api_router = APIRouter(prefix="/api")

api_router.include_router(health.router)
api_router.include_router(pins.router)
api_router.include_router(field.router)
api_router.include_router(generate.router)
