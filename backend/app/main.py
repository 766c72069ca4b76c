"""FastAPI app factory."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.engine.errors import StringArtError

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.stringart_log_level.upper(), logging.INFO),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)

logger = logging.getLogger(__name__)


async def _string_art_error_handler(request: Request, exc: StringArtError) -> JSONResponse:
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=422, content={"error": exc.kind, "detail": str(exc)})


def create_app() -> FastAPI:
    app = FastAPI(
        title="String Art",
        description="Image to string-art chord sequence generation",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StringArtError, _string_art_error_handler)

    from app.api.router import api_router

    app.include_router(api_router)

    return app


app = create_app()
