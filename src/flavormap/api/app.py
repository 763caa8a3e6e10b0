# src/flavormap/api/app.py
"""
FastAPI application wiring.

This file creates the `FastAPI` instance and configures CORS for the map frontend.
Business logic lives in `flavormap.api.routes` and `flavormap.mapview`.
"""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from flavormap.core.logging import configure_logging

from .routes import router

configure_logging()

app = FastAPI(title="FlavorMap API", version="0.1.0")


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report body/query schema errors with the same 400 shape the routes use."""
    logging.getLogger(__name__).info("Rejected request to %s: %d validation error(s)", request.url.path, len(exc.errors()))
    return JSONResponse(
        status_code=400,
        content={
            "detail": {
                "code": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "errors": jsonable_encoder(exc.errors()),
            }
        },
    )


# CORS (dev-friendly): allow the Vite dev server (e.g. http://localhost:5173) to call this API.
# Configure via env:
# - FLAVORMAP_CORS_ORIGINS="http://localhost:5173,http://127.0.0.1:5173"
# - FLAVORMAP_CORS_ALLOW_LOCAL=0 to disable the default localhost allowance
cors_origins = [s.strip() for s in os.getenv("FLAVORMAP_CORS_ORIGINS", "").split(",") if s.strip()]
cors_allow_local = os.getenv("FLAVORMAP_CORS_ALLOW_LOCAL", "1").strip().lower() in {"1", "true", "yes", "y"}
cors_origin_regex = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$" if cors_allow_local and not cors_origins else ""
if cors_origins or cors_origin_regex:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_origin_regex=cors_origin_regex or None,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(router)
