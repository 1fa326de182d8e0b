"""FastAPI application entry point."""

import re

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from playground.api import router as api_router
from playground.core.config import get_settings


def _origin_regex(prefixes: list[str]) -> str:
    """Regex matching any origin that starts with an allowed prefix."""
    if not prefixes:
        return ".*"
    return "|".join(f"{re.escape(prefix)}.*" for prefix in prefixes)


app = FastAPI(
    title="Kit Playground",
    description="Knowledge-grounded chat and image backend for the electronics kit playground",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=_origin_regex(get_settings().allowed_origins),
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "ok"}, status_code=200)


app.include_router(api_router, prefix="/api")
