"""FastAPI application for mdcommands."""

from __future__ import annotations

from fastapi import FastAPI

from mdcommands.utils.logging_config import configure_logging
from server.routers import commands_router

configure_logging()

app = FastAPI(
    title="mdcommands",
    description="Apply structural edit commands to Markdown documents.",
)
app.include_router(commands_router)


@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness check."""
    return {"status": "ok"}
