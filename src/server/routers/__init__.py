"""API routers."""

from server.routers.commands import router as commands_router

__all__ = ["commands_router"]
