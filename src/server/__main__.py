"""Run the mdcommands API with uvicorn: ``python -m server``."""

from __future__ import annotations

import uvicorn

from mdcommands.config import MDCOMMANDS_SERVER_HOST, MDCOMMANDS_SERVER_PORT, MDCOMMANDS_SERVER_RELOAD
from mdcommands.utils.logging_config import configure_logging, get_logger

logger = get_logger(__name__)


def serve(
    host: str = MDCOMMANDS_SERVER_HOST,
    port: int = MDCOMMANDS_SERVER_PORT,
    *,
    reload: bool = MDCOMMANDS_SERVER_RELOAD,
) -> None:
    """Serve ``server.main:app`` until interrupted."""
    configure_logging()
    logger.info("Starting mdcommands server", extra={"host": host, "port": port, "reload": reload})
    # log_config=None keeps the handler installed by configure_logging.
    uvicorn.run("server.main:app", host=host, port=port, reload=reload, log_config=None)


if __name__ == "__main__":
    serve()
