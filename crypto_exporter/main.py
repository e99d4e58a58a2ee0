"""Process entry point: parse flags, configure logging, serve."""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence

import uvicorn

from .app import create_app
from .config import Settings

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # One line per upstream request is noise at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the exporter until interrupted. Returns the process exit status."""
    settings = Settings.from_args(argv)
    configure_logging(settings.log_level)

    logger.info(
        "Crypto currency exporter running on %s, tracking %s every %.1fs",
        settings.listen_address,
        ",".join(settings.identifiers),
        settings.refresh_interval,
    )

    app = create_app(settings)
    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        log_config=None,  # keep the handlers installed above
    )
    server = uvicorn.Server(config)
    server.run()

    if not server.started:
        logger.error("HTTP server failed to start on %s", settings.listen_address)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
