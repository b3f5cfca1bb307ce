"""Backend entrypoint: `python -m backend.main` runs the development server."""

from __future__ import annotations

import logging

import uvicorn

from shared import config


def configure_logging() -> None:
    logging.basicConfig(
        level=config.log_level(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def main() -> None:
    configure_logging()
    logging.getLogger(__name__).info(
        "server_starting host=%s port=%s app_env=%s",
        config.server_host(),
        config.server_port(),
        config.app_env(),
    )
    uvicorn.run("backend.api:app", host=config.server_host(), port=config.server_port())


if __name__ == "__main__":
    main()
