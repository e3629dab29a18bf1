"""Run the API server: `python -m cyberkitchen`."""

import uvicorn

from cyberkitchen.config import settings


def run() -> None:
    uvicorn.run(
        "cyberkitchen.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
