"""
Direct execution entry point.

Runs the gateway with uvicorn: python -m gateway
"""

import uvicorn

from gateway.app.config import get_settings


def run() -> None:
    settings = get_settings()

    uvicorn.run(
        "gateway.app.main:app",
        host=settings.GATEWAY_HOST,
        port=settings.GATEWAY_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
