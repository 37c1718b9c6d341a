"""Run the API with uvicorn: ``python -m events_api``.

uvicorn handles SIGINT/SIGTERM: it stops accepting connections, waits up to
``SHUTDOWN_GRACE_SECONDS`` for in-flight requests, then exits.
"""

import uvicorn

from events_api.config import load_settings
from events_api.main import create_app


def main() -> None:
    settings = load_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=int(settings.shutdown_grace),
    )


if __name__ == "__main__":
    main()
