from __future__ import annotations

import uvicorn

from auto_recall.core.config import get_settings
from auto_recall.main import create_app


def main() -> None:
    """Serve the hook endpoints on APP_HOST:APP_PORT."""

    settings = get_settings()
    uvicorn.run(
        create_app(),
        host=settings.app_host,
        port=settings.app_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
