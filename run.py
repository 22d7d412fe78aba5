"""Convenience runner for the Keyscan API."""

import uvicorn

from apps.keyscan.settings import settings


def main():
    uvicorn.run(
        "apps.keyscan.main:app",
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        reload=True,
        reload_dirs=["apps"],
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
