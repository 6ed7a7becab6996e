"""Entry point for the logvault HTTP service.

Host, port and log level come from the same settings the app uses (env vars
or `backend/.env`). Defaults are `0.0.0.0:8080`.

Usage:
    python run.py
"""
import uvicorn

from logvault.core.config import settings


def main() -> None:
    uvicorn.run(
        "logvault.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        reload=False,
    )


if __name__ == "__main__":
    main()
