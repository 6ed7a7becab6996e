# logvault/api/deps.py
"""
FastAPI dependencies.

The LogService is created once by the app factory and stored on app.state;
routes receive it by reference instead of importing a global.
"""

from __future__ import annotations

from fastapi import Request

from logvault.services.log_service import LogService


def get_log_service(request: Request) -> LogService:
    """
    Usage:
        @router.get(...)
        async def handler(log_service: LogService = Depends(get_log_service)):
            ...
    """
    return request.app.state.log_service
