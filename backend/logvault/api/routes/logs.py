# logvault/api/routes/logs.py
"""
/api/logs

- GET  /api/logs             browse entries (page, limit|pageSize, level, service)
- POST /api/logs             accept one JSON entry (201, empty body)
- GET  /api/logs/statistics  per-level count + oldest/newest timestamp

Query parameters are taken as raw strings on purpose: coercion and validation
belong to LogService, so a bad `page` yields our 400 envelope rather than
FastAPI's 422.
"""

from __future__ import annotations

from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from logvault.api.deps import get_log_service
from logvault.schemas.logs import LevelStatistics, LogsResponse
from logvault.services.log_service import LogService

router = APIRouter(prefix="/api/logs")


@router.get("", response_model=LogsResponse)
async def list_logs(
    page: Optional[str] = Query(default=None, description="1-based page number (default 1)"),
    limit: Optional[str] = Query(default=None, description="Page size (default 50)"),
    page_size: Optional[str] = Query(default=None, alias="pageSize", description="Alias for limit"),
    level: Optional[str] = Query(default=None, description="Exact level filter"),
    service: Optional[str] = Query(default=None, description="Exact service filter"),
    log_service: LogService = Depends(get_log_service),
):
    """
    Example:
      /api/logs?level=ERROR&service=auth&page=2&limit=20
    """
    return await log_service.list_logs(
        page=page,
        limit=limit if limit is not None else page_size,
        level=level,
        service=service,
    )


@router.post("", status_code=201)
async def create_log(
    request: Request,
    log_service: LogService = Depends(get_log_service),
):
    body = await request.body()
    await log_service.create_log(body)
    return Response(status_code=201)


@router.get("/statistics", response_model=Dict[str, LevelStatistics])
async def log_statistics(log_service: LogService = Depends(get_log_service)):
    return await log_service.statistics()
