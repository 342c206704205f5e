import asyncio
from typing import Any, Dict

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ...dependencies import require_admin_key
from ....config import Settings, get_settings
from ....news.services.ingestion_service import create_ingestion_service
from ....news.services.scheduler import IngestionScheduler

logger = structlog.get_logger(__name__)

router = APIRouter(dependencies=[Depends(require_admin_key)])


async def get_scheduler(
    request: Request,
    settings: Settings = Depends(get_settings)
) -> IngestionScheduler:
    """
    The lifespan scheduler, or an unstarted one created on first use when
    periodic ingestion is disabled. Manual runs share its lock either way.
    """
    scheduler = getattr(request.app.state, "scheduler", None)
    if scheduler is None:
        logger.info("Creating on-demand ingestion scheduler")
        scheduler = IngestionScheduler(
            create_ingestion_service(settings),
            interval_minutes=settings.ingest_interval_minutes,
            run_on_startup=False,
        )
        request.app.state.scheduler = scheduler
    return scheduler


@router.post("/ingest")
async def trigger_ingestion(
    scheduler: IngestionScheduler = Depends(get_scheduler)
) -> Dict[str, Any]:
    """Run one ingestion pass now, unless one is already running"""
    stats = await scheduler.trigger()
    if stats is None:
        raise HTTPException(status_code=409, detail="Ingestion already in progress")
    return stats


@router.get("/pipeline/health")
async def pipeline_health(
    check_sources: bool = Query(False, description="Also check every news source"),
    scheduler: IngestionScheduler = Depends(get_scheduler)
) -> Dict[str, Any]:
    health = await asyncio.to_thread(scheduler.service.pipeline_health, check_sources)
    health["scheduler_running"] = scheduler.running
    health["last_run"] = scheduler.last_stats
    return health
