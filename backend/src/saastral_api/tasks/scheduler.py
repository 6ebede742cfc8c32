"""Background directory sync scheduler using APScheduler."""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from uuid import UUID

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.ext.asyncio import AsyncSession

from saastral_api.config import get_settings
from saastral_api.services.integration_service import IntegrationService
from saastral_api.utils.secure_logging import log_error

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AsyncSession]
ServiceFactory = Callable[[AsyncSession], IntegrationService]

# Global scheduler instance
_scheduler: AsyncIOScheduler | None = None

# One lock per integration so overlapping runs are skipped, not queued
_sync_locks: dict[UUID, asyncio.Lock] = {}


def _get_sync_lock(integration_id: UUID) -> asyncio.Lock:
    lock = _sync_locks.get(integration_id)
    if lock is None:
        lock = _sync_locks[integration_id] = asyncio.Lock()
    return lock


def _default_session_factory() -> SessionFactory:
    from saastral_api.database import async_session_maker

    return async_session_maker


async def sync_integration(
    integration_id: UUID,
    session_factory: SessionFactory | None = None,
    service_factory: ServiceFactory = IntegrationService,
) -> bool:
    """Run a full directory sync for one integration in its own session.

    Failures are logged and swallowed so one integration cannot stop the
    scheduled batch.

    Returns:
        False if a run for this integration was already in progress
    """
    lock = _get_sync_lock(integration_id)
    if lock.locked():
        logger.info(f"Sync already running for integration {integration_id}, skipping")
        return False

    session_factory = session_factory or _default_session_factory()
    async with lock:
        async with session_factory() as session:
            try:
                service = service_factory(session)
                result = await service.trigger_sync(integration_id)
                await session.commit()
                logger.info(
                    f"Scheduled sync of integration {integration_id} finished: "
                    f"employees {result.employees.stats.model_dump()}, "
                    f"departments {result.departments.stats.model_dump()}"
                )
            except Exception as e:
                log_error(logger, f"Scheduled sync of integration {integration_id} failed", e)
                await session.rollback()
    return True


async def sync_overdue_integrations_job(
    session_factory: SessionFactory | None = None,
    service_factory: ServiceFactory = IntegrationService,
) -> list[UUID]:
    """Background job syncing every active or errored integration that is overdue.

    Returns:
        IDs of the integrations that were picked
    """
    settings = get_settings()
    session_factory = session_factory or _default_session_factory()

    async with session_factory() as session:
        service = service_factory(session)
        candidates = await service.list_sync_candidates(settings.sync_overdue_threshold_hours)

    logger.info(f"Found {len(candidates)} integrations due for directory sync")
    for integration in candidates:
        await sync_integration(integration.id, session_factory, service_factory)
    return [integration.id for integration in candidates]


async def start_scheduler() -> None:
    """Start the background task scheduler."""
    global _scheduler

    settings = get_settings()
    _scheduler = AsyncIOScheduler()

    _scheduler.add_job(
        sync_overdue_integrations_job,
        trigger=IntervalTrigger(minutes=settings.sync_interval_minutes),
        id="sync_overdue_integrations",
        name="Sync overdue directory integrations",
        replace_existing=True,
        max_instances=1,
        next_run_time=datetime.now(),  # Run immediately on startup
    )

    _scheduler.start()
    logger.info("Background scheduler started")


async def stop_scheduler() -> None:
    """Stop the background task scheduler."""
    global _scheduler

    if _scheduler:
        _scheduler.shutdown(wait=False)
        _scheduler = None
        logger.info("Background scheduler stopped")
