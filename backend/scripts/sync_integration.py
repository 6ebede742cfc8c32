#!/usr/bin/env python
"""Run a directory sync for one integration, or for every overdue one."""

import asyncio
import sys
from pathlib import Path
from uuid import UUID

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from saastral_api.database import async_session_maker, engine
from saastral_api.exceptions import SaaStralAPIError
from saastral_api.services.integration_service import IntegrationService
from saastral_api.tasks.scheduler import sync_overdue_integrations_job


async def sync_one(integration_id: UUID) -> bool:
    """Sync a single integration and print both results."""
    async with async_session_maker() as session:
        service = IntegrationService(session)
        try:
            response = await service.trigger_sync(integration_id)
        except SaaStralAPIError as e:
            print(f"Sync failed: {e.message}")
            return False
        await session.commit()

    for label, result in (("Departments", response.departments), ("Employees", response.employees)):
        stats = result.stats
        print(
            f"{label}: created={stats.created} updated={stats.updated} "
            f"skipped={stats.skipped} errors={stats.errors} ({result.duration_ms} ms)"
        )
        for error in result.errors:
            print(f"  {error}")
    return response.employees.success and response.departments.success


async def main(integration_id: UUID | None) -> bool:
    try:
        if integration_id is not None:
            return await sync_one(integration_id)
        synced = await sync_overdue_integrations_job()
        print(f"Synced {len(synced)} overdue integrations")
        return True
    finally:
        await engine.dispose()


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser(description="Run a directory sync")
    parser.add_argument("--integration-id", type=UUID, help="Integration to sync (default: all overdue)")
    args = parser.parse_args()

    sys.exit(0 if asyncio.run(main(args.integration_id)) else 1)
