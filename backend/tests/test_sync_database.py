"""Directory sync against a real database session (SQLite via aiosqlite)."""

import asyncio
import base64
from uuid import uuid4

from sqlalchemy import event, select
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.ext.compiler import compiles

from conftest import (
    FakeDepartmentRepository,
    FakeDirectoryProvider,
    make_employee,
    make_integration,
    make_user,
)
from saastral_api.models.orm.base import Base
from saastral_api.models.orm.department import DepartmentORM  # noqa: F401
from saastral_api.models.orm.employee import EmployeeORM
from saastral_api.models.orm.integration import IntegrationORM
from saastral_api.repositories.employee_repository import EmployeeRepository
from saastral_api.repositories.integration_repository import IntegrationRepository
from saastral_api.security.encryption import EncryptionService
from saastral_api.services.directory_sync_service import DirectorySyncService

KEY = base64.urlsafe_b64encode(b"k" * 32).decode()


@compiles(JSONB, "sqlite")
def _compile_jsonb_for_sqlite(type_, compiler, **kw) -> str:
    return "JSON"


def _sqlite_engine(path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{path}")

    # pysqlite's own transaction handling breaks SAVEPOINT; let SQLAlchemy emit BEGIN
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")

    return engine


class TestSyncWithDatabase:
    """Per-record isolation when saves hit real constraints."""

    def test_constraint_violation_does_not_poison_later_records(self, tmp_path) -> None:
        organization_id = uuid4()
        encryption = EncryptionService(KEY)
        integration = make_integration(organization_id)
        provider = FakeDirectoryProvider(
            pages=[
                [
                    # Takes over bob's address while bob still holds it
                    make_user("g-1", "bob@example.com", "Ann Lee"),
                    make_user("g-3", "carol@example.com", "Carol King"),
                    make_user("g-4", "dan@example.com", "Dan Brown"),
                ]
            ]
        )

        async def scenario():
            engine = _sqlite_engine(tmp_path / "sync.db")
            try:
                async with engine.begin() as conn:
                    await conn.run_sync(Base.metadata.create_all)
                session_maker = async_sessionmaker(engine, expire_on_commit=False)

                async with session_maker() as session:
                    await IntegrationRepository(session, encryption).save(integration)
                    employees = EmployeeRepository(session)
                    await employees.save(
                        make_employee(organization_id, "ann@example.com", external_id="g-1")
                    )
                    await employees.save(
                        make_employee(organization_id, "bob@example.com", "Bob Stone", "g-2")
                    )
                    await session.commit()

                async with session_maker() as session:
                    service = DirectorySyncService(
                        IntegrationRepository(session, encryption),
                        EmployeeRepository(session),
                        FakeDepartmentRepository(),
                        provider,
                    )
                    result = await service.sync_employees(integration.id, organization_id)
                    await session.commit()

                async with session_maker() as session:
                    emails = (
                        await session.execute(
                            select(EmployeeORM.external_id, EmployeeORM.email).where(
                                EmployeeORM.organization_id == organization_id
                            )
                        )
                    ).all()
                    status = (
                        await session.execute(
                            select(IntegrationORM.status).where(IntegrationORM.id == integration.id)
                        )
                    ).scalar_one()
                return result, dict(emails), status
            finally:
                await engine.dispose()

        result, emails, status = asyncio.run(scenario())

        assert result.stats.model_dump() == {"created": 2, "updated": 0, "skipped": 0, "errors": 1}
        assert len(result.errors) == 1
        assert result.errors[0].startswith("employee:bob@example.com - ")
        assert emails == {
            "g-1": "ann@example.com",
            "g-2": "bob@example.com",
            "g-3": "carol@example.com",
            "g-4": "dan@example.com",
        }
        assert status == "error"
