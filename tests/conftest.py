"""
Pytest fixtures for the mass-upload test suite.

Provides:
- Structured logging configured once, LogContext cleared per test
- An in-memory SQLite database with the import log table (ORM) and the
  operational tables the pipeline reads and writes (SQLAlchemy Core)
- A per-test session that joins an outer transaction rolled back at teardown
- Deterministic clock, actor id, registry, and reference-data fixtures
"""

import json
import logging
from collections.abc import Generator
from io import StringIO
from uuid import UUID

import pytest
import sqlalchemy as sa
from sqlalchemy.orm import Session

from siteops_ingestion.domain.types import ImportContext, LookupTarget
from siteops_ingestion.registry import SchemaRegistry, default_registry
from siteops_ingestion.revalidation import ReferenceCache, ReferenceEntry
from siteops_kernel.db.engine import (
    create_tables,
    drop_tables,
    init_engine_from_url,
    reset_engine,
)
from siteops_kernel.domain.clock import DeterministicClock
from siteops_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from tests.site_schema import (
    building_sections_table,
    expense_categories_table,
    labor_categories_table,
    labor_roles_table,
    laborers_table,
    site_metadata,
    tea_shop_accounts_table,
    teams_table,
)

TEST_ACTOR_ID = UUID("00000000-0000-0000-0000-000000000001")
TEST_SITE_ID = "site-001"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture siteops logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, import_service):
            import_service.import_rows(request)
            logs = captured_logs()
            assert any(r["message"] == "import_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("siteops")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture(scope="session")
def db_engine():
    engine = init_engine_from_url("sqlite+pysqlite:///:memory:")
    create_tables()
    site_metadata.create_all(engine)
    yield engine
    site_metadata.drop_all(engine)
    drop_tables()
    reset_engine()


@pytest.fixture(scope="function")
def session(db_engine) -> Generator[Session, None, None]:
    """
    Per-test session joined to an outer transaction.

    ``session.commit()`` inside a test releases a savepoint; the outer
    transaction is rolled back at teardown, undoing every change.
    """
    conn = db_engine.connect()
    trans = conn.begin()
    sess = Session(bind=conn, join_transaction_mode="create_savepoint", expire_on_commit=False)
    yield sess
    try:
        sess.close()
    finally:
        try:
            trans.rollback()
        finally:
            conn.close()


@pytest.fixture
def seed_reference_data(session):
    """
    Insert a small set of reference rows and return their ids by name.

    Two laborers (one inactive), categories, roles, a team, and one building
    section and tea shop on TEST_SITE_ID.
    """

    def _insert(table: sa.Table, **values) -> str:
        result = session.execute(sa.insert(table).values(**values))
        return str(result.inserted_primary_key[0])

    ids = {
        "Ravi Shankar": _insert(laborers_table, name="Ravi Shankar", phone="9000000001"),
        "Old Timer": _insert(laborers_table, name="Old Timer", phone="9000000002", status="inactive"),
        "Skilled": _insert(labor_categories_table, name="Skilled"),
        "Unskilled": _insert(labor_categories_table, name="Unskilled"),
        "Mason": _insert(labor_roles_table, name="Mason"),
        "Helper": _insert(labor_roles_table, name="Helper"),
        "Carpenter": _insert(labor_roles_table, name="Carpenter", is_active=False),
        "Shuttering Crew": _insert(teams_table, name="Shuttering Crew"),
        "Tower 2": _insert(building_sections_table, name="Tower 2", site_id=TEST_SITE_ID),
        "Annex": _insert(building_sections_table, name="Annex", site_id="site-999"),
        "Lakshmi Tea Stall": _insert(
            tea_shop_accounts_table, shop_name="Lakshmi Tea Stall", site_id=TEST_SITE_ID
        ),
        "Cement": _insert(expense_categories_table, name="Cement"),
    }
    session.flush()
    return ids


# =============================================================================
# Common fixtures
# =============================================================================


@pytest.fixture
def test_actor_id() -> UUID:
    """Provide a consistent test actor ID."""
    return TEST_ACTOR_ID


@pytest.fixture
def site_id() -> str:
    return TEST_SITE_ID


@pytest.fixture
def deterministic_clock():
    """Provide a deterministic clock for testing."""
    return DeterministicClock()


@pytest.fixture
def registry() -> SchemaRegistry:
    return default_registry()


@pytest.fixture
def import_context(test_actor_id) -> ImportContext:
    return ImportContext(caller_id=test_actor_id, caller_name="Site Engineer", site_id=TEST_SITE_ID)


class InMemoryReferenceSource:
    """ReferenceSource over plain lists, counting fetches per table."""

    def __init__(self, entries: dict[str, list[ReferenceEntry]] | None = None):
        self._entries = entries or {}
        self._by_site: dict[tuple[str, str], list[ReferenceEntry]] = {}
        self.fetches: dict[str, int] = {}

    def add_site_entries(self, table: str, site_id: str, entries: list[ReferenceEntry]) -> None:
        self._by_site[(table, site_id)] = entries

    def fetch(self, target: LookupTarget, site_id: str | None) -> list[ReferenceEntry]:
        self.fetches[target.table] = self.fetches.get(target.table, 0) + 1
        if target.site_scoped:
            return list(self._by_site.get((target.table, site_id or ""), []))
        return list(self._entries.get(target.table, []))


@pytest.fixture
def reference_source() -> InMemoryReferenceSource:
    source = InMemoryReferenceSource({
        "laborers": [
            ReferenceEntry(id="lab-1", name="Ravi Shankar", alternates=("9000000001",)),
            ReferenceEntry(id="lab-2", name="Murugan", alternates=("9000000003",)),
        ],
        "labor_categories": [
            ReferenceEntry(id="cat-1", name="Skilled"),
            ReferenceEntry(id="cat-2", name="Unskilled"),
        ],
        "labor_roles": [
            ReferenceEntry(id="role-1", name="Mason"),
            ReferenceEntry(id="role-2", name="Helper"),
        ],
        "teams": [ReferenceEntry(id="team-1", name="Shuttering Crew")],
        "expense_categories": [ReferenceEntry(id="exp-1", name="Cement")],
    })
    source.add_site_entries(
        "building_sections", TEST_SITE_ID, [ReferenceEntry(id="sec-1", name="Tower 2")]
    )
    source.add_site_entries(
        "tea_shop_accounts", TEST_SITE_ID, [ReferenceEntry(id="tea-1", name="Lakshmi Tea Stall")]
    )
    return source


@pytest.fixture
def reference_cache(reference_source) -> ReferenceCache:
    return ReferenceCache(reference_source)
