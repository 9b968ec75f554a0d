"""Tests for ImportService over the SQL record store."""

import pytest
import sqlalchemy as sa

from siteops_ingestion.domain.types import ImportContext, ImportStatus
from siteops_ingestion.models import ImportLogModel
from siteops_ingestion.persistence import SqlImportLogRecorder, SqlRecordStore, WriteOutcome
from siteops_ingestion.services import ImportService
from siteops_ingestion.transport.messages import ImportRequest, SubmittedRow
from siteops_kernel.exceptions import MissingContextError, RecordWriteError, UnknownEntityError
from tests.site_schema import daily_attendance_table, expenses_table, laborers_table


def _laborer(n: int, phone: str, rate: float = 700.0) -> SubmittedRow:
    return SubmittedRow(
        row_number=n,
        values={"name": f"Worker {n}", "phone": phone, "category_id": "cat-1",
                "role_id": "role-1", "daily_rate": rate, "employment_type": "daily_wage"},
    )


@pytest.fixture
def laborer_context(test_actor_id) -> ImportContext:
    return ImportContext(caller_id=test_actor_id, caller_name="Site Engineer")


@pytest.fixture
def service(session, registry, deterministic_clock):
    return ImportService(
        SqlRecordStore(session),
        registry,
        deterministic_clock,
        batch_size=4,
        import_log=SqlImportLogRecorder(session, deterministic_clock),
    )


class TestSqlRecordStore:
    def test_insert_then_update_by_key(self, session):
        store = SqlRecordStore(session)
        record = {"name": "Ravi", "phone": "9000000001", "created_at": "a"}
        assert store.write_one("laborers", record, ("phone",)) == WriteOutcome.INSERTED
        changed = {"name": "Ravi S", "phone": "9000000001", "created_at": "b"}
        assert store.write_one("laborers", changed, ("phone",)) == WriteOutcome.UPDATED
        row = session.execute(sa.select(laborers_table)).mappings().one()
        assert row["name"] == "Ravi S" and row["created_at"] == "a"

    def test_failed_batch_rolls_back_alone(self, session):
        store = SqlRecordStore(session)
        good = {"name": "Ravi", "phone": "9000000001"}
        bad = {"name": "Bad", "phone": "9000000002", "daily_rate": -1}
        with pytest.raises(RecordWriteError) as exc_info:
            store.write_batch("laborers", [good, bad], ("phone",))
        assert exc_info.value.code == "RECORD_WRITE_FAILED"
        assert session.execute(sa.select(sa.func.count()).select_from(laborers_table)).scalar() == 0
        store.write_one("laborers", good, ("phone",))
        assert session.execute(sa.select(sa.func.count()).select_from(laborers_table)).scalar() == 1


class TestImportRows:
    def test_partial_success_scenario(self, service, session, laborer_context):
        """Ten rows: seven new, one existing phone, two rejected by the database."""
        session.execute(sa.insert(laborers_table).values(name="Existing", phone="9000000005"))
        rows = [
            _laborer(n, f"90000000{n:02d}", rate=-50.0 if n in (4, 9) else 700.0)
            for n in range(2, 12)
        ]
        progress = []
        result = service.import_rows(
            ImportRequest(entity="laborers", context=laborer_context, rows=tuple(rows)),
            on_progress=progress.append,
        )

        assert not result.success
        assert result.summary.total == 10
        assert result.summary.inserted == 7
        assert result.summary.updated == 1
        assert result.summary.errors == 2
        assert result.summary.skipped == 0
        assert result.failed_row_numbers == (4, 9)
        assert [e.row_number for e in result.errors] == [4, 9]
        assert "ck_laborers_daily_rate" in result.errors[0].error or "CHECK" in result.errors[0].error

        updated = session.execute(
            sa.select(laborers_table.c.name).where(laborers_table.c.phone == "9000000005")
        ).scalar_one()
        assert updated == "Worker 5"
        assert session.execute(sa.select(sa.func.count()).select_from(laborers_table)).scalar() == 8

        assert [p.current_row for p in progress] == [4, 8, 10]
        assert all(p.status == ImportStatus.IMPORTING for p in progress)
        assert progress[-1].error_count == 2

    def test_import_log_recorded(self, service, session, laborer_context, test_actor_id):
        result = service.import_rows(
            ImportRequest(entity="laborers", context=laborer_context, rows=(_laborer(2, "9000000002"),))
        )
        log = session.get(ImportLogModel, result.import_log_id)
        assert log.entity == "laborers" and log.inserted == 1
        assert log.created_by_id == test_actor_id
        assert log.error_details is None

    def test_duplicate_keys_within_request_skipped(self, service, laborer_context, captured_logs):
        rows = (_laborer(2, "9000000002"), _laborer(3, "9000000002"), _laborer(4, "9000000003"))
        result = service.import_rows(ImportRequest(entity="laborers", context=laborer_context, rows=rows))
        assert result.success
        assert (result.summary.inserted, result.summary.skipped) == (2, 1)
        skipped = [r for r in captured_logs() if r["message"] == "row_skipped"]
        assert skipped[0]["row_number"] == 3

    def test_site_injected_and_derived_fields(self, service, session, import_context):
        row = SubmittedRow(
            row_number=2,
            values={"laborer_id": "lab-1", "date": "2024-03-01", "work_days": "2",
                    "daily_rate_applied": 800.0, "snacks_amount": 0},
        )
        result = service.import_rows(
            ImportRequest(entity="daily_attendance", context=import_context, rows=(row,))
        )
        assert result.success and result.summary.inserted == 1
        stored = session.execute(sa.select(daily_attendance_table)).mappings().one()
        assert stored["site_id"] == "site-001"
        assert stored["daily_earnings"] == 1600.0
        assert stored["entered_by"] == "Site Engineer"

    def test_entity_without_key_always_inserts(self, service, session, import_context):
        row = SubmittedRow(
            row_number=2,
            values={"date": "2024-03-01", "category_id": "exp-1", "amount": 1500.0, "is_cleared": True},
        )
        request = ImportRequest(entity="expenses", context=import_context, rows=(row, row))
        result = service.import_rows(request)
        assert result.summary.inserted == 2
        assert session.execute(sa.select(sa.func.count()).select_from(expenses_table)).scalar() == 2

    def test_error_details_capped(self, session, registry, deterministic_clock, laborer_context):
        service = ImportService(SqlRecordStore(session), registry, deterministic_clock, max_error_details=2)
        rows = tuple(_laborer(n, f"91000000{n:02d}", rate=-1.0) for n in range(2, 7))
        result = service.import_rows(ImportRequest(entity="laborers", context=laborer_context, rows=rows))
        assert result.summary.errors == 5
        assert len(result.errors) == 2
        assert result.failed_row_numbers == (2, 3, 4, 5, 6)
        assert result.import_log_id is None

    def test_missing_site(self, service, test_actor_id):
        context = ImportContext(caller_id=test_actor_id, caller_name="Eng")
        with pytest.raises(MissingContextError):
            service.import_rows(ImportRequest(entity="expenses", context=context, rows=()))

    def test_unknown_entity(self, service, laborer_context):
        with pytest.raises(UnknownEntityError):
            service.import_rows(ImportRequest(entity="payroll", context=laborer_context, rows=()))

    def test_logs_completion(self, service, laborer_context, captured_logs):
        service.import_rows(
            ImportRequest(entity="laborers", context=laborer_context, rows=(_laborer(2, "9000000002"),))
        )
        done = next(r for r in captured_logs() if r["message"] == "import_completed")
        assert done["inserted"] == 1
        assert done["entity"] == "laborers"
        assert done["actor_id"] == str(laborer_context.caller_id)
