"""Destination writes and import bookkeeping."""

from siteops_ingestion.persistence.base import RecordSink, WriteOutcome
from siteops_ingestion.persistence.import_log import ImportLogRecorder, SqlImportLogRecorder
from siteops_ingestion.persistence.sql_store import SqlRecordStore

__all__ = [
    "ImportLogRecorder",
    "RecordSink",
    "SqlImportLogRecorder",
    "SqlRecordStore",
    "WriteOutcome",
]
