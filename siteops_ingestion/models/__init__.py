"""ORM models for pipeline bookkeeping."""

from siteops_ingestion.models.import_log import ImportLogModel

__all__ = ["ImportLogModel"]
