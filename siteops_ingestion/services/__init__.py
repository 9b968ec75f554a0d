"""Server-side services (import)."""

from siteops_ingestion.services.import_service import ImportService

__all__ = ["ImportService"]
