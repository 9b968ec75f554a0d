"""Server-side revalidation with lookup resolution."""

from siteops_ingestion.revalidation.cache import LookupMatch, ReferenceCache
from siteops_ingestion.revalidation.reference import (
    ReferenceEntry,
    ReferenceSource,
    SqlReferenceSource,
)
from siteops_ingestion.revalidation.service import RevalidationService

__all__ = [
    "LookupMatch",
    "ReferenceCache",
    "ReferenceEntry",
    "ReferenceSource",
    "RevalidationService",
    "SqlReferenceSource",
]
