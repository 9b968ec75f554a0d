"""Per-cell validation and coercion (pure)."""

from siteops_ingestion.validation.fields import FieldResult, validate_field

__all__ = ["FieldResult", "validate_field"]
