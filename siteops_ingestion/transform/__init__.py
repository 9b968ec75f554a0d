"""Row values -> destination records (context injection, derived fields)."""

from siteops_ingestion.transform.materialize import (
    DEFAULT_BATCH_SIZE,
    MATERIALIZERS,
    UpsertConfig,
    materialize,
    split_into_batches,
    upsert_config,
)

__all__ = [
    "DEFAULT_BATCH_SIZE",
    "MATERIALIZERS",
    "UpsertConfig",
    "materialize",
    "split_into_batches",
    "upsert_config",
]
