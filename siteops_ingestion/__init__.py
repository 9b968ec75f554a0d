"""
siteops_ingestion -- Bulk tabular import ("mass upload") for site operations.

A schema-driven pipeline: an uploaded file is parsed and validated per row,
corrected interactively, revalidated on the server against live reference
data, materialized into entity records, and written in batches.

Architecture:
    siteops_ingestion/ sits on top of siteops_kernel/ (errors, logging,
    clock, database). Nothing in siteops_kernel/ imports from ingestion.
"""
