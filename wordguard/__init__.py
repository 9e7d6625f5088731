"""WordGuard — moderation dictionary service.

Bulk ingestion (JSON, CSV/TSV, pipe-delimited and plain word lists),
normalisation, reconciliation against the stored dictionary, and
synonym/variation grouping behind a FastAPI admin API.
"""
