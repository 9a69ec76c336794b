"""Sales file ingestion pipeline.

This module reads CSV sales files and turns rows into typed records.
It drives deduplication, filtering, and per-file store transactions.
"""
