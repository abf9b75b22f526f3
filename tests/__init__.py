"""multivalue-backfill test suite.

- unit/: component tests for backfill.lib and the CLI

fake_store.py provides an in-memory document store behind
httpx.MockTransport with cursor-mark paging and failure injection.
"""
