"""
Tests for storage layer.

This package contains tests for the storage backend.

Test Structure:

- **backends/**: Tests for the SQLModel backend, run against SQLite

Run all storage tests:
    pytest tests/storage/ -v
"""
