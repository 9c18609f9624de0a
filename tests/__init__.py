"""
Tests for the ecclesial directory package.

This directory contains unit tests for:
- Vocabularies and domain models (base.py, entity.py)
- Mapper functions (mapper.py)
- Storage backend (storage/backends/database.py)
- REST API client (rest/client.py)
- Data service fallback policies (service.py)
- Configuration, wiring and CLIs
"""
