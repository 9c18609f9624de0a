"""
Tests for the REST API client.

Run with: pytest tests/rest/ -v
"""
