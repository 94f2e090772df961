# Shared Slot Albums Test Suite
"""
Test suite for shared slot albums.

Unit tests exercise services with mocked repositories; repository,
concurrency and API tests run against a real temporary SQLite database.
"""
