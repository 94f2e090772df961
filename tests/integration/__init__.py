# Integration Tests
"""
Integration tests run complete album workflows against a real temporary
database, through the services and through the HTTP API.

Principle: Test behavior, not implementation.
"""
