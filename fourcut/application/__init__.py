"""Application layer - business logic services.

This layer contains application services that orchestrate domain operations.
Services are independent of HTTP/FastAPI and can be tested in isolation.
Import services from ``fourcut.application.services``, domain types from
``fourcut.application.models`` and errors from ``fourcut.application.errors``.
"""
