# Infrastructure layer - database and storage
"""
Infrastructure layer contains:
- Database repositories
- Image storage adapters

This layer depends on the domain layer, not vice versa.
"""
