"""Infrastructure layer — host variable stores and the store adapter.

This layer depends on stdlib and third-party libs (SQLAlchemy).
The sync layer bridges between domain models and infrastructure.
"""
