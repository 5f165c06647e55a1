"""
Core utilities and configuration for the catalog transfer pipeline.

This package provides foundational components used by readers and writers:

Modules:
    config: Application configuration and environment variable management
    database: Async engine, session factory and schema creation
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities

Usage:
    from core.config import settings
    from core.database import async_session_maker, init_models
    from core.exceptions import AdapterError, NotFoundError
    from core.logging import setup_logging

Example:
    # Initialize logging
    setup_logging()

    # Get database session
    async with async_session_maker() as session:
        # Perform database operations
        pass
"""

__all__ = [
    "settings",
    "async_session_maker",
    "init_models",
    "setup_logging",
    # Exceptions
    "CatalogException",
    "ReadError",
    "NotFoundError",
    "InvalidArgumentError",
    "WriteError",
    "ValidationError",
    "AdapterError",
]
