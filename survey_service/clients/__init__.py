"""Client modules for external services."""

from survey_service.clients.sqlite_client import SqliteClient

__all__ = [
    "SqliteClient",
]
