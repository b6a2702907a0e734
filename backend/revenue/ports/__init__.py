"""
Ports - interface definitions for external dependencies.

Follows hexagonal architecture pattern (ports & adapters).
Ports define interfaces, adapters provide concrete implementations.
"""
from revenue.ports.repositories import BatchesRepo, FilesRepo, ValidationLogsRepo, ActivityLogsRepo

__all__ = ["BatchesRepo", "FilesRepo", "ValidationLogsRepo", "ActivityLogsRepo"]
