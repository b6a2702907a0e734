"""
Repository interfaces for data access.

Ports (interfaces) keep the batch, validation, processing and export services free of
any storage technology:
- Current: SQLite via SQLAlchemy
- Future: Postgres (same SQLAlchemy adapter)

All reads return plain dicts.
"""
from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional


class BatchesRepo(ABC):
    """Repository for upload batches."""

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Persist a new batch.

        Args:
            data: Column values (batch_name, status, user_id, ...)

        Returns:
            The stored batch as a dict, including its generated id
        """
        pass

    @abstractmethod
    def get(self, batch_id: str) -> Optional[Dict[str, Any]]:
        """Get a batch by id, or None if absent."""
        pass

    @abstractmethod
    def update(self, batch_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Update columns of a batch.

        Raises:
            NotFoundError: If the batch does not exist
        """
        pass

    @abstractmethod
    def delete(self, batch_id: str) -> None:
        """Delete a batch together with its files and rows."""
        pass

    @abstractmethod
    def list(self, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """List batches, newest first, optionally only those owned by user_id."""
        pass


class FilesRepo(ABC):
    """Repository for files attached to batches and their stored rows."""

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Persist a new file record and return it."""
        pass

    @abstractmethod
    def get(self, file_id: str) -> Optional[Dict[str, Any]]:
        """Get a file record by id, or None if absent."""
        pass

    @abstractmethod
    def update(self, file_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Update columns of a file record.

        Raises:
            NotFoundError: If the file does not exist
        """
        pass

    @abstractmethod
    def list_for_batch(self, batch_id: str) -> List[Dict[str, Any]]:
        """All files of a batch with their counts, status and validation fields."""
        pass

    @abstractmethod
    def save_rows(self, file_id: str, records: List[Dict[str, Any]]) -> int:
        """
        Store decoded rows for a file.

        Returns:
            Number of rows stored
        """
        pass

    @abstractmethod
    def list_rows(self, file_id: str) -> List[Dict[str, Any]]:
        """Stored rows of a file in record_index order."""
        pass

    @abstractmethod
    def replace_rows(self, file_id: str, records: List[Dict[str, Any]]) -> int:
        """
        Replace all stored rows of a file; row statuses reset to pending.

        Returns:
            Number of rows stored
        """
        pass

    @abstractmethod
    def update_row_statuses(
        self, file_id: str, invalid_rows: Dict[int, List[Dict[str, Any]]]
    ) -> int:
        """
        Set row-level validation status.

        Args:
            file_id: File whose rows are updated
            invalid_rows: {record_index: [error dicts]}; every other row is valid

        Returns:
            Number of rows marked invalid
        """
        pass


class ValidationLogsRepo(ABC):
    """Append-only store of validation runs."""

    @abstractmethod
    def add(self, data: Dict[str, Any]) -> int:
        """Append a validation log entry and return its id."""
        pass


class ProcessingLogsRepo(ABC):
    """Append-only store of processing runs."""

    @abstractmethod
    def add(self, data: Dict[str, Any]) -> int:
        """Append a processing log entry and return its id."""
        pass


class ActivityLogsRepo(ABC):
    """Append-only store of user activity."""

    @abstractmethod
    def add(self, data: Dict[str, Any]) -> int:
        """Append an activity entry and return its id."""
        pass
