"""
SQLite implementations of repository interfaces.

Lean stack implementation using SQLAlchemy + SQLite.
Easy migration path to Postgres (same SQLAlchemy API).
"""
from typing import List, Dict, Any, Optional
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from revenue.core.errors import NotFoundError
from revenue.ports.repositories import (
    ActivityLogsRepo,
    BatchesRepo,
    FilesRepo,
    ProcessingLogsRepo,
    ValidationLogsRepo,
)
from revenue.models import UploadBatch, UploadRecord, TableRow, ValidationLog, ProcessingLog, ActivityLog


def _to_dict(obj) -> Dict[str, Any]:
    """Column values of a mapped object keyed by attribute name."""
    return {attr.key: getattr(obj, attr.key) for attr in inspect(obj).mapper.column_attrs}


class SQLiteBatchesRepo(BatchesRepo):
    """SQLite implementation of BatchesRepo."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        batch = UploadBatch(**data)
        self.db.add(batch)
        self.db.commit()
        self.db.refresh(batch)
        return _to_dict(batch)

    def get(self, batch_id: str) -> Optional[Dict[str, Any]]:
        batch = self.db.get(UploadBatch, batch_id)
        return _to_dict(batch) if batch else None

    def update(self, batch_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        batch = self.db.get(UploadBatch, batch_id)
        if not batch:
            raise NotFoundError("batch", batch_id)

        for key, value in data.items():
            setattr(batch, key, value)
        self.db.commit()
        self.db.refresh(batch)
        return _to_dict(batch)

    def delete(self, batch_id: str) -> None:
        batch = self.db.get(UploadBatch, batch_id)
        if batch:
            self.db.delete(batch)
            self.db.commit()

    def list(self, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        query = self.db.query(UploadBatch)

        if user_id:
            query = query.filter(UploadBatch.user_id == user_id)

        batches = query.order_by(UploadBatch.created_at.desc()).all()
        return [_to_dict(b) for b in batches]


class SQLiteFilesRepo(FilesRepo):
    """SQLite implementation of FilesRepo."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        record = UploadRecord(**data)
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return _to_dict(record)

    def get(self, file_id: str) -> Optional[Dict[str, Any]]:
        record = self.db.get(UploadRecord, file_id)
        return _to_dict(record) if record else None

    def update(self, file_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        record = self.db.get(UploadRecord, file_id)
        if not record:
            raise NotFoundError("file", file_id)

        for key, value in data.items():
            setattr(record, key, value)
        self.db.commit()
        self.db.refresh(record)
        return _to_dict(record)

    def list_for_batch(self, batch_id: str) -> List[Dict[str, Any]]:
        records = (
            self.db.query(UploadRecord)
            .filter(UploadRecord.batch_id == batch_id)
            .order_by(UploadRecord.created_at)
            .all()
        )
        return [_to_dict(r) for r in records]

    def save_rows(self, file_id: str, records: List[Dict[str, Any]]) -> int:
        self.db.add_all(
            TableRow(file_id=file_id, record_index=index, data=record)
            for index, record in enumerate(records)
        )
        self.db.commit()
        return len(records)

    def list_rows(self, file_id: str) -> List[Dict[str, Any]]:
        rows = (
            self.db.query(TableRow)
            .filter(TableRow.file_id == file_id)
            .order_by(TableRow.record_index)
            .all()
        )
        return [_to_dict(r) for r in rows]

    def replace_rows(self, file_id: str, records: List[Dict[str, Any]]) -> int:
        self.db.query(TableRow).filter(TableRow.file_id == file_id).delete()
        return self.save_rows(file_id, records)

    def update_row_statuses(
        self, file_id: str, invalid_rows: Dict[int, List[Dict[str, Any]]]
    ) -> int:
        rows = self.db.query(TableRow).filter(TableRow.file_id == file_id).all()

        invalid_count = 0
        for row in rows:
            errors = invalid_rows.get(row.record_index)
            if errors:
                row.validation_status = "invalid"
                row.validation_errors = errors
                invalid_count += 1
            else:
                row.validation_status = "valid"
                row.validation_errors = None

        self.db.commit()
        return invalid_count


class SQLiteValidationLogsRepo(ValidationLogsRepo):
    """SQLite implementation of ValidationLogsRepo."""

    def __init__(self, db: Session):
        self.db = db

    def add(self, data: Dict[str, Any]) -> int:
        log = ValidationLog(**data)
        self.db.add(log)
        self.db.commit()
        return log.id


class SQLiteProcessingLogsRepo(ProcessingLogsRepo):
    """SQLite implementation of ProcessingLogsRepo."""

    def __init__(self, db: Session):
        self.db = db

    def add(self, data: Dict[str, Any]) -> int:
        log = ProcessingLog(**data)
        self.db.add(log)
        self.db.commit()
        return log.id


class SQLiteActivityLogsRepo(ActivityLogsRepo):
    """SQLite implementation of ActivityLogsRepo."""

    def __init__(self, db: Session):
        self.db = db

    def add(self, data: Dict[str, Any]) -> int:
        entry = ActivityLog(**data)
        self.db.add(entry)
        try:
            self.db.commit()
        except SQLAlchemyError:
            # Keep the session usable for the operation being audited
            self.db.rollback()
            raise
        return entry.id
