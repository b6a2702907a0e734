from datetime import datetime
import uuid
from sqlalchemy import Column, Integer, BigInteger, String, DateTime, ForeignKey, JSON, Text
from sqlalchemy.orm import relationship
from revenue.core.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class UploadBatch(Base):
    """
    A group of billing files uploaded together.

    Counters are stored facts recomputed from the batch's files; progress
    percentages are derived at read time and never stored.
    """

    __tablename__ = "upload_batches"

    id = Column(String, primary_key=True, default=_uuid)
    batch_name = Column(String, nullable=False)
    status = Column(String, default="created", nullable=False, index=True)

    total_files = Column(Integer, default=0, nullable=False)
    uploaded_files = Column(Integer, default=0, nullable=False)
    processed_files = Column(Integer, default=0, nullable=False)
    total_records = Column(Integer, default=0, nullable=False)
    total_size = Column(BigInteger, default=0, nullable=False)

    upload_started_at = Column(DateTime, nullable=True)
    upload_completed_at = Column(DateTime, nullable=True)
    processing_started_at = Column(DateTime, nullable=True)
    processing_completed_at = Column(DateTime, nullable=True)

    user_id = Column(String, nullable=True, index=True)
    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    batch_metadata = Column("metadata", JSON, default=dict)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    files = relationship("UploadRecord", back_populates="batch", cascade="all, delete-orphan")


class UploadRecord(Base):
    """One billing file attached to a batch."""

    __tablename__ = "upload_records"

    id = Column(String, primary_key=True, default=_uuid)
    batch_id = Column(String, ForeignKey("upload_batches.id"), nullable=False, index=True)
    filename = Column(String, nullable=False)
    original_name = Column(String, nullable=False)
    file_type = Column(String, nullable=True)  # ADP, OPD, CHT, CHA, ...
    file_size = Column(BigInteger, default=0, nullable=False)
    field_count = Column(Integer, default=0, nullable=False)
    record_count = Column(Integer, default=0, nullable=False)
    checksum = Column(String, nullable=True, index=True)
    file_path = Column(String, nullable=True)
    table_schema = Column(JSON, default=list)  # List of field descriptor dicts

    status = Column(String, default="uploaded", nullable=False)  # uploaded, validating, completed, failed
    upload_progress = Column(Integer, default=0, nullable=False)
    validation_status = Column(String, default="pending", nullable=False)  # pending, valid, invalid
    validation_errors = Column(Text, nullable=True)  # JSON-serialized list of error dicts

    user_id = Column(String, nullable=True)
    ip_address = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    batch = relationship("UploadBatch", back_populates="files")
    rows = relationship("TableRow", back_populates="file", cascade="all, delete-orphan")
    validation_logs = relationship("ValidationLog", back_populates="file", cascade="all, delete-orphan")
    processing_logs = relationship("ProcessingLog", back_populates="file", cascade="all, delete-orphan")


class TableRow(Base):
    """A stored data row of an uploaded file."""

    __tablename__ = "table_rows"

    id = Column(Integer, primary_key=True, index=True)
    file_id = Column(String, ForeignKey("upload_records.id"), nullable=False, index=True)
    record_index = Column(Integer, nullable=False)  # 0-based position in the file
    data = Column(JSON, nullable=False)
    validation_status = Column(String, default="pending", nullable=False)
    validation_errors = Column(JSON, nullable=True)

    # Relationships
    file = relationship("UploadRecord", back_populates="rows")
