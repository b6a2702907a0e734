"""
Audit tables: validation runs, processing runs and user activity.
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, Float
from sqlalchemy.orm import relationship
from revenue.core.database import Base


class ValidationLog(Base):
    __tablename__ = "validation_logs"

    id = Column(Integer, primary_key=True, index=True)
    file_id = Column(String, ForeignKey("upload_records.id"), nullable=False, index=True)
    validation_type = Column(String, nullable=False)  # upload_validation, schema, records, all
    rules = Column(JSON, nullable=False)
    status = Column(String, nullable=False)  # completed, completed_with_errors
    total_records = Column(Integer, default=0, nullable=False)
    valid_records = Column(Integer, default=0, nullable=False)
    invalid_records = Column(Integer, default=0, nullable=False)
    errors = Column(JSON, nullable=True)
    validation_time_ms = Column(Float, default=0.0, nullable=False)
    validated_by_id = Column(String, nullable=True)
    validated_by_name = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Relationships
    file = relationship("UploadRecord", back_populates="validation_logs")


class ProcessingLog(Base):
    __tablename__ = "processing_logs"

    id = Column(Integer, primary_key=True, index=True)
    file_id = Column(String, ForeignKey("upload_records.id"), nullable=False, index=True)
    processing_type = Column(String, nullable=False)  # batch
    details = Column(JSON, nullable=True)
    record_count = Column(Integer, default=0, nullable=False)
    processing_time_ms = Column(Float, default=0.0, nullable=False)
    status = Column(String, nullable=False)  # completed, failed
    processed_by_id = Column(String, nullable=True)
    processed_by_name = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Relationships
    file = relationship("UploadRecord", back_populates="processing_logs")


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=True, index=True)
    user_name = Column(String, nullable=True)
    action = Column(String, nullable=False)
    description = Column(String, nullable=True)
    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
