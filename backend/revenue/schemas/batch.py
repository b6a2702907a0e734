from pydantic import BaseModel
from datetime import datetime
from typing import Any, Dict, List, Optional


class BatchCreate(BaseModel):
    batch_name: Optional[str] = None
    metadata: Dict[str, Any] = {}


class BatchStatusUpdate(BaseModel):
    status: str
    metadata: Optional[Dict[str, Any]] = None


class BatchResponse(BaseModel):
    id: str
    batch_name: str
    status: str
    total_files: int = 0
    uploaded_files: int = 0
    processed_files: int = 0
    total_records: int = 0
    total_size: int = 0
    upload_progress: int = 0
    processing_progress: int = 0
    user_id: Optional[str] = None
    metadata: Dict[str, Any] = {}
    upload_started_at: Optional[datetime] = None
    upload_completed_at: Optional[datetime] = None
    processing_started_at: Optional[datetime] = None
    processing_completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BatchListResponse(BaseModel):
    batches: List[BatchResponse]
    total: int


class ProcessFileResultResponse(BaseModel):
    """Outcome of processing one file."""

    file_id: str
    filename: str
    file_type: Optional[str] = None
    status: str
    record_count: int = 0
    details: str = ""
    processing_time_ms: float = 0.0
    error: Optional[str] = None


class ProcessResponse(BaseModel):
    """Response from the batch process endpoint."""

    batch_id: str
    batch_status: str
    processed_files: int
    total_files: int
    results: List[ProcessFileResultResponse]
