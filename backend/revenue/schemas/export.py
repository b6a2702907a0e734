"""
Pydantic schemas for export API.
"""
from pydantic import BaseModel
from typing import List, Optional


class ExportRequest(BaseModel):
    formats: List[str] = ["CSV", "JSON", "DBF"]


class ExportResultResponse(BaseModel):
    """Outcome of one format export."""

    success: bool
    format: str
    filename: str = ""
    file_path: str = ""
    record_count: int = 0
    processing_time: float = 0.0
    message: Optional[str] = None
    error: Optional[str] = None

    class Config:
        from_attributes = True


class ExportSummaryResponse(BaseModel):
    total_files: int
    successful_exports: int
    failed_exports: int
    total_records: int
    formats: List[str]
    errors: List[str]

    class Config:
        from_attributes = True


class ExportResponse(BaseModel):
    """Response from export endpoint."""

    file_id: str
    results: List[ExportResultResponse]
    summary: ExportSummaryResponse
