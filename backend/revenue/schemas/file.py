from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional


class FieldSchema(BaseModel):
    """One column of a decoded billing table."""

    name: str
    type: str
    length: int
    decimal_places: int = Field(0, alias="decimalPlaces")

    class Config:
        populate_by_name = True


class FileUpload(BaseModel):
    """An already-decoded billing table attached to a batch."""

    filename: str
    size: int = 0
    file_type: Optional[str] = None
    fields: List[FieldSchema]
    records: List[Dict[str, Any]] = []
    validate_on_upload: bool = Field(False, alias="validate")

    class Config:
        populate_by_name = True


class FileUploadRequest(BaseModel):
    files: List[FileUpload]


class FileResponse(BaseModel):
    id: str
    batch_id: str
    filename: str
    original_name: Optional[str] = None
    file_type: Optional[str] = None
    file_size: int = 0
    field_count: int = 0
    record_count: int = 0
    checksum: Optional[str] = None
    schema_: List[Dict[str, Any]] = Field(default_factory=list, alias="schema")
    status: str
    upload_progress: int = 0
    validation_status: str = "pending"
    validation_errors: List[Dict[str, Any]] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        populate_by_name = True


class FileUploadResponse(BaseModel):
    batch_id: str
    files: List[FileResponse]
    batch_status: str
    message: str


class ValidateRequest(BaseModel):
    validation_type: Literal["schema", "records", "all"] = "all"


class ValidationResponse(BaseModel):
    file_id: str
    is_valid: bool
    total_records: int
    valid_records: int
    invalid_records: int
    errors: List[Dict[str, Any]]
