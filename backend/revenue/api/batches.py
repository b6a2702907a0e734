"""
Batch API endpoints: create, inspect, move through statuses, delete,
attach decoded billing files and process them.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from revenue.api.deps import (
    Caller,
    get_batch_service,
    get_caller,
    get_process_service,
    get_validation_service,
)
from revenue.core.checksum import payload_checksum
from revenue.core.logging_config import api_logger as logger
from revenue.core.table import parse_fields
from revenue.schemas.batch import (
    BatchCreate,
    BatchListResponse,
    BatchResponse,
    BatchStatusUpdate,
    ProcessResponse,
)
from revenue.schemas.file import FileResponse, FileUploadRequest, FileUploadResponse
from revenue.services.batch_service import BatchService
from revenue.services.process_service import ProcessService
from revenue.services.validation_service import ValidationService
from revenue.validate.rules import detect_file_type

router = APIRouter()


@router.post("/batches", response_model=BatchResponse, status_code=201)
def create_batch(
    payload: BatchCreate,
    caller: Caller = Depends(get_caller),
    service: BatchService = Depends(get_batch_service),
):
    """Create an empty upload batch owned by the caller."""
    batch = service.create_batch(
        caller.user_id,
        caller.ip_address,
        {"batch_name": payload.batch_name, "user_agent": caller.user_agent, "metadata": payload.metadata},
    )
    service.log_activity(
        caller.user_id,
        "create_batch",
        f"Created batch {batch['batch_name']}",
        user_name=caller.user_name,
        client_addr=caller.ip_address,
        user_agent=caller.user_agent,
        details={"batch_id": batch["id"]},
    )
    return batch


@router.get("/batches", response_model=BatchListResponse)
def list_batches(
    owner: Optional[str] = None,
    service: BatchService = Depends(get_batch_service),
):
    """List batches, newest first, optionally filtered by owner."""
    batches = service.list_batches(owner)
    return {"batches": batches, "total": len(batches)}


@router.get("/batches/{batch_id}", response_model=BatchResponse)
def get_batch(batch_id: str, service: BatchService = Depends(get_batch_service)):
    """Get a batch with its counters and progress."""
    batch = service.get_batch(batch_id)
    if not batch:
        raise HTTPException(status_code=404, detail="Batch not found")
    return batch


@router.patch("/batches/{batch_id}/status", response_model=BatchResponse)
def update_batch_status(
    batch_id: str,
    payload: BatchStatusUpdate,
    service: BatchService = Depends(get_batch_service),
):
    """Move a batch to another status."""
    try:
        return service.update_batch_status(batch_id, payload.status, payload.metadata)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Unknown batch status: {payload.status}")


@router.delete("/batches/{batch_id}")
def delete_batch(
    batch_id: str,
    caller: Caller = Depends(get_caller),
    service: BatchService = Depends(get_batch_service),
):
    """Delete a batch and its files. Only the owner may delete."""
    service.delete_batch(batch_id, caller.user_id)
    service.log_activity(
        caller.user_id,
        "delete_batch",
        f"Deleted batch {batch_id}",
        user_name=caller.user_name,
        client_addr=caller.ip_address,
        user_agent=caller.user_agent,
        details={"batch_id": batch_id},
    )
    return {"status": "deleted"}


@router.get("/batches/{batch_id}/files", response_model=List[FileResponse])
def get_batch_files(batch_id: str, service: BatchService = Depends(get_batch_service)):
    """List the files attached to a batch."""
    return service.get_batch_files(batch_id)


@router.post("/batches/{batch_id}/files", response_model=FileUploadResponse, status_code=201)
def upload_files(
    batch_id: str,
    payload: FileUploadRequest,
    caller: Caller = Depends(get_caller),
    service: BatchService = Depends(get_batch_service),
    validation: ValidationService = Depends(get_validation_service),
):
    """
    Attach already-decoded billing tables to a batch.

    Each file's rows are stored for later validation and export. The
    upload round closes once all files are attached; files sent with
    "validate" are validated afterwards.
    """
    # Reject malformed schemas before anything is written
    schemas = [[f.model_dump() for f in upload.fields] for upload in payload.files]
    parsed = [parse_fields(raw_fields) for raw_fields in schemas]

    service.start_upload(batch_id)

    attached = []
    to_validate = []
    for upload, raw_fields, fields in zip(payload.files, schemas, parsed):
        file_type = (upload.file_type or detect_file_type(upload.filename, fields)).upper()

        file = service.add_file(
            batch_id,
            {
                "filename": upload.filename,
                "size": upload.size,
                "file_type": file_type,
                "record_count": len(upload.records),
                "field_count": len(fields),
                "checksum": payload_checksum(raw_fields, upload.records),
                "schema": [f.to_dict() for f in fields],
            },
            caller.user_id,
            caller.ip_address,
        )
        service.files.save_rows(file["id"], upload.records)
        attached.append(file["id"])
        if upload.validate_on_upload:
            to_validate.append(file["id"])

    batch = service.complete_upload(batch_id)

    for file_id in to_validate:
        validation.validate_file(file_id, actor_id=caller.user_id, actor_name=caller.user_name)

    service.log_activity(
        caller.user_id,
        "upload_files",
        f"Uploaded {len(attached)} file(s) to batch {batch_id}",
        user_name=caller.user_name,
        client_addr=caller.ip_address,
        user_agent=caller.user_agent,
        details={"batch_id": batch_id, "file_ids": attached},
    )
    logger.info(f"Attached {len(attached)} file(s) to batch {batch_id}")

    files = [f for f in service.get_batch_files(batch_id) if f["id"] in attached]
    return {
        "batch_id": batch_id,
        "files": files,
        "batch_status": batch["status"],
        "message": f"{len(attached)} file(s) uploaded",
    }


@router.post("/batches/{batch_id}/process", response_model=ProcessResponse)
def process_batch(
    batch_id: str,
    caller: Caller = Depends(get_caller),
    service: BatchService = Depends(get_batch_service),
    processor: ProcessService = Depends(get_process_service),
):
    """
    Apply per-type corrections to every file of a batch.

    Stored rows are replaced by the corrected rows, so later exports carry
    the corrections. A file that fails is reported in the results; the
    batch then stays "processing".
    """
    result = processor.process_batch(batch_id, actor_id=caller.user_id, actor_name=caller.user_name)

    service.log_activity(
        caller.user_id,
        "process_batch",
        f"Processed batch {batch_id}",
        user_name=caller.user_name,
        client_addr=caller.ip_address,
        user_agent=caller.user_agent,
        details={
            "batch_id": batch_id,
            "status": result["batch_status"],
            "processed_files": result["processed_files"],
            "total_files": result["total_files"],
        },
    )
    return result
