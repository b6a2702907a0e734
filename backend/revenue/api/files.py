"""
File API endpoints: validate a stored file and export it.
"""
from fastapi import APIRouter, Depends

from revenue.api.deps import Caller, get_batch_service, get_caller, get_validation_service
from revenue.core.errors import NotFoundError
from revenue.core.table import parse_fields
from revenue.schemas.export import ExportRequest, ExportResponse
from revenue.schemas.file import ValidateRequest, ValidationResponse
from revenue.services.batch_service import BatchService
from revenue.services.export_service import ExportService
from revenue.services.validation_service import ValidationService

router = APIRouter()


def get_export_service() -> ExportService:
    return ExportService()


@router.post("/files/{file_id}/validate", response_model=ValidationResponse)
def validate_file(
    file_id: str,
    payload: ValidateRequest = ValidateRequest(),
    caller: Caller = Depends(get_caller),
    service: ValidationService = Depends(get_validation_service),
    batches: BatchService = Depends(get_batch_service),
):
    """
    Validate a stored file against its type's schema, rules and business rules.

    Invalid data is reported in the response body; the request itself
    only fails when the file is missing or validation cannot run.
    """
    result = service.validate_file(
        file_id,
        payload.validation_type,
        actor_id=caller.user_id,
        actor_name=caller.user_name,
    )
    batches.log_activity(
        caller.user_id,
        "validate_file",
        f"Validated file {file_id}",
        user_name=caller.user_name,
        client_addr=caller.ip_address,
        user_agent=caller.user_agent,
        details={"file_id": file_id, "is_valid": result.is_valid, "errors": len(result.errors)},
    )
    return {"file_id": file_id, **result.to_dict()}


@router.post("/files/{file_id}/export", response_model=ExportResponse)
def export_file(
    file_id: str,
    payload: ExportRequest = ExportRequest(),
    caller: Caller = Depends(get_caller),
    batches: BatchService = Depends(get_batch_service),
    exporter: ExportService = Depends(get_export_service),
):
    """
    Export a stored file's rows to the requested formats.

    Each format succeeds or fails on its own; failures are listed in the
    results and the summary rather than failing the request.
    """
    file = batches.files.get(file_id)
    if not file:
        raise NotFoundError("file", file_id)

    fields = parse_fields(file.get("table_schema") or [])
    records = [row["data"] for row in batches.files.list_rows(file_id)]

    results = exporter.export_multiple_formats(records, fields, file["filename"], payload.formats)
    summary = exporter.summarize(results)

    batches.log_activity(
        caller.user_id,
        "export_file",
        f"Exported file {file_id} to {', '.join(summary.formats) or 'no formats'}",
        user_name=caller.user_name,
        client_addr=caller.ip_address,
        user_agent=caller.user_agent,
        details={"file_id": file_id, **summary.to_dict()},
    )
    return {
        "file_id": file_id,
        "results": [r.to_dict() for r in results],
        "summary": summary.to_dict(),
    }
