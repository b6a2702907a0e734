"""
Validation service - runs the validator on stored files and records outcomes.

Flow for one file (validate_file):
1. Mark the file "validating"
2. Validate schema and records (pure, see revenue.validate.validator)
3. Append a validation log (rules used, counts, errors, elapsed time, actor)
4. Set file validation status and row-level statuses
5. Mark the file "completed" and recompute batch counters

Invalid data is a result, not a failure: the file still completes with
validation_status "invalid". Only infrastructural errors mark it "failed".
"""
import json
import time
from collections import defaultdict
from typing import Any, Dict, List, Optional

from revenue.core.errors import NotFoundError
from revenue.core.logging_config import validation_logger as logger
from revenue.core.table import FieldDescriptor, Record, parse_fields
from revenue.ports.repositories import FilesRepo, ValidationLogsRepo
from revenue.services.batch_service import BatchService, FileStatus
from revenue.validate.rules import describe_rules
from revenue.validate.types import ValidationError, ValidationResult, ValidationRule
from revenue.validate.validator import Validator


def _error_dicts(errors: List[ValidationError]) -> List[Dict[str, Any]]:
    # Round-trip through JSON so stored values are plain JSON types
    return json.loads(json.dumps([e.to_dict() for e in errors], default=str, ensure_ascii=False))


class ValidationService:
    """Records validation outcomes against files, rows and the validation log."""

    def __init__(
        self,
        files: FilesRepo,
        validation_logs: ValidationLogsRepo,
        batch_service: Optional[BatchService] = None,
        validator: Optional[Validator] = None,
    ):
        self.files = files
        self.validation_logs = validation_logs
        self.batch_service = batch_service
        self.validator = validator or Validator()

    def validate_file(
        self,
        file_id: str,
        validation_type: str = "all",
        actor_id: Optional[str] = None,
        actor_name: Optional[str] = None,
        fields: Optional[List[FieldDescriptor]] = None,
        records: Optional[List[Record]] = None,
    ) -> ValidationResult:
        """
        Validate a stored file and record the outcome.

        Args:
            file_id: File to validate
            validation_type: "schema", "records" or "all"
            actor_id: User attributed in the validation log
            actor_name: Display name attributed in the validation log
            fields: Field descriptors (defaults to the stored schema)
            records: Rows (defaults to the stored rows)

        Returns:
            Combined ValidationResult

        Raises:
            NotFoundError: If the file does not exist
        """
        file = self.files.get(file_id)
        if not file:
            raise NotFoundError("file", file_id)

        self.files.update(file_id, {"status": FileStatus.VALIDATING.value})

        try:
            if fields is None:
                fields = parse_fields(file.get("table_schema") or [])
            if records is None:
                records = [row["data"] for row in self.files.list_rows(file_id)]
            file_type = file.get("file_type") or ""

            started = time.perf_counter()
            if validation_type == "schema":
                result = self.validator.validate_schema(fields, file_type)
                result.total_records = len(records)
                result.valid_records = len(records)
            elif validation_type == "records":
                result = self.validator.validate_records(records, fields, file_type)
            else:
                result = ValidationResult.combine(
                    self.validator.validate_schema(fields, file_type),
                    self.validator.validate_records(records, fields, file_type),
                )
            elapsed_ms = (time.perf_counter() - started) * 1000

            self.save_validation_log(
                file_id, validation_type, describe_rules(file_type), result, elapsed_ms, actor_id, actor_name
            )
            self.update_file_validation_status(
                file_id, "valid" if result.is_valid else "invalid", result.errors
            )
            self.update_records_validation_status(file_id, result.errors)

            self.files.update(file_id, {"status": FileStatus.COMPLETED.value})
        except Exception:
            logger.exception(f"Validation of file {file_id} failed")
            self.files.update(file_id, {"status": FileStatus.FAILED.value})
            raise
        finally:
            if self.batch_service is not None:
                self.batch_service.recompute_stats(file["batch_id"])

        logger.info(
            f"Validated file {file_id} ({file_type}): "
            f"{result.valid_records}/{result.total_records} valid, {len(result.errors)} errors"
        )
        return result

    def save_validation_log(
        self,
        file_id: str,
        validation_type: str,
        rules: List[ValidationRule],
        result: ValidationResult,
        validation_time_ms: float,
        actor_id: Optional[str] = None,
        actor_name: Optional[str] = None,
    ) -> int:
        """Append a validation log entry; status is "completed" or "completed_with_errors"."""
        return self.validation_logs.add({
            "file_id": file_id,
            "validation_type": validation_type,
            "rules": [r.to_dict() for r in rules],
            "status": "completed" if result.is_valid else "completed_with_errors",
            "total_records": result.total_records,
            "valid_records": result.valid_records,
            "invalid_records": result.invalid_records,
            "errors": _error_dicts(result.errors),
            "validation_time_ms": round(validation_time_ms, 3),
            "validated_by_id": actor_id,
            "validated_by_name": actor_name,
        })

    def update_file_validation_status(
        self, file_id: str, status: str, errors: List[ValidationError]
    ) -> Dict[str, Any]:
        """Store the file's validation status and its serialized errors."""
        return self.files.update(file_id, {
            "validation_status": status,
            "validation_errors": json.dumps(_error_dicts(errors), ensure_ascii=False),
        })

    def update_records_validation_status(self, file_id: str, errors: List[ValidationError]) -> int:
        """
        Mark stored rows valid or invalid from row-level errors.

        Schema-level errors (row_index <= 0) are not tied to a row and are skipped.

        Returns:
            Number of rows marked invalid
        """
        by_row: Dict[int, List[Dict[str, Any]]] = defaultdict(list)
        for error, error_dict in zip(errors, _error_dicts(errors)):
            if error.row_index <= 0:
                continue
            by_row[error.row_index - 1].append(error_dict)

        return self.files.update_row_statuses(file_id, dict(by_row))
