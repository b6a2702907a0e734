"""
Unit Tests for ValidationService.

Repositories are mocked; the validator runs for real against a pinned code table.
"""
import json
from unittest.mock import Mock

import pytest

from revenue.services.validation_service import ValidationService
from revenue.validate.types import ValidationError, ValidationResult
from revenue.validate.validator import Validator

ADP_SCHEMA = [
    {"name": "HN", "type": "C", "length": 9, "decimal_places": 0},
    {"name": "DATEOPD", "type": "D", "length": 8, "decimal_places": 0},
    {"name": "CODE", "type": "C", "length": 11, "decimal_places": 0},
    {"name": "QTY", "type": "N", "length": 4, "decimal_places": 0},
    {"name": "RATE", "type": "N", "length": 12, "decimal_places": 2},
    {"name": "ADP", "type": "C", "length": 2, "decimal_places": 0},
]


@pytest.fixture
def files(adp_records):
    repo = Mock()
    repo.get = Mock(return_value={"id": "f1", "batch_id": "b1", "file_type": "ADP", "table_schema": ADP_SCHEMA})
    repo.list_rows = Mock(return_value=[{"record_index": i, "data": r} for i, r in enumerate(adp_records)])
    repo.update_row_statuses = Mock(return_value=0)
    return repo


@pytest.fixture
def logs():
    repo = Mock()
    repo.add = Mock(return_value=1)
    return repo


@pytest.fixture
def batch_service():
    return Mock()


@pytest.fixture
def service(files, logs, batch_service, billing_codes):
    return ValidationService(files, logs, batch_service, Validator(billing_codes))


def _statuses(files):
    return [c[0][1]["status"] for c in files.update.call_args_list if "status" in c[0][1]]


def test_valid_file(service, files, logs, batch_service):
    result = service.validate_file("f1", actor_id="u1", actor_name="Som")

    assert result.is_valid
    assert result.total_records == 2
    assert _statuses(files) == ["validating", "completed"]

    log = logs.add.call_args[0][0]
    assert log["file_id"] == "f1"
    assert log["status"] == "completed"
    assert log["validation_type"] == "all"
    assert log["validated_by_id"] == "u1"
    assert log["validated_by_name"] == "Som"
    assert log["errors"] == []
    assert log["validation_time_ms"] >= 0
    assert {"field": "HN", "rule_type": "required"}.items() <= log["rules"][0].items()
    assert log["rules"][-1]["rule_type"] == "custom"

    files.update.assert_any_call("f1", {"validation_status": "valid", "validation_errors": "[]"})
    files.update_row_statuses.assert_called_once_with("f1", {})
    batch_service.recompute_stats.assert_called_once_with("b1")


def test_invalid_file_still_completes(service, files, logs, adp_records):
    adp_records[1]["QTY"] = "x"
    result = service.validate_file("f1")

    assert not result.is_valid
    assert result.invalid_records == 1
    assert _statuses(files) == ["validating", "completed"]
    assert logs.add.call_args[0][0]["status"] == "completed_with_errors"

    stored = [c[0][1] for c in files.update.call_args_list if "validation_status" in c[0][1]][0]
    assert stored["validation_status"] == "invalid"
    assert json.loads(stored["validation_errors"])[0]["field"] == "QTY"

    invalid_rows = files.update_row_statuses.call_args[0][1]
    assert list(invalid_rows) == [1]
    assert invalid_rows[1][0]["row_index"] == 2


def test_schema_errors_not_applied_to_rows(service, files):
    files.get.return_value["table_schema"] = ADP_SCHEMA[:4]  # drops RATE
    result = service.validate_file("f1")

    assert not result.is_valid
    assert result.errors[0].row_index == -1
    files.update_row_statuses.assert_called_once_with("f1", {})


def test_schema_only(service, files):
    files.get.return_value["table_schema"] = ADP_SCHEMA[:4]
    result = service.validate_file("f1", "schema")

    assert [e.field for e in result.errors] == ["RATE"]
    assert result.total_records == 2


def test_records_only(service, files):
    files.get.return_value["table_schema"] = ADP_SCHEMA[:4]
    assert service.validate_file("f1", "records").is_valid


def test_explicit_records_override_stored_rows(service, files, adp_records):
    result = service.validate_file("f1", records=adp_records[:1])

    assert result.total_records == 1
    files.list_rows.assert_not_called()


def test_missing_file(service, files, batch_service):
    from revenue.core.errors import NotFoundError

    files.get.return_value = None
    with pytest.raises(NotFoundError):
        service.validate_file("missing")
    files.update.assert_not_called()
    batch_service.recompute_stats.assert_not_called()


def test_infrastructure_failure_marks_failed(service, files, logs, batch_service):
    logs.add.side_effect = RuntimeError("database is locked")

    with pytest.raises(RuntimeError):
        service.validate_file("f1")

    assert _statuses(files) == ["validating", "failed"]
    batch_service.recompute_stats.assert_called_once_with("b1")


def test_without_batch_service(files, logs, billing_codes):
    service = ValidationService(files, logs, validator=Validator(billing_codes))
    assert service.validate_file("f1").is_valid


def test_update_records_validation_status_groups_by_row(service, files):
    errors = [
        ValidationError(-1, "RATE", None, "missing", "required"),
        ValidationError(0, "X", None, "schema", "required"),
        ValidationError(1, "QTY", "x", "bad", "format"),
        ValidationError(3, "HN", "", "req", "required"),
        ValidationError(3, "ADP", "15", "code", "custom"),
    ]
    service.update_records_validation_status("f1", errors)

    invalid_rows = files.update_row_statuses.call_args[0][1]
    assert sorted(invalid_rows) == [0, 2]
    assert [e["field"] for e in invalid_rows[2]] == ["HN", "ADP"]


def test_save_validation_log_serializes_values(service, logs):
    from datetime import date

    result = ValidationResult(
        is_valid=False,
        errors=[ValidationError(1, "DATE", date(2024, 1, 15), "bad", "format")],
        total_records=1,
        valid_records=0,
        invalid_records=1,
    )
    service.save_validation_log("f1", "records", [], result, 1.23456)

    log = logs.add.call_args[0][0]
    assert log["errors"][0]["value"] == "2024-01-15"
    assert log["validation_time_ms"] == 1.235
    assert log["invalid_records"] == 1
