"""
Validation data types.

Validation outcomes are data, not exceptions: every rule violation becomes a
ValidationError in a ValidationResult.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

# Row index used for errors about the file schema rather than a data row.
SCHEMA_ROW = -1


class RuleType(str, Enum):
    REQUIRED = "required"
    FORMAT = "format"
    LENGTH = "length"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ValidationRule:
    """One registered check on one field."""

    field: str
    rule_type: RuleType
    message: str
    param: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field,
            "rule_type": self.rule_type.value,
            "param": self.param,
            "message": self.message,
        }


@dataclass
class ValidationError:
    """A single violation. row_index is 1-based, SCHEMA_ROW for schema errors."""

    row_index: int
    field: str
    value: Any
    message: str
    rule_type: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "row_index": self.row_index,
            "field": self.field,
            "value": self.value,
            "message": self.message,
            "rule_type": self.rule_type,
        }


@dataclass
class ValidationResult:
    """Result of a schema or record validation pass."""

    is_valid: bool
    errors: List[ValidationError] = field(default_factory=list)
    total_records: int = 0
    valid_records: int = 0
    invalid_records: int = 0

    @classmethod
    def combine(cls, schema: "ValidationResult", records: "ValidationResult") -> "ValidationResult":
        """Merge a schema pass and a record pass; record counts come from the record pass."""
        return cls(
            is_valid=schema.is_valid and records.is_valid,
            errors=[*schema.errors, *records.errors],
            total_records=records.total_records,
            valid_records=records.valid_records,
            invalid_records=records.invalid_records,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "total_records": self.total_records,
            "valid_records": self.valid_records,
            "invalid_records": self.invalid_records,
        }
