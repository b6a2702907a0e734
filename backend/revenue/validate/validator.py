"""
Validator - validates decoded billing tables against file-type rules.

Two levels, both pure (no I/O, no persistence):
1. Schema: every required field of the file type is declared with the
   expected storage type → `required` / `format` errors at row -1
2. Records: per row (1-based), every generic rule of the file type
   (required, length, format), then the type's business rules

Rules are evaluated independently, so one row can collect several errors.
A row counts once towards invalid_records however many errors it has.
"""
from typing import Dict, List, Optional

from revenue.core.table import NUMERIC_TYPES, FieldDescriptor, Record
from revenue.validate.billing_codes import BillingCodes, default_billing_codes
from revenue.validate.checks import as_text, is_empty, is_number, is_table_date
from revenue.validate.rules import get_file_type_spec, get_validation_rules
from revenue.validate.types import (
    SCHEMA_ROW,
    RuleType,
    ValidationError,
    ValidationResult,
    ValidationRule,
)


def _types_match(expected: str, actual: str) -> bool:
    # Numeric and Float store the same right-justified text
    if expected in NUMERIC_TYPES:
        return actual in NUMERIC_TYPES
    return expected == actual


class Validator:
    """
    Validates field schemas and records for a billing file type.

    Business-rule constants come from the billing code table; pass
    ``codes`` to pin a specific table version.
    """

    def __init__(self, codes: Optional[BillingCodes] = None):
        self._codes = codes

    @property
    def codes(self) -> BillingCodes:
        if self._codes is None:
            self._codes = default_billing_codes()
        return self._codes

    def validate_schema(self, fields: List[FieldDescriptor], file_type: str) -> ValidationResult:
        """
        Check the declared fields against the file type's required fields.

        Args:
            fields: Field descriptors of the file
            file_type: Billing file type code (ADP, OPD, CHT, CHA, ...)

        Returns:
            ValidationResult with schema-level errors only
        """
        spec = get_file_type_spec(file_type)
        declared: Dict[str, FieldDescriptor] = {f.name: f for f in fields}
        errors: List[ValidationError] = []

        for required in spec.required_fields:
            field = declared.get(required.name)
            if field is None:
                errors.append(
                    ValidationError(
                        row_index=SCHEMA_ROW,
                        field=required.name,
                        value=None,
                        message=f"Required field {required.name} is missing from {spec.file_type} schema",
                        rule_type=RuleType.REQUIRED.value,
                    )
                )
            elif not _types_match(required.type, field.type):
                errors.append(
                    ValidationError(
                        row_index=SCHEMA_ROW,
                        field=required.name,
                        value=field.type,
                        message=f"Field {required.name} must be type {required.type}, found {field.type}",
                        rule_type=RuleType.FORMAT.value,
                    )
                )

        return ValidationResult(is_valid=not errors, errors=errors)

    def validate_records(
        self, records: List[Record], fields: List[FieldDescriptor], file_type: str
    ) -> ValidationResult:
        """
        Run generic and business rules over every record.

        Args:
            records: Decoded rows keyed by field name
            fields: Field descriptors (drive length and format checks)
            file_type: Billing file type code

        Returns:
            ValidationResult with per-row errors and valid/invalid counts
        """
        spec = get_file_type_spec(file_type)
        rules = get_validation_rules(file_type)
        declared: Dict[str, FieldDescriptor] = {f.name: f for f in fields}
        codes = self.codes
        errors: List[ValidationError] = []

        for row_index, record in enumerate(records, start=1):
            for rule in rules:
                error = self._apply_rule(rule, record, declared.get(rule.field), row_index)
                if error is not None:
                    errors.append(error)

            for business_rule in spec.business_rules:
                errors.extend(business_rule(record, row_index, codes))

        invalid_records = len({e.row_index for e in errors})
        return ValidationResult(
            is_valid=not errors,
            errors=errors,
            total_records=len(records),
            valid_records=len(records) - invalid_records,
            invalid_records=invalid_records,
        )

    def _apply_rule(
        self,
        rule: ValidationRule,
        record: Record,
        field: Optional[FieldDescriptor],
        row_index: int,
    ) -> Optional[ValidationError]:
        value = record.get(rule.field)

        if rule.rule_type == RuleType.REQUIRED:
            failed = is_empty(value)
        elif is_empty(value) or field is None:
            # Length and format only apply to present values of declared fields
            return None
        elif rule.rule_type == RuleType.LENGTH:
            failed = len(as_text(value)) > field.length
        elif rule.rule_type == RuleType.FORMAT:
            failed = not self._format_ok(value, field)
        else:
            return None

        if not failed:
            return None
        return ValidationError(
            row_index=row_index,
            field=rule.field,
            value=value,
            message=rule.message,
            rule_type=rule.rule_type.value,
        )

    def _format_ok(self, value, field: FieldDescriptor) -> bool:
        if field.is_date:
            return is_table_date(value)
        if field.is_numeric:
            return is_number(value)
        return True
