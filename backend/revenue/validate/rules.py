"""
Per-file-type rule registry.

Each billing file type (ADP, OPD, CHT, CHA, ...) maps to a FileTypeSpec:
the fields its schema must declare, the generic rules run on every record
and the business rules layered on top. BASE_RULES apply to every type,
including unregistered ones.

Adding a file type means adding one FILE_TYPES entry.
"""
from dataclasses import dataclass, field
from typing import Dict, List

from revenue.core.table import FieldDescriptor, FieldType
from revenue.validate.business_rules import (
    BusinessRule,
    adp_type_code,
    cha_total_for_charge_item,
    cht_numeric_seq,
)
from revenue.validate.types import RuleType, ValidationRule

UNKNOWN_FILE_TYPE = "UNKNOWN"

C, N, D = FieldType.CHARACTER.value, FieldType.NUMERIC.value, FieldType.DATE.value


@dataclass(frozen=True)
class RequiredField:
    name: str
    type: str


@dataclass(frozen=True)
class FileTypeSpec:
    file_type: str
    required_fields: List[RequiredField] = field(default_factory=list)
    rules: List[ValidationRule] = field(default_factory=list)
    business_rules: List[BusinessRule] = field(default_factory=list)
    business_rule_descriptions: List[ValidationRule] = field(default_factory=list)


def _required(name: str) -> ValidationRule:
    return ValidationRule(name, RuleType.REQUIRED, f"{name} is required")


def _format(name: str) -> ValidationRule:
    return ValidationRule(name, RuleType.FORMAT, f"{name} has an invalid format")


def _length(name: str) -> ValidationRule:
    return ValidationRule(name, RuleType.LENGTH, f"{name} exceeds its field length")


BASE_RULES: List[ValidationRule] = [
    _required("HN"),
    _length("HN"),
]


FILE_TYPES: Dict[str, FileTypeSpec] = {
    "ADP": FileTypeSpec(
        file_type="ADP",
        required_fields=[
            RequiredField("HN", C),
            RequiredField("DATEOPD", D),
            RequiredField("CODE", C),
            RequiredField("QTY", N),
            RequiredField("RATE", N),
        ],
        rules=[
            _required("DATEOPD"), _format("DATEOPD"),
            _required("CODE"), _length("CODE"),
            _format("QTY"),
            _format("RATE"),
        ],
        business_rules=[adp_type_code],
        business_rule_descriptions=[
            ValidationRule("ADP", RuleType.CUSTOM, "ADP must be a recognised type code"),
        ],
    ),
    "OPD": FileTypeSpec(
        file_type="OPD",
        required_fields=[
            RequiredField("HN", C),
            RequiredField("CLINIC", C),
            RequiredField("DATEOPD", D),
            RequiredField("SEQ", C),
        ],
        rules=[
            _required("CLINIC"), _length("CLINIC"),
            _required("DATEOPD"), _format("DATEOPD"),
            _required("SEQ"), _length("SEQ"),
        ],
    ),
    "CHT": FileTypeSpec(
        file_type="CHT",
        required_fields=[
            RequiredField("HN", C),
            RequiredField("DATE", D),
            RequiredField("TOTAL", N),
            RequiredField("PAID", N),
            RequiredField("PTTYPE", C),
        ],
        rules=[
            _required("DATE"), _format("DATE"),
            _required("TOTAL"), _format("TOTAL"),
            _format("PAID"),
            _length("PTTYPE"),
        ],
        business_rules=[cht_numeric_seq],
        business_rule_descriptions=[
            ValidationRule("SEQ", RuleType.CUSTOM, "SEQ must be numeric when present"),
        ],
    ),
    "CHA": FileTypeSpec(
        file_type="CHA",
        required_fields=[
            RequiredField("HN", C),
            RequiredField("DATE", D),
            RequiredField("CHRGITEM", C),
            RequiredField("AMOUNT", N),
        ],
        rules=[
            _required("DATE"), _format("DATE"),
            _required("CHRGITEM"), _length("CHRGITEM"),
            _format("AMOUNT"),
        ],
        business_rules=[cha_total_for_charge_item],
        business_rule_descriptions=[
            ValidationRule("TOTAL", RuleType.CUSTOM, "TOTAL required and numeric for the sentinel CHRGITEM"),
        ],
    ),
}


def get_file_type_spec(file_type: str) -> FileTypeSpec:
    """Registry entry for a file type; unregistered types get an empty spec."""
    key = (file_type or "").upper()
    return FILE_TYPES.get(key, FileTypeSpec(file_type=key or UNKNOWN_FILE_TYPE))


def get_validation_rules(file_type: str) -> List[ValidationRule]:
    """Generic rules run for a file type: BASE_RULES followed by the type's own."""
    return [*BASE_RULES, *get_file_type_spec(file_type).rules]


def describe_rules(file_type: str) -> List[ValidationRule]:
    """All rules for a file type, business rules included, for validation logs."""
    return [*get_validation_rules(file_type), *get_file_type_spec(file_type).business_rule_descriptions]


def detect_file_type(filename: str, fields: List[FieldDescriptor]) -> str:
    """
    Infer the billing file type from its name and columns.

    The name decides first (PAT files are OPD). A file whose name says
    nothing but which carries a charge column (CODE, QTY, RATE, TOTAL) is ADP.
    """
    name = (filename or "").upper()

    for file_type in ("ADP", "OPD", "CHT", "CHA", "INS", "DRU"):
        if file_type in name:
            return file_type
    if "PAT" in name:
        return "OPD"

    field_names = {f.name.upper() for f in fields}
    if field_names & {"CODE", "QTY", "RATE", "TOTAL"}:
        return "ADP"
    return UNKNOWN_FILE_TYPE
