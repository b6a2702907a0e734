"""
Table schema types shared by validation and export.

A decoded billing file arrives as a list of FieldDescriptor plus a list of
records (plain dicts mapping field name to value, one per data row).
"""
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, List

from revenue.core.errors import SchemaError

Record = Dict[str, Any]

# Legacy field names are stored in an 11-byte null-padded slot.
MAX_FIELD_NAME_LENGTH = 11
MAX_FIELD_LENGTH = 255


class FieldType(str, Enum):
    """Storage type codes of the legacy table format."""

    CHARACTER = "C"
    NUMERIC = "N"
    FLOAT = "F"
    DATE = "D"


NUMERIC_TYPES = {FieldType.NUMERIC.value, FieldType.FLOAT.value}


@dataclass(frozen=True)
class FieldDescriptor:
    """Metadata for one column: name, storage type code, byte length, decimals."""

    name: str
    type: str
    length: int
    decimal_places: int = 0

    @property
    def is_numeric(self) -> bool:
        return self.type in NUMERIC_TYPES

    @property
    def is_date(self) -> bool:
        return self.type == FieldType.DATE.value

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldDescriptor":
        """
        Parse a field descriptor from a dict.

        Accepts both ``decimal_places`` and the upstream ``decimalPlaces`` key.

        Raises:
            SchemaError: If name, type or length are missing or out of range
        """
        name = data.get("name")
        type_code = data.get("type")
        length = data.get("length")
        decimals = data.get("decimal_places", data.get("decimalPlaces", 0)) or 0

        if not name or not isinstance(name, str):
            raise SchemaError(f"Field descriptor is missing a name: {data}")
        if len(name) > MAX_FIELD_NAME_LENGTH:
            raise SchemaError(f"Field name '{name}' exceeds {MAX_FIELD_NAME_LENGTH} characters")
        if not type_code or not isinstance(type_code, str):
            raise SchemaError(f"Field '{name}' is missing a type code")
        try:
            length = int(length)
            decimals = int(decimals)
        except (TypeError, ValueError):
            raise SchemaError(f"Field '{name}' has a non-integer length or decimal count")
        if not 0 < length <= MAX_FIELD_LENGTH:
            raise SchemaError(f"Field '{name}' length {length} outside 1..{MAX_FIELD_LENGTH}")
        if decimals < 0:
            raise SchemaError(f"Field '{name}' has negative decimal places")

        return cls(name=name, type=type_code.upper()[:1], length=length, decimal_places=decimals)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def parse_fields(raw_fields: List[Dict[str, Any]]) -> List[FieldDescriptor]:
    """Parse a list of field dicts, preserving order."""
    return [FieldDescriptor.from_dict(f) for f in raw_fields]
