"""
Validation module: file-type rule registry and record validator.
"""
from revenue.validate.rules import detect_file_type, describe_rules, get_validation_rules
from revenue.validate.types import RuleType, ValidationError, ValidationResult, ValidationRule
from revenue.validate.validator import Validator

__all__ = [
    "Validator",
    "ValidationResult",
    "ValidationError",
    "ValidationRule",
    "RuleType",
    "detect_file_type",
    "describe_rules",
    "get_validation_rules",
]
