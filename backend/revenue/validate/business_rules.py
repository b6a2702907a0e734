"""
File-type business rules.

Each rule takes one record and its 1-based row index and returns the
violations it finds. Code sets and sentinels come from BillingCodes.
"""
from typing import Callable, List

from revenue.core.table import Record
from revenue.validate.billing_codes import BillingCodes
from revenue.validate.checks import is_empty, is_number
from revenue.validate.types import RuleType, ValidationError

BusinessRule = Callable[[Record, int, BillingCodes], List[ValidationError]]


def adp_type_code(record: Record, row_index: int, codes: BillingCodes) -> List[ValidationError]:
    value = record.get("ADP")
    if is_empty(value) or str(value).strip() in codes.adp_type_codes:
        return []
    return [
        ValidationError(
            row_index=row_index,
            field="ADP",
            value=value,
            message=f"ADP type code '{value}' is not recognised (code table {codes.version})",
            rule_type=RuleType.CUSTOM.value,
        )
    ]


def cht_numeric_seq(record: Record, row_index: int, codes: BillingCodes) -> List[ValidationError]:
    value = record.get("SEQ")
    if is_empty(value) or is_number(value):
        return []
    return [
        ValidationError(
            row_index=row_index,
            field="SEQ",
            value=value,
            message="SEQ must be numeric",
            rule_type=RuleType.CUSTOM.value,
        )
    ]


def cha_total_for_charge_item(record: Record, row_index: int, codes: BillingCodes) -> List[ValidationError]:
    item = record.get("CHRGITEM")
    if is_empty(item) or str(item).strip() != codes.cha_total_required_item:
        return []

    total = record.get("TOTAL")
    if not is_empty(total) and is_number(total):
        return []
    return [
        ValidationError(
            row_index=row_index,
            field="TOTAL",
            value=total,
            message=f"TOTAL is required and must be numeric when CHRGITEM is {codes.cha_total_required_item}",
            rule_type=RuleType.CUSTOM.value,
        )
    ]
