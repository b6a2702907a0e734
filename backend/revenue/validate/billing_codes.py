"""
Billing code table loader.

Enumerated codes and sentinel values come from the external billing
standard and change on its schedule, so they are kept in a versioned YAML
file rather than in the rule code.
"""
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import FrozenSet, Mapping, Optional

import yaml

from revenue.core.config import settings
from revenue.core.errors import RegistryError

DEFAULT_CODES_FILE = Path(__file__).parent / "billing_codes.yaml"


@dataclass(frozen=True)
class BillingCodes:
    version: str
    adp_type_codes: FrozenSet[str]
    cha_total_required_item: str
    adp_type_remap: Mapping[str, str] = field(default_factory=dict)
    cht_delete_code: str = "DELETE"


def load_billing_codes(path: Optional[Path] = None) -> BillingCodes:
    """
    Load the billing code table.

    Args:
        path: YAML file to read (defaults to BILLING_CODES_FILE or the packaged table)

    Raises:
        RegistryError: If the file is missing, unparseable or lacks a section
    """
    path = Path(path or settings.BILLING_CODES_FILE or DEFAULT_CODES_FILE)

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise RegistryError(f"Cannot read billing codes from {path}: {e}") from e

    try:
        return BillingCodes(
            version=str(data["version"]),
            adp_type_codes=frozenset(str(c) for c in data["adp"]["type_codes"]),
            cha_total_required_item=str(data["cha"]["total_required_charge_item"]),
            adp_type_remap={
                str(old): str(new) for old, new in (data["adp"].get("remapped_type_codes") or {}).items()
            },
            cht_delete_code=str((data.get("cht") or {}).get("delete_code", "DELETE")),
        )
    except (KeyError, TypeError) as e:
        raise RegistryError(f"Billing codes file {path} is missing {e}") from e


@lru_cache(maxsize=1)
def default_billing_codes() -> BillingCodes:
    return load_billing_codes()
