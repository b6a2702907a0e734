"""
JSON emitter for processed billing tables.
"""
import json
from datetime import datetime, timezone
from typing import List, Optional

from revenue.core.table import Record


def render_json(records: List[Record], filename: str, exported_at: Optional[datetime] = None) -> str:
    """
    Render records inside a metadata envelope.

    Dates and other non-JSON values are written with str().
    """
    exported_at = exported_at or datetime.now(timezone.utc)
    envelope = {
        "metadata": {
            "filename": filename,
            "recordCount": len(records),
            "exportTimestamp": exported_at.isoformat(),
            "format": "JSON",
        },
        "records": records,
    }
    return json.dumps(envelope, indent=2, ensure_ascii=False, default=str)
