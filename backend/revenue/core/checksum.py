"""
Content checksums for upload integrity and duplicate detection.
"""
import hashlib
import json
from typing import Any, Dict, List


def checksum(data: bytes) -> str:
    """
    SHA-256 hex digest of raw content.

    Same bytes always hash the same; any single-byte change changes the digest.
    """
    return hashlib.sha256(data).hexdigest()


def payload_checksum(fields: List[Dict[str, Any]], records: List[Dict[str, Any]]) -> str:
    """
    Checksum of an already-decoded table.

    Serializes fields and records as canonical JSON (sorted keys, no
    whitespace) so equal tables hash equally regardless of key order.
    """
    canonical = json.dumps(
        {"fields": fields, "records": records},
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )
    return checksum(canonical.encode("utf-8"))
