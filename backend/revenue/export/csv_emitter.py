"""
CSV emitter for processed billing tables.

Polars-based:
- Header is the key order of the first record (empty file when no records)
- Every value cast to Utf8, nulls become empty strings
- Every data field quoted, embedded quotes doubled
- UTF-8, LF line endings
"""
from typing import List

import polars as pl

from revenue.core.table import Record


def render_csv(records: List[Record]) -> str:
    """
    Render records as CSV text.

    Args:
        records: Rows; columns come from the first record's keys

    Returns:
        CSV content (header line unquoted, data fields always quoted)
    """
    if not records:
        return ""

    headers = list(records[0].keys())
    header_line = ",".join(headers)

    columns = {
        header: ["" if record.get(header) is None else str(record.get(header)) for record in records]
        for header in headers
    }
    df = pl.DataFrame(columns, schema={header: pl.Utf8 for header in headers})

    body = df.write_csv(
        include_header=False,
        separator=",",
        quote_style="always",
        line_terminator="\n",
    )

    return header_line + "\n" + body.rstrip("\n")
