"""
Export module: CSV, JSON and legacy binary table writers.
"""
from revenue.export.csv_emitter import render_csv
from revenue.export.json_emitter import render_json
from revenue.export.table_codec import encode_table, format_date, header_length, record_length
from revenue.export.table_writer import TableWriter

__all__ = [
    "render_csv",
    "render_json",
    "encode_table",
    "format_date",
    "header_length",
    "record_length",
    "TableWriter",
]
