"""
Export service - writes processed billing tables as CSV, JSON or DBF.

Every export:
1. Ensures the output directory exists (idempotent)
2. Names the output "{epoch_ms}_{basename}_processed.{ext}"
3. Writes the content (UTF-8 text, or bytes for DBF)
4. Returns an ExportResult with elapsed seconds

Exports never raise: any failure becomes a failed ExportResult, so a
multi-format export keeps going after one format fails. Formats run one
after another in the requested order.
"""
import re
import time
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from revenue.core.config import settings
from revenue.core.errors import UnsupportedFormatError
from revenue.core.logging_config import export_logger as logger
from revenue.core.table import FieldDescriptor, Record
from revenue.export.csv_emitter import render_csv
from revenue.export.json_emitter import render_json
from revenue.export.table_codec import encode_table

DEFAULT_FORMATS = ["CSV", "JSON", "DBF"]


@dataclass
class ExportResult:
    """Outcome of one format export."""

    success: bool
    format: str
    filename: str = ""
    file_path: str = ""
    record_count: int = 0
    processing_time: float = 0.0  # seconds, 2 decimals
    message: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ExportSummary:
    """Aggregate over a set of export results."""

    total_files: int = 0
    successful_exports: int = 0
    failed_exports: int = 0
    total_records: int = 0
    formats: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def base_name(filename: str) -> str:
    """Source file name without its .dbf extension."""
    return re.sub(r"\.dbf$", "", filename, flags=re.IGNORECASE)


class ExportService:
    """
    Exports decoded records to files in an output directory.

    Args:
        output_dir: Default directory (EXPORT_DIR setting when omitted)
        clock: Returns epoch seconds; used for output names
    """

    def __init__(self, output_dir: Optional[Union[str, Path]] = None, clock: Callable[[], float] = time.time):
        self.output_dir = Path(output_dir or settings.EXPORT_DIR)
        self.clock = clock

    def export_csv(
        self, records: List[Record], filename: str, output_dir: Optional[Union[str, Path]] = None
    ) -> ExportResult:
        return self._export("CSV", "csv", lambda: render_csv(records), records, filename, output_dir)

    def export_json(
        self, records: List[Record], filename: str, output_dir: Optional[Union[str, Path]] = None
    ) -> ExportResult:
        return self._export("JSON", "json", lambda: render_json(records, filename), records, filename, output_dir)

    def export_dbf(
        self,
        records: List[Record],
        fields: List[FieldDescriptor],
        filename: str,
        output_dir: Optional[Union[str, Path]] = None,
    ) -> ExportResult:
        return self._export("DBF", "dbf", lambda: encode_table(fields, records), records, filename, output_dir)

    def export_multiple_formats(
        self,
        records: List[Record],
        fields: List[FieldDescriptor],
        filename: str,
        formats: Optional[List[str]] = None,
        output_dir: Optional[Union[str, Path]] = None,
    ) -> List[ExportResult]:
        """
        Export to several formats in order.

        An unknown format yields a failed result naming it; the remaining
        formats still run. None means all default formats; an empty list
        exports nothing.
        """
        results: List[ExportResult] = []

        for format in DEFAULT_FORMATS if formats is None else formats:
            tag = format.upper()
            try:
                if tag == "CSV":
                    result = self.export_csv(records, filename, output_dir)
                elif tag == "JSON":
                    result = self.export_json(records, filename, output_dir)
                elif tag == "DBF":
                    result = self.export_dbf(records, fields, filename, output_dir)
                else:
                    raise UnsupportedFormatError(format)
            except UnsupportedFormatError as e:
                logger.warning(str(e))
                result = ExportResult(success=False, format=format, error=str(e))
            results.append(result)

        return results

    @staticmethod
    def summarize(results: List[ExportResult]) -> ExportSummary:
        """Count successes and failures; records and formats come from successes only."""
        summary = ExportSummary(total_files=len(results))

        for result in results:
            if result.success:
                summary.successful_exports += 1
                summary.total_records += result.record_count
                summary.formats.append(result.format)
            else:
                summary.failed_exports += 1
                if result.error:
                    summary.errors.append(f"{result.format}: {result.error}")

        return summary

    def _export(
        self,
        format: str,
        extension: str,
        render: Callable[[], Union[str, bytes]],
        records: List[Record],
        filename: str,
        output_dir: Optional[Union[str, Path]],
    ) -> ExportResult:
        started = time.perf_counter()

        try:
            directory = Path(output_dir or self.output_dir)
            directory.mkdir(parents=True, exist_ok=True)

            timestamp = int(self.clock() * 1000)
            out_name = f"{timestamp}_{base_name(filename)}_processed.{extension}"
            file_path = directory / out_name

            content = render()
            if isinstance(content, bytes):
                file_path.write_bytes(content)
            else:
                file_path.write_text(content, encoding="utf-8")

            elapsed = round(time.perf_counter() - started, 2)
            logger.info(f"{format} exported: {file_path} ({len(records)} records)")

            return ExportResult(
                success=True,
                format=format,
                filename=out_name,
                file_path=str(file_path),
                record_count=len(records),
                processing_time=elapsed,
                message=f"{format} exported successfully",
            )
        except Exception as e:
            logger.exception(f"Error exporting {filename} to {format}")
            return ExportResult(success=False, format=format, error=str(e))
