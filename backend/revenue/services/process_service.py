"""
Process service - applies per-type corrections to the stored rows of a batch.

Corrections by file type:
- ADP: retired type codes in ADP and TYPE are remapped (15 -> 16)
- CHT: lines whose CODE is the delete code, or whose QTY is zero or blank,
  are dropped; their SEQ values are remembered for the batch
- CHA: lines whose SEQ was dropped from a CHT file of the same batch are
  dropped, and TOTAL becomes QTY * RATE for the recomputed charge item
- INS: lines whose SEQ was dropped from a CHT file are dropped
- OPD: OPTYPE is upper-cased and trimmed, DATE is normalized to YYYYMMDD
Other types pass through unchanged.

Flow for one batch (process_batch):
1. Move the batch to "processing"
2. Process CHT files first, then the rest, in upload order
3. For each file: replace its stored rows, append a processing log and
   mark it "completed" (or "failed" on an error, which is reported per file)
4. Recompute counters; the batch is "completed" once every file is processed
"""
import time
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

from revenue.core.logging_config import process_logger as logger
from revenue.core.table import Record
from revenue.export.table_codec import EMPTY_DATE, format_date
from revenue.ports.repositories import FilesRepo, ProcessingLogsRepo
from revenue.services.batch_service import BatchService, BatchStatus, FileStatus
from revenue.validate.billing_codes import BillingCodes, default_billing_codes
from revenue.validate.checks import is_empty, is_number

PROCESSING_TYPE = "batch"


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _number(value: Any) -> Optional[float]:
    """Blank counts as 0; anything non-numeric is None."""
    if is_empty(value):
        return 0.0
    return float(str(value).strip()) if is_number(value) else None


def _number_text(value: float) -> str:
    return str(int(value)) if value.is_integer() else str(value)


def remap_adp_type_codes(records: Iterable[Record], remap: Dict[str, str]) -> List[Record]:
    """Replace retired type codes in the ADP and TYPE fields."""
    processed = []
    for record in records:
        record = dict(record)
        for name in ("ADP", "TYPE"):
            code = _text(record.get(name))
            if code in remap:
                record[name] = remap[code]
        processed.append(record)
    return processed


def should_delete_seq(record: Record, delete_code: str = "DELETE") -> bool:
    """A CHT line is dropped when CODE is the delete code or QTY is zero or blank."""
    if _text(record.get("CODE")) == delete_code:
        return True
    return _number(record.get("QTY")) == 0


def process_cht(records: Iterable[Record], delete_code: str = "DELETE") -> Tuple[List[Record], Set[str]]:
    """
    Drop deleted CHT lines.

    Lines without a SEQ are always kept.

    Returns:
        (kept records, SEQ values of the dropped lines)
    """
    kept: List[Record] = []
    deleted: Set[str] = set()
    for record in records:
        seq = _text(record.get("SEQ"))
        if seq and should_delete_seq(record, delete_code):
            deleted.add(seq)
            continue
        kept.append(record)
    return kept, deleted


def drop_deleted_seqs(records: Iterable[Record], deleted_seqs: Set[str]) -> List[Record]:
    return [r for r in records if _text(r.get("SEQ")) not in deleted_seqs]


def process_cha(records: Iterable[Record], deleted_seqs: Set[str], charge_item: str = "31") -> List[Record]:
    """
    Drop lines of deleted SEQs and recompute TOTAL = QTY * RATE for the charge item.

    TOTAL is left as-is when QTY or RATE is not numeric.
    """
    processed = []
    for record in drop_deleted_seqs(records, deleted_seqs):
        if _text(record.get("CHRGITEM")) == charge_item:
            qty, rate = _number(record.get("QTY")), _number(record.get("RATE"))
            if qty is not None and rate is not None:
                record = {**record, "TOTAL": _number_text(qty * rate)}
        processed.append(record)
    return processed


def format_date_for_export(value: Any) -> Any:
    """YYYYMMDD for recognisable dates; anything else is returned unchanged."""
    formatted = format_date(value)
    return value if formatted == EMPTY_DATE else formatted


def process_opd(records: Iterable[Record]) -> List[Record]:
    processed = []
    for record in records:
        record = dict(record)
        if not is_empty(record.get("OPTYPE")):
            record["OPTYPE"] = str(record["OPTYPE"]).upper().strip()
        if not is_empty(record.get("DATE")):
            record["DATE"] = format_date_for_export(record["DATE"])
        processed.append(record)
    return processed


@dataclass
class ProcessFileResult:
    """Outcome of processing one file."""

    file_id: str
    filename: str
    file_type: Optional[str]
    status: str  # completed, error
    record_count: int = 0
    details: str = ""
    processing_time_ms: float = 0.0
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ProcessService:
    """Runs per-type corrections over a batch and records the outcome per file."""

    def __init__(
        self,
        files: FilesRepo,
        processing_logs: ProcessingLogsRepo,
        batch_service: BatchService,
        codes: Optional[BillingCodes] = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.files = files
        self.processing_logs = processing_logs
        self.batch_service = batch_service
        self._codes = codes
        self.clock = clock

    @property
    def codes(self) -> BillingCodes:
        if self._codes is None:
            self._codes = default_billing_codes()
        return self._codes

    def process_records(
        self, file_type: Optional[str], records: List[Record], deleted_seqs: Set[str]
    ) -> Tuple[List[Record], str]:
        """
        Apply the corrections for one file type.

        SEQ values dropped from a CHT file are added to deleted_seqs.

        Returns:
            (processed records, human-readable summary)
        """
        file_type = (file_type or "").upper()

        if file_type == "ADP":
            remap = dict(self.codes.adp_type_remap)
            pairs = ", ".join(f"{old} -> {new}" for old, new in sorted(remap.items()))
            return remap_adp_type_codes(records, remap), f"Remapped ADP type codes ({pairs or 'none'})"
        if file_type == "CHT":
            kept, deleted = process_cht(records, self.codes.cht_delete_code)
            deleted_seqs.update(deleted)
            return kept, f"Removed {len(deleted)} SEQ value(s), {len(records) - len(kept)} line(s)"
        if file_type == "CHA":
            item = self.codes.cha_total_required_item
            processed = process_cha(records, deleted_seqs, item)
            return processed, f"Recomputed TOTAL for CHRGITEM {item}, removed {len(records) - len(processed)} line(s)"
        if file_type == "INS":
            processed = drop_deleted_seqs(records, deleted_seqs)
            return processed, f"Removed {len(records) - len(processed)} line(s) of deleted SEQ values"
        if file_type == "OPD":
            return process_opd(records), "Normalized OPTYPE and DATE"
        return list(records), "No corrections for this file type"

    def process_batch(
        self, batch_id: str, actor_id: Optional[str] = None, actor_name: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Process every file of a batch.

        Args:
            batch_id: Batch to process
            actor_id: User attributed in the processing logs
            actor_name: Display name attributed in the processing logs

        Returns:
            batch_id, final batch status, processed/total file counts and
            per-file results

        Raises:
            NotFoundError: If the batch does not exist
        """
        self.batch_service.update_batch_status(batch_id, BatchStatus.PROCESSING.value)

        files = self.files.list_for_batch(batch_id)
        # CHT first so its dropped SEQ values reach CHA and INS files
        ordered = sorted(files, key=lambda f: (f.get("file_type") or "").upper() != "CHT")

        deleted_seqs: Set[str] = set()
        results = [self.process_file(file, deleted_seqs, actor_id, actor_name) for file in ordered]

        batch = self.batch_service.finish_processing(batch_id)

        status = batch["status"]
        failed = sum(1 for r in results if r.status != "completed")
        logger.info(f"Processed batch {batch_id}: {len(results) - failed}/{len(results)} file(s), status {status}")
        return {
            "batch_id": batch_id,
            "batch_status": status,
            "processed_files": batch["processed_files"],
            "total_files": batch["total_files"],
            "results": [r.to_dict() for r in results],
        }

    def process_file(
        self,
        file: Dict[str, Any],
        deleted_seqs: Set[str],
        actor_id: Optional[str] = None,
        actor_name: Optional[str] = None,
    ) -> ProcessFileResult:
        """
        Process one stored file and replace its rows.

        Errors are logged, mark the file "failed" and come back as an
        "error" result so the rest of the batch still runs.
        """
        file_id = file["id"]
        result = ProcessFileResult(
            file_id=file_id, filename=file["filename"], file_type=file.get("file_type"), status="completed"
        )

        try:
            records = [row["data"] for row in self.files.list_rows(file_id)]
            started = self.clock()
            processed, details = self.process_records(file.get("file_type"), records, deleted_seqs)
            elapsed_ms = round((self.clock() - started) * 1000, 3)

            self.files.replace_rows(file_id, processed)
            self.processing_logs.add({
                "file_id": file_id,
                "processing_type": PROCESSING_TYPE,
                "details": {"summary": details, "input_records": len(records)},
                "record_count": len(processed),
                "processing_time_ms": elapsed_ms,
                "status": "completed",
                "processed_by_id": actor_id,
                "processed_by_name": actor_name,
            })
            self.files.update(file_id, {"record_count": len(processed), "status": FileStatus.COMPLETED.value})
        except Exception as e:
            logger.exception(f"Processing of file {file_id} failed")
            self.files.update(file_id, {"status": FileStatus.FAILED.value})
            result.status = "error"
            result.error = str(e)
            return result

        result.record_count = len(processed)
        result.details = details
        result.processing_time_ms = elapsed_ms
        logger.info(f"Processed file {file['filename']} ({file_id}): {details}")
        return result
