"""
Batch service - lifecycle bookkeeping for upload batches.

Lifecycle:
    created → uploading → completed | failed
    completed → processing → completed | failed (processing runs on its own clock)

Uploads are refused once a batch is completed or failed.

Aggregate counters (total/uploaded/processed files, total records, total
size) are stored facts and always recomputed wholesale from the batch's
current files, never patched incrementally, so concurrent file completions
cannot make them drift. Progress percentages are derived at read time.
"""
import json
import math
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from revenue.core.checksum import checksum as content_checksum
from revenue.core.errors import AccessDeniedError, BatchClosedError, NotFoundError
from revenue.core.logging_config import batch_logger as logger
from revenue.ports.repositories import ActivityLogsRepo, BatchesRepo, FilesRepo


class BatchStatus(str, Enum):
    CREATED = "created"
    UPLOADING = "uploading"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class FileStatus(str, Enum):
    UPLOADED = "uploaded"
    VALIDATING = "validating"
    COMPLETED = "completed"
    FAILED = "failed"


# Timestamp stamped by each status transition
STATUS_TIMESTAMPS = {
    BatchStatus.UPLOADING: "upload_started_at",
    BatchStatus.COMPLETED: "upload_completed_at",
    BatchStatus.PROCESSING: "processing_started_at",
    BatchStatus.FAILED: "processing_completed_at",
}


# Statuses that no longer accept uploads
CLOSED_STATUSES = {BatchStatus.COMPLETED.value, BatchStatus.FAILED.value}


def percent(part: int, total: int) -> int:
    """Whole-number percentage, rounding halves up; 0 when total is 0."""
    if not total:
        return 0
    return int(math.floor(part * 100 / total + 0.5))


class BatchService:
    """
    Creates batches, attaches files and keeps batch counters consistent.

    Storage is reached only through the repository ports.
    """

    def __init__(
        self,
        batches: BatchesRepo,
        files: FilesRepo,
        activity: ActivityLogsRepo,
        now: Callable[[], datetime] = datetime.utcnow,
    ):
        self.batches = batches
        self.files = files
        self.activity = activity
        self.now = now

    def create_batch(
        self, owner: Optional[str], client_addr: Optional[str], options: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Create a new batch in status "created".

        Args:
            owner: User id of the creator; only they may delete the batch
            client_addr: Client IP address
            options: batch_name, user_agent and free-form metadata

        Returns:
            Batch view with derived progress
        """
        options = options or {}
        batch_name = options.get("batch_name") or f"Batch {self.now():%Y-%m-%d %H:%M:%S}"

        batch = self.batches.create({
            "batch_name": batch_name,
            "status": BatchStatus.CREATED.value,
            "user_id": owner,
            "ip_address": client_addr,
            "user_agent": options.get("user_agent"),
            "batch_metadata": dict(options.get("metadata") or {}),
        })

        logger.info(f"Created batch {batch['id']} ({batch_name}) for {owner}")
        return self._batch_view(batch)

    def update_batch_status(
        self, batch_id: str, status: str, metadata: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Move a batch to a new status and stamp the matching timestamp.

        Args:
            batch_id: Batch to update
            status: One of BatchStatus values
            metadata: Keys merged into the stored metadata

        Raises:
            NotFoundError: If the batch does not exist
            ValueError: If status is not a known batch status
        """
        status = BatchStatus(status)
        batch = self._require_batch(batch_id)

        updates: Dict[str, Any] = {"status": status.value}
        stamp = STATUS_TIMESTAMPS.get(status)
        if stamp:
            updates[stamp] = self.now()
        if metadata:
            updates["batch_metadata"] = {**(batch.get("batch_metadata") or {}), **metadata}

        batch = self.batches.update(batch_id, updates)
        logger.info(f"Batch {batch_id} status -> {status.value}")
        return self._batch_view(batch)

    def start_upload(self, batch_id: str) -> Dict[str, Any]:
        """
        Open an upload round by moving the batch to "uploading".

        Raises:
            NotFoundError: If the batch does not exist
            BatchClosedError: If the batch is already completed or failed
        """
        batch = self._require_batch(batch_id)
        status = batch["status"]
        if status in CLOSED_STATUSES:
            logger.warning(f"Refused upload to {status} batch {batch_id}")
            raise BatchClosedError(batch_id, status)
        return self.update_batch_status(batch_id, BatchStatus.UPLOADING.value)

    def add_file(
        self,
        batch_id: str,
        file_meta: Dict[str, Any],
        owner: Optional[str],
        client_addr: Optional[str],
    ) -> Dict[str, Any]:
        """
        Attach an uploaded file to a batch and refresh the batch counters.

        Args:
            batch_id: Target batch
            file_meta: filename, original_name, size, file_type, record_count,
                field_count, checksum, file_path, schema
            owner: Uploading user id
            client_addr: Client IP address

        Returns:
            File view

        Raises:
            NotFoundError: If the batch does not exist
        """
        self._require_batch(batch_id)

        record = self.files.create({
            "batch_id": batch_id,
            "filename": file_meta["filename"],
            "original_name": file_meta.get("original_name") or file_meta["filename"],
            "file_type": file_meta.get("file_type"),
            "file_size": int(file_meta.get("size") or 0),
            "field_count": int(file_meta.get("field_count") or 0),
            "record_count": int(file_meta.get("record_count") or 0),
            "checksum": file_meta.get("checksum"),
            "file_path": file_meta.get("file_path"),
            "table_schema": file_meta.get("schema") or [],
            "status": FileStatus.UPLOADED.value,
            "upload_progress": 100,
            "user_id": owner,
            "ip_address": client_addr,
        })

        self.recompute_stats(batch_id)
        logger.info(f"Added file {record['filename']} ({record['id']}) to batch {batch_id}")
        return self._file_view(record)

    def recompute_stats(self, batch_id: str) -> Dict[str, int]:
        """
        Recompute and store the batch counters from its current files.

        Raises:
            NotFoundError: If the batch does not exist
        """
        self._require_batch(batch_id)
        files = self.files.list_for_batch(batch_id)

        stats = {
            "total_files": len(files),
            "uploaded_files": sum(1 for f in files if f["status"] == FileStatus.UPLOADED.value),
            "processed_files": sum(1 for f in files if f["status"] == FileStatus.COMPLETED.value),
            "total_records": sum(f.get("record_count") or 0 for f in files),
            "total_size": sum(f.get("file_size") or 0 for f in files),
        }

        self.batches.update(batch_id, stats)
        return stats

    def complete_upload(self, batch_id: str) -> Dict[str, Any]:
        """
        Close an upload round: "completed" once every file is uploaded,
        otherwise the batch stays "uploading".
        """
        batch = self._require_batch(batch_id)
        done = batch["total_files"] > 0 and batch["uploaded_files"] == batch["total_files"]
        status = BatchStatus.COMPLETED if done else BatchStatus.UPLOADING
        return self.update_batch_status(batch_id, status.value)

    def finish_processing(self, batch_id: str) -> Dict[str, Any]:
        """
        Close a processing run: "completed" once every file is processed,
        otherwise the batch stays "processing".
        """
        stats = self.recompute_stats(batch_id)
        if stats["processed_files"] != stats["total_files"]:
            return self._batch_view(self._require_batch(batch_id))

        batch = self.batches.update(batch_id, {
            "status": BatchStatus.COMPLETED.value,
            "processing_completed_at": self.now(),
        })
        logger.info(f"Batch {batch_id} processing completed")
        return self._batch_view(batch)

    def get_batch(self, batch_id: str) -> Optional[Dict[str, Any]]:
        """Batch view with derived progress, or None if absent."""
        batch = self.batches.get(batch_id)
        return self._batch_view(batch) if batch else None

    def list_batches(self, owner: Optional[str] = None) -> List[Dict[str, Any]]:
        """Batch views, newest first, optionally only the owner's."""
        return [self._batch_view(b) for b in self.batches.list(owner)]

    def get_batch_files(self, batch_id: str) -> List[Dict[str, Any]]:
        """
        File views of a batch.

        Raises:
            NotFoundError: If the batch does not exist
        """
        self._require_batch(batch_id)
        return [self._file_view(f) for f in self.files.list_for_batch(batch_id)]

    def delete_batch(self, batch_id: str, requester: Optional[str]) -> None:
        """
        Delete a batch. Only its owner may do so.

        Raises:
            NotFoundError: If the batch does not exist
            AccessDeniedError: If requester is not the batch owner
        """
        batch = self._require_batch(batch_id)
        if requester is None or requester != batch.get("user_id"):
            logger.warning(f"Refused delete of batch {batch_id} by {requester}")
            raise AccessDeniedError("batch", batch_id, requester)

        self.batches.delete(batch_id)
        logger.info(f"Deleted batch {batch_id}")

    @staticmethod
    def checksum(data: bytes) -> str:
        """Deterministic content hash for integrity and duplicate checks."""
        return content_checksum(data)

    def log_activity(
        self,
        user_id: Optional[str],
        action: str,
        description: str,
        user_name: Optional[str] = None,
        client_addr: Optional[str] = None,
        user_agent: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Best-effort audit entry.

        Failures are logged and swallowed so they never block the operation
        being recorded.
        """
        try:
            self.activity.add({
                "user_id": user_id,
                "user_name": user_name,
                "action": action,
                "description": description,
                "ip_address": client_addr,
                "user_agent": user_agent,
                "details": details,
            })
        except Exception as e:
            logger.warning(f"Activity log write failed for {action}: {e}")

    def _require_batch(self, batch_id: str) -> Dict[str, Any]:
        batch = self.batches.get(batch_id)
        if not batch:
            raise NotFoundError("batch", batch_id)
        return batch

    def _batch_view(self, batch: Dict[str, Any]) -> Dict[str, Any]:
        view = dict(batch)
        view["metadata"] = view.pop("batch_metadata", None) or {}
        view["upload_progress"] = percent(batch.get("uploaded_files") or 0, batch.get("total_files") or 0)
        view["processing_progress"] = percent(batch.get("processed_files") or 0, batch.get("total_files") or 0)
        return view

    def _file_view(self, record: Dict[str, Any]) -> Dict[str, Any]:
        view = dict(record)
        view["schema"] = view.pop("table_schema", None) or []
        errors = view.get("validation_errors")
        view["validation_errors"] = json.loads(errors) if errors else []
        return view
