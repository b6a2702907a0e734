from revenue.models.batch import UploadBatch, UploadRecord, TableRow
from revenue.models.logs import ValidationLog, ProcessingLog, ActivityLog

__all__ = [
    "UploadBatch",
    "UploadRecord",
    "TableRow",
    "ValidationLog",
    "ProcessingLog",
    "ActivityLog",
]
