"""
Service-level exceptions.

Per-record validation failures are never raised; they are returned as
ValidationError data by the validator. These exceptions cover the
operational failures callers have to handle.
"""
from typing import Optional


class RevenueError(Exception):
    """Base class for revenue service errors."""

    pass


class NotFoundError(RevenueError):
    """Raised when a referenced batch or file does not exist."""

    def __init__(self, resource: str, resource_id: str):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found: {resource_id}")


class AccessDeniedError(RevenueError):
    """Raised when a mutating call is made by someone other than the owner."""

    def __init__(self, resource: str, resource_id: str, requester: Optional[str]):
        self.resource = resource
        self.resource_id = resource_id
        self.requester = requester
        super().__init__(f"{requester or 'anonymous'} may not modify {resource} {resource_id}")


class SchemaError(RevenueError):
    """Raised when field descriptors are structurally malformed."""

    pass


class UnsupportedFormatError(RevenueError):
    """Raised when an export is requested for an unregistered format tag."""

    def __init__(self, format: str):
        self.format = format
        super().__init__(f"Unsupported format: {format}")


class RegistryError(RevenueError):
    """Raised when the billing code table cannot be read."""

    pass


class BatchClosedError(RevenueError):
    """Raised when files are sent to a batch that is already completed or failed."""

    def __init__(self, batch_id: str, status: str):
        self.batch_id = batch_id
        self.status = status
        super().__init__(f"Cannot upload to {status} batch {batch_id}")
