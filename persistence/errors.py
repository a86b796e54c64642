"""Error taxonomy shared by the persistence adapters and the supplier store."""

from typing import Any


class SupplierHubError(Exception):
    """Base class for every error surfaced to store callers."""


class RemoteReadError(SupplierHubError):
    """Fetching from the remote database failed (unreachable, bad query, malformed row)."""


class RemoteNotFoundError(SupplierHubError):
    """No remote record matches the requested id."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class RemoteWriteError(SupplierHubError):
    """Insert, update or delete was rejected by the remote database."""


class BatchWriteError(RemoteWriteError):
    """One or more creates of a batch failed; the local cache was left untouched.

    ``created`` holds the entities the remote database did accept, so the
    caller can decide whether to keep or remove them.
    """

    def __init__(self, message: str, created: list[Any], failures: list[Exception]):
        super().__init__(message)
        self.created = created
        self.failures = failures


class ValidationError(SupplierHubError):
    """Caller-side problem detected before any remote call was made."""
