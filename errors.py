"""Exception hierarchy for pfm.

Validation problems are not exceptions: see validators.ValidationResult.
"""


class PfmError(Exception):
    """Base class for all application errors."""


class NotFoundError(PfmError):
    """An operation referenced an ID that does not exist."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with ID {entity_id} not found")


class PersistenceError(PfmError):
    """The local database rejected a write. Nothing was changed."""


class PaymentRejectedError(PfmError):
    """An installment payment was refused."""


class SnapshotError(PfmError):
    """An import document is malformed or the import mode is unknown."""


class SyncError(PfmError):
    """A remote push/pull/delete failed."""
