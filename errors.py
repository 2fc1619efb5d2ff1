class TrainingError(Exception):
    """Base class for errors raised by the training core."""


class NotAuthenticatedError(TrainingError):
    """Raised when an operation needs a user but none is signed in."""

    def __init__(self, message: str = "not authenticated") -> None:
        super().__init__(message)


class ReferenceNotFound(TrainingError, LookupError):
    """A plan or plan day id does not exist in the catalog."""

    def __init__(self, kind: str, ref_id: str | None) -> None:
        super().__init__(f"{kind} not found: {ref_id}")
        self.kind = kind
        self.ref_id = ref_id


class SubmissionValidationError(TrainingError, ValueError):
    """A session submission was rejected before any write."""

    def __init__(self, reasons: list[str]) -> None:
        super().__init__("; ".join(reasons))
        self.reasons = list(reasons)


class PersistenceError(TrainingError, RuntimeError):
    """An I/O call against the document store failed.

    Nothing is rolled back. A failed multi-step submission may be partially
    applied, so callers re-read the ledger and stats before retrying.
    """

    retryable = True

    def __init__(self, operation: str, path: str, cause: Exception | None = None) -> None:
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{operation} failed for {path}{detail}")
        self.operation = operation
        self.path = path
