class DomainError(Exception):
    """Base exception for business rule violations."""


class NotFoundError(DomainError):
    """Raised when a requested record (e.g. a cycle) does not exist."""


class EmptyInputError(DomainError):
    """Raised when a report has nothing to work on (no events, no pilots)."""


class LookupFailure(DomainError):
    """Raised by a per-entity sub-lookup; callers degrade instead of aborting."""


class DeadlineExceeded(DomainError):
    """Raised when a report run or a single query runs past its time budget."""


class ReportCancelled(DomainError):
    """Raised when the caller cancels a report run."""
