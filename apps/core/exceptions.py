"""
Domain exceptions for the salon point-of-sale platform.

Views translate these into HTTP responses:
- ValidationError -> 400, refused before any write
- NotFoundError -> 404
- PartialCommitError -> 207, some units of a basket were written
- TransientError -> 503, a ledger write failed before any unit was written
"""


class SalonLedgerError(Exception):
    """Base exception for salon ledger errors."""

    pass


class ValidationError(SalonLedgerError):
    """Raised when input is refused before any write takes place."""

    def __init__(self, message, field=None):
        super().__init__(message)
        self.message = message
        self.field = field

    def as_dict(self):
        return {"detail": self.message, "field": self.field}


class NotFoundError(SalonLedgerError):
    """Raised when a record, staff member or client no longer exists."""

    pass


class TransientError(SalonLedgerError):
    """
    Raised when a single ledger write fails due to availability.

    When a checkout stops before its first unit, ``remainder`` is the basket to
    retry. It names the client created by that checkout, if any.
    """

    def __init__(self, message, remainder=None, attempt=None):
        super().__init__(message)
        self.remainder = remainder
        self.attempt = attempt


class PartialCommitError(SalonLedgerError):
    """
    Raised when a checkout stopped after some, but not all, units were written.

    Units already written stay in the ledger. ``remainder`` is a basket holding
    exactly the units that were never submitted, so the operator can retry them.
    """

    def __init__(self, committed, total, remainder=None, attempt=None, cause=None):
        super().__init__(f"{committed} of {total} committed")
        self.committed = committed
        self.total = total
        self.remainder = remainder
        self.attempt = attempt
        self.cause = cause
