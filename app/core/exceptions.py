"""Exception hierarchy for the transactions service."""


class TransactionServiceError(Exception):
    """Base exception for all service errors."""


class FilterValidationError(TransactionServiceError):
    """Raised when filter criteria fail strict validation.

    ``reason`` is a user-facing message suitable for a 400 response.
    """

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class TransactionNotFound(TransactionServiceError):
    """Raised when a transaction id has no matching record."""


class StoreUnavailable(TransactionServiceError):
    """Raised when the backing record store cannot be reached or fails."""
