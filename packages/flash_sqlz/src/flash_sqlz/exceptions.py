from __future__ import annotations


class FlashSQLZError(Exception):
    """Base class for all flash_sqlz exceptions."""


class ConfigurationError(FlashSQLZError, ValueError):
    """Raised when a statement is configured in a way that cannot be rendered."""


class MissingTableError(ConfigurationError):
    """Raised when a statement is rendered without a target table."""


class MissingPayloadError(ConfigurationError):
    """Raised when an INSERT or UPDATE is rendered without data."""


class StatementKindError(ConfigurationError):
    """Raised when an execute method does not match the statement kind."""


class UnsupportedPayloadError(ConfigurationError, TypeError):
    """Raised when INSERT/UPDATE data is neither a mapping nor a tagged record."""


class ExecutionError(FlashSQLZError, RuntimeError):
    """Raised when the database rejects a query or statement."""


class RollbackError(ExecutionError):
    """
    Raised when a rollback attempted after a failure fails as well.

    Both failures are kept so neither is lost.
    """

    def __init__(
        self,
        message: str,
        *,
        error: BaseException | None = None,
        rollback_error: BaseException | None = None,
    ):
        super().__init__(message)
        self.error = error
        self.rollback_error = rollback_error


class CommitError(ExecutionError):
    """Raised when a commit failed and the transaction was rolled back."""


class TransactionError(FlashSQLZError, RuntimeError):
    """Raised on misuse of the transaction lifecycle."""


class MaterializationError(FlashSQLZError, ValueError):
    """Raised when rows cannot be converted into the requested target type."""
