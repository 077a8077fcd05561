from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Self

from flash_sqlz.exceptions import CommitError, ExecutionError, RollbackError

from .execution import ClientExecution

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)


class ClientTransaction(ClientExecution):
    """
    Transaction control on top of the execution layer.

    While a transaction is active, ``all``, ``first`` and ``do`` run on the
    transaction's connection.
    """

    def begin(self, auto_rollback: bool = False) -> Self:
        """
        Start a transaction.

        Args:
            auto_rollback: Roll back automatically when a statement run by
                ``do()`` fails inside this transaction.

        Raises:
            TransactionError: If a transaction is already active.
        """
        self.executor.begin()
        self.auto_rollback = auto_rollback
        return self

    def commit(self) -> None:
        """
        Commit the active transaction.

        If the commit fails the transaction is rolled back.

        Raises:
            CommitError: The commit failed and the rollback succeeded.
            RollbackError: The commit failed and so did the rollback.
            TransactionError: No transaction is active.
        """
        try:
            self.executor.commit()
        except ExecutionError as e:
            try:
                self.executor.rollback()
            except Exception as rollback_error:
                msg = f"commit error: {e}, and rollback err: {rollback_error}"
                logger.error(msg)
                raise RollbackError(
                    msg, error=e, rollback_error=rollback_error
                ) from e
            msg = f"commit error: {e}, rollback success"
            raise CommitError(msg) from e
        finally:
            self.auto_rollback = False

    def rollback(self) -> None:
        """
        Roll back the active transaction.

        Raises:
            TransactionError: No transaction is active.
        """
        try:
            self.executor.rollback()
        finally:
            self.auto_rollback = False

    @property
    def in_transaction(self) -> bool:
        return self.executor.in_transaction

    @contextmanager
    def transaction(self, auto_rollback: bool = True) -> Iterator[Self]:
        """
        Run a block inside a transaction.

        Commits when the block finishes and rolls back when it raises. When
        ``do()`` inside the block already rolled back, the original error
        is re-raised unchanged. A failed rollback raises ``RollbackError``
        carrying both the block error and the rollback error.

        Example:
            >>> with client.transaction():
            ...     client.table("people").insert({"name": "abc"}).do()
            ...     client.table("people").update({"age": 20}).where({"name": "abc"}).do()
        """
        self.begin(auto_rollback=auto_rollback)
        try:
            yield self
        except BaseException as exc:
            if self.executor.in_transaction:
                try:
                    self.rollback()
                except Exception as rollback_error:
                    msg = f"exec error: {exc}, and rollback err: {rollback_error}"
                    logger.error(msg)
                    raise RollbackError(
                        msg, error=exc, rollback_error=rollback_error
                    ) from exc
            raise
        self.commit()

    def close(self) -> None:
        """Release the client's connections. Open transactions are rolled back."""
        self.clear()
        self.executor.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
