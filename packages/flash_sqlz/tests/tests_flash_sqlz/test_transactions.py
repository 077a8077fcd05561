import pytest
from flash_sqlz import (
    CommitError,
    ExecutionError,
    RollbackError,
    TransactionError,
)


def count_people(client):
    return len(client.table("people").select(["id"]).all())


class TestTransactionsWithSQLite:
    """Transaction lifecycle against a real SQLite database."""

    def test_commit_persists_changes(self, client):
        client.begin()
        client.table("people").insert({"name": "a"}).do()
        client.table("people").insert({"name": "b"}).do()
        client.commit()

        assert not client.in_transaction
        assert count_people(client) == 2

    def test_rollback_discards_changes(self, client):
        client.begin()
        client.table("people").insert({"name": "a"}).do()
        assert count_people(client) == 1
        client.rollback()

        assert count_people(client) == 0

    def test_context_manager_commits_on_success(self, client):
        with client.transaction():
            client.table("people").insert({"name": "a"}).do()
        assert count_people(client) == 1

    def test_context_manager_rolls_back_on_error(self, client):
        """Should roll back when the block raises, re-raising the error."""
        msg = "Intentional Error"
        with pytest.raises(RuntimeError, match=msg):
            with client.transaction():
                client.table("people").insert({"name": "a"}).do()
                raise RuntimeError(msg)

        assert not client.in_transaction
        assert count_people(client) == 0

    def test_failed_statement_auto_rolls_back(self, client):
        """Should undo earlier statements of the transaction on failure."""
        client.begin(auto_rollback=True)
        client.table("people").insert({"name": "a"}).do()

        with pytest.raises(ExecutionError, match="rollback:True, exec error:"):
            client.table("people").insert({"bogus": 1}).do()

        assert not client.in_transaction
        assert client.info.is_empty()
        assert count_people(client) == 0

    def test_context_manager_after_auto_rollback(self, client):
        """Should re-raise the statement error when do() already rolled back."""
        with pytest.raises(ExecutionError, match="rollback:True"):
            with client.transaction(auto_rollback=True):
                client.table("people").insert({"name": "a"}).do()
                client.table("people").insert({"bogus": 1}).do()

        assert count_people(client) == 0

    def test_commit_without_transaction(self, client):
        with pytest.raises(TransactionError, match="No active transaction"):
            client.commit()

    def test_nested_begin_is_refused(self, client):
        client.begin()
        with pytest.raises(TransactionError, match="already active"):
            client.begin()
        client.rollback()


class TestTransactionFailurePaths:
    """Combined error reporting, driven by the recording executor."""

    def test_exec_failure_with_auto_rollback(self, fake_client, executor):
        executor.execute_error = ExecutionError("disk full")
        fake_client.begin(auto_rollback=True)

        with pytest.raises(ExecutionError, match="rollback:True, exec error: disk full"):
            fake_client.table("t").delete().do()

        assert executor.events == ["begin", "rollback"]
        assert fake_client.info.is_empty()

    def test_exec_failure_without_auto_rollback(self, fake_client, executor):
        """Should leave the transaction open for the caller to decide."""
        executor.execute_error = ExecutionError("disk full")
        fake_client.begin(auto_rollback=False)

        with pytest.raises(ExecutionError, match="rollback:False, exec error: disk full"):
            fake_client.table("t").delete().do()

        assert executor.events == ["begin"]
        assert fake_client.in_transaction

    def test_exec_failure_with_failed_rollback(self, fake_client, executor):
        """Should report both errors and keep them on the exception."""
        exec_error = ExecutionError("disk full")
        rollback_error = ExecutionError("connection lost")
        executor.execute_error = exec_error
        executor.rollback_error = rollback_error
        fake_client.begin(auto_rollback=True)

        with pytest.raises(RollbackError) as exc_info:
            fake_client.table("t").update({"a": 1}).do()

        err = exc_info.value
        assert str(err) == "exec error: disk full, and rollback err: connection lost"
        assert err.error is exec_error
        assert err.rollback_error is rollback_error
        assert err.__cause__ is exec_error

    def test_unexpected_exception_still_rolls_back(self, fake_client, executor):
        executor.execute_error = KeyError("boom")
        fake_client.begin(auto_rollback=True)

        with pytest.raises(ExecutionError, match="rollback:True"):
            fake_client.table("t").delete().do()
        assert executor.events[-1] == "rollback"

    def test_exception_outside_transaction_propagates_unchanged(
        self, fake_client, executor
    ):
        error = ExecutionError("disk full")
        executor.execute_error = error

        with pytest.raises(ExecutionError) as exc_info:
            fake_client.table("t").delete().do()
        assert exc_info.value is error

    def test_commit_failure_with_successful_rollback(self, fake_client, executor):
        executor.commit_error = ExecutionError("deadlock")
        fake_client.begin()

        with pytest.raises(CommitError, match="commit error: deadlock, rollback success"):
            fake_client.commit()
        assert executor.events == ["begin", "commit", "rollback"]

    def test_commit_failure_with_failed_rollback(self, fake_client, executor):
        executor.commit_error = ExecutionError("deadlock")
        executor.rollback_error = ExecutionError("gone")
        fake_client.begin()

        with pytest.raises(
            RollbackError, match="commit error: deadlock, and rollback err: gone"
        ):
            fake_client.commit()

    def test_close_releases_executor(self, fake_client, executor):
        with fake_client as c:
            c.table("t").select()
        assert executor.events == ["close"]
        assert fake_client.info.is_empty()

    def test_context_manager_reports_failed_rollback(self, fake_client, executor):
        """Should keep the block error alongside the rollback error."""
        block_error = RuntimeError("x")
        rollback_error = ExecutionError("gone")
        executor.rollback_error = rollback_error

        with pytest.raises(RollbackError) as exc_info:
            with fake_client.transaction():
                raise block_error

        err = exc_info.value
        assert str(err) == "exec error: x, and rollback err: gone"
        assert err.error is block_error
        assert err.rollback_error is rollback_error
        assert err.__cause__ is block_error
        assert executor.events == ["begin", "rollback"]
