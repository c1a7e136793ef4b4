"""Tests for the unit of work and transaction journal."""

import pytest

from app.domain.events import StockReleased
from app.domain.exceptions import StorageCommitFailedError
from app.infrastructure.unit_of_work import (
    InMemoryTransactionJournal,
    UnitOfWork,
    UnitOfWorkState,
    get_transaction_journal,
    set_transaction_journal,
)


def make_event(quantity: int = 1) -> StockReleased:
    return StockReleased(
        aggregate_id="p-1",
        aggregate_type="StockCounter",
        product_id="p-1",
        quantity=quantity,
    )


class TestCommit:
    """Tests for the commit path."""

    @pytest.mark.asyncio
    async def test_commit_appends_one_record(self) -> None:
        """All recorded events land in a single journal record."""
        journal = InMemoryTransactionJournal()

        async with UnitOfWork("test", journal=journal, request_id="req-1") as uow:
            uow.record([make_event(1), make_event(2)])
            record = await uow.commit()

        assert uow.state is UnitOfWorkState.COMMITTED
        assert journal.list_records() == [record]
        assert record.kind == "test"
        assert record.request_id == "req-1"
        assert record.event_types == ["inventory.stock_released"] * 2
        assert [e["payload"]["quantity"] for e in record.events] == [1, 2]

    @pytest.mark.asyncio
    async def test_after_commit_runs_in_order(self) -> None:
        """Staged effects run after the append, sync or async."""
        journal = InMemoryTransactionJournal()
        calls: list[str] = []

        async def async_effect() -> None:
            calls.append(f"async:{len(journal)}")

        async with UnitOfWork("test", journal=journal) as uow:
            uow.after_commit("sync", lambda: calls.append(f"sync:{len(journal)}"))
            uow.after_commit("async", async_effect)
            assert calls == []
            await uow.commit()

        assert calls == ["sync:1", "async:1"]

    @pytest.mark.asyncio
    async def test_compensations_skipped_on_commit(self) -> None:
        calls: list[str] = []

        async with UnitOfWork("test", journal=InMemoryTransactionJournal()) as uow:
            uow.add_compensation("undo", lambda: calls.append("undo"))
            await uow.commit()

        assert calls == []

    @pytest.mark.asyncio
    async def test_commit_twice_fails(self) -> None:
        async with UnitOfWork("test", journal=InMemoryTransactionJournal()) as uow:
            await uow.commit()
            with pytest.raises(RuntimeError):
                await uow.commit()

    @pytest.mark.asyncio
    async def test_uses_global_journal_by_default(self) -> None:
        journal = InMemoryTransactionJournal()
        set_transaction_journal(journal)

        async with UnitOfWork("test") as uow:
            await uow.commit()

        assert get_transaction_journal() is journal
        assert len(journal) == 1

    @pytest.mark.asyncio
    async def test_journal_retention_bounded(self) -> None:
        """The in-memory journal keeps only the newest records."""
        journal = InMemoryTransactionJournal(max_records=2)

        for kind in ("a", "b", "c"):
            async with UnitOfWork(kind, journal=journal) as uow:
                await uow.commit()

        assert [r.kind for r in journal.list_records()] == ["b", "c"]
        assert journal.list_records(kind="a") == []


class TestRollback:
    """Tests for the rollback path."""

    @pytest.mark.asyncio
    async def test_exception_rolls_back_in_reverse(self) -> None:
        """Compensations run newest first and the error propagates."""
        calls: list[str] = []
        journal = InMemoryTransactionJournal()

        with pytest.raises(ValueError):
            async with UnitOfWork("test", journal=journal) as uow:
                uow.add_compensation("first", lambda: calls.append("first"))
                uow.add_compensation("second", lambda: calls.append("second"))
                uow.after_commit("effect", lambda: calls.append("effect"))
                raise ValueError("boom")

        assert calls == ["second", "first"]
        assert uow.state is UnitOfWorkState.ROLLED_BACK
        assert len(journal) == 0

    @pytest.mark.asyncio
    async def test_leaving_without_commit_rolls_back(self) -> None:
        calls: list[str] = []

        async with UnitOfWork("test", journal=InMemoryTransactionJournal()) as uow:
            uow.add_compensation("undo", lambda: calls.append("undo"))

        assert calls == ["undo"]
        assert uow.state is UnitOfWorkState.ROLLED_BACK

    @pytest.mark.asyncio
    async def test_failing_compensation_does_not_stop_others(self) -> None:
        calls: list[str] = []

        def broken() -> None:
            raise RuntimeError("compensation broke")

        with pytest.raises(ValueError):
            async with UnitOfWork("test", journal=InMemoryTransactionJournal()) as uow:
                uow.add_compensation("first", lambda: calls.append("first"))
                uow.add_compensation("broken", broken)
                raise ValueError("boom")

        assert calls == ["first"]

    @pytest.mark.asyncio
    async def test_journal_failure_rolls_back(self, failing_journal) -> None:
        """A failed append undoes the work and raises StorageCommitFailedError."""
        calls: list[str] = []

        with pytest.raises(StorageCommitFailedError) as exc_info:
            async with UnitOfWork("checkout", journal=failing_journal) as uow:
                uow.add_compensation("undo", lambda: calls.append("undo"))
                uow.after_commit("effect", lambda: calls.append("effect"))
                uow.record([make_event()])
                await uow.commit()

        assert calls == ["undo"]
        assert uow.state is UnitOfWorkState.ROLLED_BACK
        assert len(failing_journal.attempts) == 1
        assert exc_info.value.details["kind"] == "checkout"
        assert exc_info.value.details["transaction_id"] == uow.transaction_id
