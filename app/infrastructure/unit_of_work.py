"""Unit of work and transaction journal.

A unit of work groups the steps of one business transaction (checkout,
cancellation, stock adjustment):

- every step that already changed shared state registers a compensation;
- effects that must only become visible once the transaction is durable
  are staged with ``after_commit``;
- domain events are recorded and written to the journal as one record.

Appending the record is the commit point. If the append fails, the
compensations run in reverse registration order and the caller receives
``StorageCommitFailedError``. A durable store plugs in by implementing
``TransactionJournal``.
"""

import inspect
from collections import deque
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import TracebackType
from typing import Any, Protocol, Self
from uuid import uuid4

import structlog

from app.domain.base import DomainEvent, utcnow
from app.domain.exceptions import StorageCommitFailedError
from app.infrastructure.config import settings

logger = structlog.get_logger()

Action = Callable[[], Awaitable[None] | None]


# ============================================================================
# Transaction Journal
# ============================================================================


@dataclass(frozen=True)
class TransactionRecord:
    """One committed transaction.

    Attributes:
        transaction_id: Unit of work identifier.
        kind: Transaction kind (e.g. "checkout", "order.cancel").
        committed_at: Commit timestamp.
        events: Serialized domain events, in the order they were recorded.
        request_id: Request that ran the transaction, if any.
    """

    transaction_id: str
    kind: str
    committed_at: datetime
    events: tuple[dict[str, Any], ...] = ()
    request_id: str | None = None

    @property
    def event_types(self) -> list[str]:
        return [event["event_type"] for event in self.events]


class TransactionJournal(Protocol):
    """Append-only store of committed transactions."""

    async def append(self, record: TransactionRecord) -> None:
        """Durably append a record; raising means nothing was committed."""
        ...


class InMemoryTransactionJournal:
    """In-memory journal keeping the most recent records.

    In production, this would be replaced with a durable append-only log.
    """

    def __init__(self, max_records: int | None = None) -> None:
        self._records: deque[TransactionRecord] = deque(
            maxlen=max_records or settings.journal_max_records
        )

    async def append(self, record: TransactionRecord) -> None:
        self._records.append(record)

    def list_records(self, kind: str | None = None) -> list[TransactionRecord]:
        """List retained records, oldest first, optionally filtered by kind."""
        return [r for r in self._records if kind is None or r.kind == kind]

    def __len__(self) -> int:
        return len(self._records)


# Global journal instance
_journal: TransactionJournal | None = None


def get_transaction_journal() -> TransactionJournal:
    """Get transaction journal singleton."""
    global _journal
    if _journal is None:
        _journal = InMemoryTransactionJournal()
    return _journal


def set_transaction_journal(journal: TransactionJournal) -> None:
    """Replace the journal (durable store, or a failing one in tests)."""
    global _journal
    _journal = journal


def reset_transaction_journal() -> None:
    """Reset transaction journal (for testing)."""
    global _journal
    _journal = InMemoryTransactionJournal()


# ============================================================================
# Unit of Work
# ============================================================================


class UnitOfWorkState(str, Enum):
    """Lifecycle of a unit of work."""

    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass
class _Step:
    description: str
    action: Action


async def _run(action: Action) -> None:
    result = action()
    if inspect.isawaitable(result):
        await result


@dataclass
class UnitOfWork:
    """Transaction boundary for one business operation.

    Use as an async context manager and call ``commit()`` explicitly. Leaving
    the block without committing (because of an exception or otherwise)
    rolls the unit of work back; exceptions propagate unchanged.

    Example:
        async with UnitOfWork("checkout") as uow:
            await ledger.reserve(product_id, 2)
            uow.add_compensation("release", lambda: ledger.release(product_id, 2))
            uow.after_commit("save order", lambda: repo.add(order))
            uow.record(order.collect_events())
            await uow.commit()
    """

    kind: str
    journal: TransactionJournal | None = None
    request_id: str | None = None
    transaction_id: str = field(default_factory=lambda: str(uuid4()))
    state: UnitOfWorkState = UnitOfWorkState.ACTIVE
    _compensations: list[_Step] = field(default_factory=list, init=False, repr=False)
    _after_commit: list[_Step] = field(default_factory=list, init=False, repr=False)
    _events: list[DomainEvent] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.journal is None:
            self.journal = get_transaction_journal()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        if self.state is UnitOfWorkState.ACTIVE:
            if exc is None:
                logger.warning(
                    "Unit of work left without commit",
                    transaction_id=self.transaction_id,
                    kind=self.kind,
                )
            await self.rollback()
        return False

    # -------------------------------------------------------------------------
    # Staging
    # -------------------------------------------------------------------------

    def add_compensation(self, description: str, action: Action) -> None:
        """Register how to undo a step that has already been applied."""
        self._compensations.append(_Step(description, action))

    def after_commit(self, description: str, action: Action) -> None:
        """Stage an effect that runs only once the commit succeeded."""
        self._after_commit.append(_Step(description, action))

    def record(self, events: Iterable[DomainEvent]) -> None:
        """Record domain events for the journal record."""
        self._events.extend(events)

    # -------------------------------------------------------------------------
    # Completion
    # -------------------------------------------------------------------------

    async def commit(self) -> TransactionRecord:
        """Append the journal record, then run the staged effects.

        Returns:
            The committed record.

        Raises:
            StorageCommitFailedError: If the journal append failed. The
                unit of work has been rolled back.
        """
        if self.state is not UnitOfWorkState.ACTIVE:
            raise RuntimeError(f"Unit of work {self.transaction_id} is {self.state.value}")

        record = TransactionRecord(
            transaction_id=self.transaction_id,
            kind=self.kind,
            committed_at=utcnow(),
            events=tuple(event.to_dict() for event in self._events),
            request_id=self.request_id,
        )

        try:
            await self.journal.append(record)
        except Exception as e:
            logger.error(
                "Journal append failed, rolling back",
                transaction_id=self.transaction_id,
                kind=self.kind,
                error=str(e),
                request_id=self.request_id,
            )
            await self.rollback()
            raise StorageCommitFailedError(self.transaction_id, self.kind, str(e)) from e

        self.state = UnitOfWorkState.COMMITTED
        for step in self._after_commit:
            await _run(step.action)

        logger.info(
            "Transaction committed",
            transaction_id=self.transaction_id,
            kind=self.kind,
            event_count=len(record.events),
            request_id=self.request_id,
        )
        return record

    async def rollback(self) -> None:
        """Run compensations in reverse registration order.

        Every compensation is attempted; a failing one is logged and the
        rest still run.
        """
        if self.state is not UnitOfWorkState.ACTIVE:
            return
        self.state = UnitOfWorkState.ROLLED_BACK

        for step in reversed(self._compensations):
            try:
                await _run(step.action)
            except Exception:
                logger.exception(
                    "Compensation failed",
                    transaction_id=self.transaction_id,
                    kind=self.kind,
                    step=step.description,
                )

        self._after_commit.clear()
        self._events.clear()
        logger.info(
            "Transaction rolled back",
            transaction_id=self.transaction_id,
            kind=self.kind,
            compensations=len(self._compensations),
            request_id=self.request_id,
        )
