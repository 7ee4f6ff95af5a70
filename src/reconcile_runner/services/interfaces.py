from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from reconcile_runner.domain.reconciliation import BatchResult, ProgressSnapshot
from reconcile_runner.domain.transactions import Bill, Invoice, TransactionWithMatch
from reconcile_runner.schemas import ConfirmMatchRequest, ReconcileRequest

SnapshotCallback = Callable[[ProgressSnapshot | None], None]
Unsubscribe = Callable[[], None]


class ReconcileBackend(ABC):
    """Remote callables the orchestrator drives."""

    @abstractmethod
    async def reconcile_all(
        self, request: ReconcileRequest, *, timeout: float | None = None
    ) -> BatchResult:
        pass

    @abstractmethod
    async def confirm_match(self, request: ConfirmMatchRequest) -> None:
        pass

    @abstractmethod
    async def categorize_transaction(
        self, transaction_id: str, category: str = "other"
    ) -> None:
        pass


class ProgressFeed(ABC):
    """Live view of per-run progress records."""

    @abstractmethod
    def subscribe(self, run_id: str, callback: SnapshotCallback) -> Unsubscribe:
        """Deliver every snapshot of the record to ``callback``.

        ``callback`` receives None while the record does not exist. The
        returned callable stops delivery and may be called more than once.
        """
        pass


class DocumentSource(ABC):
    """Owner-filtered, newest-first collections of persisted documents."""

    @abstractmethod
    async def list_transactions(
        self, user_id: str, limit: int
    ) -> list[TransactionWithMatch]:
        pass

    @abstractmethod
    async def list_invoices(self, user_id: str, limit: int) -> list[Invoice]:
        pass

    @abstractmethod
    async def list_bills(self, user_id: str, limit: int) -> list[Bill]:
        pass


class NoticeLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    message: str


class Notifier(ABC):
    """Transient user-facing notifications."""

    @abstractmethod
    def notify(self, notice: Notice) -> None:
        pass

    def info(self, message: str) -> None:
        self.notify(Notice(NoticeLevel.INFO, message))

    def success(self, message: str) -> None:
        self.notify(Notice(NoticeLevel.SUCCESS, message))

    def error(self, message: str) -> None:
        self.notify(Notice(NoticeLevel.ERROR, message))


class CollectingNotifier(Notifier):
    """Keeps notices in memory; used headless and by the CLI."""

    def __init__(self) -> None:
        self.notices: list[Notice] = []

    def notify(self, notice: Notice) -> None:
        self.notices.append(notice)

    def messages(self, level: NoticeLevel | None = None) -> list[str]:
        return [n.message for n in self.notices if level is None or n.level == level]
