from reconcile_runner.services.accumulator import BatchAccumulator
from reconcile_runner.services.documents import DocumentLoader
from reconcile_runner.services.interfaces import (
    CollectingNotifier,
    DocumentSource,
    Notice,
    NoticeLevel,
    Notifier,
    ProgressFeed,
    ReconcileBackend,
)
from reconcile_runner.services.orchestrator import (
    ReconciliationOrchestrator,
    SessionContext,
)
from reconcile_runner.services.progress import ProgressSubscriber

__all__ = [
    "BatchAccumulator",
    "CollectingNotifier",
    "DocumentLoader",
    "DocumentSource",
    "Notice",
    "NoticeLevel",
    "Notifier",
    "ProgressFeed",
    "ProgressSubscriber",
    "ReconcileBackend",
    "ReconciliationOrchestrator",
    "SessionContext",
]
