from reconcile_runner.domain.reconciliation import (
    BatchResult,
    DocumentType,
    FxDetails,
    MatchClassification,
    ProgressEvent,
    ProgressEventType,
    ProgressSnapshot,
    ProgressSummary,
    ReconcileStats,
    ReconcileStep,
    ReconciliationRun,
    RunStatus,
    StepName,
    StepStatus,
    ThinkingLevel,
    TransactionMatch,
    new_run_id,
)
from reconcile_runner.domain.transactions import (
    BankTransaction,
    Bill,
    Invoice,
    ReconciliationStatus,
    ReviewTab,
    TransactionType,
    TransactionWithMatch,
)

__all__ = [
    "BankTransaction",
    "BatchResult",
    "Bill",
    "DocumentType",
    "FxDetails",
    "Invoice",
    "MatchClassification",
    "ProgressEvent",
    "ProgressEventType",
    "ProgressSnapshot",
    "ProgressSummary",
    "ReconcileStats",
    "ReconcileStep",
    "ReconciliationRun",
    "ReconciliationStatus",
    "ReviewTab",
    "RunStatus",
    "StepName",
    "StepStatus",
    "ThinkingLevel",
    "TransactionMatch",
    "TransactionType",
    "TransactionWithMatch",
    "new_run_id",
]
