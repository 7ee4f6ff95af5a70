from reconcile_runner.domain.reconciliation import (
    BatchResult,
    ProgressEvent,
    ReconciliationRun,
    TransactionMatch,
)
from reconcile_runner.domain.transactions import (
    BankTransaction,
    ReconciliationStatus,
    TransactionWithMatch,
)

__all__ = [
    "BankTransaction",
    "BatchResult",
    "ProgressEvent",
    "ReconciliationRun",
    "ReconciliationStatus",
    "TransactionMatch",
    "TransactionWithMatch",
]

__version__ = "0.1.0"
