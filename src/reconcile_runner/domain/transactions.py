"""Bank transaction and accounting document models."""

from dataclasses import dataclass, replace
from datetime import date
from enum import Enum

from reconcile_runner.domain.reconciliation import (
    DocumentType,
    MatchClassification,
    TransactionMatch,
)


class ReconciliationStatus(str, Enum):
    """Reconciliation state of a transaction.

    UNMATCHED -> SUGGESTED -> MATCHED, or UNMATCHED -> CATEGORIZED.
    """

    UNMATCHED = "unmatched"
    SUGGESTED = "suggested"
    MATCHED = "matched"
    CATEGORIZED = "categorized"


class TransactionType(str, Enum):
    DEBIT = "debit"
    CREDIT = "credit"


class ReviewTab(str, Enum):
    """Filters offered by the reconciliation view."""

    UNMATCHED = "unmatched"
    SUGGESTED = "suggested"
    MATCHED = "matched"
    ALL = "all"


@dataclass(frozen=True)
class BankTransaction:
    """A persisted bank statement line."""

    id: str
    user_id: str
    transaction_date: date
    description: str
    amount: float
    type: TransactionType = TransactionType.DEBIT
    account_id: str = ""
    statement_id: str = ""
    currency: str = "USD"
    reference: str | None = None
    category: str | None = None
    merchant: str | None = None
    reconciliation_status: ReconciliationStatus | None = None
    matched_document_id: str | None = None
    matched_document_type: DocumentType | None = None

    @property
    def is_credit(self) -> bool:
        return self.type == TransactionType.CREDIT


@dataclass(frozen=True)
class TransactionWithMatch:
    """A bank transaction together with the match currently attached to it.

    Instances are immutable; every state change produces a new instance via
    ``dataclasses.replace`` so list updates stay pure functions of the
    previous list.
    """

    transaction: BankTransaction
    match: TransactionMatch | None = None

    @property
    def id(self) -> str:
        return self.transaction.id

    @property
    def status(self) -> ReconciliationStatus:
        persisted = self.transaction.reconciliation_status
        if persisted == ReconciliationStatus.MATCHED:
            return ReconciliationStatus.MATCHED
        if persisted == ReconciliationStatus.CATEGORIZED:
            return ReconciliationStatus.CATEGORIZED
        match = self.match
        if match is not None:
            if match.auto_confirmed:
                return ReconciliationStatus.MATCHED
            if (
                match.is_suggestion
                or match.classification == MatchClassification.NEEDS_REVIEW
            ):
                return ReconciliationStatus.SUGGESTED
        if persisted == ReconciliationStatus.SUGGESTED:
            return ReconciliationStatus.SUGGESTED
        return ReconciliationStatus.UNMATCHED

    @property
    def is_confirmable(self) -> bool:
        """Only a suggested, unconfirmed payment match can be confirmed."""
        return (
            self.match is not None
            and self.match.is_unconfirmed_payment_match
            and self.status == ReconciliationStatus.SUGGESTED
        )

    @property
    def is_unmatched(self) -> bool:
        """True when the transaction should be sent to the matcher."""
        persisted = self.transaction.reconciliation_status
        return self.match is None and persisted in (
            None,
            ReconciliationStatus.UNMATCHED,
        )

    def with_match(self, match: TransactionMatch | None) -> "TransactionWithMatch":
        return replace(self, match=match)

    def with_status(self, status: ReconciliationStatus) -> "TransactionWithMatch":
        return replace(
            self,
            transaction=replace(self.transaction, reconciliation_status=status),
        )


@dataclass(frozen=True)
class Invoice:
    """An outgoing invoice (accounts receivable)."""

    id: str
    document_number: str
    customer_name: str
    document_date: date | None
    total: float = 0.0
    amount_remaining: float = 0.0
    currency: str = "USD"


@dataclass(frozen=True)
class Bill:
    """An incoming bill (accounts payable)."""

    id: str
    document_number: str
    vendor_name: str
    document_date: date | None
    total: float = 0.0
    amount_remaining: float = 0.0
    currency: str = "USD"
