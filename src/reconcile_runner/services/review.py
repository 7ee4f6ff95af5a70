"""Pure state transitions and queries over the transaction list.

Every transition takes the previous list and returns a new one; none of them
mutate their input. The orchestrator and the batch accumulator apply them
through ``ReconciliationPageState.update_transactions``.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from reconcile_runner.domain.reconciliation import MatchClassification, TransactionMatch
from reconcile_runner.domain.transactions import (
    ReconciliationStatus,
    ReviewTab,
    TransactionWithMatch,
)

TransactionList = list[TransactionWithMatch]


def apply_batch_matches(
    transactions: TransactionList, matches: Iterable[TransactionMatch]
) -> TransactionList:
    """Attach a batch's matches to their transactions.

    Auto-confirmed matches also move the transaction to MATCHED. When a batch
    carries several matches for one transaction, the last one wins.
    """
    by_id = {m.transaction_id: m for m in matches}
    if not by_id:
        return transactions

    merged: TransactionList = []
    for tx in transactions:
        match = by_id.get(tx.id)
        if match is None:
            merged.append(tx)
            continue
        updated = tx.with_match(match)
        if match.auto_confirmed:
            updated = updated.with_status(ReconciliationStatus.MATCHED)
        merged.append(updated)
    return merged


def confirm_locally(transactions: TransactionList, transaction_id: str) -> TransactionList:
    """Mark a transaction matched after the remote confirmation succeeded."""
    return [
        tx.with_status(ReconciliationStatus.MATCHED).with_match(
            tx.match.confirmed() if tx.match is not None else None
        )
        if tx.id == transaction_id
        else tx
        for tx in transactions
    ]


def reject_locally(transactions: TransactionList, transaction_id: str) -> TransactionList:
    """Drop the attached match; nothing is persisted."""
    return [tx.with_match(None) if tx.id == transaction_id else tx for tx in transactions]


def categorize_locally(
    transactions: TransactionList, transaction_id: str
) -> TransactionList:
    return [
        tx.with_status(ReconciliationStatus.CATEGORIZED) if tx.id == transaction_id else tx
        for tx in transactions
    ]


def merge_transaction_snapshot(
    previous: TransactionList, fresh: TransactionList
) -> TransactionList:
    """Combine a fresh read of the transaction collection with local matches.

    Transactions already on screen keep whatever match is held locally,
    including the absence of one after a dismissal. Transactions seen for the
    first time take the match stored with the record, if any.
    """
    local = {tx.id: tx.match for tx in previous}
    return [
        tx.with_match(local[tx.id]) if tx.id in local else tx for tx in fresh
    ]


def unmatched_transactions(transactions: TransactionList) -> TransactionList:
    """Transactions that a new run should send to the matcher."""
    return [tx for tx in transactions if tx.is_unmatched]


def filter_by_tab(transactions: TransactionList, tab: ReviewTab) -> TransactionList:
    if tab == ReviewTab.ALL:
        return list(transactions)
    if tab == ReviewTab.UNMATCHED:
        return [tx for tx in transactions if tx.is_unmatched]
    if tab == ReviewTab.SUGGESTED:
        return [
            tx for tx in transactions if tx.status == ReconciliationStatus.SUGGESTED
        ]
    return [tx for tx in transactions if tx.status == ReconciliationStatus.MATCHED]


@dataclass(frozen=True)
class TabCounts:
    unmatched: int
    suggested: int
    matched: int
    all: int

    def for_tab(self, tab: ReviewTab) -> int:
        return getattr(self, tab.value)


def tab_counts(transactions: TransactionList) -> TabCounts:
    return TabCounts(
        unmatched=len(filter_by_tab(transactions, ReviewTab.UNMATCHED)),
        suggested=len(filter_by_tab(transactions, ReviewTab.SUGGESTED)),
        matched=len(filter_by_tab(transactions, ReviewTab.MATCHED)),
        all=len(transactions),
    )


def reconciliation_progress(transactions: TransactionList) -> int:
    """Percentage of transactions that are matched or identified as bank fees."""
    if not transactions:
        return 0
    done = sum(
        1
        for tx in transactions
        if tx.status == ReconciliationStatus.MATCHED
        or (
            tx.match is not None
            and tx.match.classification == MatchClassification.BANK_FEE
        )
    )
    return int(done * 100 / len(transactions) + 0.5)
