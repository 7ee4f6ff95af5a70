"""Reconciliation page state.

One instance backs one open page (or one CLI invocation). Everything runs on
a single event loop, so there are no locks; list updates go through
``update_transactions`` as pure functions of the previous list so that
interleaved async completions never work from a stale copy.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from reconcile_runner.domain.descriptions import format_event_line
from reconcile_runner.domain.reconciliation import (
    ProgressEvent,
    ProgressSummary,
    ReconciliationRun,
)
from reconcile_runner.domain.transactions import (
    Bill,
    Invoice,
    ReviewTab,
    TransactionWithMatch,
)

TransactionsUpdate = Callable[[list[TransactionWithMatch]], list[TransactionWithMatch]]


@dataclass(slots=True)
class ReconciliationPageState:
    """State rendered by the reconciliation view."""

    transactions: list[TransactionWithMatch] = field(default_factory=list)
    invoices: list[Invoice] = field(default_factory=list)
    bills: list[Bill] = field(default_factory=list)
    loading: bool = True

    active_tab: ReviewTab = ReviewTab.UNMATCHED

    # Current (or most recent) run
    run: ReconciliationRun | None = None
    is_reconciling: bool = False
    transcript: list[ProgressEvent] = field(default_factory=list)
    progress_summary: ProgressSummary | None = None
    elapsed_ms: int = 0

    listeners: list[Callable[[], None]] = field(default_factory=list)

    def update_transactions(self, update: TransactionsUpdate) -> None:
        self.transactions = update(self.transactions)
        self.changed()

    def find(self, transaction_id: str) -> TransactionWithMatch | None:
        return next((t for t in self.transactions if t.id == transaction_id), None)

    def append_transcript(self, events: list[ProgressEvent]) -> None:
        self.transcript.extend(events)
        if self.run is not None:
            self.run.events.extend(events)
        self.changed()

    def transcript_lines(self) -> list[str]:
        return [format_event_line(e) for e in self.transcript]

    def reset_run(self) -> None:
        self.run = None
        self.transcript = []
        self.progress_summary = None
        self.elapsed_ms = 0

    def changed(self) -> None:
        for listener in list(self.listeners):
            listener()
