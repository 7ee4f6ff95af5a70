"""Folds batch results into the run record and the page state."""

from __future__ import annotations

from reconcile_runner.domain.reconciliation import BatchResult, ReconciliationRun
from reconcile_runner.domain.transactions import ReviewTab
from reconcile_runner.logging_config import get_logger
from reconcile_runner.services.review import apply_batch_matches
from reconcile_runner.ui.state import ReconciliationPageState

logger = get_logger(__name__)


class BatchAccumulator:
    """Applies each batch as soon as it returns.

    The run keeps every match of every batch (for the end-of-run summary)
    while the transaction list only holds the latest match per transaction.
    Statistics are taken from the most recent batch as-is: the matcher
    reports running totals.
    """

    def __init__(self, run: ReconciliationRun, state: ReconciliationPageState) -> None:
        self._run = run
        self._state = state

    @property
    def run(self) -> ReconciliationRun:
        return self._run

    def accumulate(self, batch: BatchResult) -> None:
        run = self._run
        run.batch_count += 1
        run.matches.extend(batch.matches)
        run.stats = batch.stats
        run.steps = batch.steps
        run.patterns_learned = batch.patterns_learned
        run.processing_time_ms = batch.processing_time_ms
        run.model = batch.model

        if batch.matches:
            matches = batch.matches
            self._state.update_transactions(
                lambda previous: apply_batch_matches(previous, matches)
            )

        if run.suggestions and self._state.active_tab != ReviewTab.SUGGESTED:
            self._state.active_tab = ReviewTab.SUGGESTED
            self._state.changed()

        logger.info(
            "reconciliation_batch_completed",
            batch_number=batch.batch_number,
            matches=len(batch.matches),
            auto_confirmed=sum(1 for m in batch.matches if m.auto_confirmed),
            total_matches=len(run.matches),
            has_more=batch.should_continue,
        )
