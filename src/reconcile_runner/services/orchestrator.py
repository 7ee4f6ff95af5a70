"""Reconciliation run orchestration.

A run sends every unmatched transaction to the remote matcher. The matcher
works under an execution time ceiling, so it processes the set in bounded
batches and hands back a cursor while work remains; the orchestrator keeps
calling until no cursor comes back, applying each batch before requesting
the next. A progress subscription runs alongside the loop to show what the
matcher is doing.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass

from reconcile_runner.config import Settings, get_settings
from reconcile_runner.domain.reconciliation import (
    ProgressSummary,
    ReconcileStats,
    ReconciliationRun,
    RunStatus,
    new_run_id,
)
from reconcile_runner.exceptions import (
    MatchNotConfirmableError,
    MatchNotFoundError,
    MatchNotPresentableError,
    NotSignedInError,
    ReconcileRunnerError,
    TransactionNotFoundError,
)
from reconcile_runner.logging_config import LogContext, get_logger
from reconcile_runner.schemas import (
    ConfirmMatchRequest,
    ReconcileRequest,
    ReconcileStatsPayload,
)
from reconcile_runner.services.accumulator import BatchAccumulator
from reconcile_runner.services.interfaces import (
    CollectingNotifier,
    Notifier,
    ProgressFeed,
    ReconcileBackend,
)
from reconcile_runner.services.progress import ProgressSubscriber
from reconcile_runner.services.review import (
    categorize_locally,
    confirm_locally,
    reject_locally,
    unmatched_transactions,
)
from reconcile_runner.ui.state import ReconciliationPageState

logger = get_logger(__name__)


@dataclass(frozen=True)
class SessionContext:
    """The signed-in user an action is performed for."""

    user_id: str
    org_id: str | None = None


class ReconciliationOrchestrator:
    """Drives reconciliation runs and review actions for one page.

    Args:
        backend: Remote callables (matcher, confirm, categorize).
        feed: Progress record subscription transport.
        state: Page state the orchestrator renders into.
        settings: Run loop tuning; loaded from the environment if omitted.
        notifier: Sink for transient user-facing notices.
        run_ids: Factory for run identifiers.
    """

    def __init__(
        self,
        backend: ReconcileBackend,
        feed: ProgressFeed,
        state: ReconciliationPageState,
        settings: Settings | None = None,
        notifier: Notifier | None = None,
        run_ids: Callable[[str], str] = new_run_id,
    ) -> None:
        self._backend = backend
        self._feed = feed
        self._state = state
        self._settings = settings or get_settings()
        self._notifier = notifier or CollectingNotifier()
        self._run_ids = run_ids
        self._subscriber: ProgressSubscriber | None = None
        self._ticker: asyncio.Task[None] | None = None

    @property
    def state(self) -> ReconciliationPageState:
        return self._state

    @property
    def notifier(self) -> Notifier:
        return self._notifier

    @property
    def subscriber(self) -> ProgressSubscriber | None:
        return self._subscriber

    # ------------------------------------------------------------------
    # Runs
    # ------------------------------------------------------------------

    async def run(self, session: SessionContext | None) -> ReconciliationRun | None:
        """Run the matcher over every unmatched transaction.

        Returns the run record, or None when there was nothing to do. Remote
        failures end the run early with a notice; matches from batches that
        already returned stay applied.
        """
        if session is None:
            raise NotSignedInError()

        state = self._state
        if state.is_reconciling:
            self._notifier.info("A reconciliation run is already in progress")
            return None

        pending = unmatched_transactions(state.transactions)
        if not pending:
            self._notifier.info("No unmatched transactions to process")
            return None

        run = ReconciliationRun(
            run_id=self._run_ids(session.user_id),
            transaction_ids=tuple(tx.id for tx in pending),
        )
        state.reset_run()
        state.run = run
        state.is_reconciling = True
        state.changed()

        if self._subscriber is not None:
            self._subscriber.close()
        subscriber = ProgressSubscriber(
            self._feed,
            run.run_id,
            on_events=state.append_transcript,
            on_summary=self._on_summary,
        )
        self._subscriber = subscriber
        self._start_ticker()
        subscriber.start()

        with LogContext(run_id=run.run_id, user_id=session.user_id):
            logger.info("reconciliation_run_started", transactions=len(pending))
            try:
                await self._drive(run, BatchAccumulator(run, state))
            except ReconcileRunnerError as e:
                run.status = RunStatus.FAILED
                run.error = e.message
                logger.warning(
                    "reconciliation_run_failed",
                    error=e.message,
                    error_code=e.error_code,
                    batches=run.batch_count,
                    matches=len(run.matches),
                )
                self._notifier.error(e.message or "Reconciliation failed")
            else:
                run.status = RunStatus.COMPLETED
                state.elapsed_ms = run.processing_time_ms
                logger.info(
                    "reconciliation_run_completed",
                    batches=run.batch_count,
                    matches=len(run.matches),
                    suggestions=len(run.suggestions),
                    processing_time_ms=run.processing_time_ms,
                    model=run.model,
                )
                self._notifier.success(self._completion_message(run))
            finally:
                self._stop_ticker()
                state.is_reconciling = False
                subscriber.release_after(self._settings.progress_grace_seconds)
                state.changed()

        return run

    async def _drive(self, run: ReconciliationRun, accumulator: BatchAccumulator) -> None:
        cursor: str | None = None
        batch_number = 0
        accumulated: ReconcileStats | None = None
        first = True

        while True:
            request = ReconcileRequest(
                progress_id=run.run_id,
                auto_confirm_threshold=self._settings.auto_confirm_threshold,
                transaction_ids=list(run.transaction_ids) if first else None,
                cursor=cursor,
                batch_number=batch_number,
                accumulated_stats=(
                    ReconcileStatsPayload.from_domain(accumulated)
                    if accumulated is not None
                    else None
                ),
            )
            batch = await self._backend.reconcile_all(
                request, timeout=self._settings.batch_timeout_seconds
            )
            accumulator.accumulate(batch)
            accumulated = batch.stats
            first = False

            if not batch.should_continue:
                return

            cursor = batch.cursor
            previous = batch.batch_number if batch.batch_number is not None else batch_number
            batch_number = previous + 1
            await asyncio.sleep(self._settings.batch_delay_seconds)

    def _on_summary(self, summary: ProgressSummary) -> None:
        self._state.progress_summary = summary
        if self._state.run is not None:
            self._state.run.summary = summary
        self._state.changed()

    @staticmethod
    def _completion_message(run: ReconciliationRun) -> str:
        stats = run.stats or ReconcileStats()
        batch_info = f" ({run.batch_count} batches)" if run.batch_count > 1 else ""
        return (
            f"Done{batch_info}! {stats.auto_confirmed} auto-confirmed, "
            f"{stats.suggestion_count} suggestions, "
            f"{stats.bank_fees} bank fees identified."
        )

    # ------------------------------------------------------------------
    # Elapsed time display
    # ------------------------------------------------------------------

    def _start_ticker(self) -> None:
        self._stop_ticker()
        self._ticker = asyncio.get_running_loop().create_task(
            self._tick(time.monotonic())
        )

    def _stop_ticker(self) -> None:
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None

    async def _tick(self, started: float) -> None:
        interval = self._settings.elapsed_tick_seconds
        while True:
            await asyncio.sleep(interval)
            self._state.elapsed_ms = int((time.monotonic() - started) * 1000)
            self._state.changed()

    # ------------------------------------------------------------------
    # Review actions
    # ------------------------------------------------------------------

    async def confirm(self, session: SessionContext | None, transaction_id: str) -> bool:
        """Confirm the suggested match of a transaction.

        The transaction becomes MATCHED locally as soon as the remote call
        succeeds. On failure it keeps its match and status.
        """
        if session is None:
            raise NotSignedInError()

        tx = self._state.find(transaction_id)
        if tx is None:
            raise TransactionNotFoundError(transaction_id)
        if tx.match is None:
            raise MatchNotFoundError(transaction_id)
        if not tx.is_confirmable:
            raise MatchNotConfirmableError(transaction_id, tx.status.value)
        if not tx.match.is_presentable:
            raise MatchNotPresentableError(transaction_id)

        request = ConfirmMatchRequest.from_match(tx.match)
        try:
            await self._backend.confirm_match(request)
        except ReconcileRunnerError as e:
            logger.warning(
                "match_confirm_failed",
                transaction_id=transaction_id,
                error=e.message,
            )
            self._notifier.error(e.message or "Failed to confirm match")
            return False

        self._state.update_transactions(
            lambda previous: confirm_locally(previous, transaction_id)
        )
        logger.info(
            "match_confirmed",
            transaction_id=transaction_id,
            document_id=request.document_id,
            match_method=request.match_method,
        )
        self._notifier.success("Match confirmed! Pattern memory updated.")
        return True

    def reject(self, transaction_id: str) -> None:
        """Dismiss a suggestion for this session only.

        Nothing is sent to the backend; a fresh load brings the suggestion
        back if the matcher stored it.
        """
        if self._state.find(transaction_id) is None:
            raise TransactionNotFoundError(transaction_id)
        self._state.update_transactions(
            lambda previous: reject_locally(previous, transaction_id)
        )
        logger.info("suggestion_dismissed", transaction_id=transaction_id)
        self._notifier.info("Suggestion dismissed")

    async def categorize(
        self,
        session: SessionContext | None,
        transaction_id: str,
        category: str = "other",
    ) -> bool:
        if session is None:
            raise NotSignedInError()
        if self._state.find(transaction_id) is None:
            raise TransactionNotFoundError(transaction_id)

        try:
            await self._backend.categorize_transaction(transaction_id, category)
        except ReconcileRunnerError as e:
            logger.warning(
                "categorize_failed", transaction_id=transaction_id, error=e.message
            )
            self._notifier.error(e.message or "Failed to categorize")
            return False

        self._state.update_transactions(
            lambda previous: categorize_locally(previous, transaction_id)
        )
        logger.info(
            "transaction_categorized", transaction_id=transaction_id, category=category
        )
        self._notifier.success("Transaction categorized")
        return True

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Release every resource held for the page, whatever the run state.

        Batch calls already in flight are not recalled.
        """
        self._stop_ticker()
        if self._subscriber is not None:
            self._subscriber.close()
