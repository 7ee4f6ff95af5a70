"""Keeps the page's transaction, invoice and bill lists current."""

from __future__ import annotations

import asyncio

from reconcile_runner.config import Settings, get_settings
from reconcile_runner.exceptions import ReconcileRunnerError
from reconcile_runner.logging_config import get_logger
from reconcile_runner.services.interfaces import DocumentSource
from reconcile_runner.services.orchestrator import SessionContext
from reconcile_runner.services.review import merge_transaction_snapshot
from reconcile_runner.ui.state import ReconciliationPageState

logger = get_logger(__name__)


class DocumentLoader:
    """Reads the user's collections into the page state.

    Each refresh replaces the invoice and bill lists and merges the
    transaction list so that matches held only in memory survive.
    """

    def __init__(
        self,
        source: DocumentSource,
        state: ReconciliationPageState,
        settings: Settings | None = None,
    ) -> None:
        self._source = source
        self._state = state
        self._settings = settings or get_settings()
        self._watcher: asyncio.Task[None] | None = None

    async def refresh(self, session: SessionContext) -> None:
        limit = self._settings.page_size
        transactions, invoices, bills = await asyncio.gather(
            self._source.list_transactions(session.user_id, limit),
            self._source.list_invoices(session.user_id, limit),
            self._source.list_bills(session.user_id, limit),
        )
        self._state.invoices = invoices
        self._state.bills = bills
        self._state.loading = False
        self._state.update_transactions(
            lambda previous: merge_transaction_snapshot(previous, transactions)
        )
        logger.debug(
            "documents_refreshed",
            transactions=len(transactions),
            invoices=len(invoices),
            bills=len(bills),
        )

    def watch(self, session: SessionContext, interval: float | None = None) -> None:
        """Refresh periodically until ``close`` is called."""
        self.close()
        period = interval or self._settings.refresh_interval_seconds
        self._watcher = asyncio.get_running_loop().create_task(
            self._watch(session, period)
        )

    async def _watch(self, session: SessionContext, period: float) -> None:
        while True:
            try:
                await self.refresh(session)
            except ReconcileRunnerError as e:
                logger.warning("documents_refresh_failed", error=e.message)
            await asyncio.sleep(period)

    def close(self) -> None:
        if self._watcher is not None:
            self._watcher.cancel()
            self._watcher = None
