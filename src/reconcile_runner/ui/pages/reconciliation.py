# pyright: reportMissingImports=false

"""Reconciliation page."""

from __future__ import annotations

from typing import Any

from nicegui import context, ui  # pyright: ignore[reportMissingImports]

from reconcile_runner.api_client import PollingProgressFeed, ReconcileAPIClient
from reconcile_runner.domain.descriptions import (
    extract_entity_name,
    format_currency,
    truncate_description,
)
from reconcile_runner.domain.transactions import (
    ReconciliationStatus,
    ReviewTab,
    TransactionWithMatch,
)
from reconcile_runner.exceptions import ReconcileRunnerError
from reconcile_runner.logging_config import get_logger
from reconcile_runner.services.documents import DocumentLoader
from reconcile_runner.services.interfaces import Notice, NoticeLevel, Notifier
from reconcile_runner.services.orchestrator import (
    ReconciliationOrchestrator,
    SessionContext,
)
from reconcile_runner.services.review import (
    filter_by_tab,
    reconciliation_progress,
    tab_counts,
)
from reconcile_runner.ui.components.panels import run_summary, stats_row, transcript
from reconcile_runner.ui.constants import (
    BUTTON_DANGER,
    BUTTON_PRIMARY,
    BUTTON_SECONDARY,
    CARD,
    CARD_PAD,
    CATEGORY_OPTIONS,
    TAB_LABELS,
)
from reconcile_runner.ui.state import ReconciliationPageState

logger = get_logger(__name__)

_NOTIFY_TYPES = {
    NoticeLevel.INFO: "info",
    NoticeLevel.SUCCESS: "positive",
    NoticeLevel.ERROR: "negative",
}


class NiceGUINotifier(Notifier):
    """Shows notices as toasts on the page that owns ``container``."""

    def __init__(self, container: Any) -> None:
        self._container = container

    def notify(self, notice: Notice) -> None:
        with self._container:
            ui.notify(notice.message, type=_NOTIFY_TYPES[notice.level])


def render(api: ReconcileAPIClient, user_id: str | None) -> None:
    ui.label("Reconciliation").classes("text-xl font-semibold text-slate-900")

    state = ReconciliationPageState()
    session = SessionContext(user_id=user_id) if user_id else None

    root = ui.column().classes("w-full gap-4")
    notifier = NiceGUINotifier(root)
    orchestrator = ReconciliationOrchestrator(
        api, PollingProgressFeed(api), state, notifier=notifier
    )
    loader = DocumentLoader(api, state)

    dirty = True

    def mark_dirty() -> None:
        nonlocal dirty
        dirty = True

    state.listeners.append(mark_dirty)

    async def reconcile() -> None:
        try:
            await orchestrator.run(session)
        except ReconcileRunnerError as e:
            notifier.error(e.message)

    async def confirm(transaction_id: str) -> None:
        try:
            await orchestrator.confirm(session, transaction_id)
        except ReconcileRunnerError as e:
            notifier.error(e.message)

    def reject(transaction_id: str) -> None:
        try:
            orchestrator.reject(transaction_id)
        except ReconcileRunnerError as e:
            notifier.error(e.message)

    async def categorize(transaction_id: str, category: str) -> None:
        try:
            await orchestrator.categorize(session, transaction_id, category)
        except ReconcileRunnerError as e:
            notifier.error(e.message)

    def select_tab(tab: ReviewTab) -> None:
        state.active_tab = tab
        state.changed()

    @ui.refreshable
    def body() -> None:
        if session is None:
            ui.label("Sign in to reconcile transactions.").classes("text-slate-600")
            return
        if state.loading:
            ui.spinner(size="lg")
            return

        with ui.row().classes("w-full items-center justify-between"):
            ui.label(
                f"{len(state.transactions)} transactions · "
                f"{len(state.invoices)} invoices · {len(state.bills)} bills"
            ).classes("text-sm text-slate-500")
            button = ui.button(
                "Reconciling…" if state.is_reconciling else "Run AI reconciliation",
                on_click=reconcile,
            ).classes(BUTTON_PRIMARY)
            if state.is_reconciling:
                button.disable()

        stats_row(tab_counts(state.transactions), reconciliation_progress(state.transactions))

        if state.transactions and not state.invoices and not state.bills:
            with ui.card().classes(f"{CARD} {CARD_PAD} w-full border-amber-200 bg-amber-50"):
                ui.label("No invoices or bills uploaded").classes(
                    "text-sm font-semibold text-amber-900"
                )
                ui.label(
                    "Upload invoices and bills so references in your statements "
                    "can be matched to documents."
                ).classes("text-xs text-amber-700")

        if state.transcript or state.is_reconciling:
            summary = state.progress_summary
            if summary is not None:
                ui.label(
                    f"Analyzing {summary.total_transactions} transactions against "
                    f"{summary.total_invoices} invoices and {summary.total_bills} bills"
                ).classes("text-xs text-slate-500")
            transcript(
                state.transcript_lines(),
                running=state.is_reconciling,
                elapsed_ms=state.elapsed_ms,
            )

        if state.run is not None and state.run.is_terminal:
            run_summary(state.run)

        counts = tab_counts(state.transactions)
        with ui.row().classes("gap-2"):
            for tab, label in TAB_LABELS.items():
                style = BUTTON_PRIMARY if tab == state.active_tab else BUTTON_SECONDARY
                ui.button(
                    f"{label} ({counts.for_tab(tab)})",
                    on_click=lambda _, t=tab: select_tab(t),
                ).classes(style).props("dense")

        visible = filter_by_tab(state.transactions, state.active_tab)
        if not visible:
            ui.label("Nothing here.").classes("text-sm text-slate-500")
        for tx in visible:
            _transaction_row(tx, confirm, reject, categorize)

    with root:
        body()

    def flush() -> None:
        nonlocal dirty
        if dirty:
            dirty = False
            body.refresh()

    def start() -> None:
        if session is None:
            state.loading = False
            return
        loader.watch(session)

    def teardown() -> None:
        loader.close()
        orchestrator.close()
        state.listeners.clear()
        logger.debug("reconciliation_page_closed", user_id=user_id)

    ui.timer(0.2, flush)
    ui.timer(0.05, start, once=True)
    context.client.on_disconnect(teardown)


def _transaction_row(
    tx: TransactionWithMatch,
    confirm: Any,
    reject: Any,
    categorize: Any,
) -> None:
    t = tx.transaction
    match = tx.match
    name = extract_entity_name(t.description)

    with ui.card().classes(f"{CARD} {CARD_PAD} w-full"):
        with ui.row().classes("w-full items-start justify-between"):
            with ui.column().classes("gap-0 flex-1"):
                ui.label(name or truncate_description(t.description)).classes(
                    "text-sm font-medium text-slate-900"
                )
                if name:
                    ui.label(truncate_description(t.description)).classes(
                        "text-xs text-slate-500"
                    )
                ui.label(
                    f"{t.transaction_date.isoformat()} · {tx.status.value}"
                ).classes("text-xs text-slate-500")
            amount = t.amount if t.is_credit else -abs(t.amount)
            ui.label(format_currency(amount, t.currency)).classes(
                "text-sm font-semibold "
                + ("text-emerald-700" if t.is_credit else "text-slate-900")
            )

        if match is not None:
            with ui.column().classes("gap-0 pt-2"):
                parts = [match.classification.value.replace("_", " ")]
                if match.document_number:
                    parts.append(match.document_number)
                if match.display_counterparty:
                    parts.append(match.display_counterparty)
                parts.append(f"{match.confidence}%")
                ui.label(" · ".join(parts)).classes("text-xs text-purple-700")
                if match.fx_details is not None:
                    fx = match.fx_details
                    ui.label(
                        f"{fx.from_currency} → {fx.to_currency} @ {fx.rate:g} = "
                        f"{format_currency(fx.converted_amount, fx.to_currency)}"
                    ).classes("text-xs text-slate-500")
                for line in match.reasoning:
                    ui.label(line).classes("text-xs text-slate-600")

        with ui.row().classes("gap-2 pt-2"):
            if tx.is_confirmable and match is not None and match.is_presentable:
                ui.button(
                    "Confirm", on_click=lambda: confirm(tx.id)
                ).classes(BUTTON_PRIMARY).props("dense")
            if match is not None and tx.status != ReconciliationStatus.MATCHED:
                ui.button(
                    "Reject", on_click=lambda: reject(tx.id)
                ).classes(BUTTON_DANGER).props("dense")
            if tx.status in (ReconciliationStatus.UNMATCHED, ReconciliationStatus.SUGGESTED):
                with ui.button("Categorize").classes(BUTTON_SECONDARY).props("dense"):
                    with ui.menu():
                        for option in CATEGORY_OPTIONS:
                            ui.menu_item(
                                option["label"],
                                on_click=lambda _, c=option["value"]: categorize(tx.id, c),
                            )
