# pyright: reportMissingImports=false

"""Display panels for the reconciliation view."""

from __future__ import annotations

from nicegui import ui  # pyright: ignore[reportMissingImports]

from reconcile_runner.domain.descriptions import step_label
from reconcile_runner.domain.reconciliation import ReconciliationRun, RunStatus
from reconcile_runner.services.review import TabCounts
from reconcile_runner.ui.constants import (
    CARD,
    CARD_PAD,
    STAT_CARD,
    STEP_CARD,
    TRANSCRIPT,
)


def stat_card(kind: str, label: str, value: str, caption: str) -> None:
    with ui.card().classes(f"rounded-lg border {STAT_CARD[kind]} {CARD_PAD} w-48"):
        ui.label(label).classes("text-xs uppercase tracking-wide font-medium")
        ui.label(value).classes("text-2xl font-bold")
        ui.label(caption).classes("text-xs")


def stats_row(counts: TabCounts, progress: int) -> None:
    with ui.row().classes("w-full gap-3"):
        stat_card("unmatched", "Unmatched", str(counts.unmatched), "need matching")
        stat_card("suggested", "Suggested", str(counts.suggested), "to review")
        stat_card("matched", "Matched", str(counts.matched), "reconciled")
        stat_card("progress", "Progress", f"{progress}%", "matched or bank fees")


def transcript(lines: list[str], *, running: bool, elapsed_ms: int) -> None:
    with ui.card().classes(f"{CARD} {CARD_PAD} w-full"):
        with ui.row().classes("w-full items-center justify-between"):
            ui.label("Matcher log").classes("text-sm font-semibold text-slate-700")
            status = "running" if running else "finished"
            ui.label(f"{status} · {elapsed_ms / 1000:.1f}s").classes(
                "text-xs text-slate-500"
            )
        log = ui.log(max_lines=2000).classes(TRANSCRIPT)
        for line in lines:
            log.push(line)


def run_summary(run: ReconciliationRun) -> None:
    """Results of a finished run."""
    if run.status == RunStatus.FAILED:
        with ui.card().classes(f"{CARD} {CARD_PAD} w-full border-rose-200"):
            ui.label("Reconciliation stopped").classes("text-sm font-semibold text-rose-700")
            ui.label(run.error or "Reconciliation failed").classes("text-xs text-rose-600")
            ui.label(
                f"{len(run.matches)} matches from {run.batch_count} batches were kept"
            ).classes("text-xs text-slate-500")
        return

    stats = run.stats
    if stats is None:
        return
    with ui.card().classes(f"{CARD} {CARD_PAD} w-full"):
        with ui.row().classes("w-full items-center justify-between"):
            ui.label("Reconciliation results").classes(
                "text-sm font-semibold text-slate-900"
            )
            ui.label(f"{stats.match_rate:g}% match rate").classes(
                "text-lg font-bold text-slate-900"
            )
        ui.label(
            f"{stats.total_transactions} transactions processed in "
            f"{run.processing_time_ms / 1000:.1f}s"
            + (f" by {run.model}" if run.model else "")
        ).classes("text-xs text-slate-500")
        with ui.row().classes("gap-6 pt-2"):
            for label, value in [
                ("Auto-confirmed", stats.auto_confirmed),
                ("AI suggestions", stats.suggestion_count),
                ("Bank fees", stats.bank_fees),
                ("Needs review", stats.needs_review),
                ("No match", stats.no_match),
            ]:
                with ui.column().classes("gap-0"):
                    ui.label(str(value)).classes("text-sm font-semibold text-slate-900")
                    ui.label(label).classes("text-[10px] text-slate-500")
        if run.steps:
            ui.label("Pipeline steps").classes("text-xs font-semibold pt-2")
            with ui.row().classes("w-full gap-2"):
                for step in run.steps:
                    with ui.column().classes(
                        f"flex-1 items-center gap-0 p-2 rounded-lg border {STEP_CARD[step.status]}"
                    ):
                        ui.label(step_label(step)).classes("text-[10px] font-medium")
                        ui.label(str(step.count)).classes("text-xs font-bold")
                        ui.label(f"{step.time_ms / 1000:.1f}s").classes(
                            "text-[9px] text-slate-400"
                        )
        if run.patterns_learned:
            ui.label("Patterns learned").classes("text-xs font-semibold pt-2")
            for pattern in run.patterns_learned:
                ui.label(pattern).classes("text-xs text-slate-600")
