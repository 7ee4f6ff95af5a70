"""UI constants for the reconciliation view."""

from __future__ import annotations

from typing import Final

from reconcile_runner.domain.reconciliation import StepStatus
from reconcile_runner.domain.transactions import ReviewTab

TAB_LABELS: Final[dict[ReviewTab, str]] = {
    ReviewTab.UNMATCHED: "Unmatched",
    ReviewTab.SUGGESTED: "Suggested",
    ReviewTab.MATCHED: "Matched",
    ReviewTab.ALL: "All",
}

CATEGORY_OPTIONS: Final[list[dict[str, str]]] = [
    {"value": "other", "label": "Other"},
    {"value": "bank_fee", "label": "Bank fee"},
    {"value": "transfer", "label": "Internal transfer"},
    {"value": "tax", "label": "Tax"},
    {"value": "payroll", "label": "Payroll"},
]


# Tailwind class constants
CARD: Final[str] = "bg-white rounded-lg shadow-sm border border-slate-200"
CARD_PAD: Final[str] = "p-4"

STAT_CARD: Final[dict[str, str]] = {
    "unmatched": "border-orange-200 bg-orange-50 text-orange-700",
    "suggested": "border-purple-200 bg-purple-50 text-purple-700",
    "matched": "border-emerald-200 bg-emerald-50 text-emerald-700",
    "progress": "border-slate-200 bg-slate-50 text-slate-700",
}

TRANSCRIPT: Final[str] = (
    "bg-slate-900 text-slate-100 font-mono text-xs rounded-lg p-3 h-64 w-full"
)

BUTTON_PRIMARY: Final[str] = (
    "bg-blue-600 text-white hover:bg-blue-700 focus:ring-2 focus:ring-blue-300"
)
BUTTON_SECONDARY: Final[str] = (
    "bg-slate-200 text-slate-900 hover:bg-slate-300 focus:ring-2 focus:ring-slate-300"
)
BUTTON_DANGER: Final[str] = (
    "bg-rose-600 text-white hover:bg-rose-700 focus:ring-2 focus:ring-rose-300"
)

STEP_CARD: Final[dict[StepStatus, str]] = {
    StepStatus.COMPLETED: "bg-emerald-50 border-emerald-200",
    StepStatus.SKIPPED: "bg-slate-50 border-slate-200 opacity-50",
    StepStatus.RUNNING: "bg-purple-50 border-purple-200",
}
