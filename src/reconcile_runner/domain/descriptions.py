"""Display helpers for bank descriptions, amounts and transcript lines."""

import math
import re

from reconcile_runner.domain.reconciliation import (
    ProgressEvent,
    ProgressEventType,
    ReconcileStep,
    StepStatus,
)

_INCOMING_PAYMENT = re.compile(
    r"(?:ORBACWCU|MCBKCWCU|CMBAAWAX)\s+(.+?)(?:\s+ACCTNUM|\s+(?:INV|S\d))", re.I
)
_TRANSFER_CREDIT = re.compile(r"Internet Transfer Credit\s+(.+?)$", re.I)
_SWIFT_INWARD = re.compile(r"Inward SWIFT Payment\s+/\d+\s+(.+?)(?:\s+DBA|\s+SW-)", re.I)
_SWIFT_OUTWARD = re.compile(
    r"(?:Outward SWIFT|WireTfr Debit).+?(?:MOBILEWEB|ILEWEB)\s+(.+?)\s+\d", re.I
)
_WIRE_PERSON = re.compile(
    r"WireTfr Debit.+?(?:MOBILEWEB|ILEWEB)\s+([A-Z][a-z]+\s+[A-Z][a-z]+)", re.I
)
_LEGAL_SUFFIX = re.compile(r"\s+(N\.?V\.?|B\.?V\.?|LLC|INC|LTD|CORP)\.?\s*$", re.I)

_PATTERNS = (
    _INCOMING_PAYMENT,
    _TRANSFER_CREDIT,
    _SWIFT_INWARD,
    _SWIFT_OUTWARD,
    _WIRE_PERSON,
)

TAX_AUTHORITY_NAME = "Overheid Curaçao (Tax)"

_CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£", "CAD": "CA$", "AUD": "A$"}

EVENT_MARKERS: dict[ProgressEventType, str] = {
    ProgressEventType.STEP: "▸",
    ProgressEventType.ANALYZE: "→",
    ProgressEventType.SEARCH: "  ↳",
    ProgressEventType.MATCH: "  ↳",
    ProgressEventType.FX: "  ↳",
    ProgressEventType.CONFIRM: "  ✓",
    ProgressEventType.CLASSIFY: "  ◆",
    ProgressEventType.ESCALATE: "  ⚡",
    ProgressEventType.LEARN: "  ✱",
    ProgressEventType.INFO: "─",
}


def clean_entity_name(name: str) -> str:
    """Normalise whitespace and casing of a counterparty name.

    Tokens of three characters or fewer (legal forms, initials) are
    upper-cased, longer tokens are capitalised.
    """
    name = _LEGAL_SUFFIX.sub(lambda m: " " + m.group(0).strip(), name)
    words = " ".join(name.split()).split(" ")
    return " ".join(
        w.upper() if len(w) <= 3 else w[:1].upper() + w[1:].lower() for w in words
    )


def extract_entity_name(description: str | None) -> str | None:
    """Pull a counterparty name out of a raw bank description.

    Returns None when no known description layout matches.
    """
    if not description:
        return None
    desc = description.strip()

    for pattern in _PATTERNS:
        found = pattern.search(desc)
        if found:
            return clean_entity_name(found.group(1))

    if "OVERHEID CURACAO" in desc or "LANDSONTVANGER" in desc:
        return TAX_AUTHORITY_NAME

    return None


def truncate_description(description: str, max_len: int = 80) -> str:
    if not description or len(description) <= max_len:
        return description
    return description[:max_len].strip() + "…"


def format_currency(amount: float | None, currency: str = "USD") -> str:
    """Format an amount for display, tolerating missing values."""
    if amount is None or (isinstance(amount, float) and math.isnan(amount)):
        return f"{currency} 0.00"
    symbol = _CURRENCY_SYMBOLS.get(currency.upper())
    if symbol is None:
        return f"{currency} {amount:,.2f}"
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def format_event_line(event: ProgressEvent) -> str:
    """Render one progress event as a transcript line."""
    return f"{EVENT_MARKERS.get(event.type, ' ')} {event.text}"


def step_label(step: ReconcileStep) -> str:
    """``quick_scan`` -> ``Quick Scan``."""
    return step.name.value.replace("_", " ").title()


def format_step_line(step: ReconcileStep) -> str:
    line = f"{step_label(step)}: {step.count} ({step.time_ms / 1000:.1f}s)"
    if step.status != StepStatus.COMPLETED:
        line += f" [{step.status.value}]"
    return line
