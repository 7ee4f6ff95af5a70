"""Reconciliation run, match and progress domain models."""

import time
from dataclasses import dataclass, field, replace
from enum import Enum


class MatchClassification(str, Enum):
    """How the remote matcher classified a bank transaction."""

    PAYMENT_MATCH = "payment_match"
    BANK_FEE = "bank_fee"
    TRANSFER = "transfer"
    NO_MATCH = "no_match"
    NEEDS_REVIEW = "needs_review"


class DocumentType(str, Enum):
    BILL = "bill"
    INVOICE = "invoice"


class ThinkingLevel(str, Enum):
    """Depth of model reasoning spent on a match."""

    NONE = "none"
    LOW = "low"
    HIGH = "high"


class ProgressEventType(str, Enum):
    STEP = "step"
    ANALYZE = "analyze"
    SEARCH = "search"
    MATCH = "match"
    FX = "fx"
    CONFIRM = "confirm"
    CLASSIFY = "classify"
    ESCALATE = "escalate"
    LEARN = "learn"
    INFO = "info"


class StepName(str, Enum):
    QUICK_SCAN = "quick_scan"
    AI_MATCHING = "ai_matching"
    DEEP_INVESTIGATION = "deep_investigation"
    LEARNING = "learning"


class StepStatus(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    RUNNING = "running"


class RunStatus(str, Enum):
    """Client-side lifecycle of a reconciliation run."""

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


SUGGESTION_CLASSIFICATIONS = frozenset(
    {MatchClassification.BANK_FEE, MatchClassification.TRANSFER}
)


@dataclass(frozen=True)
class FxDetails:
    """Currency conversion applied to reach a match."""

    from_currency: str
    to_currency: str
    rate: float
    converted_amount: float


@dataclass(frozen=True)
class TransactionMatch:
    """A proposed or confirmed link between a bank transaction and a document.

    Matches are produced by the remote matcher; the client only attaches
    them to transactions, confirms or dismisses them.
    """

    transaction_id: str
    classification: MatchClassification
    confidence: int = 0
    document_id: str | None = None
    document_type: DocumentType | None = None
    document_number: str | None = None
    counterparty_name: str | None = None
    reasoning: tuple[str, ...] = ()
    match_type: str = ""
    fx_details: FxDetails | None = None
    thinking_level: ThinkingLevel = ThinkingLevel.NONE
    auto_confirmed: bool = False
    rule_based_score: float | None = None

    @property
    def is_payment_match(self) -> bool:
        return self.classification == MatchClassification.PAYMENT_MATCH

    @property
    def is_unconfirmed_payment_match(self) -> bool:
        return self.is_payment_match and not self.auto_confirmed

    @property
    def is_suggestion(self) -> bool:
        """True when the match awaits a human decision."""
        return (
            self.is_unconfirmed_payment_match
            or self.classification in SUGGESTION_CLASSIFICATIONS
        )

    @property
    def is_presentable(self) -> bool:
        """Unconfirmed payment matches must explain themselves before review."""
        if self.is_unconfirmed_payment_match:
            return any(line.strip() for line in self.reasoning)
        return True

    @property
    def match_method(self) -> str:
        return f"ai_{self.thinking_level.value}"

    @property
    def fx_rate(self) -> float | None:
        return self.fx_details.rate if self.fx_details is not None else None

    @property
    def display_counterparty(self) -> str | None:
        if self.counterparty_name in (None, "", "Unknown", "null"):
            return None
        return self.counterparty_name

    def confirmed(self) -> "TransactionMatch":
        """Copy of this match marked as confirmed."""
        return replace(self, auto_confirmed=True)


@dataclass(frozen=True)
class ReconcileStats:
    """Cumulative run statistics as reported by the remote matcher."""

    total_transactions: int = 0
    quick_matches: int = 0
    ai_matches: int = 0
    deep_matches: int = 0
    bank_fees: int = 0
    no_match: int = 0
    auto_confirmed: int = 0
    needs_review: int = 0
    match_rate: float = 0.0

    @property
    def suggestion_count(self) -> int:
        return self.ai_matches + self.deep_matches


@dataclass(frozen=True)
class ReconcileStep:
    name: StepName
    status: StepStatus
    count: int = 0
    details: tuple[str, ...] = ()
    time_ms: int = 0


@dataclass(frozen=True)
class ProgressEvent:
    """One line of the remote matcher's execution log."""

    ts: int
    type: ProgressEventType
    text: str
    step: str | None = None


@dataclass(frozen=True)
class ProgressSummary:
    total_transactions: int
    total_bills: int = 0
    total_invoices: int = 0


@dataclass(frozen=True)
class ProgressSnapshot:
    """Full state of a progress record at one point in time.

    Snapshots always carry the complete event history, never deltas.
    """

    events: tuple[ProgressEvent, ...] = ()
    total_transactions: int = 0
    total_bills: int = 0
    total_invoices: int = 0

    @property
    def summary(self) -> ProgressSummary | None:
        if not self.total_transactions:
            return None
        return ProgressSummary(
            total_transactions=self.total_transactions,
            total_bills=self.total_bills,
            total_invoices=self.total_invoices,
        )


@dataclass(frozen=True)
class BatchResult:
    """One response of the remote matcher."""

    matches: tuple[TransactionMatch, ...] = ()
    stats: ReconcileStats = field(default_factory=ReconcileStats)
    steps: tuple[ReconcileStep, ...] = ()
    patterns_learned: tuple[str, ...] = ()
    processing_time_ms: int = 0
    model: str = ""
    has_more: bool = False
    cursor: str | None = None
    batch_number: int | None = None

    @property
    def should_continue(self) -> bool:
        return bool(self.has_more) and bool(self.cursor)


@dataclass
class ReconciliationRun:
    """Client-side record of one invocation of the matching pipeline."""

    run_id: str
    transaction_ids: tuple[str, ...]
    status: RunStatus = RunStatus.RUNNING
    events: list[ProgressEvent] = field(default_factory=list)
    summary: ProgressSummary | None = None
    matches: list[TransactionMatch] = field(default_factory=list)
    stats: ReconcileStats | None = None
    steps: tuple[ReconcileStep, ...] = ()
    patterns_learned: tuple[str, ...] = ()
    processing_time_ms: int = 0
    model: str = ""
    batch_count: int = 0
    error: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status != RunStatus.RUNNING

    @property
    def suggestions(self) -> list[TransactionMatch]:
        return [m for m in self.matches if m.is_unconfirmed_payment_match]


class RunIdGenerator:
    """Builds run identifiers of the form ``recon_<user prefix>_<epoch ms>``.

    Timestamps handed out by one generator strictly increase, so two runs
    started within the same millisecond still get distinct identifiers.
    """

    USER_PREFIX_LENGTH = 8

    def __init__(self) -> None:
        self._last_ms = 0

    def __call__(self, user_id: str, now_ms: int | None = None) -> str:
        if now_ms is None:
            now_ms = time.time_ns() // 1_000_000
        stamp = max(now_ms, self._last_ms + 1)
        self._last_ms = stamp
        return f"recon_{user_id[: self.USER_PREFIX_LENGTH]}_{stamp}"


new_run_id = RunIdGenerator()
