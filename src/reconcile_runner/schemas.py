"""Pydantic v2 schemas for the remote callables and document store.

Every payload on the wire uses camelCase keys; the models expose snake_case
attributes and convert to and from the frozen domain dataclasses.
"""

from datetime import date
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from reconcile_runner.domain.reconciliation import (
    BatchResult,
    DocumentType,
    FxDetails,
    MatchClassification,
    ProgressEvent,
    ProgressEventType,
    ProgressSnapshot,
    ReconcileStats,
    ReconcileStep,
    StepName,
    StepStatus,
    ThinkingLevel,
    TransactionMatch,
)
from reconcile_runner.domain.transactions import (
    BankTransaction,
    Bill,
    Invoice,
    ReconciliationStatus,
    TransactionType,
    TransactionWithMatch,
)


class WireModel(BaseModel):
    """Base model for camelCase payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _none_to_list(v: Any) -> Any:
    return [] if v is None else v


def _date_prefix(v: Any) -> Any:
    # Timestamps arrive as ISO datetimes; only the calendar date is kept
    if isinstance(v, str) and len(v) > 10:
        return v[:10]
    return v


StrList = Annotated[list[str], BeforeValidator(_none_to_list)]
WireDate = Annotated[date, BeforeValidator(_date_prefix)]


# Matcher payloads
class FxDetailsPayload(WireModel):
    from_currency: str
    to_currency: str
    rate: float
    converted_amount: float

    def to_domain(self) -> FxDetails:
        return FxDetails(
            from_currency=self.from_currency,
            to_currency=self.to_currency,
            rate=self.rate,
            converted_amount=self.converted_amount,
        )


class TransactionMatchPayload(WireModel):
    transaction_id: str
    classification: MatchClassification
    document_id: str | None = None
    document_type: DocumentType | None = None
    document_number: str | None = None
    counterparty_name: str | None = None
    confidence: int = Field(default=0, ge=0, le=100)
    reasoning: StrList = Field(default_factory=list)
    match_type: str = ""
    fx_details: FxDetailsPayload | None = None
    thinking_level: ThinkingLevel = ThinkingLevel.NONE
    auto_confirmed: bool = False
    rule_based_score: float | None = None

    @field_validator("confidence", mode="before")
    @classmethod
    def round_confidence(cls, v: Any) -> Any:
        if isinstance(v, float):
            return round(v)
        return v

    @field_validator("match_type", mode="before")
    @classmethod
    def blank_match_type(cls, v: Any) -> Any:
        return v or ""

    def to_domain(self) -> TransactionMatch:
        return TransactionMatch(
            transaction_id=self.transaction_id,
            classification=self.classification,
            confidence=self.confidence,
            document_id=self.document_id,
            document_type=self.document_type,
            document_number=self.document_number,
            counterparty_name=self.counterparty_name,
            reasoning=tuple(self.reasoning),
            match_type=self.match_type,
            fx_details=self.fx_details.to_domain() if self.fx_details else None,
            thinking_level=self.thinking_level,
            auto_confirmed=self.auto_confirmed,
            rule_based_score=self.rule_based_score,
        )


class ReconcileStatsPayload(WireModel):
    total_transactions: int = 0
    quick_matches: int = 0
    ai_matches: int = 0
    deep_matches: int = 0
    bank_fees: int = 0
    no_match: int = 0
    auto_confirmed: int = 0
    needs_review: int = 0
    match_rate: float = 0.0

    def to_domain(self) -> ReconcileStats:
        return ReconcileStats(**self.model_dump())

    @classmethod
    def from_domain(cls, stats: ReconcileStats) -> "ReconcileStatsPayload":
        return cls(
            total_transactions=stats.total_transactions,
            quick_matches=stats.quick_matches,
            ai_matches=stats.ai_matches,
            deep_matches=stats.deep_matches,
            bank_fees=stats.bank_fees,
            no_match=stats.no_match,
            auto_confirmed=stats.auto_confirmed,
            needs_review=stats.needs_review,
            match_rate=stats.match_rate,
        )


class ReconcileStepPayload(WireModel):
    name: StepName
    status: StepStatus
    count: int = 0
    details: StrList = Field(default_factory=list)
    time_ms: int = 0

    def to_domain(self) -> ReconcileStep:
        return ReconcileStep(
            name=self.name,
            status=self.status,
            count=self.count,
            details=tuple(self.details),
            time_ms=self.time_ms,
        )


class ReconcileRequest(WireModel):
    """Payload of one ``reconcileAll`` call."""

    progress_id: str
    auto_confirm_threshold: int = Field(ge=0, le=100)
    transaction_ids: list[str] | None = None
    cursor: str | None = None
    batch_number: int | None = None
    accumulated_stats: ReconcileStatsPayload | None = None


class ReconcileResponse(WireModel):
    matches: Annotated[
        list[TransactionMatchPayload], BeforeValidator(_none_to_list)
    ] = Field(default_factory=list)
    stats: ReconcileStatsPayload = Field(default_factory=ReconcileStatsPayload)
    steps: Annotated[
        list[ReconcileStepPayload], BeforeValidator(_none_to_list)
    ] = Field(default_factory=list)
    patterns_learned: StrList = Field(default_factory=list)
    processing_time_ms: int = 0
    model: str = ""
    progress_id: str | None = None
    has_more: bool | None = None
    cursor: str | None = None
    batch_number: int | None = None

    @field_validator("stats", mode="before")
    @classmethod
    def empty_stats(cls, v: Any) -> Any:
        return {} if v is None else v

    def to_domain(self) -> BatchResult:
        return BatchResult(
            matches=tuple(m.to_domain() for m in self.matches),
            stats=self.stats.to_domain(),
            steps=tuple(s.to_domain() for s in self.steps),
            patterns_learned=tuple(self.patterns_learned),
            processing_time_ms=self.processing_time_ms,
            model=self.model,
            has_more=bool(self.has_more),
            cursor=self.cursor or None,
            batch_number=self.batch_number,
        )


class ConfirmMatchRequest(WireModel):
    """Payload of one ``confirmMatchV2`` call."""

    transaction_id: str
    document_id: str | None
    document_type: DocumentType | None
    match_confidence: int
    match_method: str
    fx_rate: float | None = None

    @classmethod
    def from_match(cls, match: TransactionMatch) -> "ConfirmMatchRequest":
        return cls(
            transaction_id=match.transaction_id,
            document_id=match.document_id,
            document_type=match.document_type,
            match_confidence=match.confidence,
            match_method=match.match_method,
            fx_rate=match.fx_rate,
        )


class CategorizeRequest(WireModel):
    transaction_id: str
    category: str = "other"


# Progress records
class ProgressEventPayload(WireModel):
    ts: int = 0
    type: ProgressEventType = ProgressEventType.INFO
    text: str = ""
    step: str | None = None

    @field_validator("type", mode="before")
    @classmethod
    def _unknown_type_as_info(cls, v: Any) -> Any:
        # New event categories must not hide the rest of the log
        if v is None or v not in {t.value for t in ProgressEventType}:
            return ProgressEventType.INFO
        return v

    def to_domain(self) -> ProgressEvent:
        return ProgressEvent(ts=self.ts, type=self.type, text=self.text, step=self.step)


class ProgressSnapshotPayload(WireModel):
    total_transactions: int | None = None
    total_bills: int | None = None
    total_invoices: int | None = None
    events: Annotated[
        list[ProgressEventPayload], BeforeValidator(_none_to_list)
    ] = Field(default_factory=list)

    def to_domain(self) -> ProgressSnapshot:
        return ProgressSnapshot(
            events=tuple(e.to_domain() for e in self.events),
            total_transactions=self.total_transactions or 0,
            total_bills=self.total_bills or 0,
            total_invoices=self.total_invoices or 0,
        )


# Document store records
class TransactionRecord(WireModel):
    id: str
    user_id: str
    transaction_date: WireDate = Field(alias="date")
    description: str = ""
    amount: float = 0.0
    type: TransactionType = TransactionType.DEBIT
    account_id: str = ""
    statement_id: str = ""
    currency: str | None = None
    reference: str | None = None
    category: str | None = None
    merchant: str | None = None
    reconciliation_status: ReconciliationStatus | None = None
    matched_document_id: str | None = None
    matched_document_type: DocumentType | None = None
    match: TransactionMatchPayload | None = None

    def to_domain(self) -> TransactionWithMatch:
        transaction = BankTransaction(
            id=self.id,
            user_id=self.user_id,
            transaction_date=self.transaction_date,
            description=self.description,
            amount=self.amount,
            type=self.type,
            account_id=self.account_id,
            statement_id=self.statement_id,
            currency=self.currency or "USD",
            reference=self.reference,
            category=self.category,
            merchant=self.merchant,
            reconciliation_status=self.reconciliation_status,
            matched_document_id=self.matched_document_id,
            matched_document_type=self.matched_document_type,
        )
        return TransactionWithMatch(
            transaction=transaction,
            match=self.match.to_domain() if self.match else None,
        )


class InvoiceRecord(WireModel):
    id: str
    document_number: str
    customer_name: str
    document_date: WireDate | None = None
    total: float = 0.0
    amount_remaining: float = 0.0
    currency: str = "USD"

    @model_validator(mode="before")
    @classmethod
    def fill_legacy_fields(cls, data: Any) -> Any:
        """Older invoices were stored with invoice-specific field names."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        data["documentNumber"] = (
            data.get("documentNumber") or data.get("invoiceNumber") or "Unknown"
        )
        data["documentDate"] = data.get("documentDate") or data.get("invoiceDate")
        data["customerName"] = (
            data.get("customerName") or data.get("counterpartyName") or "Unknown"
        )
        remaining = data.get("amountRemaining")
        if remaining is None:
            remaining = data.get("amountDue")
        if remaining is None:
            remaining = data.get("total")
        data["amountRemaining"] = remaining if remaining is not None else 0
        data["total"] = data.get("total") or 0
        data["currency"] = data.get("currency") or "USD"
        return data

    def to_domain(self) -> Invoice:
        return Invoice(
            id=self.id,
            document_number=self.document_number,
            customer_name=self.customer_name,
            document_date=self.document_date,
            total=self.total,
            amount_remaining=self.amount_remaining,
            currency=self.currency,
        )


class BillRecord(WireModel):
    id: str
    document_number: str = "Unknown"
    vendor_name: str = "Unknown"
    document_date: WireDate | None = None
    total: float = 0.0
    amount_remaining: float | None = None
    currency: str = "USD"

    def to_domain(self) -> Bill:
        return Bill(
            id=self.id,
            document_number=self.document_number,
            vendor_name=self.vendor_name,
            document_date=self.document_date,
            total=self.total,
            amount_remaining=(
                self.amount_remaining if self.amount_remaining is not None else self.total
            ),
            currency=self.currency,
        )
