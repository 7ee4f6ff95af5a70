"""Tests for the camelCase wire models."""

from datetime import date

import pytest
from fakes import make_match
from pydantic import ValidationError

from reconcile_runner.domain.reconciliation import (
    DocumentType,
    MatchClassification,
    ProgressEventType,
    ReconcileStats,
    StepName,
    StepStatus,
    ThinkingLevel,
)
from reconcile_runner.domain.transactions import ReconciliationStatus, TransactionType
from reconcile_runner.schemas import (
    BillRecord,
    CategorizeRequest,
    ConfirmMatchRequest,
    InvoiceRecord,
    ProgressSnapshotPayload,
    ReconcileRequest,
    ReconcileResponse,
    ReconcileStatsPayload,
    TransactionRecord,
)

RESPONSE = {
    "matches": [
        {
            "transactionId": "tx-1",
            "documentId": "inv-1001",
            "documentType": "invoice",
            "documentNumber": "INV-1001",
            "counterpartyName": "Acme Trading",
            "confidence": 96.6,
            "reasoning": ["Exact amount", "Reference INV-1001 in description"],
            "matchType": "exact",
            "classification": "payment_match",
            "fxDetails": {
                "fromCurrency": "EUR",
                "toCurrency": "USD",
                "rate": 1.08,
                "convertedAmount": 1350.0,
            },
            "thinkingLevel": "low",
            "autoConfirmed": True,
            "ruleBasedScore": 82.5,
        },
        {
            "transactionId": "tx-2",
            "classification": "bank_fee",
            "confidence": 99,
            "reasoning": None,
            "matchType": None,
        },
    ],
    "stats": {
        "totalTransactions": 40,
        "quickMatches": 10,
        "aiMatches": 5,
        "deepMatches": 1,
        "bankFees": 4,
        "noMatch": 20,
        "autoConfirmed": 9,
        "needsReview": 2,
        "matchRate": 50.0,
    },
    "steps": [
        {
            "name": "quick_scan",
            "status": "completed",
            "count": 10,
            "details": ["10 exact matches"],
            "timeMs": 120,
        }
    ],
    "patternsLearned": ["Acme Trading -> INV-*"],
    "processingTimeMs": 8123,
    "model": "gemini-3-flash",
    "progressId": "recon_user_1",
    "hasMore": True,
    "cursor": "tx-20",
    "batchNumber": 0,
}


class TestReconcileRequest:
    def test_first_request_wire_shape(self) -> None:
        request = ReconcileRequest(
            progress_id="recon_user_1",
            auto_confirm_threshold=93,
            transaction_ids=["tx-1", "tx-2"],
            batch_number=0,
        )

        assert request.to_wire() == {
            "progressId": "recon_user_1",
            "autoConfirmThreshold": 93,
            "transactionIds": ["tx-1", "tx-2"],
            "batchNumber": 0,
        }

    def test_continuation_request_wire_shape(self) -> None:
        request = ReconcileRequest(
            progress_id="recon_user_1",
            auto_confirm_threshold=93,
            cursor="tx-20",
            batch_number=1,
            accumulated_stats=ReconcileStatsPayload.from_domain(
                ReconcileStats(total_transactions=40, auto_confirmed=9)
            ),
        )

        wire = request.to_wire()
        assert "transactionIds" not in wire
        assert wire["cursor"] == "tx-20"
        assert wire["batchNumber"] == 1
        assert wire["accumulatedStats"]["totalTransactions"] == 40
        assert wire["accumulatedStats"]["autoConfirmed"] == 9

    def test_threshold_range(self) -> None:
        with pytest.raises(ValidationError):
            ReconcileRequest(progress_id="r", auto_confirm_threshold=101)


class TestReconcileResponse:
    def test_full_response(self) -> None:
        batch = ReconcileResponse.model_validate(RESPONSE).to_domain()

        first, second = batch.matches
        assert first.confidence == 97
        assert first.document_type == DocumentType.INVOICE
        assert first.thinking_level == ThinkingLevel.LOW
        assert first.fx_rate == 1.08
        assert first.reasoning == ("Exact amount", "Reference INV-1001 in description")
        assert first.rule_based_score == 82.5
        assert second.classification == MatchClassification.BANK_FEE
        assert second.reasoning == ()
        assert second.match_type == ""
        assert batch.stats.match_rate == 50.0
        assert batch.stats.suggestion_count == 6
        assert batch.steps[0].name == StepName.QUICK_SCAN
        assert batch.steps[0].status == StepStatus.COMPLETED
        assert batch.patterns_learned == ("Acme Trading -> INV-*",)
        assert batch.should_continue
        assert batch.cursor == "tx-20"
        assert batch.batch_number == 0

    def test_minimal_response(self) -> None:
        batch = ReconcileResponse.model_validate(
            {"matches": None, "stats": None, "hasMore": None}
        ).to_domain()

        assert batch.matches == ()
        assert batch.stats == ReconcileStats()
        assert not batch.should_continue

    def test_empty_cursor_stops(self) -> None:
        batch = ReconcileResponse.model_validate({"hasMore": True, "cursor": ""}).to_domain()

        assert batch.cursor is None
        assert not batch.should_continue

    def test_unknown_classification_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ReconcileResponse.model_validate(
                {"matches": [{"transactionId": "t", "classification": "maybe"}]}
            )


class TestReviewRequests:
    def test_confirm_request_from_match(self) -> None:
        request = ConfirmMatchRequest.from_match(make_match("tx-1", confidence=91))

        assert request.to_wire() == {
            "transactionId": "tx-1",
            "documentId": "inv-1001",
            "documentType": "invoice",
            "matchConfidence": 91,
            "matchMethod": "ai_low",
        }

    def test_categorize_request(self) -> None:
        assert CategorizeRequest(transaction_id="tx-1").to_wire() == {
            "transactionId": "tx-1",
            "category": "other",
        }


class TestProgressSnapshotPayload:
    def test_snapshot(self) -> None:
        snapshot = ProgressSnapshotPayload.model_validate(
            {
                "totalTransactions": 40,
                "totalBills": 12,
                "totalInvoices": 30,
                "events": [
                    {"ts": 1, "type": "step", "text": "Quick scan", "step": "quick_scan"},
                    {"ts": 2, "type": "match", "text": "INV-1001 ↔ tx-1"},
                ],
            }
        ).to_domain()

        assert len(snapshot.events) == 2
        assert snapshot.events[0].type == ProgressEventType.STEP
        assert snapshot.summary.total_invoices == 30

    def test_unknown_event_type_reads_as_info(self) -> None:
        snapshot = ProgressSnapshotPayload.model_validate(
            {
                "events": [
                    {"ts": 1, "type": "teleport", "text": "New kind of event"},
                    {"ts": 2, "type": None, "text": "Untyped"},
                    {"ts": 3, "type": "confirm", "text": "Auto-confirmed"},
                ]
            }
        ).to_domain()

        assert [e.type for e in snapshot.events] == [
            ProgressEventType.INFO,
            ProgressEventType.INFO,
            ProgressEventType.CONFIRM,
        ]
        assert snapshot.events[0].text == "New kind of event"

    def test_record_created_before_totals(self) -> None:
        snapshot = ProgressSnapshotPayload.model_validate({"events": None}).to_domain()

        assert snapshot.events == ()
        assert snapshot.summary is None


class TestDocumentRecords:
    def test_transaction_record(self) -> None:
        tx = TransactionRecord.model_validate(
            {
                "id": "tx-1",
                "userId": "user-1",
                "date": "2025-03-14T00:00:00.000Z",
                "description": "ORBACWCU ACME TRADING NV ACCTNUM 1",
                "amount": 1250.0,
                "type": "credit",
                "currency": None,
                "reconciliationStatus": "suggested",
                "match": {
                    "transactionId": "tx-1",
                    "classification": "payment_match",
                    "confidence": 88,
                    "reasoning": ["Amount matches"],
                },
            }
        ).to_domain()

        assert tx.transaction.transaction_date == date(2025, 3, 14)
        assert tx.transaction.type == TransactionType.CREDIT
        assert tx.transaction.currency == "USD"
        assert tx.transaction.reconciliation_status == ReconciliationStatus.SUGGESTED
        assert tx.match.confidence == 88
        assert tx.status == ReconciliationStatus.SUGGESTED

    def test_invoice_legacy_fields(self) -> None:
        invoice = InvoiceRecord.model_validate(
            {
                "id": "inv-1",
                "invoiceNumber": "INV-1001",
                "invoiceDate": "2025-03-01",
                "counterpartyName": "Acme Trading",
                "total": 1250.0,
                "amountDue": 250.0,
            }
        ).to_domain()

        assert invoice.document_number == "INV-1001"
        assert invoice.customer_name == "Acme Trading"
        assert invoice.document_date == date(2025, 3, 1)
        assert invoice.amount_remaining == 250.0
        assert invoice.currency == "USD"

    def test_invoice_without_names(self) -> None:
        invoice = InvoiceRecord.model_validate({"id": "inv-2", "total": 90}).to_domain()

        assert invoice.document_number == "Unknown"
        assert invoice.customer_name == "Unknown"
        assert invoice.amount_remaining == 90

    def test_bill_remaining_defaults_to_total(self) -> None:
        bill = BillRecord.model_validate(
            {"id": "b-1", "vendorName": "Aqualectra", "total": 89.5}
        ).to_domain()

        assert bill.amount_remaining == 89.5
        assert bill.document_number == "Unknown"
