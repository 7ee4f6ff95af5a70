"""Tests for the pure transaction-list transitions."""

from fakes import make_match, make_transaction

from reconcile_runner.domain.reconciliation import MatchClassification
from reconcile_runner.domain.transactions import ReconciliationStatus, ReviewTab
from reconcile_runner.services.review import (
    apply_batch_matches,
    categorize_locally,
    confirm_locally,
    filter_by_tab,
    merge_transaction_snapshot,
    reconciliation_progress,
    reject_locally,
    tab_counts,
    unmatched_transactions,
)


def _ids(transactions) -> list[str]:
    return [tx.id for tx in transactions]


class TestApplyBatchMatches:
    def test_auto_confirmed_match_sets_matched(self) -> None:
        before = [make_transaction("tx-1"), make_transaction("tx-2")]

        after = apply_batch_matches(before, [make_match("tx-1", auto_confirmed=True)])

        assert after[0].status == ReconciliationStatus.MATCHED
        assert after[0].transaction.reconciliation_status == ReconciliationStatus.MATCHED
        assert after[1] is before[1]

    def test_suggestion_is_attached_without_status_change(self) -> None:
        after = apply_batch_matches([make_transaction("tx-1")], [make_match("tx-1")])

        assert after[0].match == make_match("tx-1")
        assert after[0].transaction.reconciliation_status is None
        assert after[0].status == ReconciliationStatus.SUGGESTED

    def test_does_not_mutate_input(self) -> None:
        before = [make_transaction("tx-1")]

        apply_batch_matches(before, [make_match("tx-1", auto_confirmed=True)])

        assert before[0].match is None
        assert before[0].status == ReconciliationStatus.UNMATCHED

    def test_unknown_transaction_ids_are_ignored(self) -> None:
        before = [make_transaction("tx-1")]

        assert apply_batch_matches(before, [make_match("tx-9")]) == before


class TestLocalTransitions:
    def test_confirm_marks_matched_and_confirms_match(self) -> None:
        before = [make_transaction("tx-1", match=make_match("tx-1"))]

        after = confirm_locally(before, "tx-1")

        assert after[0].status == ReconciliationStatus.MATCHED
        assert after[0].match.auto_confirmed is True

    def test_reject_drops_match(self) -> None:
        before = [make_transaction("tx-1", match=make_match("tx-1"))]

        after = reject_locally(before, "tx-1")

        assert after[0].match is None
        assert after[0].status == ReconciliationStatus.UNMATCHED
        assert before[0].match is not None

    def test_categorize(self) -> None:
        after = categorize_locally([make_transaction("tx-1")], "tx-1")

        assert after[0].status == ReconciliationStatus.CATEGORIZED
        assert after[0].is_unmatched is False


class TestMergeTransactionSnapshot:
    def test_rejected_match_survives_merge_in_same_session(self) -> None:
        stored = make_transaction("tx-1", match=make_match("tx-1"))
        local = reject_locally([stored], "tx-1")

        merged = merge_transaction_snapshot(local, [stored])

        assert merged[0].match is None

    def test_rejected_match_reappears_on_fresh_load(self) -> None:
        stored = make_transaction("tx-1", match=make_match("tx-1"))
        reject_locally([stored], "tx-1")

        fresh = merge_transaction_snapshot([], [stored])

        assert fresh[0].match == make_match("tx-1")
        assert fresh[0].status == ReconciliationStatus.SUGGESTED

    def test_fresh_persisted_status_is_taken(self) -> None:
        local = [make_transaction("tx-1", match=make_match("tx-1"))]
        stored = [make_transaction("tx-1", status=ReconciliationStatus.MATCHED)]

        merged = merge_transaction_snapshot(local, stored)

        assert merged[0].status == ReconciliationStatus.MATCHED
        assert merged[0].match == make_match("tx-1")

    def test_order_and_membership_follow_fresh_read(self) -> None:
        local = [make_transaction("tx-1"), make_transaction("tx-2")]
        stored = [make_transaction("tx-3"), make_transaction("tx-1")]

        assert _ids(merge_transaction_snapshot(local, stored)) == ["tx-3", "tx-1"]


class TestQueries:
    def _transactions(self):
        return [
            make_transaction("unmatched"),
            make_transaction("suggested", match=make_match("suggested")),
            make_transaction(
                "review",
                match=make_match("review", MatchClassification.NEEDS_REVIEW),
            ),
            make_transaction(
                "fee", match=make_match("fee", MatchClassification.BANK_FEE)
            ),
            make_transaction("matched", status=ReconciliationStatus.MATCHED),
            make_transaction("categorized", status=ReconciliationStatus.CATEGORIZED),
        ]

    def test_unmatched_transactions(self) -> None:
        assert _ids(unmatched_transactions(self._transactions())) == ["unmatched"]

    def test_filter_by_tab(self) -> None:
        transactions = self._transactions()

        assert _ids(filter_by_tab(transactions, ReviewTab.UNMATCHED)) == ["unmatched"]
        assert _ids(filter_by_tab(transactions, ReviewTab.SUGGESTED)) == [
            "suggested",
            "review",
            "fee",
        ]
        assert _ids(filter_by_tab(transactions, ReviewTab.MATCHED)) == ["matched"]
        assert len(filter_by_tab(transactions, ReviewTab.ALL)) == 6

    def test_tab_counts(self) -> None:
        counts = tab_counts(self._transactions())

        assert (counts.unmatched, counts.suggested, counts.matched, counts.all) == (
            1,
            3,
            1,
            6,
        )
        assert counts.for_tab(ReviewTab.SUGGESTED) == 3

    def test_progress_counts_matched_and_bank_fees(self) -> None:
        # 2 of 6 -> 33.3%
        assert reconciliation_progress(self._transactions()) == 33

    def test_progress_rounds_half_up(self) -> None:
        transactions = [
            make_transaction("a", status=ReconciliationStatus.MATCHED),
            make_transaction("b"),
            make_transaction("c"),
            make_transaction("d"),
            make_transaction("e"),
            make_transaction("f"),
            make_transaction("g"),
            make_transaction("h"),
        ]

        # 1 of 8 -> 12.5%
        assert reconciliation_progress(transactions) == 13

    def test_progress_of_empty_list(self) -> None:
        assert reconciliation_progress([]) == 0
