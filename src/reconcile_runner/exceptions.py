"""Exception hierarchy for Reconcile Runner.

All errors raised by the package inherit from ReconcileRunnerError, so the
orchestrator can catch every expected failure at the call site with a
single except clause and surface it as a transient notice.
"""

from typing import Any


class ReconcileRunnerError(Exception):
    """Base exception for all Reconcile Runner errors."""

    error_code: str = "RECON_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        if status_code:
            self.status_code = status_code
        self.context = context or {}


# =============================================================================
# Remote Call Errors
# =============================================================================


class RemoteCallError(ReconcileRunnerError):
    """Raised when a remote callable rejects or cannot be reached."""

    error_code = "REMOTE_CALL_FAILED"
    status_code = 502

    def __init__(
        self,
        function_name: str,
        message: str = "",
        *,
        status_code: int | None = None,
        remote_status: str | None = None,
    ) -> None:
        super().__init__(
            message,
            status_code=status_code,
            context={"function": function_name, "remote_status": remote_status},
        )
        self.function_name = function_name
        self.remote_status = remote_status


class RemoteTimeoutError(RemoteCallError):
    """Raised when a remote callable exceeds its timeout."""

    error_code = "REMOTE_CALL_TIMEOUT"
    status_code = 504

    def __init__(self, function_name: str, timeout: float) -> None:
        super().__init__(
            function_name,
            f"{function_name} timed out after {timeout:g}s",
            remote_status="deadline-exceeded",
        )
        self.context["timeout"] = timeout


class ProgressFeedError(ReconcileRunnerError):
    """Raised when a progress record cannot be read."""

    error_code = "PROGRESS_FEED_ERROR"
    status_code = 502

    def __init__(self, run_id: str, message: str) -> None:
        super().__init__(message, context={"run_id": run_id})


# =============================================================================
# Review Errors
# =============================================================================


class ReviewError(ReconcileRunnerError):
    """Base exception for confirm / reject / categorize actions."""

    error_code = "REVIEW_ERROR"
    status_code = 400


class TransactionNotFoundError(ReviewError):
    """Raised when a transaction is not in the current view."""

    error_code = "TRANSACTION_NOT_FOUND"
    status_code = 404

    def __init__(self, transaction_id: str) -> None:
        super().__init__(
            f"Transaction not found: {transaction_id}",
            context={"transaction_id": transaction_id},
        )


class MatchNotFoundError(ReviewError):
    """Raised when a transaction carries no match to act on."""

    error_code = "MATCH_NOT_FOUND"
    status_code = 404

    def __init__(self, transaction_id: str) -> None:
        super().__init__(
            f"No match attached to transaction {transaction_id}",
            context={"transaction_id": transaction_id},
        )


class MatchNotPresentableError(ReviewError):
    """Raised when an unconfirmed payment match has no reasoning to show."""

    error_code = "MATCH_NOT_PRESENTABLE"
    status_code = 422

    def __init__(self, transaction_id: str) -> None:
        super().__init__(
            f"Match for transaction {transaction_id} has no reasoning and cannot be confirmed",
            context={"transaction_id": transaction_id},
        )


class MatchNotConfirmableError(ReviewError):
    """Raised when a match is not a pending payment suggestion."""

    error_code = "MATCH_NOT_CONFIRMABLE"
    status_code = 409

    def __init__(self, transaction_id: str, status: str) -> None:
        super().__init__(
            f"Transaction {transaction_id} has no payment suggestion to confirm ({status})",
            context={"transaction_id": transaction_id, "status": status},
        )


class NotSignedInError(ReconcileRunnerError):
    """Raised when an action needs a user session and none is active."""

    error_code = "NOT_SIGNED_IN"
    status_code = 401

    def __init__(self, message: str = "Sign in to reconcile transactions") -> None:
        super().__init__(message)
