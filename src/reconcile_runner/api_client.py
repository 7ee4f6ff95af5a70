"""HTTP client for the remote callables and the document store.

Callables follow the usual callable-function protocol: ``POST /<name>`` with
``{"data": payload}``, answered by ``{"result": ...}`` on success and
``{"error": {"message": ..., "status": ...}}`` on failure.
"""

from __future__ import annotations

import asyncio
from typing import Any, TypeVar

import httpx
from pydantic import ValidationError

from reconcile_runner.config import Settings, get_settings
from reconcile_runner.domain.reconciliation import BatchResult, ProgressSnapshot
from reconcile_runner.domain.transactions import Bill, Invoice, TransactionWithMatch
from reconcile_runner.exceptions import (
    ProgressFeedError,
    ReconcileRunnerError,
    RemoteCallError,
    RemoteTimeoutError,
)
from reconcile_runner.logging_config import get_logger
from reconcile_runner.schemas import (
    BillRecord,
    CategorizeRequest,
    ConfirmMatchRequest,
    InvoiceRecord,
    ProgressSnapshotPayload,
    ReconcileRequest,
    ReconcileResponse,
    TransactionRecord,
)
from reconcile_runner.services.interfaces import (
    DocumentSource,
    ProgressFeed,
    ReconcileBackend,
    SnapshotCallback,
    Unsubscribe,
)

logger = get_logger(__name__)

RecordModel = TypeVar("RecordModel", TransactionRecord, InvoiceRecord, BillRecord)

RECONCILE_FUNCTION = "reconcileAll"
CONFIRM_FUNCTION = "confirmMatchV2"
CATEGORIZE_FUNCTION = "categorizeTransactionV2"
PROGRESS_COLLECTION = "reconciliation_runs"


def _error_parts(response: httpx.Response) -> tuple[str, str | None]:
    try:
        payload = response.json()
    except ValueError:
        return response.text, None
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict):
        return str(error.get("message") or ""), error.get("status")
    if isinstance(error, str):
        return error, None
    return response.text, None


class ReconcileAPIClient(ReconcileBackend, DocumentSource):
    def __init__(
        self,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._base_url = base_url or self._settings.api_url
        self._client = (
            client
            if client is not None
            else httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._settings.request_timeout_seconds,
            )
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> ReconcileAPIClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def _call(
        self,
        function_name: str,
        payload: dict[str, Any],
        *,
        timeout: float | None = None,
    ) -> Any:
        request_timeout = timeout or self._settings.request_timeout_seconds
        try:
            r = await self._client.post(
                f"/{function_name}",
                json={"data": payload},
                timeout=request_timeout,
            )
        except httpx.TimeoutException as e:
            raise RemoteTimeoutError(function_name, request_timeout) from e
        except httpx.HTTPError as e:
            raise RemoteCallError(function_name, str(e)) from e

        if 200 <= r.status_code < 300:
            if r.status_code == 204 or not r.content:
                return None
            try:
                body = r.json()
            except ValueError as e:
                raise RemoteCallError(
                    function_name,
                    f"Malformed {function_name} response",
                    status_code=r.status_code,
                ) from e
            return body.get("result") if isinstance(body, dict) else None

        message, remote_status = _error_parts(r)
        raise RemoteCallError(
            function_name,
            message,
            status_code=r.status_code,
            remote_status=remote_status,
        )

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        try:
            r = await self._client.get(path, params=params)
        except httpx.TimeoutException as e:
            raise RemoteTimeoutError(
                path, self._settings.request_timeout_seconds
            ) from e
        except httpx.HTTPError as e:
            raise RemoteCallError(path, str(e)) from e

        if r.status_code == 404:
            return None
        if not 200 <= r.status_code < 300:
            message, remote_status = _error_parts(r)
            raise RemoteCallError(
                path, message, status_code=r.status_code, remote_status=remote_status
            )
        try:
            return r.json()
        except ValueError as e:
            raise RemoteCallError(
                path, f"Malformed response from {path}", status_code=r.status_code
            ) from e

    # Callables
    async def reconcile_all(
        self, request: ReconcileRequest, *, timeout: float | None = None
    ) -> BatchResult:
        data = await self._call(
            RECONCILE_FUNCTION,
            request.to_wire(),
            timeout=timeout or self._settings.batch_timeout_seconds,
        )
        try:
            return ReconcileResponse.model_validate(data or {}).to_domain()
        except ValidationError as e:
            raise RemoteCallError(
                RECONCILE_FUNCTION, f"Malformed {RECONCILE_FUNCTION} response"
            ) from e

    async def confirm_match(self, request: ConfirmMatchRequest) -> None:
        await self._call(CONFIRM_FUNCTION, request.to_wire())

    async def categorize_transaction(
        self, transaction_id: str, category: str = "other"
    ) -> None:
        payload = CategorizeRequest(transaction_id=transaction_id, category=category)
        await self._call(CATEGORIZE_FUNCTION, payload.to_wire())

    # Document store
    async def get_progress(self, run_id: str) -> ProgressSnapshot | None:
        try:
            data = await self._get_json(f"/{PROGRESS_COLLECTION}/{run_id}")
        except RemoteCallError as e:
            raise ProgressFeedError(run_id, e.message or "Progress record unavailable") from e
        if data is None:
            return None
        try:
            return ProgressSnapshotPayload.model_validate(data).to_domain()
        except ValidationError as e:
            raise ProgressFeedError(run_id, "Malformed progress record") from e

    async def _list(
        self, collection: str, user_id: str, order_by: str, limit: int
    ) -> list[dict[str, Any]]:
        data = await self._get_json(
            f"/{collection}",
            params={
                "userId": user_id,
                "orderBy": order_by,
                "direction": "desc",
                "limit": limit,
            },
        )
        if data is None:
            return []
        if isinstance(data, dict):
            data = data.get("documents") or []
        if not isinstance(data, list):
            raise RemoteCallError(f"/{collection}", f"Malformed {collection} listing")
        return data

    async def _records(
        self,
        collection: str,
        model: type[RecordModel],
        user_id: str,
        order_by: str,
        limit: int,
    ) -> list[RecordModel]:
        rows = await self._list(collection, user_id, order_by, limit)
        try:
            return [model.model_validate(row) for row in rows]
        except ValidationError as e:
            raise RemoteCallError(
                f"/{collection}", f"Malformed {collection} record"
            ) from e

    async def list_transactions(
        self, user_id: str, limit: int
    ) -> list[TransactionWithMatch]:
        records = await self._records(
            "transactions", TransactionRecord, user_id, "date", limit
        )
        return [record.to_domain() for record in records]

    async def list_invoices(self, user_id: str, limit: int) -> list[Invoice]:
        records = await self._records(
            "invoices", InvoiceRecord, user_id, "invoiceDate", limit
        )
        return [record.to_domain() for record in records]

    async def list_bills(self, user_id: str, limit: int) -> list[Bill]:
        records = await self._records("bills", BillRecord, user_id, "documentDate", limit)
        return [record.to_domain() for record in records]


class PollingProgressFeed(ProgressFeed):
    """Progress subscription backed by periodic reads of the record.

    Each subscription runs its own polling task on the current event loop.
    Read failures are logged and retried on the next tick; they never reach
    the subscriber.
    """

    def __init__(
        self,
        client: ReconcileAPIClient,
        interval: float | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._client = client
        self._interval = interval or settings.progress_poll_interval_seconds

    def subscribe(self, run_id: str, callback: SnapshotCallback) -> Unsubscribe:
        task = asyncio.get_running_loop().create_task(self._poll(run_id, callback))

        def unsubscribe() -> None:
            if not task.done():
                task.cancel()

        return unsubscribe

    async def _poll(self, run_id: str, callback: SnapshotCallback) -> None:
        while True:
            try:
                snapshot = await self._client.get_progress(run_id)
            except ReconcileRunnerError as e:
                logger.warning(
                    "progress_poll_failed", run_id=run_id, error=e.message
                )
            else:
                callback(snapshot)
            await asyncio.sleep(self._interval)
