"""Live transcript of a reconciliation run."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from reconcile_runner.domain.reconciliation import (
    ProgressEvent,
    ProgressSnapshot,
    ProgressSummary,
)
from reconcile_runner.logging_config import get_logger
from reconcile_runner.services.interfaces import ProgressFeed, Unsubscribe

logger = get_logger(__name__)


class ProgressSubscriber:
    """Follows one progress record and forwards only unseen events.

    Snapshots carry the whole event history, so the subscriber remembers how
    many events it has already delivered and forwards just the tail beyond
    that. Summary counts are captured once, from the first snapshot that
    carries them.
    """

    def __init__(
        self,
        feed: ProgressFeed,
        run_id: str,
        on_events: Callable[[list[ProgressEvent]], None],
        on_summary: Callable[[ProgressSummary], None] | None = None,
    ) -> None:
        self._feed = feed
        self._run_id = run_id
        self._on_events = on_events
        self._on_summary = on_summary
        self._seen = 0
        self._summary: ProgressSummary | None = None
        self._unsubscribe: Unsubscribe | None = None
        self._release: asyncio.TimerHandle | None = None

    @property
    def run_id(self) -> str:
        return self._run_id

    @property
    def seen_count(self) -> int:
        return self._seen

    @property
    def summary(self) -> ProgressSummary | None:
        return self._summary

    @property
    def active(self) -> bool:
        return self._unsubscribe is not None

    def start(self) -> None:
        if self._unsubscribe is not None:
            return
        self._unsubscribe = self._feed.subscribe(self._run_id, self.handle_snapshot)
        logger.debug("progress_subscribed", run_id=self._run_id)

    def handle_snapshot(self, snapshot: ProgressSnapshot | None) -> None:
        if snapshot is None:
            return

        if self._summary is None and snapshot.summary is not None:
            self._summary = snapshot.summary
            if self._on_summary is not None:
                self._on_summary(self._summary)

        if len(snapshot.events) > self._seen:
            fresh = list(snapshot.events[self._seen :])
            self._seen = len(snapshot.events)
            self._on_events(fresh)

    def release_after(self, delay: float) -> None:
        """Unsubscribe once ``delay`` seconds have passed.

        Trailing events written after the last batch returned still arrive
        during the delay.
        """
        if self._unsubscribe is None:
            return
        if self._release is not None:
            self._release.cancel()
        if delay <= 0:
            self.close()
            return
        self._release = asyncio.get_running_loop().call_later(delay, self.close)

    def close(self) -> None:
        """Unsubscribe immediately; safe to call repeatedly."""
        if self._release is not None:
            self._release.cancel()
            self._release = None
        if self._unsubscribe is not None:
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            unsubscribe()
            logger.debug(
                "progress_unsubscribed", run_id=self._run_id, events=self._seen
            )
