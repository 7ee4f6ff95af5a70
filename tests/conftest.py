"""Shared fixtures: scripted matcher, progress feed and page state."""

import pytest

from fakes import USER_ID, FakeBackend, FakeFeed, make_transaction

from reconcile_runner.config import Settings
from reconcile_runner.services.interfaces import CollectingNotifier
from reconcile_runner.services.orchestrator import (
    ReconciliationOrchestrator,
    SessionContext,
)
from reconcile_runner.ui.state import ReconciliationPageState


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        batch_delay_seconds=0,
        progress_grace_seconds=0,
        elapsed_tick_seconds=0.01,
        auto_confirm_threshold=93,
        batch_timeout_seconds=540,
    )


@pytest.fixture
def session() -> SessionContext:
    return SessionContext(user_id=USER_ID)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def feed() -> FakeFeed:
    return FakeFeed()


@pytest.fixture
def notifier() -> CollectingNotifier:
    return CollectingNotifier()


@pytest.fixture
def state() -> ReconciliationPageState:
    return ReconciliationPageState(
        transactions=[
            make_transaction("tx-1", amount=1250.0),
            make_transaction("tx-2", amount=89.5),
            make_transaction("tx-3", amount=12.0),
        ],
        loading=False,
    )


@pytest.fixture
def orchestrator(
    backend: FakeBackend,
    feed: FakeFeed,
    state: ReconciliationPageState,
    settings: Settings,
    notifier: CollectingNotifier,
) -> ReconciliationOrchestrator:
    return ReconciliationOrchestrator(
        backend, feed, state, settings=settings, notifier=notifier
    )
