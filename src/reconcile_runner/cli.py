"""Command-line interface for Reconcile Runner."""

import argparse
import asyncio
import sys
from collections.abc import Awaitable, Callable

from reconcile_runner import __version__
from reconcile_runner.api_client import PollingProgressFeed, ReconcileAPIClient
from reconcile_runner.config import Settings, get_settings
from reconcile_runner.domain.descriptions import (
    extract_entity_name,
    format_currency,
    format_event_line,
    format_step_line,
    truncate_description,
)
from reconcile_runner.domain.reconciliation import ReconciliationRun, RunStatus
from reconcile_runner.domain.transactions import ReviewTab
from reconcile_runner.exceptions import ReconcileRunnerError
from reconcile_runner.logging_config import configure_logging
from reconcile_runner.services.documents import DocumentLoader
from reconcile_runner.services.interfaces import CollectingNotifier
from reconcile_runner.services.orchestrator import (
    ReconciliationOrchestrator,
    SessionContext,
)
from reconcile_runner.services.review import filter_by_tab
from reconcile_runner.ui.state import ReconciliationPageState


def _client(args: argparse.Namespace, settings: Settings) -> ReconcileAPIClient:
    return ReconcileAPIClient(base_url=args.api_url, settings=settings)


def _session(args: argparse.Namespace, settings: Settings) -> SessionContext | None:
    user_id = args.user or settings.user_id
    return SessionContext(user_id=user_id) if user_id else None


def _print_notices(notifier: CollectingNotifier) -> None:
    for notice in notifier.notices:
        print(notice.message)


def _print_run(run: ReconciliationRun) -> None:
    print()
    print(f"Run {run.run_id}: {run.status.value} after {run.batch_count} batch(es)")
    if run.model:
        print(f"Model: {run.model}, {run.processing_time_ms / 1000:.1f}s")
    if run.stats is not None:
        stats = run.stats
        print(
            f"Match rate {stats.match_rate:g}%: {stats.auto_confirmed} auto-confirmed, "
            f"{stats.suggestion_count} suggestions, {stats.bank_fees} bank fees, "
            f"{stats.needs_review} need review, {stats.no_match} without match"
        )
    for step in run.steps:
        print(f"  {format_step_line(step)}")
    for pattern in run.patterns_learned:
        print(f"  learned: {pattern}")


class _Workspace:
    """Client, state and services for one headless command."""

    def __init__(self, args: argparse.Namespace) -> None:
        self.settings = get_settings()
        self.session = _session(args, self.settings)
        self.state = ReconciliationPageState()
        self.notifier = CollectingNotifier()
        self.api = _client(args, self.settings)
        self.loader = DocumentLoader(self.api, self.state, self.settings)
        self.orchestrator = ReconciliationOrchestrator(
            self.api,
            PollingProgressFeed(self.api, settings=self.settings),
            self.state,
            self.settings,
            self.notifier,
        )

    async def __aenter__(self) -> "_Workspace":
        if self.session is not None:
            await self.loader.refresh(self.session)
        return self

    async def __aexit__(self, *args: object) -> None:
        self.loader.close()
        self.orchestrator.close()
        await self.api.aclose()


async def _run(args: argparse.Namespace) -> int:
    async with _Workspace(args) as ws:
        state = ws.state
        printed = 0

        def echo() -> None:
            nonlocal printed
            for event in state.transcript[printed:]:
                print(format_event_line(event))
            printed = len(state.transcript)

        state.listeners.append(echo)
        run = await ws.orchestrator.run(ws.session)
        if run is not None:
            # Trailing events can still arrive until the subscription is released
            await asyncio.sleep(ws.settings.progress_grace_seconds)

    _print_notices(ws.notifier)
    if run is None:
        return 0
    _print_run(run)
    return 0 if run.status == RunStatus.COMPLETED else 1


async def _list(args: argparse.Namespace) -> int:
    async with _Workspace(args) as ws:
        if ws.session is None:
            print("Error: Sign in to reconcile transactions (pass --user)")
            return 1
        rows = filter_by_tab(ws.state.transactions, ReviewTab(args.tab))

    print(f"{'Transaction ID':<28} {'Date':<12} {'Status':<12} {'Amount':>14}  Description")
    print("-" * 100)
    for tx in rows:
        t = tx.transaction
        name = extract_entity_name(t.description) or truncate_description(t.description, 40)
        print(
            f"{t.id:<28} {t.transaction_date.isoformat():<12} {tx.status.value:<12} "
            f"{format_currency(t.amount, t.currency):>14}  {name}"
        )
        if tx.match is not None:
            m = tx.match
            target = m.document_number or m.display_counterparty or "-"
            print(f"{'':<28} ↳ {m.classification.value} {target} ({m.confidence}%)")
    print(f"\n{len(rows)} transaction(s)")
    return 0


async def _confirm(args: argparse.Namespace) -> int:
    async with _Workspace(args) as ws:
        ok = await ws.orchestrator.confirm(ws.session, args.transaction_id)
    _print_notices(ws.notifier)
    return 0 if ok else 1


async def _categorize(args: argparse.Namespace) -> int:
    async with _Workspace(args) as ws:
        ok = await ws.orchestrator.categorize(
            ws.session, args.transaction_id, args.category
        )
    _print_notices(ws.notifier)
    return 0 if ok else 1


def _execute(
    coro_fn: Callable[[argparse.Namespace], Awaitable[int]], args: argparse.Namespace
) -> int:
    try:
        result: int = asyncio.run(coro_fn(args))
    except ReconcileRunnerError as e:
        print(f"Error: {e.message}")
        return 1
    return result


def cmd_run(args: argparse.Namespace) -> int:
    """Run the matcher over every unmatched transaction."""
    return _execute(_run, args)


def cmd_list(args: argparse.Namespace) -> int:
    """List transactions on one review tab."""
    return _execute(_list, args)


def cmd_confirm(args: argparse.Namespace) -> int:
    """Confirm the suggested match of a transaction."""
    return _execute(_confirm, args)


def cmd_categorize(args: argparse.Namespace) -> int:
    """Categorize a transaction without a document match."""
    return _execute(_categorize, args)


def cmd_ui(args: argparse.Namespace) -> int:
    """Launch the NiceGUI web interface."""
    from reconcile_runner.ui.main import run

    settings = get_settings()
    try:
        run(
            port=int(args.port),
            api_url=args.api_url,
            user_id=args.user or settings.user_id,
            reload=args.reload,
        )
    except ImportError:
        print("Frontend dependencies are not installed.")
        print("Install with: pip install 'reconcile-runner[frontend]'")
        return 1
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    """Show version information."""
    print(f"Reconcile Runner v{__version__}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="recon",
        description="Reconcile Runner - AI bank reconciliation from the command line",
    )
    parser.add_argument(
        "--api-url",
        help="Callable-function gateway base URL (default: RECON_API_URL)",
        default=None,
    )
    parser.add_argument(
        "--user",
        "-u",
        help="Signed-in user id (default: RECON_USER_ID)",
        default=None,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # run command
    run_parser = subparsers.add_parser(
        "run", help="Reconcile every unmatched transaction"
    )
    run_parser.set_defaults(func=cmd_run)

    # list command
    list_parser = subparsers.add_parser("list", help="List transactions by review tab")
    list_parser.add_argument(
        "--tab",
        choices=[t.value for t in ReviewTab],
        default=ReviewTab.UNMATCHED.value,
        help="Review tab to list (default: unmatched)",
    )
    list_parser.set_defaults(func=cmd_list)

    # confirm command
    confirm_parser = subparsers.add_parser(
        "confirm", help="Confirm a suggested match"
    )
    confirm_parser.add_argument("transaction_id", help="Transaction ID")
    confirm_parser.set_defaults(func=cmd_confirm)

    # categorize command
    categorize_parser = subparsers.add_parser(
        "categorize", help="Categorize a transaction"
    )
    categorize_parser.add_argument("transaction_id", help="Transaction ID")
    categorize_parser.add_argument(
        "--category",
        "-c",
        default="other",
        help="Category to assign (default: other)",
    )
    categorize_parser.set_defaults(func=cmd_categorize)

    # ui command
    ui_parser = subparsers.add_parser("ui", help="Launch the NiceGUI web interface")
    ui_parser.add_argument(
        "--port",
        type=int,
        default=3000,
        help="Port to run frontend (default: 3000)",
    )
    ui_parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable hot reload",
    )
    ui_parser.set_defaults(func=cmd_ui)

    # version command
    version_parser = subparsers.add_parser("version", help="Show version")
    version_parser.set_defaults(func=cmd_version)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    configure_logging()

    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
