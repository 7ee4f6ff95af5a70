# pyright: reportMissingImports=false

"""NiceGUI entry point and routing."""

from __future__ import annotations

from typing import Any

from reconcile_runner.api_client import ReconcileAPIClient


def _require_nicegui() -> Any:
    try:
        from nicegui import ui
    except ImportError as e:  # pragma: no cover
        raise ImportError(
            "NiceGUI is required for the frontend. Install with 'reconcile-runner[frontend]'."
        ) from e
    return ui


def add_global_styles() -> None:
    ui = _require_nicegui()
    ui.add_head_html(
        """
<style type="text/tailwindcss">
  @layer components {
    .recon-page {
      @apply bg-slate-50 min-h-screen;
    }
  }
</style>
"""
    )


def create_ui(api: ReconcileAPIClient, user_id: str | None) -> None:
    ui = _require_nicegui()

    from reconcile_runner.ui.pages import reconciliation

    @ui.page("/")  # type: ignore[untyped-decorator]
    def index() -> None:
        add_global_styles()
        with ui.column().classes("recon-page"):  # noqa: SIM117
            with ui.column().classes("max-w-[1200px] w-full mx-auto p-6 gap-4"):
                reconciliation.render(api, user_id)


def run(
    *,
    port: int = 3000,
    api_url: str | None = None,
    user_id: str | None = None,
    reload: bool = False,
) -> None:
    ui = _require_nicegui()

    api = ReconcileAPIClient(base_url=api_url)
    create_ui(api, user_id)
    ui.run(title="Reconciliation", port=port, reload=reload)
