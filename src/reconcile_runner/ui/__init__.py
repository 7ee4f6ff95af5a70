"""Browser review page for reconciliation runs (``recon ui``).

Only ``reconcile_runner.ui.main`` and the component modules import NiceGUI;
``constants`` and ``state`` are shared with the CLI and the tests.
"""

from __future__ import annotations

from reconcile_runner import __version__

__all__ = ["__version__"]
