from __future__ import annotations

from ..config import resolve_config
from ..logger import configure_logging


def run_tui(cli_args: dict[str, object]) -> int:
    cfg = resolve_config(cli_args)
    configure_logging("ERROR")
    # textual is only needed once the browser actually starts
    from .app import RecipeBrowserApp

    app = RecipeBrowserApp(cfg)
    app.run()
    return 0


__all__ = ["run_tui"]
