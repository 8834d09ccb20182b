from __future__ import annotations

import asyncio
from pathlib import Path

from .errors import RecipeboxError, WatchError
from .logger import logger
from .paths import resolve_site_paths
from .site import Site, build_site
from .store import RECIPE_GLOB
from .templates import OVERRIDE_SUFFIX


async def watch_site(
    site: Site,
    debounce_ms: int,
    max_cycles: int | None = None,
) -> None:
    paths = resolve_site_paths(site.cfg)
    watched = [(paths.recipes_dir, RECIPE_GLOB), (paths.overrides_dir, f"*{OVERRIDE_SUFFIX}")]
    mtimes = _snapshot_mtimes(watched)
    cycles = 0

    while True:
        await asyncio.sleep(debounce_ms / 1000.0)
        current = _snapshot_mtimes(watched)
        if _changed(mtimes, current):
            logger.info("Change detected, rebuilding {}", paths.output_dir)
            try:
                await build_site(site)
            except RecipeboxError as exc:
                raise WatchError(str(exc)) from exc
            mtimes = current

        cycles += 1
        if max_cycles is not None and cycles >= max_cycles:
            break


def _snapshot_mtimes(watched: list[tuple[Path, str]]) -> dict[Path, float]:
    mtimes: dict[Path, float] = {}
    for directory, pattern in watched:
        if not directory.is_dir():
            continue
        for path in directory.rglob(pattern):
            try:
                mtimes[path] = path.stat().st_mtime
            except FileNotFoundError:
                continue
    return mtimes


def _changed(before: dict[Path, float], after: dict[Path, float]) -> bool:
    return before != after
