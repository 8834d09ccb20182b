from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path

from .config import EffectiveConfig
from .fsutil import atomic_write_text
from .logger import logger
from .paths import resolve_site_paths
from .render import Renderer, dashboard_context, home_context, recipe_context
from .store import RecipeStore, ScanResult
from .templates import Slot, TemplateRegistry


@dataclass(frozen=True)
class BuildResult:
    output_dir: Path
    written: tuple[Path, ...]
    scan: ScanResult

    @property
    def index(self) -> Path:
        return self.output_dir / "index.html"


@dataclass
class Site:
    """The collaborating core components for one site directory."""

    cfg: EffectiveConfig
    store: RecipeStore
    registry: TemplateRegistry
    renderer: Renderer

    @classmethod
    def from_config(cls, cfg: EffectiveConfig) -> Site:
        paths = resolve_site_paths(cfg)
        return cls(
            cfg=cfg,
            store=RecipeStore(paths.recipes_dir),
            registry=TemplateRegistry(paths.overrides_dir),
            renderer=Renderer(),
        )

    async def render_recipe(self, identifier: str) -> str:
        recipe = self.store.get(identifier)
        return await self.renderer.render_slot(
            self.registry,
            Slot.RECIPE,
            recipe_context(recipe, self.cfg.site_title),
        )

    async def render_home(self) -> str:
        context = home_context(self.store.list(), self.store.failures, self.cfg.site_title)
        return await self.renderer.render_slot(self.registry, Slot.HOME, context)

    async def render_dashboard(self) -> str:
        templates = await self.registry.resolve_all()
        context = dashboard_context(
            self.store.list(),
            self.store.failures,
            templates,
            self.cfg.site_title,
        )
        return await self.renderer.render_slot(self.registry, Slot.DASHBOARD, context)


async def build_site(site: Site, dry_run: bool = False) -> BuildResult:
    scan = await site.store.scan()
    output_dir = resolve_site_paths(site.cfg).output_dir

    pages: dict[Path, str] = {
        output_dir / "index.html": await site.render_home(),
        output_dir / "dashboard.html": await site.render_dashboard(),
    }
    for recipe in site.store.list():
        pages[output_dir / "recipes" / f"{recipe.identifier}.html"] = await site.render_recipe(recipe.identifier)

    written: list[Path] = []
    if not dry_run:
        for path, content in pages.items():
            await asyncio.to_thread(atomic_write_text, path, content)
            written.append(path)
        _remove_stale_pages(output_dir / "recipes", set(pages))
    logger.info("Built {} pages into {}", len(pages), output_dir)

    return BuildResult(output_dir=output_dir, written=tuple(written), scan=scan)


def _remove_stale_pages(recipes_out: Path, keep: set[Path]) -> None:
    if not recipes_out.is_dir():
        return
    for path in recipes_out.glob("*.html"):
        if path not in keep:
            path.unlink(missing_ok=True)
