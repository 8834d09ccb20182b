from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .config import EffectiveConfig


@dataclass(frozen=True)
class SitePaths:
    site_root: Path
    recipes_dir: Path
    overrides_dir: Path
    output_dir: Path


def resolve_site_paths(cfg: EffectiveConfig) -> SitePaths:
    root = Path(cfg.site_dir)
    return SitePaths(
        site_root=root,
        recipes_dir=_under(root, cfg.recipes_dir),
        overrides_dir=_under(root, cfg.overrides_dir),
        output_dir=_under(root, cfg.output_dir),
    )


def _under(root: Path, rel: str) -> Path:
    candidate = Path(rel)
    if candidate.is_absolute():
        return candidate
    return root / candidate
