from __future__ import annotations

from pathlib import Path


RECIPE_TEMPLATE = """---
title: {title}
ingredients:
  - name: flour
    amount: {amount}
    unit: c
---

1. Mix.
2. Bake.
"""


def write_recipe(directory: Path, filename: str, title: str = "Test", amount: str = "1") -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    path.write_text(RECIPE_TEMPLATE.format(title=title, amount=amount), encoding="utf-8")
    return path


def write_global_config(home: Path, content: str) -> Path:
    cfg_dir = home / ".config" / "recipebox"
    cfg_dir.mkdir(parents=True, exist_ok=True)
    path = cfg_dir / "config.toml"
    path.write_text(content, encoding="utf-8")
    return path


def write_profile(home: Path, name: str, site: str) -> Path:
    dir_path = home / ".config" / "recipebox" / "sites.d"
    dir_path.mkdir(parents=True, exist_ok=True)
    path = dir_path / f"{name}.toml"
    path.write_text(f"site = {site!r}\n", encoding="utf-8")
    return path
