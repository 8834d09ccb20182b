from __future__ import annotations

from pathlib import Path

import pytest

from recipebox.config import resolve_config
from recipebox.errors import RecipeNotFoundError, ScanError
from recipebox.site import Site, build_site
from tests.utils import write_recipe


def _site(site_dir: Path) -> Site:
    return Site.from_config(resolve_config({"site": str(site_dir)}))


# Purpose: verify a build writes the index, the dashboard and one page per recipe.
@pytest.mark.asyncio
async def test_build_site_writes_pages(site_copy: Path, temp_home: Path) -> None:
    result = await build_site(_site(site_copy))

    cache = site_copy / "cache"
    assert result.output_dir == cache
    assert result.index == cache / "index.html"
    assert sorted(path.name for path in (cache / "recipes").iterdir()) == [
        "lemon-bars.html",
        "pan-grilled-garlic-naan.html",
        "weeknight-chili.html",
    ]
    assert len(result.written) == 5
    index = (cache / "index.html").read_text(encoding="utf-8")
    assert "<h1>Example Kitchen</h1>" in index
    assert "broken-amount.md" in index
    assert "1 failed." in (cache / "dashboard.html").read_text(encoding="utf-8")
    assert len(result.scan.failures) == 1


@pytest.mark.asyncio
async def test_build_site_dry_run_writes_nothing(site_copy: Path, temp_home: Path) -> None:
    result = await build_site(_site(site_copy), dry_run=True)
    assert result.written == ()
    assert not (site_copy / "cache").exists()


@pytest.mark.asyncio
async def test_build_site_removes_stale_pages(site_copy: Path, temp_home: Path) -> None:
    site = _site(site_copy)
    await build_site(site)
    (site_copy / "recipes" / "lemon-bars.md").unlink()

    await build_site(site)
    pages = sorted(path.name for path in (site_copy / "cache" / "recipes").iterdir())
    assert pages == ["pan-grilled-garlic-naan.html", "weeknight-chili.html"]


@pytest.mark.asyncio
async def test_build_site_uses_override(site_copy: Path, temp_home: Path) -> None:
    (site_copy / "pages").mkdir(exist_ok=True)
    (site_copy / "pages" / "recipe.html").write_text("<p>{{ recipe.title }}</p>", encoding="utf-8")
    await build_site(_site(site_copy))
    page = site_copy / "cache" / "recipes" / "lemon-bars.html"
    assert page.read_text(encoding="utf-8") == "<p>Lemon Bars</p>"


@pytest.mark.asyncio
async def test_build_site_missing_recipes_dir(tmp_path: Path, temp_home: Path) -> None:
    with pytest.raises(ScanError):
        await build_site(_site(tmp_path))


@pytest.mark.asyncio
async def test_render_recipe_unknown(tmp_path: Path, temp_home: Path) -> None:
    write_recipe(tmp_path / "recipes", "one.md")
    site = _site(tmp_path)
    await site.store.scan()
    assert "<h1>Test</h1>" in await site.render_recipe("one")
    with pytest.raises(RecipeNotFoundError):
        await site.render_recipe("two")
