from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from recipebox.editor import LayoutEditor
from recipebox.errors import StorageError, TemplateValidationError
from recipebox.templates import Origin, Slot, TemplateRegistry


def _editor(pages: Path) -> tuple[LayoutEditor, TemplateRegistry]:
    registry = TemplateRegistry(pages)
    return LayoutEditor(registry), registry


# Purpose: verify a saved layout is what the next resolve returns.
@pytest.mark.asyncio
async def test_save_then_resolve(tmp_path: Path) -> None:
    editor, registry = _editor(tmp_path / "pages")
    content = "<h1>{{ recipe.title }}</h1>\n"

    path = await editor.save("recipe", content)
    assert path == tmp_path / "pages" / "recipe.html"
    assert path.read_text(encoding="utf-8") == content

    template = await registry.resolve(Slot.RECIPE)
    assert template.origin is Origin.OVERRIDE
    assert template.content == content


@pytest.mark.asyncio
async def test_save_invalidates_cached_override(tmp_path: Path) -> None:
    pages = tmp_path / "pages"
    editor, registry = _editor(pages)
    await editor.save(Slot.HOME, "<p>one</p>")
    assert (await registry.resolve(Slot.HOME)).content == "<p>one</p>"

    await editor.save(Slot.HOME, "<p>two</p>")
    assert not registry.is_cached(Slot.HOME)
    assert (await registry.resolve(Slot.HOME)).content == "<p>two</p>"


@pytest.mark.asyncio
async def test_invalid_save_leaves_existing_override_untouched(tmp_path: Path) -> None:
    pages = tmp_path / "pages"
    editor, registry = _editor(pages)
    await editor.save(Slot.DASHBOARD, "<p>{{ recipe_count }}</p>")
    before = (pages / "dashboard.html").read_bytes()
    await registry.resolve(Slot.DASHBOARD)

    with pytest.raises(TemplateValidationError):
        await editor.save(Slot.DASHBOARD, "{% for r in recipes %}<p>{{ r.title }}</p>")

    assert (pages / "dashboard.html").read_bytes() == before
    assert (await registry.resolve(Slot.DASHBOARD)).content == "<p>{{ recipe_count }}</p>"
    assert sorted(path.name for path in pages.iterdir()) == ["dashboard.html"]


@pytest.mark.parametrize(
    "content",
    [
        "<h1>{{ site_title | bogus }}</h1>",
        "{% if recipe_count is bogus %}none{% endif %}",
    ],
)
@pytest.mark.asyncio
async def test_unrenderable_save_is_rejected(tmp_path: Path, content: str) -> None:
    pages = tmp_path / "pages"
    editor, registry = _editor(pages)
    await editor.save(Slot.HOME, "<h1>{{ site_title }}</h1>")
    before = (pages / "home.html").read_bytes()

    with pytest.raises(TemplateValidationError):
        await editor.save(Slot.HOME, content)

    assert (pages / "home.html").read_bytes() == before
    assert (await registry.resolve(Slot.HOME)).content == "<h1>{{ site_title }}</h1>"


@pytest.mark.asyncio
async def test_invalid_save_without_override_creates_nothing(tmp_path: Path) -> None:
    pages = tmp_path / "pages"
    editor, _ = _editor(pages)
    with pytest.raises(TemplateValidationError):
        await editor.save(Slot.HOME, "")
    assert not (pages / "home.html").exists()


@pytest.mark.asyncio
async def test_concurrent_saves_to_one_slot(tmp_path: Path) -> None:
    pages = tmp_path / "pages"
    editor, registry = _editor(pages)
    contents = [f"<p>version {idx} {{{{ site_title }}}}</p>" for idx in range(10)]

    await asyncio.gather(*(editor.save(Slot.HOME, content) for content in contents))

    final = (pages / "home.html").read_text(encoding="utf-8")
    assert final in contents
    assert [path.name for path in pages.iterdir()] == ["home.html"]
    assert (await registry.resolve(Slot.HOME)).content == final


@pytest.mark.asyncio
async def test_saves_to_different_slots_do_not_interfere(tmp_path: Path) -> None:
    pages = tmp_path / "pages"
    editor, _ = _editor(pages)
    await asyncio.gather(
        editor.save(Slot.HOME, "<p>home</p>"),
        editor.save(Slot.RECIPE, "<p>recipe</p>"),
        editor.save(Slot.DASHBOARD, "<p>dashboard</p>"),
    )
    for slot in Slot:
        assert (pages / f"{slot.value}.html").read_text(encoding="utf-8") == f"<p>{slot.value}</p>"


@pytest.mark.asyncio
async def test_reset_removes_override(tmp_path: Path) -> None:
    pages = tmp_path / "pages"
    editor, registry = _editor(pages)
    await editor.save(Slot.RECIPE, "<p>{{ recipe.title }}</p>")
    await registry.resolve(Slot.RECIPE)

    assert await editor.reset(Slot.RECIPE) is True
    assert not (pages / "recipe.html").exists()
    assert (await registry.resolve(Slot.RECIPE)).origin is Origin.DEFAULT
    assert await editor.reset(Slot.RECIPE) is False


@pytest.mark.asyncio
async def test_save_storage_failure(tmp_path: Path) -> None:
    blocker = tmp_path / "pages"
    blocker.write_text("not a directory", encoding="utf-8")
    editor, _ = _editor(blocker)
    with pytest.raises(StorageError):
        await editor.save(Slot.HOME, "<p>ok</p>")


@pytest.mark.asyncio
async def test_reset_storage_failure(tmp_path: Path) -> None:
    pages = tmp_path / "pages"
    (pages / "home.html").mkdir(parents=True)
    editor, _ = _editor(pages)
    with pytest.raises(StorageError):
        await editor.reset(Slot.HOME)


@pytest.mark.asyncio
async def test_save_keeps_existing_file_mode(tmp_path: Path) -> None:
    pages = tmp_path / "pages"
    pages.mkdir()
    target = pages / "home.html"
    target.write_text("<p>old</p>", encoding="utf-8")
    target.chmod(0o600)
    editor, _ = _editor(pages)

    await editor.save(Slot.HOME, "<p>new</p>")
    assert target.stat().st_mode & 0o777 == 0o600
