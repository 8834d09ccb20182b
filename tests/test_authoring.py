from __future__ import annotations

from pathlib import Path

import pytest

from recipebox.authoring import (
    MAX_FILENAME_CHARS,
    recipe_filename,
    render_recipe_skeleton,
    validate_new_recipe,
    write_new_recipe,
)
from recipebox.errors import ValidationError
from recipebox.store import load_recipe


def test_validate_new_recipe_rejects_blank_title() -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate_new_recipe("   ")
    assert "blank" in str(excinfo.value)
    assert validate_new_recipe("  Soup ") == "Soup"


def test_recipe_filename() -> None:
    assert recipe_filename("Pan-Grilled Garlic Naan") == "pan_grilled_garlic_naan.md"
    assert recipe_filename("Mum's Stew!") == "mum_s_stew.md"
    assert len(recipe_filename("a" * 500)) == MAX_FILENAME_CHARS + len(".md")
    with pytest.raises(ValidationError):
        recipe_filename("!!!")


# Purpose: verify a new recipe skeleton loads back as a valid recipe.
def test_skeleton_is_a_valid_recipe(tmp_path: Path) -> None:
    content = render_recipe_skeleton("Fish Pie", tags=["dinner", " "], description="Creamy.")
    path = write_new_recipe(content, recipe_filename("Fish Pie"), tmp_path / "recipes")

    recipe = load_recipe(path)
    assert path.name == "fish_pie.md"
    assert recipe.identifier == "fish-pie"
    assert recipe.title == "Fish Pie"
    assert recipe.tags == frozenset({"dinner"})
    assert recipe.description == "Creamy."
    assert recipe.ingredients[0].amount.display == "1"
    assert recipe.steps == ("First step.",)


def test_write_new_recipe_does_not_overwrite(tmp_path: Path) -> None:
    write_new_recipe("first", "soup.md", tmp_path)
    with pytest.raises(FileExistsError):
        write_new_recipe("second", "soup.md", tmp_path)
    assert (tmp_path / "soup.md").read_text(encoding="utf-8") == "first"
