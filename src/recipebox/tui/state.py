from __future__ import annotations

from ..domain import Recipe
from ..errors import ParseError


def describe_recipe(recipe: Recipe) -> str:
    lines = [recipe.title, "=" * len(recipe.title)]
    if recipe.description:
        lines += ["", recipe.description]
    if recipe.tags:
        lines += ["", "Tags: " + ", ".join(recipe.sorted_tags)]

    lines += ["", "Ingredients:"]
    lines += [f"  - {ingredient.display}" for ingredient in recipe.ingredients]

    if recipe.steps:
        lines += ["", "Method:"]
        lines += [f"  {idx}. {step}" for idx, step in enumerate(recipe.steps, start=1)]
    if recipe.notes:
        lines += ["", "Notes:", recipe.notes]

    lines += ["", f"{recipe.identifier} ({recipe.path})"]
    return "\n".join(lines)


def describe_status(recipe_count: int, failures: tuple[ParseError, ...]) -> str:
    text = f"{recipe_count} recipes"
    if not failures:
        return text
    names = ", ".join(failure.path.name for failure in failures)
    return f"{text}, {len(failures)} failed: {names}"
