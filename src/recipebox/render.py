from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from jinja2 import TemplateError
from markupsafe import Markup

from .domain import Ingredient, Recipe, markdown_to_html
from .errors import ParseError, RenderError
from .logger import logger
from .templates import Origin, Slot, Template, TemplateRegistry, make_environment


class Renderer:
    def __init__(self) -> None:
        self.env = make_environment()

    def render(self, template: Template | str, context: Mapping[str, Any]) -> str:
        source = template.content if isinstance(template, Template) else template
        try:
            return self.env.from_string(source).render(dict(context))
        except TemplateError as exc:
            raise RenderError(f"Failed to render {_label(template)}: {exc}") from exc

    async def render_slot(
        self,
        registry: TemplateRegistry,
        slot: Slot | str,
        context: Mapping[str, Any],
    ) -> str:
        template = await registry.resolve(slot)
        try:
            return self.render(template, context)
        except RenderError as exc:
            if template.origin is not Origin.OVERRIDE:
                raise
            logger.warning("Using default {} layout: {}", template.slot, exc)
            return self.render(registry.default(template.slot), context)


def ingredient_context(ingredient: Ingredient) -> dict[str, Any]:
    return {
        "name": ingredient.name,
        "amount": ingredient.amount.display,
        "unit": ingredient.unit,
        "free_text": ingredient.amount.is_free_text,
        "display": ingredient.display,
    }


def recipe_summary(recipe: Recipe) -> dict[str, Any]:
    return {
        "identifier": recipe.identifier,
        "title": recipe.title,
        "description": recipe.description,
        "tags": recipe.sorted_tags,
        "modified": recipe.modified.strftime("%Y-%m-%d %H:%M"),
    }


def recipe_context(recipe: Recipe, site_title: str = "") -> dict[str, Any]:
    data = recipe_summary(recipe)
    data.update(
        {
            "ingredients": [ingredient_context(item) for item in recipe.ingredients],
            "steps": list(recipe.steps),
            "notes": recipe.notes,
            "notes_html": Markup(markdown_to_html(recipe.notes)),
        }
    )
    return {"site_title": site_title, "recipe": data}


def failure_context(failure: ParseError) -> dict[str, Any]:
    return {"path": str(failure.path), "field": failure.field or "", "message": failure.message}


def home_context(
    recipes: Iterable[Recipe],
    failures: Iterable[ParseError] = (),
    site_title: str = "",
) -> dict[str, Any]:
    summaries = [recipe_summary(recipe) for recipe in recipes]
    return {
        "site_title": site_title,
        "recipes": summaries,
        "recipe_count": len(summaries),
        "failures": [failure_context(failure) for failure in failures],
    }


def dashboard_context(
    recipes: Iterable[Recipe],
    failures: Iterable[ParseError],
    templates: Iterable[Template],
    site_title: str = "",
) -> dict[str, Any]:
    data = home_context(recipes, failures, site_title)
    data["failure_count"] = len(data["failures"])
    data["templates"] = [
        {
            "slot": str(template.slot),
            "origin": str(template.origin),
            "modified": template.modified.strftime("%Y-%m-%d %H:%M") if template.modified else "",
            "path": str(template.path or ""),
        }
        for template in templates
    ]
    return data


def _label(template: Template | str) -> str:
    if isinstance(template, Template):
        return f"{template.slot} layout ({template.origin})"
    return "template"
