from __future__ import annotations

from pathlib import Path
import re

import yaml

from .errors import ValidationError

MAX_FILENAME_CHARS = 200


def validate_new_recipe(title: str) -> str:
    text = (title or "").strip()
    if not text:
        raise ValidationError("'title' provided with a blank value")
    return text


def recipe_filename(title: str) -> str:
    name = validate_new_recipe(title)[:MAX_FILENAME_CHARS].strip().lower()
    name = re.sub(r"[^a-z0-9]+", "_", name).strip("_")
    if not name:
        raise ValidationError(f"Title {title!r} has no characters usable in a filename")
    return f"{name}.md"


def render_recipe_skeleton(
    title: str,
    tags: list[str] | None = None,
    description: str | None = None,
) -> str:
    header: dict[str, object] = {"title": validate_new_recipe(title)}
    if tags:
        header["tags"] = [tag.strip() for tag in tags if tag.strip()]
    if description:
        header["description"] = description.strip()
    header["ingredients"] = [{"name": "ingredient", "amount": "1", "unit": ""}]

    lines = ["---", yaml.safe_dump(header, sort_keys=False, allow_unicode=True).rstrip(), "---", ""]
    lines.append("1. First step.")
    lines.append("")
    return "\n".join(lines)


def write_new_recipe(content: str, filename: str, recipes_dir: Path) -> Path:
    recipes_dir.mkdir(parents=True, exist_ok=True)
    path = recipes_dir / filename
    with path.open("x", encoding="utf-8") as fh:
        fh.write(content)
    return path
