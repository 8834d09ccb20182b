from __future__ import annotations

import html
from pathlib import Path
import re
from typing import Any

import yaml

from ..errors import ParseError
from ..logger import logger
from ..quantity import parse_quantity
from .models import Ingredient, RecipeBody, RecipeHeader


FRONTMATTER_RE = re.compile(r"^\ufeff?\s*---\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|$)", re.DOTALL)
STEP_RE = re.compile(r"^\d+[.)]\s+(.+)$")
BULLET_RE = re.compile(r"^[-*]\s+(.+)$")

KNOWN_KEYS = ("title", "tags", "description", "ingredients")
INGREDIENT_KEYS = ("name", "amount", "unit")
NUMERIC_TAGS = ("tag:yaml.org,2002:int", "tag:yaml.org,2002:float")


class HeaderLoader(yaml.SafeLoader):
    """SafeLoader that keeps numeric-looking ``amount`` values as the text written."""

    def construct_mapping(self, node, deep=False):
        pairs = node.value if isinstance(node, yaml.MappingNode) else ()
        for key_node, value_node in pairs:
            if (
                isinstance(key_node, yaml.ScalarNode)
                and key_node.value == "amount"
                and isinstance(value_node, yaml.ScalarNode)
                and value_node.tag in NUMERIC_TAGS
            ):
                value_node.tag = "tag:yaml.org,2002:str"
        return super().construct_mapping(node, deep=deep)


def split_frontmatter(md: str, path: Path) -> tuple[dict[str, Any], str]:
    match = FRONTMATTER_RE.match(md)
    if not match:
        raise ParseError(path, None, "missing YAML header")

    try:
        data = yaml.load(match.group(1), Loader=HeaderLoader) or {}
    except yaml.YAMLError as exc:
        raise ParseError(path, "header", f"invalid YAML header: {_yaml_problem(exc)}") from exc
    except (ValueError, RecursionError) as exc:
        raise ParseError(path, "header", f"invalid YAML header: {exc.__class__.__name__}: {exc}") from exc

    if not isinstance(data, dict):
        raise ParseError(path, "header", "header must be a mapping")
    return data, md[match.end() :]


def parse_header(data: dict[str, Any], path: Path) -> RecipeHeader:
    title = _string_field(data.get("title"), path, "title")
    if not title:
        raise ParseError(path, "title", "missing required field")

    description = _string_field(data.get("description"), path, "description") or ""
    tags = normalize_tags(data.get("tags"), path)
    ingredients = _parse_ingredients(data.get("ingredients"), path)

    extra = {str(key): value for key, value in data.items() if key not in KNOWN_KEYS}
    if extra:
        logger.debug("{}: ignoring unrecognized header keys {}", path, sorted(extra))

    return RecipeHeader(
        title=title,
        ingredients=ingredients,
        tags=tags,
        description=description,
        extra=extra,
    )


def parse_body(body: str) -> RecipeBody:
    steps: list[str] = []
    trailing: list[str] = []

    for raw_line in body.splitlines():
        line = raw_line.rstrip()
        match = STEP_RE.match(line)
        if match:
            steps.append(match.group(1).strip())
            trailing = []
            continue

        # indented lines directly under a step continue it
        if steps and line[:1].isspace() and line.strip() and not trailing:
            steps[-1] = f"{steps[-1]} {line.strip()}"
            continue

        if steps:
            trailing.append(line)

    return RecipeBody(steps=tuple(steps), notes="\n".join(trailing).strip())


def normalize_tags(tags: Any, path: Path) -> tuple[str, ...]:
    if tags is None:
        return ()
    if isinstance(tags, str):
        tags = [tags]
    if not isinstance(tags, list):
        raise ParseError(path, "tags", "must be a list of strings")

    out: list[str] = []
    for tag in tags:
        if isinstance(tag, (dict, list)) or tag is None:
            raise ParseError(path, "tags", f"invalid tag {tag!r}")
        text = str(tag).strip()
        if text and text not in out:
            out.append(text)
    return tuple(out)


def markdown_to_html(text: str) -> str:
    lines = text.splitlines()
    out: list[str] = []
    paragraph: list[str] = []
    in_ul = False
    in_ol = False

    def close_paragraph() -> None:
        nonlocal paragraph
        if paragraph:
            out.append(f"<p>{html.escape(' '.join(paragraph).strip())}</p>")
            paragraph = []

    def close_lists() -> None:
        nonlocal in_ul, in_ol
        if in_ul:
            out.append("</ul>")
            in_ul = False
        if in_ol:
            out.append("</ol>")
            in_ol = False

    for raw_line in lines:
        line = raw_line.strip()

        if not line:
            close_paragraph()
            close_lists()
            continue

        heading = re.match(r"^(#{1,6})\s+(.+)$", line)
        if heading:
            close_paragraph()
            close_lists()
            level = min(6, len(heading.group(1)) + 1)
            out.append(f"<h{level}>{html.escape(heading.group(2).strip())}</h{level}>")
            continue

        bullet = BULLET_RE.match(line)
        if bullet:
            close_paragraph()
            if in_ol:
                out.append("</ol>")
                in_ol = False
            if not in_ul:
                out.append("<ul>")
                in_ul = True
            out.append(f"<li>{html.escape(bullet.group(1).strip())}</li>")
            continue

        ordered = STEP_RE.match(line)
        if ordered:
            close_paragraph()
            if in_ul:
                out.append("</ul>")
                in_ul = False
            if not in_ol:
                out.append("<ol>")
                in_ol = True
            out.append(f"<li>{html.escape(ordered.group(1).strip())}</li>")
            continue

        close_lists()
        paragraph.append(line)

    close_paragraph()
    close_lists()
    return "\n".join(out)


def _parse_ingredients(value: Any, path: Path) -> tuple[Ingredient, ...]:
    if value is None:
        raise ParseError(path, "ingredients", "missing required field")
    if not isinstance(value, list) or not value:
        raise ParseError(path, "ingredients", "must be a non-empty list")

    items: list[Ingredient] = []
    for idx, entry in enumerate(value, start=1):
        field = f"ingredients[{idx}]"
        if not isinstance(entry, dict):
            raise ParseError(path, field, f"expected name/amount/unit mapping, got {entry!r}")
        unknown = sorted(str(key) for key in entry if key not in INGREDIENT_KEYS)
        if unknown:
            raise ParseError(path, field, f"unrecognized keys {unknown}")

        name = _string_field(entry.get("name"), path, f"{field}.name")
        if not name:
            raise ParseError(path, f"{field}.name", "missing required field")
        amount = _amount_text(entry.get("amount"), path, f"{field}.amount")
        unit = _string_field(entry.get("unit"), path, f"{field}.unit") or ""

        items.append(Ingredient(name=name, amount=parse_quantity(amount), unit=unit))
    return tuple(items)


def _amount_text(value: Any, path: Path, field: str) -> str:
    if value is None:
        raise ParseError(path, field, "missing required field")
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ParseError(path, field, f"unsupported amount {value!r}")
    text = str(value)
    if not text.strip():
        raise ParseError(path, field, "missing required field")
    return text


def _string_field(value: Any, path: Path, field: str) -> str | None:
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        raise ParseError(path, field, "must be a string")
    text = str(value).strip()
    return text or None


def _yaml_problem(exc: yaml.YAMLError) -> str:
    problem = getattr(exc, "problem", None)
    mark = getattr(exc, "problem_mark", None)
    if problem and mark is not None:
        return f"{problem} (line {mark.line + 1})"
    return str(exc).splitlines()[0] if str(exc) else exc.__class__.__name__
