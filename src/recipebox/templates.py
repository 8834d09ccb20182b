"""Page layouts: embedded defaults, on-disk overrides and the resolution cache."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
import os
from pathlib import Path

from jinja2 import (
    ChainableUndefined,
    Environment,
    TemplateAssertionError,
    TemplateSyntaxError,
    nodes,
    select_autoescape,
)

from .errors import TemplateValidationError, ValidationError
from .logger import logger


OVERRIDE_SUFFIX = ".html"
DEFAULT_PAGES_DIR = Path(__file__).resolve().parent / "pages"


class Slot(str, Enum):
    DASHBOARD = "dashboard"
    RECIPE = "recipe"
    HOME = "home"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: Slot | str) -> Slot:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            names = ", ".join(slot.value for slot in cls)
            raise ValidationError(f"Unknown layout slot {value!r} (expected one of: {names})") from None


class Origin(str, Enum):
    DEFAULT = "default"
    OVERRIDE = "override"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Template:
    slot: Slot
    content: str
    origin: Origin
    modified: datetime | None = None
    path: Path | None = None


@dataclass(frozen=True)
class _CacheEntry:
    key: tuple[int, int]
    template: Template


def make_environment() -> Environment:
    return Environment(
        autoescape=select_autoescape(default_for_string=True, default=True),
        undefined=ChainableUndefined,
        keep_trailing_newline=True,
    )


_VALIDATION_ENV = make_environment()


def validate_template(content: str) -> None:
    """Check that ``content`` is a page layout that will compile and render, without rendering it.

    Unknown filters and tests are rejected here even where Jinja2 would only
    notice them at render time (inside ``{% if %}`` blocks).
    """
    if not content.strip():
        raise TemplateValidationError("", "template is empty")
    try:
        tree = _VALIDATION_ENV.parse(content)
        _check_filters_and_tests(tree)
        _VALIDATION_ENV.compile(tree)
    except TemplateSyntaxError as exc:
        raise TemplateValidationError(
            _offending_line(content, exc.lineno),
            exc.message or "invalid template syntax",
            exc.lineno,
        ) from exc


def _check_filters_and_tests(tree: nodes.Template) -> None:
    for node in tree.find_all((nodes.Filter, nodes.Test)):
        if isinstance(node, nodes.Filter):
            kind, known = "filter", _VALIDATION_ENV.filters
        else:
            kind, known = "test", _VALIDATION_ENV.tests
        if node.name not in known:
            raise TemplateAssertionError(f"No {kind} named {node.name!r}.", node.lineno)


def load_default(slot: Slot) -> str:
    return (DEFAULT_PAGES_DIR / f"{slot.value}{OVERRIDE_SUFFIX}").read_text(encoding="utf-8")


class TemplateRegistry:
    def __init__(self, overrides_dir: Path | str) -> None:
        self.overrides_dir = Path(overrides_dir)
        self._defaults = {
            slot: Template(slot=slot, content=load_default(slot), origin=Origin.DEFAULT)
            for slot in Slot
        }
        self._cache: dict[Slot, _CacheEntry] = {}

    def override_path(self, slot: Slot | str) -> Path:
        return self.overrides_dir / f"{Slot.parse(slot).value}{OVERRIDE_SUFFIX}"

    def default(self, slot: Slot | str) -> Template:
        return self._defaults[Slot.parse(slot)]

    def invalidate(self, slot: Slot | str) -> None:
        self._cache.pop(Slot.parse(slot), None)

    def is_cached(self, slot: Slot | str) -> bool:
        return Slot.parse(slot) in self._cache

    async def resolve(self, slot: Slot | str) -> Template:
        slot = Slot.parse(slot)
        path = self.override_path(slot)

        try:
            stat = await asyncio.to_thread(_stat_or_none, path)
        except OSError as exc:
            logger.warning("Using default {} layout: cannot stat {} ({})", slot, path, exc)
            return self._defaults[slot]

        if stat is None:
            self._cache.pop(slot, None)
            logger.debug("No override for {} layout at {}", slot, path)
            return self._defaults[slot]

        key = (stat.st_mtime_ns, stat.st_size)
        cached = self._cache.get(slot)
        if cached is not None and cached.key == key:
            return cached.template

        try:
            content = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Using default {} layout: cannot read {} ({})", slot, path, exc)
            return self._defaults[slot]

        try:
            validate_template(content)
        except TemplateValidationError as exc:
            logger.warning("Using default {} layout: invalid override {}: {}", slot, path, exc)
            return self._defaults[slot]

        template = Template(
            slot=slot,
            content=content,
            origin=Origin.OVERRIDE,
            modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            path=path,
        )
        self._cache[slot] = _CacheEntry(key=key, template=template)
        return template

    async def resolve_all(self) -> list[Template]:
        return list(await asyncio.gather(*(self.resolve(slot) for slot in Slot)))


def _stat_or_none(path: Path) -> os.stat_result | None:
    try:
        return path.stat()
    except (FileNotFoundError, NotADirectoryError):
        return None


def _offending_line(content: str, lineno: int | None) -> str:
    lines = content.splitlines()
    if lineno is None or lineno < 1 or lineno > len(lines):
        return ""
    return lines[lineno - 1].strip()
