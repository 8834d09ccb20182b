"""In-memory recipe index rebuilt wholesale from the recipes directory."""

from __future__ import annotations

import asyncio
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
import re
from types import MappingProxyType

from .domain import Recipe, parse_body, parse_header, split_frontmatter
from .errors import IdentifierCollisionError, ParseError, RecipeNotFoundError, ScanError
from .logger import logger


RECIPE_GLOB = "*.md"


@dataclass(frozen=True, eq=False)
class RecipeSnapshot(Mapping[str, Recipe]):
    """Immutable identifier -> Recipe index produced by one scan."""

    recipes: Mapping[str, Recipe] = field(default_factory=lambda: MappingProxyType({}))
    directory: Path | None = None
    scanned_at: datetime | None = None

    def __getitem__(self, identifier: str) -> Recipe:
        return self.recipes[identifier]

    def __iter__(self) -> Iterator[str]:
        return iter(self.recipes)

    def __len__(self) -> int:
        return len(self.recipes)

    def ordered(self) -> list[Recipe]:
        return sorted(self.recipes.values(), key=Recipe.sort_key)


@dataclass(frozen=True)
class ScanResult:
    snapshot: RecipeSnapshot
    failures: tuple[ParseError, ...]

    @property
    def ok(self) -> bool:
        return not self.failures


class RecipeStore:
    def __init__(self, directory: Path | str | None = None) -> None:
        self.directory = Path(directory) if directory is not None else None
        self._snapshot = RecipeSnapshot()
        self._failures: tuple[ParseError, ...] = ()
        # a scan result is swapped in only if no later-started scan has been applied
        self._started = 0
        self._applied = 0

    @property
    def snapshot(self) -> RecipeSnapshot:
        return self._snapshot

    @property
    def failures(self) -> tuple[ParseError, ...]:
        return self._failures

    async def scan(self, directory: Path | str | None = None) -> ScanResult:
        if directory is not None:
            self.directory = Path(directory)
        if self.directory is None:
            raise ScanError("No recipes directory configured")

        self._started += 1
        generation = self._started
        directory = self.directory
        try:
            result = await asyncio.to_thread(scan_directory, directory)
        except ScanError:
            if self._claim(generation):
                self._snapshot = RecipeSnapshot(directory=directory)
                self._failures = ()
            raise

        if not self._claim(generation):
            logger.debug("Discarding scan {} of {}: a newer scan already finished", generation, directory)
            return result
        self._snapshot = result.snapshot
        self._failures = result.failures
        logger.info(
            "Scanned {}: {} recipes, {} failures",
            directory,
            len(result.snapshot),
            len(result.failures),
        )
        return result

    def _claim(self, generation: int) -> bool:
        if generation < self._applied:
            return False
        self._applied = generation
        return True

    def get(self, identifier: str) -> Recipe:
        snapshot = self._snapshot
        try:
            return snapshot[identifier]
        except KeyError:
            raise RecipeNotFoundError(identifier) from None

    def list(self, tag: str | None = None) -> list[Recipe]:
        recipes = self._snapshot.ordered()
        if tag:
            recipes = [recipe for recipe in recipes if tag in recipe.tags]
        return recipes


def scan_directory(directory: Path) -> ScanResult:
    if not directory.is_dir():
        raise ScanError(f"Recipes directory not found: {directory}")
    try:
        paths = sorted(directory.rglob(RECIPE_GLOB))
    except OSError as exc:
        raise ScanError(f"Failed to read recipes directory: {directory}") from exc

    parsed: dict[str, list[Recipe]] = {}
    failures: list[ParseError] = []
    for path in paths:
        if not path.is_file():
            continue
        try:
            recipe = load_recipe(path)
        except ParseError as exc:
            logger.warning("Skipping recipe: {}", exc)
            failures.append(exc)
            continue
        parsed.setdefault(recipe.identifier, []).append(recipe)

    recipes: dict[str, Recipe] = {}
    for identifier, group in parsed.items():
        if len(group) == 1:
            recipes[identifier] = group[0]
            continue
        for recipe in group:
            other = next(item for item in group if item is not recipe)
            error = IdentifierCollisionError(identifier, recipe.path, other.path)
            logger.warning("Skipping recipe: {}", error)
            failures.append(error)

    failures.sort(key=lambda error: str(error.path))
    snapshot = RecipeSnapshot(
        recipes=MappingProxyType(recipes),
        directory=directory,
        scanned_at=datetime.now(timezone.utc),
    )
    return ScanResult(snapshot=snapshot, failures=tuple(failures))


def load_recipe(path: Path) -> Recipe:
    try:
        text = path.read_text(encoding="utf-8")
        mtime = path.stat().st_mtime
    except (OSError, UnicodeDecodeError) as exc:
        raise ParseError(path, None, f"unreadable file ({exc.__class__.__name__})") from exc

    data, body_text = split_frontmatter(text, path)
    header = parse_header(data, path)
    body = parse_body(body_text)

    return Recipe(
        identifier=recipe_identifier(path),
        title=header.title,
        tags=frozenset(header.tags),
        description=header.description,
        ingredients=header.ingredients,
        steps=body.steps,
        notes=body.notes,
        path=path,
        modified=datetime.fromtimestamp(mtime, tz=timezone.utc),
    )


def recipe_identifier(path: Path | str) -> str:
    slug = Path(path).stem.lower()
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    slug = slug.strip("-")
    return slug or "recipe"
