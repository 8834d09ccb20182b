from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from ..quantity import Quantity


@dataclass(frozen=True)
class Ingredient:
    name: str
    amount: Quantity
    unit: str = ""

    @property
    def display(self) -> str:
        parts = [self.amount.display, self.unit, self.name]
        return " ".join(part for part in parts if part)


@dataclass(frozen=True)
class RecipeHeader:
    title: str
    ingredients: tuple[Ingredient, ...]
    tags: tuple[str, ...] = ()
    description: str = ""
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RecipeBody:
    steps: tuple[str, ...]
    notes: str


@dataclass(frozen=True)
class Recipe:
    identifier: str
    title: str
    tags: frozenset[str]
    description: str
    ingredients: tuple[Ingredient, ...]
    steps: tuple[str, ...]
    notes: str
    path: Path
    modified: datetime

    @property
    def sorted_tags(self) -> list[str]:
        return sorted(self.tags)

    def sort_key(self) -> tuple[str, str]:
        return (self.title.casefold(), self.identifier)
