from __future__ import annotations

from pathlib import Path


class RecipeboxError(Exception):
    pass


class ConfigError(RecipeboxError):
    pass


class MissingFileError(RecipeboxError):
    pass


class RecipeNotFoundError(MissingFileError):
    def __init__(self, identifier: str) -> None:
        super().__init__(f"Recipe not found: {identifier}")
        self.identifier = identifier


class ParseError(RecipeboxError):
    def __init__(self, path: Path | str, field: str | None, message: str) -> None:
        where = f"{path}: {field}" if field else str(path)
        super().__init__(f"{where}: {message}")
        self.path = Path(path)
        self.field = field
        self.message = message


class IdentifierCollisionError(ParseError):
    def __init__(self, identifier: str, path: Path | str, other: Path | str) -> None:
        super().__init__(
            path,
            None,
            f"identifier {identifier!r} collides with {other}",
        )
        self.identifier = identifier
        self.other = Path(other)


class ScanError(RecipeboxError):
    pass


class ValidationError(RecipeboxError):
    pass


class TemplateValidationError(ValidationError):
    def __init__(self, construct: str, message: str, lineno: int | None = None) -> None:
        where = f"line {lineno}: " if lineno else ""
        super().__init__(f"{where}{message} (at {construct!r})")
        self.construct = construct
        self.lineno = lineno
        self.message = message


class StorageError(RecipeboxError):
    pass


class RenderError(RecipeboxError):
    pass


class WatchError(RecipeboxError):
    pass
