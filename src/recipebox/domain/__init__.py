from .markdown import (
    FRONTMATTER_RE,
    markdown_to_html,
    normalize_tags,
    parse_body,
    parse_header,
    split_frontmatter,
)
from .models import Ingredient, Recipe, RecipeBody, RecipeHeader

__all__ = [
    "FRONTMATTER_RE",
    "Ingredient",
    "Recipe",
    "RecipeBody",
    "RecipeHeader",
    "markdown_to_html",
    "normalize_tags",
    "parse_body",
    "parse_header",
    "split_frontmatter",
]
