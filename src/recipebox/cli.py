from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from collections.abc import Callable
from pathlib import Path

from .authoring import recipe_filename, render_recipe_skeleton, write_new_recipe
from .config import EffectiveConfig, config_to_toml, resolve_config
from .editor import LayoutEditor
from .errors import (
    ConfigError,
    MissingFileError,
    ParseError,
    RecipeboxError,
    ScanError,
    StorageError,
    ValidationError,
    WatchError,
)
from .logger import configure_logging
from .paths import resolve_site_paths
from .render import recipe_summary
from .site import Site, build_site
from .templates import Slot
from .watch import watch_site


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    handlers: dict[str, Callable[[argparse.Namespace], int]] = {
        "list": _cmd_list,
        "show": _cmd_show,
        "check": _cmd_check,
        "build": _cmd_build,
        "layout": _cmd_layout,
        "new-recipe": _cmd_new_recipe,
        "init": _cmd_init,
        "watch": _cmd_watch,
        "config": _cmd_config,
    }

    if args.tui or not args.command:
        handler = _cmd_tui
    else:
        handler = handlers[args.command]

    try:
        return handler(args)
    except RecipeboxError as exc:
        print(str(exc), file=sys.stderr)
        return _exit_code(exc)
    except FileExistsError as exc:
        print(f"File already exists: {exc.filename}", file=sys.stderr)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--site")
    common.add_argument("--profile")
    common.add_argument("--recipes-dir")
    common.add_argument("--overrides-dir")
    common.add_argument("--output-dir")
    common.add_argument("--site-title")
    common.add_argument("--log-level")

    parser = argparse.ArgumentParser(prog="recipebox", parents=[common])
    parser.add_argument("--tui", action="store_true", help="Launch interactive recipe browser")
    sub = parser.add_subparsers(dest="command")

    listing = sub.add_parser("list", parents=[common])
    listing.add_argument("--tag")
    listing.add_argument("--json", action="store_true")

    show = sub.add_parser("show", parents=[common])
    show.add_argument("identifier")

    sub.add_parser("check", parents=[common])

    build = sub.add_parser("build", parents=[common])
    build.add_argument("--dry-run", action="store_true")

    layout = sub.add_parser("layout", parents=[common])
    layout.add_argument("action", choices=("show", "save", "reset"))
    layout.add_argument("slot", choices=[slot.value for slot in Slot])
    layout.add_argument("file", nargs="?")

    new_recipe = sub.add_parser("new-recipe", parents=[common])
    new_recipe.add_argument("--title", required=True)
    new_recipe.add_argument("--tag", dest="tags", action="append")
    new_recipe.add_argument("--description")

    init = sub.add_parser("init")
    init.add_argument("path", nargs="?", default=".")
    init.add_argument("--force", action="store_true")

    watch = sub.add_parser("watch", parents=[common])
    watch.add_argument("--debounce", type=int)
    watch.add_argument("--max-cycles", type=int, help=argparse.SUPPRESS)

    sub.add_parser("config", parents=[common])

    return parser


def _cmd_list(args: argparse.Namespace) -> int:
    site = _site(args)
    asyncio.run(site.store.scan())
    recipes = site.store.list(tag=args.tag)
    if args.json:
        print(json.dumps([recipe_summary(recipe) for recipe in recipes], indent=2, ensure_ascii=False))
    else:
        for recipe in recipes:
            print(f"{recipe.identifier}: {recipe.title}")
    _report_failures(site.store.failures)
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    site = _site(args)

    async def _render() -> str:
        await site.store.scan()
        return await site.render_recipe(args.identifier)

    print(asyncio.run(_render()))
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    site = _site(args)
    result = asyncio.run(site.store.scan())
    print(f"{len(result.snapshot)} recipes loaded, {len(result.failures)} failed")
    _report_failures(result.failures)
    return 0 if result.ok else 4


def _cmd_build(args: argparse.Namespace) -> int:
    site = _site(args)
    result = asyncio.run(build_site(site, dry_run=args.dry_run))
    _report_failures(result.scan.failures)
    if args.dry_run:
        print(f"Would write pages to {result.output_dir}")
    else:
        print(result.index)
    return 0


def _cmd_layout(args: argparse.Namespace) -> int:
    site = _site(args)
    editor = LayoutEditor(site.registry)

    if args.action == "show":
        template = asyncio.run(site.registry.resolve(args.slot))
        print(f"# {template.slot}: {template.origin}", file=sys.stderr)
        print(template.content, end="")
        return 0

    if args.action == "reset":
        removed = asyncio.run(editor.reset(args.slot))
        print("Override removed" if removed else "No override to remove")
        return 0

    if not args.file:
        raise ConfigError("layout save requires a FILE argument ('-' for stdin)")
    content = sys.stdin.read() if args.file == "-" else _read_layout_file(Path(args.file))
    path = asyncio.run(editor.save(args.slot, content))
    print(path)
    return 0


def _cmd_new_recipe(args: argparse.Namespace) -> int:
    cfg = _resolve_cfg(args)
    content = render_recipe_skeleton(args.title, tags=args.tags, description=args.description)
    path = write_new_recipe(content, recipe_filename(args.title), resolve_site_paths(cfg).recipes_dir)
    print(path)
    return 0


def _cmd_init(args: argparse.Namespace) -> int:
    root = os.path.abspath(args.path)
    os.makedirs(root, exist_ok=True)
    for name in ("recipes", "pages", "cache"):
        os.makedirs(os.path.join(root, name), exist_ok=True)
    config_path = os.path.join(root, "recipebox.toml")
    if os.path.exists(config_path) and not args.force:
        raise ConfigError(f"{config_path} already exists (use --force to overwrite)")
    with open(config_path, "w", encoding="utf-8") as fh:
        fh.write(
            """recipes_dir = \"recipes\"\noverrides_dir = \"pages\"\noutput_dir = \"cache\"\n# site_title = \"Recipe Box\"\n\n[watch]\n# debounce_ms = 400\n"""
        )
    print(config_path)
    return 0


def _cmd_watch(args: argparse.Namespace) -> int:
    site = _site(args)
    asyncio.run(build_site(site))
    _report_failures(site.store.failures)
    asyncio.run(watch_site(site, debounce_ms=site.cfg.watch.debounce_ms, max_cycles=args.max_cycles))
    return 0


def _cmd_config(args: argparse.Namespace) -> int:
    cfg = _resolve_cfg(args)
    print(config_to_toml(cfg))
    return 0


def _cmd_tui(args: argparse.Namespace) -> int:
    from .tui import run_tui

    return run_tui(_cli_args_dict(args))


def _resolve_cfg(args: argparse.Namespace) -> EffectiveConfig:
    cfg = resolve_config(_cli_args_dict(args))
    configure_logging(cfg.log_level)
    return cfg


def _site(args: argparse.Namespace) -> Site:
    return Site.from_config(_resolve_cfg(args))


def _read_layout_file(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise MissingFileError(f"Layout file not readable: {path}") from exc


def _report_failures(failures: tuple[ParseError, ...]) -> None:
    for failure in failures:
        print(f"error: {failure}", file=sys.stderr)


def _cli_args_dict(args: argparse.Namespace) -> dict[str, object]:
    return vars(args).copy()


def _exit_code(exc: RecipeboxError) -> int:
    if isinstance(exc, ConfigError):
        return 2
    if isinstance(exc, (MissingFileError, ScanError)):
        return 3
    if isinstance(exc, (ValidationError, ParseError)):
        return 4
    if isinstance(exc, StorageError):
        return 5
    if isinstance(exc, WatchError):
        return 6
    return 1
