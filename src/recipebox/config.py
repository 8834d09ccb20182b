from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os
import tomllib
from typing import Any, Optional

from .errors import ConfigError
from .logger import normalize_level


@dataclass(frozen=True)
class WatchConfig:
    debounce_ms: int = 400


@dataclass(frozen=True)
class TuiConfig:
    header_icon: str = "🍲"


@dataclass(frozen=True)
class EffectiveConfig:
    site_dir: str
    recipes_dir: str
    overrides_dir: str
    output_dir: str
    site_title: str
    log_level: str
    watch: WatchConfig
    tui: TuiConfig


def _config_root() -> Path:
    return Path(os.path.expanduser("~/.config/recipebox"))


def load_global_config() -> dict[str, Any]:
    path = _config_root() / "config.toml"
    if not path.exists():
        return {}
    return _load_toml(path)


def load_profile(profile: str) -> Optional[str]:
    path = _config_root() / "sites.d" / f"{profile}.toml"
    if not path.exists():
        return None
    data = _load_toml(path)
    site = data.get("site")
    if not site:
        raise ConfigError(f"Profile {profile!r} missing 'site' key")
    return str(site)


def load_site_config(site_dir: str) -> dict[str, Any]:
    path = Path(site_dir) / "recipebox.toml"
    if not path.exists():
        return {}
    return _load_toml(path)


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except OSError as exc:
        raise ConfigError(f"Failed to read config: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in config: {path}") from exc


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def merge_config(cli: dict[str, Any], site: dict[str, Any], global_cfg: dict[str, Any]) -> dict[str, Any]:
    merged = _deep_merge(global_cfg, site)
    return _deep_merge(merged, cli)


def resolve_config(cli_args: dict[str, Any]) -> EffectiveConfig:
    global_cfg = load_global_config()
    profile = cli_args.get("profile")
    site_dir = cli_args.get("site")
    if not site_dir and profile:
        site_dir = load_profile(profile)
    if not site_dir:
        site_dir = global_cfg.get("default_site") or os.getcwd()

    site_cfg = load_site_config(site_dir)
    merged = merge_config(_cli_to_dict(cli_args), site_cfg, global_cfg)

    watch_cfg = merged.get("watch", {})
    tui_cfg = merged.get("tui", {})
    if not isinstance(watch_cfg, dict) or not isinstance(tui_cfg, dict):
        raise ConfigError("[watch] and [tui] must be tables")

    return EffectiveConfig(
        site_dir=str(site_dir),
        recipes_dir=str(merged.get("recipes_dir", "recipes")),
        overrides_dir=str(merged.get("overrides_dir", "pages")),
        output_dir=str(merged.get("output_dir", "cache")),
        site_title=str(merged.get("site_title", "Recipe Box")),
        log_level=normalize_level(merged.get("log_level", "WARNING")),
        watch=WatchConfig(debounce_ms=_positive_int(watch_cfg.get("debounce_ms", 400), "watch.debounce_ms")),
        tui=TuiConfig(header_icon=str(tui_cfg.get("header_icon", "🍲"))),
    )


def _cli_to_dict(cli_args: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key in ("recipes_dir", "overrides_dir", "output_dir", "site_title", "log_level"):
        if cli_args.get(key) is not None:
            out[key] = cli_args[key]

    if cli_args.get("debounce") is not None:
        out["watch"] = {"debounce_ms": cli_args["debounce"]}
    return out


def _positive_int(value: Any, key: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be an integer") from exc
    if number <= 0:
        raise ConfigError(f"{key} must be positive")
    return number


def config_to_toml(cfg: EffectiveConfig) -> str:
    lines = [
        f"# site: {cfg.site_dir}",
        f"recipes_dir = {cfg.recipes_dir!r}",
        f"overrides_dir = {cfg.overrides_dir!r}",
        f"output_dir = {cfg.output_dir!r}",
        f"site_title = {cfg.site_title!r}",
        f"log_level = {cfg.log_level!r}",
        "",
        "[watch]",
        f"debounce_ms = {cfg.watch.debounce_ms!r}",
        "",
        "[tui]",
        f"header_icon = {cfg.tui.header_icon!r}",
    ]
    return "\n".join(lines) + "\n"
