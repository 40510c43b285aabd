from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from static_builder.errors import ConfigError, NotFoundError

CONFIG_FILE = "bst.json"

@dataclass(frozen=True)
class StyleOptions:
    minify: bool = True
    package_root: Path = Path("node_modules")  # target of "~/" style imports

@dataclass(frozen=True)
class HtmlOptions:
    minify: bool = True
    minify_classes: bool = True  # reserved, not applied yet
    reduce_blocking: bool = True

@dataclass(frozen=True)
class ScriptOptions:
    minify: bool = True
    esbuild: str = "esbuild"  # bundler executable

@dataclass(frozen=True)
class BuildConfig:
    source: Path
    destination: Path
    clean: bool = False
    verbose: bool = False
    css: StyleOptions = field(default_factory=StyleOptions)
    html: HtmlOptions = field(default_factory=HtmlOptions)
    js: ScriptOptions = field(default_factory=ScriptOptions)

def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a mapping")
    return value

def _flag(section: Dict[str, Any], key: str, default: bool, where: str) -> bool:
    value = section.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ConfigError(f"'{where}{key}' must be true or false")
    return value

def _path(base: Path, value: Any, key: str) -> Path:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{key}' must be a non-empty path")
    return (base / Path(value).expanduser()).resolve()

def parse_config(data: Any, base_dir: Path) -> BuildConfig:
    """
    Build a BuildConfig from a decoded config mapping. Relative paths are
    anchored at `base_dir` (the directory holding the config file).
    """
    if not isinstance(data, dict):
        raise ConfigError("config must be a mapping")
    if not data.get("source") or not data.get("destination"):
        raise ConfigError("config must have source and destination fields")

    css = _section(data, "css")
    html = _section(data, "html")
    js = _section(data, "js")

    esbuild = js.get("esbuild", ScriptOptions.esbuild)
    if not isinstance(esbuild, str) or not esbuild:
        raise ConfigError("'js.esbuild' must be an executable name or path")

    package_root = css.get("packageRoot")
    return BuildConfig(
        source=_path(base_dir, data["source"], "source"),
        destination=_path(base_dir, data["destination"], "destination"),
        clean=_flag(data, "clean", False, ""),
        verbose=_flag(data, "verbose", False, ""),
        css=StyleOptions(
            minify=_flag(css, "minify", True, "css."),
            package_root=_path(base_dir, package_root, "css.packageRoot") if package_root is not None
            else (base_dir / StyleOptions.package_root).resolve(),
        ),
        html=HtmlOptions(
            minify=_flag(html, "minify", True, "html."),
            minify_classes=_flag(html, "minifyClasses", True, "html."),
            reduce_blocking=_flag(html, "reduceBlocking", True, "html."),
        ),
        js=ScriptOptions(
            minify=_flag(js, "minify", True, "js."),
            esbuild=esbuild,
        ),
    )

def load_config(path: Optional[Path] = None) -> BuildConfig:
    path = Path(path) if path is not None else Path(CONFIG_FILE)
    if not path.exists():
        raise NotFoundError(f"{path} not found", path=str(path))
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Malformed config: {e}", path=str(path)) from e
    try:
        return parse_config(data, path.resolve().parent)
    except ConfigError as e:
        e.path = str(path)
        raise
