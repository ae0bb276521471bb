from __future__ import annotations

import json
import sys
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path

import yaml

from .utils import parse_bool, parse_int

MISSING_ASSET_POLICIES = {"warn", "error"}


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            print(f"Invalid TOML in config file {path}: {exc}", file=sys.stderr)
            sys.exit(1)
        return data
    if suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            print(f"Invalid YAML in config file {path}: {exc}", file=sys.stderr)
            sys.exit(1)
        if data is None:
            return {}
        if not isinstance(data, dict):
            print(f"YAML config must be a mapping: {path}", file=sys.stderr)
            sys.exit(1)
        return data
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        print(f"Invalid JSON in config file {path}: {exc}", file=sys.stderr)
        sys.exit(1)
    if not isinstance(data, dict):
        print(f"JSON config must be an object: {path}", file=sys.stderr)
        sys.exit(1)
    return data


@dataclass
class SiteConfig:
    """Resolved settings for one build.

    ``components_dir``, ``styles_dir``, ``images_dir``, ``scripts_dir``,
    ``favicon`` and ``manifest`` are relative to ``source_dir`` unless absolute.
    """

    site_title: str = "Blog"
    posts_dir: Path = Path("posts")
    output_dir: Path = Path("public")
    source_dir: Path = Path("src")
    components_dir: Path = Path("components")
    styles_dir: Path = Path("styles")
    images_dir: Path = Path("img")
    scripts_dir: Path = Path("scripts")
    favicon: Path = Path("favicon.ico")
    manifest: Path = Path("site.webmanifest")
    workers: int = 0
    missing_assets: str = "warn"
    highlight_css: bool = False
    highlight_style: str = "default"

    def __post_init__(self) -> None:
        for item in fields(self):
            if item.type in {"Path", Path}:
                setattr(self, item.name, Path(getattr(self, item.name)))
        self.site_title = str(self.site_title)
        self.workers = parse_int(self.workers, 0)
        self.highlight_css = parse_bool(self.highlight_css)
        self.missing_assets = str(self.missing_assets).strip().lower()
        if self.missing_assets not in MISSING_ASSET_POLICIES:
            raise ValueError(
                f"missing_assets must be one of {sorted(MISSING_ASSET_POLICIES)}, got {self.missing_assets!r}"
            )

    def source_path(self, path: Path) -> Path:
        if path.is_absolute():
            return path
        return self.source_dir / path

    @property
    def components_path(self) -> Path:
        return self.source_path(self.components_dir)

    @property
    def styles_path(self) -> Path:
        return self.source_path(self.styles_dir)

    @property
    def images_path(self) -> Path:
        return self.source_path(self.images_dir)

    @property
    def scripts_path(self) -> Path:
        return self.source_path(self.scripts_dir)

    @property
    def favicon_path(self) -> Path:
        return self.source_path(self.favicon)

    @property
    def manifest_path(self) -> Path:
        return self.source_path(self.manifest)
