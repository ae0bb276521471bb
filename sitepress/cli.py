from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from .config import MISSING_ASSET_POLICIES, SiteConfig, load_config
from .errors import BuildError
from .site import build_site
from .utils import parse_bool, parse_int


def build_parser(config: dict, config_path: str) -> argparse.ArgumentParser:
    def cfg_str(key: str, default: str) -> str:
        value = config.get(key)
        return default if value is None else str(value)

    def cfg_bool(key: str, default: bool) -> bool:
        value = config.get(key)
        return default if value is None else parse_bool(value)

    def cfg_int(key: str, default: int) -> int:
        return parse_int(config.get(key), default)

    parser = argparse.ArgumentParser(description="Build a static blog from markdown posts and HTML components.")
    parser.add_argument("--config", default=config_path, help="Path to site config file (TOML/YAML/JSON).")
    parser.add_argument("--site-title", default=cfg_str("site_title", "Blog"), help="Site title.")
    parser.add_argument("--posts", default=cfg_str("posts", "posts"), help="Directory containing Markdown posts.")
    parser.add_argument("--output", default=cfg_str("output", "public"), help="Output directory for the site.")
    parser.add_argument(
        "--source",
        default=cfg_str("source", "src"),
        help="Directory holding components, styles, images, scripts, favicon and manifest.",
    )
    parser.add_argument(
        "--components",
        default=cfg_str("components", "components"),
        help="HTML components directory (relative to --source).",
    )
    parser.add_argument("--styles", default=cfg_str("styles", "styles"), help="Stylesheet directory (relative to --source).")
    parser.add_argument("--images", default=cfg_str("images", "img"), help="Image directory (relative to --source).")
    parser.add_argument("--scripts", default=cfg_str("scripts", "scripts"), help="Script directory (relative to --source).")
    parser.add_argument("--favicon", default=cfg_str("favicon", "favicon.ico"), help="Favicon file (relative to --source).")
    parser.add_argument(
        "--manifest",
        default=cfg_str("manifest", "site.webmanifest"),
        help="Web manifest file (relative to --source).",
    )
    parser.add_argument(
        "--build-workers",
        default=cfg_int("build_workers", 0),
        type=int,
        help="Number of worker threads for parsing/rendering (0 = auto).",
    )
    parser.add_argument(
        "--missing-assets",
        default=cfg_str("missing_assets", "warn"),
        choices=sorted(MISSING_ASSET_POLICIES),
        help="Treat missing optional assets (favicon, manifest, asset directories) as warnings or errors.",
    )
    parser.add_argument(
        "--highlight-css",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("highlight_css", False),
        help="Write styles/highlight.css for code blocks.",
    )
    parser.add_argument(
        "--highlight-style",
        default=cfg_str("highlight_style", "default"),
        help="Pygments style used for styles/highlight.css.",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> SiteConfig:
    return SiteConfig(
        site_title=args.site_title,
        posts_dir=Path(args.posts),
        output_dir=Path(args.output),
        source_dir=Path(args.source),
        components_dir=Path(args.components),
        styles_dir=Path(args.styles),
        images_dir=Path(args.images),
        scripts_dir=Path(args.scripts),
        favicon=Path(args.favicon),
        manifest=Path(args.manifest),
        workers=args.build_workers,
        missing_assets=args.missing_assets,
        highlight_css=args.highlight_css,
        highlight_style=args.highlight_style,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument(
        "--config",
        default="site.toml",
        help="Path to site config file (TOML/YAML/JSON).",
    )
    pre_args, _ = pre_parser.parse_known_args(argv)
    config = load_config(Path(pre_args.config))

    parser = build_parser(config, pre_args.config)
    args = parser.parse_args(argv)
    try:
        site_config = config_from_args(args)
    except ValueError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1
    start = time.perf_counter()
    try:
        context = build_site(site_config)
    except BuildError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    elapsed = time.perf_counter() - start
    print(f"Build completed in {elapsed:.2f}s.")
    print(f"Site generated in: {args.output} ({len(context.posts)} posts)")
    if context.warnings:
        print(f"{len(context.warnings)} warning(s).")
    return 0
