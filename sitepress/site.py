from __future__ import annotations

import shutil
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from .components import load_components
from .config import SiteConfig
from .errors import BuildError, SiteError, SiteIOError
from .pages import PageComposer
from .posts import Post, load_posts
from .render import copy_files, write_text
from .styles import compile_styles, highlight_stylesheet
from .utils import resolve_workers

OUTPUT_SUBDIRS = ("posts", "img", "js", "styles")
HIGHLIGHT_CSS = "highlight.css"


class Stage(Enum):
    INIT = "init"
    DIRECTORY_PREPARED = "directory-prepared"
    COMPONENTS_LOADED = "components-loaded"
    POSTS_LOADED = "posts-loaded"
    INDEX_WRITTEN = "index-written"
    POSTS_WRITTEN = "posts-written"
    ASSETS_COPIED = "assets-copied"
    STYLES_COMPILED = "styles-compiled"
    DONE = "done"


@dataclass
class BuildContext:
    config: SiteConfig
    stage: Stage = Stage.INIT
    components: dict[str, str] = field(default_factory=dict)
    composer: Optional[PageComposer] = None
    posts: list[Post] = field(default_factory=list)
    written: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def output_dir(self) -> Path:
        return self.config.output_dir

    @property
    def workers(self) -> int:
        return resolve_workers(self.config.workers)

    def missing_asset(self, description: str, path: Path) -> None:
        if self.config.missing_assets == "error":
            raise SiteIOError(f"Missing {description}", path)
        message = f"Missing {description}: {path}"
        self.warnings.append(message)
        print(f"Warning: {message}", file=sys.stderr)


def prepare_directories(context: BuildContext) -> None:
    output_dir = context.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)
    for name in OUTPUT_SUBDIRS:
        (output_dir / name).mkdir(parents=True, exist_ok=True)


def load_site_components(context: BuildContext) -> None:
    context.components = load_components(context.config.components_path)
    context.composer = PageComposer.from_components(context.components, context.config.site_title)


def load_site_posts(context: BuildContext) -> None:
    context.posts = load_posts(context.config.posts_dir, workers=context.workers)


def write_index(context: BuildContext) -> None:
    path = context.output_dir / "index.html"
    write_text(path, context.composer.build_index_page(context.posts))
    context.written.append(path)


def write_posts(context: BuildContext) -> None:
    posts_dir = context.output_dir / "posts"

    def render_post(post: Post) -> Path:
        path = posts_dir / post.output_filename
        write_text(path, context.composer.build_post_page(post))
        return path

    workers = min(context.workers, len(context.posts))
    if workers <= 1:
        paths = [render_post(post) for post in context.posts]
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            paths = list(executor.map(render_post, context.posts))
    context.written.extend(paths)


def copy_assets(context: BuildContext) -> None:
    config = context.config
    output_dir = context.output_dir
    for description, source, dest in (
        ("images directory", config.images_path, output_dir / "img"),
        ("scripts directory", config.scripts_path, output_dir / "js"),
    ):
        if not source.is_dir():
            context.missing_asset(description, source)
            continue
        context.written.extend(copy_files(source, dest))

    for description, source in (("favicon", config.favicon_path), ("manifest", config.manifest_path)):
        if not source.is_file():
            context.missing_asset(description, source)
            continue
        dest = output_dir / source.name
        shutil.copyfile(source, dest)
        context.written.append(dest)


def compile_site_styles(context: BuildContext) -> None:
    config = context.config
    styles_out = context.output_dir / "styles"
    if config.styles_path.is_dir():
        context.written.extend(compile_styles(config.styles_path, styles_out))
    else:
        context.missing_asset("styles directory", config.styles_path)
    if config.highlight_css:
        path = styles_out / HIGHLIGHT_CSS
        write_text(path, highlight_stylesheet(config.highlight_style))
        context.written.append(path)


PIPELINE: tuple[tuple[Stage, Callable[[BuildContext], None]], ...] = (
    (Stage.DIRECTORY_PREPARED, prepare_directories),
    (Stage.COMPONENTS_LOADED, load_site_components),
    (Stage.POSTS_LOADED, load_site_posts),
    (Stage.INDEX_WRITTEN, write_index),
    (Stage.POSTS_WRITTEN, write_posts),
    (Stage.ASSETS_COPIED, copy_assets),
    (Stage.STYLES_COMPILED, compile_site_styles),
)


def run_stage(context: BuildContext, stage: Stage, step: Callable[[BuildContext], None]) -> None:
    try:
        step(context)
    except SiteError as exc:
        raise BuildError(stage, exc) from exc
    except OSError as exc:
        error = SiteIOError(exc.strerror or str(exc), exc.filename)
        raise BuildError(stage, error) from exc
    context.stage = stage


def build_site(config: SiteConfig) -> BuildContext:
    """Run every build stage in order. The first failing stage raises :class:`BuildError`."""
    context = BuildContext(config=config)
    for stage, step in PIPELINE:
        run_stage(context, stage, step)
    context.stage = Stage.DONE
    return context
