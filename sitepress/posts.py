from __future__ import annotations

import datetime as dt
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from .content import process_markdown
from .errors import ParseError, SiteIOError, ValidationError
from .utils import display_date, parse_iso_date

MARKDOWN_SUFFIXES = {".md", ".markdown"}
REQUIRED_KEYS = ("title", "date")
# Derived post fields and composer placeholders a preamble may not declare.
RESERVED_KEYS = frozenset(
    {
        "filename",
        "source_filename",
        "output_filename",
        "html_content",
        "content",
        "href",
        "display_date",
        "datetime",
        "header",
        "footer",
        "head",
        "body",
        "site_title",
    }
)


@dataclass(frozen=True)
class Post:
    source_filename: str
    output_filename: str
    title: str
    date: str
    html_content: str
    extra_metadata: Mapping[str, object] = field(default_factory=dict)

    @property
    def published(self) -> dt.date:
        return parse_iso_date(self.date)

    @property
    def display_date(self) -> str:
        return display_date(self.date)

    @property
    def styles(self) -> list[str]:
        return _as_list(self.extra_metadata.get("styles"))

    @property
    def scripts(self) -> list[str]:
        return _as_list(self.extra_metadata.get("scripts"))


def _as_list(value: object) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value]


def output_filename_for(source_filename: str) -> str:
    return f"{Path(source_filename).stem}.html"


def make_post(source_filename: str, html_content: str, metadata: dict) -> Post:
    """Validate preamble metadata and build the :class:`Post` record."""
    for key in REQUIRED_KEYS:
        value = metadata.get(key)
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"Missing required metadata key '{key}'", source_filename)

    reserved = sorted(RESERVED_KEYS.intersection(metadata))
    if reserved:
        raise ValidationError(f"Metadata declares reserved key(s): {', '.join(reserved)}", source_filename)

    date_value = metadata["date"].strip()
    try:
        parse_iso_date(date_value)
    except ValueError as exc:
        raise ValidationError(f"Invalid ISO-8601 date {date_value!r}", source_filename) from exc

    extra = {key: value for key, value in metadata.items() if key not in REQUIRED_KEYS}
    return Post(
        source_filename=source_filename,
        output_filename=output_filename_for(source_filename),
        title=metadata["title"].strip(),
        date=date_value,
        html_content=html_content,
        extra_metadata=MappingProxyType(extra),
    )


def list_post_files(posts_dir: Path) -> list[Path]:
    try:
        entries = list(posts_dir.iterdir())
    except OSError as exc:
        raise SiteIOError(f"Cannot read posts directory: {exc.strerror or exc}", posts_dir) from exc
    files = [
        path
        for path in entries
        if path.suffix.lower() in MARKDOWN_SUFFIXES and not path.name.startswith(".") and path.is_file()
    ]
    return sorted(files, key=lambda p: p.name)


def load_post(path: Path) -> Post:
    try:
        raw_text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SiteIOError(f"Cannot read post: {exc.strerror or exc}", path) from exc
    except UnicodeDecodeError as exc:
        raise SiteIOError(f"Post is not valid UTF-8: {exc.reason}", path) from exc
    try:
        html_content, meta = process_markdown(raw_text)
    except ParseError as exc:
        raise ParseError(exc.message, path, exc.line) from exc
    return make_post(path.name, html_content, meta)


def check_unique_outputs(posts: list[Post]) -> None:
    seen: dict[str, Post] = {}
    for post in posts:
        key = post.output_filename.casefold()
        other = seen.get(key)
        if other is not None:
            raise ValidationError(
                f"Posts {other.source_filename} and {post.source_filename} "
                f"both render to {post.output_filename}",
                post.source_filename,
            )
        seen[key] = post


def sort_posts(posts: list[Post]) -> list[Post]:
    by_name = sorted(posts, key=lambda p: p.source_filename)
    return sorted(by_name, key=lambda p: p.published, reverse=True)


def load_posts(posts_dir: Path, workers: int = 1) -> list[Post]:
    """Load every markdown post in ``posts_dir``, newest first.

    The first invalid post aborts the load; no partial list is returned.
    """
    posts_dir = Path(posts_dir)
    post_files = list_post_files(posts_dir)
    workers = max(1, int(workers or 1))
    if workers > 1 and len(post_files) > 1:
        with ThreadPoolExecutor(max_workers=min(workers, len(post_files))) as executor:
            posts = list(executor.map(load_post, post_files))
    else:
        posts = [load_post(path) for path in post_files]
    check_unique_outputs(posts)
    return sort_posts(posts)
