from __future__ import annotations

import re
import shutil
from pathlib import Path

from bs4 import BeautifulSoup
from bs4.builder import HTMLParserTreeBuilder

from .errors import SiteIOError

PLACEHOLDER_RE = re.compile(r"\{\{\s*([A-Za-z_][\w-]*)\s*\}\}")
# Elements whose text is emitted verbatim by the formatting pass. Indenting
# inside them would add visible spaces around inline markup.
VERBATIM_TAGS = frozenset(
    {
        "pre",
        "textarea",
        "title",
        "p",
        "li",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "a",
        "time",
        "td",
        "th",
        "dt",
        "dd",
        "blockquote",
        "figcaption",
        "caption",
        "summary",
        "label",
        "button",
    }
)


def render_template(template: str, **context: str) -> str:
    """Substitute ``{{key}}`` placeholders in a single pass.

    Placeholders missing from ``context`` render as empty. Substituted values
    are never rescanned, so content containing ``{{...}}`` is left as written.
    """

    def repl(match: re.Match) -> str:
        return str(context.get(match.group(1), ""))

    return PLACEHOLDER_RE.sub(repl, template)


def format_html(html_text: str) -> str:
    """Re-indent a full document.

    Only block structure is indented; the contents of text-bearing elements
    (``VERBATIM_TAGS``) are written as-is so the visible text is unchanged.
    """
    builder = HTMLParserTreeBuilder(preserve_whitespace_tags=VERBATIM_TAGS)
    soup = BeautifulSoup(html_text, builder=builder)
    return soup.prettify()


def write_text(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise SiteIOError(f"Cannot write file: {exc.strerror or exc}", path) from exc


def copy_files(source_dir: Path, output_dir: Path) -> list[Path]:
    """Copy the entries of ``source_dir`` into ``output_dir`` byte-for-byte.

    Symlinks are followed. Existing sub-directories are merged, not replaced.
    """
    copied = []
    output_dir.mkdir(parents=True, exist_ok=True)
    for item in sorted(source_dir.iterdir(), key=lambda p: p.name):
        dest = output_dir / item.name
        if item.is_dir():
            shutil.copytree(item, dest, dirs_exist_ok=True)
        else:
            shutil.copyfile(item, dest)
        copied.append(dest)
    return copied
