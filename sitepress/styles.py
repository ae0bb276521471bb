from __future__ import annotations

import os
import re
import shutil
from pathlib import Path
from typing import Optional

import sass
from pygments.formatters import HtmlFormatter
from pygments.util import ClassNotFound

from .errors import CompileError, SiteIOError
from .render import write_text

STYLE_SUFFIXES = {".scss", ".sass"}
SASS_LOCATION_RE = re.compile(r"on line (?P<line>\d+)(?::\d+)? of (?P<path>\S+)")


def error_location(message: str) -> tuple[Optional[str], Optional[int]]:
    match = SASS_LOCATION_RE.search(message)
    if not match:
        return None, None
    return match.group("path"), int(match.group("line"))


def compile_stylesheet(source: Path) -> str:
    """Compile one SCSS/Sass file to CSS.

    Symlinks are resolved first so ``@import`` paths are relative to the real file.
    """
    path = Path(source).resolve()
    if not path.is_file():
        raise CompileError("Stylesheet not found", source)
    try:
        return sass.compile(filename=str(path), output_style="expanded")
    except sass.CompileError as exc:
        message = str(exc).strip()
        where, line = error_location(message)
        if where and where != "stdin":
            path = Path(where)
        summary = message.splitlines()[0] if message else "Stylesheet compilation failed"
        raise CompileError(summary, path, line) from exc


def is_partial(path: Path) -> bool:
    return path.name.startswith("_")


def list_style_files(source_dir: Path) -> list[Path]:
    """Every non-directory entry under ``source_dir``, following symlinked directories."""

    def fail(exc: OSError) -> None:
        raise SiteIOError(f"Cannot read styles directory: {exc.strerror or exc}", exc.filename) from exc

    files = []
    for dirpath, dirnames, filenames in os.walk(source_dir, onerror=fail, followlinks=True):
        dirnames.sort()
        files.extend(Path(dirpath) / name for name in filenames)
    return sorted(files, key=lambda p: p.as_posix())


def compile_styles(source_dir: Path, output_dir: Path) -> list[Path]:
    """Compile every stylesheet in ``source_dir`` into ``output_dir``.

    Partials (``_name.scss``) are only reachable through ``@import``. Other
    files are copied through unchanged.
    """
    written = []
    for path in list_style_files(source_dir):
        rel = path.relative_to(source_dir)
        if path.suffix.lower() in STYLE_SUFFIXES:
            if is_partial(path):
                continue
            dest = (output_dir / rel).with_suffix(".css")
            write_text(dest, compile_stylesheet(path))
        else:
            dest = output_dir / rel
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(path.resolve(), dest)
        written.append(dest)
    return written


def highlight_stylesheet(style: str = "default") -> str:
    try:
        formatter = HtmlFormatter(style=style, cssclass="codehilite")
    except ClassNotFound as exc:
        raise CompileError(f"Unknown Pygments style {style!r}") from exc
    return formatter.get_style_defs(".codehilite") + "\n"
