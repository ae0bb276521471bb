from __future__ import annotations

from pathlib import Path

from .errors import SiteIOError

DOCUMENT = "document.html"
HTML_HEAD = "html-head.html"
PAGE_HEADER = "page-header.html"
PAGE_FOOTER = "page-footer.html"
INDEX = "index.html"
POST = "post.html"


def load_components(directory: Path) -> dict[str, str]:
    """Read every file in ``directory`` into a ``{filename: source}`` mapping.

    Not recursive. Any unreadable file fails the whole load.
    """
    directory = Path(directory)
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as exc:
        raise SiteIOError(f"Cannot read components directory: {exc.strerror or exc}", directory) from exc

    components = {}
    for path in entries:
        if path.is_symlink() and not path.exists():
            raise SiteIOError(f"Broken symlink to {path.readlink()}", path)
        if not path.is_file():
            continue
        try:
            components[path.name] = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise SiteIOError(f"Cannot read component: {exc.strerror or exc}", path) from exc
        except UnicodeDecodeError as exc:
            raise SiteIOError(f"Component is not valid UTF-8: {exc.reason}", path) from exc
    return components
