from __future__ import annotations

import re

import markdown

from .errors import ParseError

LIST_MARKER_RE = re.compile(r"^(?P<indent>[ \t]*)(?:[-+*]|\d+[.)])\s+")
FENCE_RE = re.compile(r"^(?P<indent>[ \t]*)(`{3,}|~{3,})")
PREAMBLE_DELIMITER = "---"
LIST_KEYS = {"styles", "scripts", "tags", "categories"}
MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "codehilite"]
MARKDOWN_EXTENSION_CONFIGS = {"codehilite": {"guess_lang": False, "css_class": "codehilite"}}


def parse_list(value: str) -> list[str]:
    value = value.strip()
    if value.startswith("[") and value.endswith("]"):
        inner = value[1:-1]
        items = [item.strip().strip("'\"") for item in inner.split(",")]
    else:
        items = [item.strip() for item in value.split(",")]
    return [item for item in items if item]


def unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    return value


def parse_front_matter(text: str) -> tuple[dict, str]:
    """Split ``text`` into its ``---`` delimited preamble and the markdown body.

    Text without a preamble yields empty metadata and the full text as body.
    An opening delimiter that is never closed raises :class:`ParseError`.
    """
    clean_text = text.lstrip("\ufeff")
    lines = clean_text.splitlines()
    if not lines or lines[0].strip() != PREAMBLE_DELIMITER:
        return {}, clean_text

    end = None
    for i in range(1, len(lines)):
        if lines[i].strip() == PREAMBLE_DELIMITER:
            end = i
            break
    if end is None:
        raise ParseError("Unterminated metadata preamble: missing closing '---'", line=1)

    meta = {}
    for number, line in enumerate(lines[1:end], start=2):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if ":" not in line:
            raise ParseError(f"Expected 'key: value' in metadata preamble, got {line!r}", line=number)
        key, value = line.split(":", 1)
        key = key.strip().lower()
        if not key:
            raise ParseError("Empty key in metadata preamble", line=number)
        value = value.strip()
        if key in LIST_KEYS:
            meta[key] = parse_list(value)
        else:
            meta[key] = unquote(value)
    body = "\n".join(lines[end + 1 :])
    return meta, body


def normalize_list_spacing(text: str) -> str:
    # Python-Markdown needs a blank line before a top-level list that follows a paragraph.
    lines = text.splitlines()
    out: list[str] = []
    in_fence = False
    fence_marker = ""
    for line in lines:
        fence_match = FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group(2)
            if not in_fence:
                in_fence = True
                fence_marker = marker
            elif marker == fence_marker:
                in_fence = False
                fence_marker = ""
            out.append(line)
            continue
        if in_fence:
            out.append(line)
            continue
        list_match = LIST_MARKER_RE.match(line)
        if list_match and not list_match.group("indent"):
            if out and out[-1].strip() and not LIST_MARKER_RE.match(out[-1]):
                out.append("")
        out.append(line)
    return "\n".join(out)


def markdown_to_html(body: str) -> str:
    md = markdown.Markdown(
        extensions=MARKDOWN_EXTENSIONS,
        extension_configs=MARKDOWN_EXTENSION_CONFIGS,
    )
    return md.convert(normalize_list_spacing(body))


def process_markdown(raw_text: str) -> tuple[str, dict]:
    """Convert one markdown document into ``(html, metadata)``."""
    meta, body = parse_front_matter(raw_text)
    return markdown_to_html(body), meta
