from __future__ import annotations

from pathlib import Path

import pytest

from sitepress.config import SiteConfig

COMPONENTS = {
    "document.html": "<!DOCTYPE html>\n<html lang=\"en\">\n{{head}}\n<body>\n{{body}}\n</body>\n</html>\n",
    "html-head.html": (
        "<head>\n<meta charset=\"utf-8\">\n<title>{{title}}</title>\n"
        "<link rel=\"stylesheet\" href=\"/styles/main.css\">\n{{styles}}\n{{scripts}}\n</head>\n"
    ),
    "page-header.html": "<header class=\"site-header\"><a href=\"/\">{{site_title}}</a></header>\n",
    "page-footer.html": "<footer class=\"site-footer\">{{site_title}}</footer>\n",
    "index.html": "{{header}}\n<main>\n{{posts}}\n</main>\n{{footer}}\n",
    "post.html": (
        "{{header}}\n<article>\n<h1 class=\"post-title\">{{title}}</h1>\n"
        "<time datetime=\"{{datetime}}\">{{date}}</time>\n"
        "<p class=\"summary\">{{summary}}</p>\n"
        "<div class=\"post-body\">{{content}}</div>\n</article>\n{{footer}}\n"
    ),
}

HELLO_POST = """---
title: "Hello"
date: "2021-03-14"
---
# Hi
"""

SECOND_POST = """---
title: Second post
date: 2021-04-01
summary: Notes on the second post
styles: [post.css]
scripts: [chart.js]
---
Some *text*.

```python
def answer():
    return 42
```
"""

MAIN_SCSS = """@import "vars";

body {
  color: $text;

  .title {
    font-weight: bold;
  }
}
"""

VARS_SCSS = "$text: #333333;\n"


def write_files(root: Path, files: dict[str, str]) -> None:
    for name, text in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    root = tmp_path / "site"
    src = root / "src"
    write_files(src / "components", COMPONENTS)
    write_files(root / "posts", {"hello.md": HELLO_POST, "second.md": SECOND_POST})
    write_files(
        src / "styles",
        {"main.scss": MAIN_SCSS, "_vars.scss": VARS_SCSS, "plain.css": "a { color: blue; }\n"},
    )
    write_files(src / "scripts", {"dark-mode-toggle.js": "document.documentElement.dataset.theme = 'dark';\n"})
    (src / "img").mkdir(parents=True)
    (src / "img" / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00\x01binary")
    (src / "favicon.ico").write_bytes(b"\x00\x00\x01\x00icon")
    (src / "site.webmanifest").write_text('{"name": "Test Site"}\n', encoding="utf-8")
    return root


@pytest.fixture
def make_config(site_root: Path):
    def factory(**overrides) -> SiteConfig:
        values = {
            "site_title": "Test Site",
            "posts_dir": site_root / "posts",
            "output_dir": site_root / "public",
            "source_dir": site_root / "src",
            "workers": 1,
        }
        values.update(overrides)
        return SiteConfig(**values)

    return factory


def snapshot(root: Path) -> dict[str, bytes]:
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }
