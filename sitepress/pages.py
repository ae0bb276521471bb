from __future__ import annotations

import html
from dataclasses import dataclass
from typing import Iterable, Mapping

from .components import DOCUMENT, HTML_HEAD, INDEX, PAGE_FOOTER, PAGE_HEADER, POST
from .errors import TemplateError
from .posts import Post
from .render import format_html, render_template
from .utils import join_url

REQUIRED_COMPONENTS = (DOCUMENT, HTML_HEAD, INDEX, POST)
STYLES_ROOT = "/styles"
SCRIPTS_ROOT = "/js"
POSTS_ROOT = "/posts"


@dataclass(frozen=True)
class IndexEntry:
    href: str
    title: str
    display_date: str
    date: str


def index_entries(posts: Iterable[Post]) -> list[IndexEntry]:
    return [
        IndexEntry(
            href=f"{POSTS_ROOT}/{post.output_filename}",
            title=post.title,
            display_date=post.display_date,
            date=post.date,
        )
        for post in posts
    ]


def build_post_list(entries: list[IndexEntry]) -> str:
    items = []
    for entry in entries:
        items.append(
            '<li class="post-summary">'
            f'<a href="{html.escape(entry.href)}">{html.escape(entry.title)}</a>'
            f'<time datetime="{html.escape(entry.date)}">{entry.display_date}</time>'
            "</li>"
        )
    return f'<ul class="post-list">{"".join(items)}</ul>'


def asset_href(value: str, root: str) -> str:
    if value.startswith(("http://", "https://", "//", "/")):
        return value
    return join_url(root, value)


def build_style_links(styles: list[str]) -> str:
    return "\n".join(
        f'<link rel="stylesheet" href="{html.escape(asset_href(style, STYLES_ROOT))}">' for style in styles
    )


def build_script_tags(scripts: list[str]) -> str:
    return "\n".join(
        f'<script src="{html.escape(asset_href(script, SCRIPTS_ROOT))}" defer></script>' for script in scripts
    )


@dataclass(frozen=True)
class PageComposer:
    """Composes full pages from the component fragments of one build.

    ``header`` and ``footer`` are optional and render as empty when the site
    does not provide them. The four other fragments are required.
    """

    document: str
    head: str
    index_body: str
    post_body: str
    site_title: str
    header: str = ""
    footer: str = ""

    @classmethod
    def from_components(cls, components: Mapping[str, str], site_title: str) -> "PageComposer":
        missing = [name for name in REQUIRED_COMPONENTS if name not in components]
        if missing:
            raise TemplateError(f"Missing required component(s): {', '.join(missing)}")
        return cls(
            document=components[DOCUMENT],
            head=components[HTML_HEAD],
            index_body=components[INDEX],
            post_body=components[POST],
            site_title=site_title,
            header=components.get(PAGE_HEADER, ""),
            footer=components.get(PAGE_FOOTER, ""),
        )

    def shared_context(self) -> dict[str, str]:
        site_title = html.escape(self.site_title)
        return {
            "site_title": site_title,
            "header": render_template(self.header, site_title=site_title),
            "footer": render_template(self.footer, site_title=site_title),
        }

    def wrap(self, title: str, body: str, styles: str = "", scripts: str = "") -> str:
        head = render_template(
            self.head,
            title=html.escape(title),
            site_title=html.escape(self.site_title),
            styles=styles,
            scripts=scripts,
        )
        return format_html(render_template(self.document, head=head, body=body))

    def build_index_page(self, posts: Iterable[Post]) -> str:
        body = render_template(
            self.index_body,
            posts=build_post_list(index_entries(posts)),
            **self.shared_context(),
        )
        return self.wrap(self.site_title, body)

    def build_post_page(self, post: Post) -> str:
        context = {
            key: html.escape(value) for key, value in post.extra_metadata.items() if isinstance(value, str)
        }
        context.update(self.shared_context())
        context.update(
            title=html.escape(post.title),
            date=post.display_date,
            datetime=html.escape(post.date),
            content=post.html_content,
        )
        body = render_template(self.post_body, **context)
        return self.wrap(
            f"{post.title} | {self.site_title}",
            body,
            styles=build_style_links(post.styles),
            scripts=build_script_tags(post.scripts),
        )


def build_index_page(posts: Iterable[Post], components: Mapping[str, str], site_title: str) -> str:
    return PageComposer.from_components(components, site_title).build_index_page(posts)


def build_post_page(post: Post, components: Mapping[str, str], site_title: str) -> str:
    return PageComposer.from_components(components, site_title).build_post_page(post)
