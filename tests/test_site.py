from __future__ import annotations

import pytest
from bs4 import BeautifulSoup
from conftest import snapshot

from sitepress.errors import BuildError, CompileError, TemplateError, ValidationError
from sitepress.site import Stage, build_site


def test_full_build_writes_site_tree(site_root, make_config):
    context = build_site(make_config())
    public = site_root / "public"

    assert context.stage is Stage.DONE
    assert context.warnings == []
    assert [post.output_filename for post in context.posts] == ["second.html", "hello.html"]
    for name in ("posts", "img", "js", "styles"):
        assert (public / name).is_dir()

    index = BeautifulSoup((public / "index.html").read_text(encoding="utf-8"), "html.parser")
    assert [a["href"] for a in index.select("ul.post-list li a")] == ["/posts/second.html", "/posts/hello.html"]

    hello = BeautifulSoup((public / "posts" / "hello.html").read_text(encoding="utf-8"), "html.parser")
    assert hello.title.get_text(strip=True) == "Hello | Test Site"
    assert hello.select_one("div.post-body h1").get_text(strip=True) == "Hi"

    second = BeautifulSoup((public / "posts" / "second.html").read_text(encoding="utf-8"), "html.parser")
    assert second.select_one("div.post-body .codehilite") is not None
    assert [s["src"] for s in second.head.select("script")] == ["/js/chart.js"]

    src = site_root / "src"
    assert (public / "img" / "logo.png").read_bytes() == (src / "img" / "logo.png").read_bytes()
    assert (public / "js" / "dark-mode-toggle.js").exists()
    assert (public / "favicon.ico").read_bytes() == (src / "favicon.ico").read_bytes()
    assert (public / "site.webmanifest").exists()

    main_css = (public / "styles" / "main.css").read_text(encoding="utf-8")
    assert "color: #333333" in main_css
    assert "body .title" in main_css
    assert (public / "styles" / "plain.css").exists()
    assert not (public / "styles" / "_vars.css").exists()


def test_rebuild_is_byte_identical(site_root, make_config):
    build_site(make_config())
    first = snapshot(site_root / "public")
    build_site(make_config())
    assert snapshot(site_root / "public") == first


def test_worker_count_does_not_change_output(site_root, make_config, tmp_path):
    build_site(make_config(workers=1))
    serial = snapshot(site_root / "public")
    build_site(make_config(workers=4, output_dir=tmp_path / "parallel"))
    assert snapshot(tmp_path / "parallel") == serial


def test_missing_document_shell_fails_before_writing(site_root, make_config):
    (site_root / "src" / "components" / "document.html").unlink()

    with pytest.raises(BuildError) as exc_info:
        build_site(make_config())

    assert exc_info.value.stage is Stage.COMPONENTS_LOADED
    assert isinstance(exc_info.value.error, TemplateError)
    assert snapshot(site_root / "public") == {}


def test_invalid_post_aborts_build(site_root, make_config):
    (site_root / "posts" / "untitled.md").write_text("---\ndate: 2021-01-01\n---\nbody\n", encoding="utf-8")

    with pytest.raises(BuildError) as exc_info:
        build_site(make_config())

    assert exc_info.value.stage is Stage.POSTS_LOADED
    assert isinstance(exc_info.value.error, ValidationError)
    assert "untitled.md" in str(exc_info.value)
    assert "posts-loaded" in str(exc_info.value)
    assert snapshot(site_root / "public") == {}


def test_missing_manifest_warns_by_default(site_root, make_config, capsys):
    (site_root / "src" / "site.webmanifest").unlink()

    context = build_site(make_config())

    assert context.stage is Stage.DONE
    assert len(context.warnings) == 1
    assert "manifest" in context.warnings[0]
    assert "Warning: Missing manifest" in capsys.readouterr().err
    assert (site_root / "public" / "favicon.ico").exists()


def test_missing_manifest_can_be_fatal(site_root, make_config):
    (site_root / "src" / "site.webmanifest").unlink()

    with pytest.raises(BuildError) as exc_info:
        build_site(make_config(missing_assets="error"))

    assert exc_info.value.stage is Stage.ASSETS_COPIED
    assert exc_info.value.path == site_root / "src" / "site.webmanifest"


def test_symlinked_stylesheet_in_styles_dir(site_root, make_config, tmp_path):
    shared = tmp_path / "shared"
    shared.mkdir()
    (shared / "_palette.scss").write_text("$ink: #222222;\n", encoding="utf-8")
    (shared / "print.scss").write_text('@import "palette";\nbody { color: $ink; }\n', encoding="utf-8")
    (site_root / "src" / "styles" / "print.scss").symlink_to(shared / "print.scss")

    build_site(make_config())

    assert "color: #222222" in (site_root / "public" / "styles" / "print.css").read_text(encoding="utf-8")


def test_stylesheet_error_surfaces_stage(site_root, make_config):
    (site_root / "src" / "styles" / "broken.scss").write_text("a { color: }\n", encoding="utf-8")

    with pytest.raises(BuildError) as exc_info:
        build_site(make_config())

    assert exc_info.value.stage is Stage.STYLES_COMPILED
    assert isinstance(exc_info.value.error, CompileError)


def test_highlight_css_is_opt_in(site_root, make_config):
    build_site(make_config())
    assert not (site_root / "public" / "styles" / "highlight.css").exists()

    build_site(make_config(highlight_css=True, highlight_style="friendly"))
    assert ".codehilite" in (site_root / "public" / "styles" / "highlight.css").read_text(encoding="utf-8")
