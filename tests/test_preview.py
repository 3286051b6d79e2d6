"""
Tests for the preview site: UI model, AsciiDoc headers, template
registry and the page compile task.
"""

from pathlib import Path

import pytest

from tests.helpers import write
from uibundle.core.errors import PageCompilationError
from uibundle.core.services.preview import TemplateRegistry, build_preview_pages
from uibundle.core.services.preview.documents import convert, load, parse_header
from uibundle.core.services.preview.model import (
    finalize_model,
    load_sample_ui_model,
    page_model,
    root_paths,
)
from uibundle.core.services.preview.templates import resolve_page, resolve_page_url

MODEL = """\
site:
  title: Docs Site
  components:
    - name: home
      versions:
        - version: "1.0"
          asciidoc:
            attributes: {source-language: java}
asciidoc:
  attributes: {}
page:
  component:
    name: home
"""

DEFAULT_LAYOUT = (
    "<title>{{page.title}}</title>"
    '<body class="{{page.attributes.role}}">'
    "{{> header}}{{{page.contents}}}"
    '<link href="{{uiRootPath}}/css/site.css">'
    "</body>"
)


@pytest.fixture
def ui_project(tmp_path: Path) -> Path:
    src_dir = tmp_path / "src"
    write(src_dir / "layouts" / "default.hbs", DEFAULT_LAYOUT)
    write(src_dir / "layouts" / "404.hbs", "<h1>{{page.title}}</h1>")
    write(src_dir / "partials" / "header.hbs", "<header>{{upper site.title}}</header>")
    write(src_dir / "helpers" / "upper.py", "def upper(this, value):\n    return str(value).upper()\n")

    preview_src = tmp_path / "preview-src"
    write(preview_src / "ui-model.yml", MODEL)
    write(preview_src / "index.adoc", "= Welcome\n:page-role: home\n\nHello preview.\n")
    write(preview_src / "404.adoc", "= Lost\n")
    write(preview_src / "sub" / "page.adoc", "= Nested\n\nDeep page.\n")
    (preview_src / "multirepo-ssg.svg").write_bytes(b"<svg/>")
    return tmp_path


def _build(root: Path) -> list:
    return build_preview_pages(root / "src", root / "preview-src", root / "public")()


# ── Page compilation ────────────────────────────────────────────────


class TestBuildPreviewPages:
    def test_every_page_rendered(self, ui_project: Path):
        pages = _build(ui_project)
        out = ui_project / "public"
        assert sorted(p.relative for p in pages) == ["404.html", "index.html", "sub/page.html"]
        assert (out / "multirepo-ssg.svg").read_bytes() == b"<svg/>"

    def test_page_model(self, ui_project: Path):
        _build(ui_project)
        html = (ui_project / "public" / "index.html").read_text()
        assert "<title>Welcome</title>" in html
        assert 'class="home"' in html
        assert "<header>DOCS SITE</header>" in html
        assert "Hello preview." in html
        assert 'href="_/css/site.css"' in html

    def test_nested_page_root_paths(self, ui_project: Path):
        _build(ui_project)
        html = (ui_project / "public" / "sub" / "page.html").read_text()
        assert 'href="../_/css/site.css"' in html
        assert "<title>Nested</title>" in html

    def test_not_found_page(self, ui_project: Path):
        _build(ui_project)
        assert (ui_project / "public" / "404.html").read_text() == "<h1>Page Not Found</h1>"

    def test_missing_layout(self, ui_project: Path):
        write(ui_project / "preview-src" / "index.adoc", "= Welcome\n:page-layout: landing\n\nBody.\n")
        with pytest.raises(PageCompilationError) as exc:
            _build(ui_project)
        assert exc.value.layout == "landing"
        assert exc.value.template_path.endswith("src/layouts/landing.hbs")
        assert "Layout 'landing' not found" in str(exc.value)

    def test_partial_error_names_partial(self, ui_project: Path):
        write(
            ui_project / "src" / "helpers" / "upper.py",
            "def upper(this, value):\n    raise ValueError('cannot shout')\n",
        )
        with pytest.raises(PageCompilationError) as exc:
            _build(ui_project)
        assert exc.value.template_path.endswith("src/partials/header.hbs")
        assert str(exc.value).startswith("cannot shout in UI template ")

    def test_invalid_model(self, ui_project: Path):
        write(ui_project / "preview-src" / "ui-model.yml", "site: [unclosed\n")
        with pytest.raises(PageCompilationError, match="Invalid YAML"):
            _build(ui_project)


# ── Template registry ───────────────────────────────────────────────


class TestTemplateRegistry:
    def test_no_layouts_compiled(self, tmp_path: Path):
        with pytest.raises(PageCompilationError, match="Layout 'default' not found") as exc:
            TemplateRegistry(tmp_path).render("default", {"page": {}})
        assert exc.value.layout == "default"

    def test_render_with_builtin_helpers(self, tmp_path: Path):
        write(tmp_path / "layouts" / "link.hbs", '<a href="{{resolvePageURL target}}">x</a>')
        registry = TemplateRegistry(tmp_path)
        registry.compile_layouts()
        html = registry.render("link", {"target": "home:ROOT:guide/install.adoc"})
        assert html == '<a href="/guide/install.html">x</a>'

    def test_builtin_helper_accepts_hash_arguments(self, tmp_path: Path):
        write(tmp_path / "layouts" / "link.hbs", "{{resolvePageURL target family='page'}}")
        registry = TemplateRegistry(tmp_path)
        registry.compile_layouts()
        assert registry.render("link", {"target": "home:ROOT:guide/install.adoc"}) == "/guide/install.html"

    def test_helper_without_function(self, tmp_path: Path):
        write(tmp_path / "helpers" / "broken.py", "VALUE = 1\n")
        with pytest.raises(PageCompilationError, match="defines no function 'broken'"):
            TemplateRegistry(tmp_path).register_helpers()

    def test_helper_named_helper(self, tmp_path: Path):
        write(tmp_path / "helpers" / "year.py", "def helper(this):\n    return '2024'\n")
        write(tmp_path / "layouts" / "default.hbs", "{{year}}")
        registry = TemplateRegistry(tmp_path)
        registry.register_helpers()
        registry.compile_layouts()
        assert registry.render("default", {}) == "2024"

    def test_layout_error_names_layout(self, tmp_path: Path):
        write(tmp_path / "layouts" / "default.hbs", "{{explode}}")
        registry = TemplateRegistry(tmp_path)
        registry.register_helper("explode", lambda this: 1 / 0)
        registry.compile_layouts()
        with pytest.raises(PageCompilationError) as exc:
            registry.render("default", {})
        assert exc.value.template_path.endswith("layouts/default.hbs")


class TestResolvePage:
    def test_url(self):
        assert resolve_page_url(None, "home:ROOT:guide/install.adoc") == "/guide/install.html"
        assert resolve_page_url(None, "index.adoc") == "/index.html"

    def test_missing_spec(self):
        assert resolve_page_url(None) is None
        assert resolve_page(None, "") is None

    def test_page(self):
        assert resolve_page(None, "c:m:a.adoc") == {"pub": {"url": "/a.html"}}

    def test_ignores_hash_arguments(self):
        assert resolve_page(None, "c:m:a.adoc", family="page") == {"pub": {"url": "/a.html"}}


# ── UI model ────────────────────────────────────────────────────────


class TestModel:
    def test_root_paths(self, tmp_path: Path):
        assert root_paths(tmp_path / "index.adoc", tmp_path) == ("", "_")
        assert root_paths(tmp_path / "sub" / "page.adoc", tmp_path) == ("..", "../_")
        assert root_paths(tmp_path / "a" / "b" / "page.adoc", tmp_path) == ("../..", "../../_")

    def test_finalize_model(self):
        base = {
            "site": {"components": [{"name": "home", "versions": [{"version": "1.0"}, {"version": "2.0"}]}]},
            "asciidoc": {"attributes": {}},
        }
        model = finalize_model(base, env={"CI": "true"})
        assert "asciidoc" not in model
        assert model["env"] == {"CI": "true"}
        versions = model["site"]["components"][0]["versions"]
        assert all(v["asciidoc"] == {"extensions": []} for v in versions)

    def test_page_model_is_per_page(self, tmp_path: Path):
        model = {"page": {"component": "home"}}
        first = page_model(model, tmp_path / "a.adoc", tmp_path)
        first["page"]["title"] = "A"
        assert "title" not in model["page"]

    def test_empty_model_file(self, tmp_path: Path):
        write(tmp_path / "ui-model.yml", "")
        assert load_sample_ui_model(tmp_path) == {}

    def test_missing_model_file(self, tmp_path: Path):
        with pytest.raises(PageCompilationError, match="Cannot read UI model"):
            load_sample_ui_model(tmp_path)

    def test_model_must_be_mapping(self, tmp_path: Path):
        write(tmp_path / "ui-model.yml", "- a\n- b\n")
        with pytest.raises(PageCompilationError, match="mapping"):
            load_sample_ui_model(tmp_path)


# ── AsciiDoc header ─────────────────────────────────────────────────


class TestParseHeader:
    def test_title_and_attributes(self):
        text = (
            "= Install Guide\n"
            "Jane Writer\n"
            ":page-role: guide\n"
            ":description: A long \\\n"
            "  description\n"
            ":icons!:\n"
            "\n"
            ":not-header: x\n"
        )
        title, attributes = parse_header(text)
        assert title == "Install Guide"
        assert attributes == {"page-role": "guide", "description": "A long description"}

    def test_title_after_attributes(self):
        title, attributes = parse_header(":page-role: home\n= Title\n\nbody\n")
        assert title == "Title"
        assert attributes == {"page-role": "home"}

    def test_no_title(self):
        title, attributes = parse_header(":page-layout: home\n\nBody\n")
        assert title is None
        assert attributes == {"page-layout": "home"}

    def test_unset_forms(self):
        _, attributes = parse_header("= T\n:a: 1\n:b: 2\n:a!:\n:!b:\n")
        assert attributes == {}

    def test_load_merges_defaults(self):
        doc = load("= T\n:icons: image\n:page-layout: home\n")
        assert doc.attribute("icons") == "image"
        assert doc.attribute("sectanchors") == ""
        assert doc.page_attributes == {"layout": "home"}


class TestConvert:
    def test_unix_line_endings(self):
        html = convert("First paragraph.\n\nSecond paragraph.\n")
        assert "First paragraph." in html
        assert "Second paragraph." in html
        assert "\r\n" not in html
