"""Tests for Jinja2 template rendering and the custom filters."""

from __future__ import annotations

from pathlib import Path

import pytest

from conftest import write_tree
from crafter.errors import TemplateRenderError
from crafter.scaffolder.resources import resolve
from crafter.scaffolder.templates import (
    TemplateRenderer,
    _camel_case_filter,
    _pascal_case_filter,
    _slugify_filter,
    _snake_case_filter,
)

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


class TestFilters:
    @pytest.mark.parametrize(
        "value, expected",
        [("my-app", "MyApp"), ("my_app", "MyApp"), ("demo", "Demo"), ("order.service", "OrderService")],
    )
    def test_pascal_case(self, value: str, expected: str) -> None:
        assert _pascal_case_filter(value) == expected

    @pytest.mark.parametrize(
        "value, expected", [("my-app", "myApp"), ("Demo", "demo"), ("", "")]
    )
    def test_camel_case(self, value: str, expected: str) -> None:
        assert _camel_case_filter(value) == expected

    @pytest.mark.parametrize(
        "value, expected", [("MyApp", "my_app"), ("my-app", "my_app"), ("HTTPServer", "http_server")]
    )
    def test_snake_case(self, value: str, expected: str) -> None:
        assert _snake_case_filter(value) == expected

    def test_slugify(self) -> None:
        assert _slugify_filter("  My Demo App! ") == "my-demo-app"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TestTemplateRenderer:
    def test_render_from_tree(self, tmp_path: Path) -> None:
        root = write_tree(
            tmp_path / "t",
            {"a/Hello.java.j2": "class {{ project_name | pascal_case }} {}\n"},
        )
        with resolve(override=root) as tree:
            rendered = TemplateRenderer(tree).render("a/Hello.java.j2", {"project_name": "my-app"})
        assert rendered == "class MyApp {}\n"

    def test_render_from_archive(self, template_zip: Path) -> None:
        with resolve(override=template_zip) as tree:
            rendered = TemplateRenderer(tree).render("pom.xml.j2", {"project_name": "demo"})
        assert rendered == "<artifactId>demo</artifactId>\n"

    def test_include_by_tree_path(self, tmp_path: Path) -> None:
        root = write_tree(
            tmp_path / "t",
            {
                "partials/header.txt": "# {{ project_name }}\n",
                "README.md.j2": "{% include 'partials/header.txt' %}body\n",
            },
        )
        with resolve(override=root) as tree:
            rendered = TemplateRenderer(tree).render("README.md.j2", {"project_name": "demo"})
        assert rendered == "# demo\nbody\n"

    def test_no_autoescape(self, tmp_path: Path) -> None:
        root = write_tree(tmp_path / "t", {"pom.xml.j2": "{{ v }}"})
        with resolve(override=root) as tree:
            rendered = TemplateRenderer(tree).render("pom.xml.j2", {"v": "<a & b>"})
        assert rendered == "<a & b>"

    def test_missing_template(self, template_dir: Path) -> None:
        with resolve(override=template_dir) as tree:
            with pytest.raises(TemplateRenderError, match="not found"):
                TemplateRenderer(tree).render("absent.j2", {})

    def test_syntax_error(self, tmp_path: Path) -> None:
        root = write_tree(tmp_path / "t", {"bad.j2": "{% if %}"})
        with resolve(override=root) as tree:
            with pytest.raises(TemplateRenderError) as excinfo:
                TemplateRenderer(tree).render("bad.j2", {})
        assert excinfo.value.template == "bad.j2"
