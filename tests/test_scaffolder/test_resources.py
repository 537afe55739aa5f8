"""Tests for template root resolution on disk and inside zip archives."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from conftest import E2E_TREE, write_tree, write_zip
from crafter.errors import TemplateRootNotFound, UnsupportedOrigin
from crafter.scaffolder.paths import EntryKind
from crafter.scaffolder.resources import (
    ArchiveOrigin,
    FilesystemOrigin,
    locate,
    open_root,
    resolve,
)

pytestmark = pytest.mark.unit


EXPECTED_WALK = [
    ("", EntryKind.DIRECTORY),
    ("pom.xml.j2", EntryKind.TEMPLATE),
    ("src", EntryKind.DIRECTORY),
    ("src/main", EntryKind.DIRECTORY),
    ("src/main/java", EntryKind.DIRECTORY),
    ("src/main/java/template-example", EntryKind.DIRECTORY),
    ("src/main/java/template-example/App.java.j2", EntryKind.TEMPLATE),
    ("src/main/resources", EntryKind.DIRECTORY),
    ("src/main/resources/.keep", EntryKind.SKIP),
]


# ---------------------------------------------------------------------------
# locate
# ---------------------------------------------------------------------------


class TestLocate:
    def test_bundled_archetype(self) -> None:
        origin = locate()
        assert isinstance(origin, FilesystemOrigin)
        assert origin.path.name == "archetype"
        assert (origin.path / "pom.xml.j2").is_file()

    def test_unknown_root_id(self) -> None:
        with pytest.raises(TemplateRootNotFound) as excinfo:
            locate("no-such-root")
        assert excinfo.value.root_id == "no-such-root"

    def test_root_id_naming_a_file(self) -> None:
        with pytest.raises(UnsupportedOrigin):
            locate("generator.py")

    def test_unknown_package(self) -> None:
        with pytest.raises(TemplateRootNotFound):
            locate(package="crafter_no_such_package")

    def test_directory_override(self, template_dir: Path) -> None:
        assert locate(override=template_dir) == FilesystemOrigin(template_dir)

    def test_zip_override_uses_root_id(self, template_zip: Path) -> None:
        assert locate(override=template_zip) == ArchiveOrigin(template_zip, "archetype")

    def test_zip_override_with_inner_path(self, template_zip: Path) -> None:
        origin = locate(override=f"{template_zip}!/archetype/")
        assert origin == ArchiveOrigin(template_zip, "archetype")
        assert origin.describe() == f"{template_zip}!/archetype"

    def test_missing_override(self, tmp_path: Path) -> None:
        with pytest.raises(TemplateRootNotFound):
            locate(override=tmp_path / "absent")

    def test_missing_archive_override(self, tmp_path: Path) -> None:
        with pytest.raises(TemplateRootNotFound):
            locate(override=f"{tmp_path / 'absent.zip'}!/archetype")

    def test_plain_file_override(self, tmp_path: Path) -> None:
        path = tmp_path / "templates.txt"
        path.write_text("not a tree", encoding="utf-8")
        with pytest.raises(UnsupportedOrigin):
            locate(override=path)

    def test_package_inside_zip(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        archive = tmp_path / "bundle.zip"
        files = {"__init__.py": ""} | {f"archetype/{name}": body for name, body in E2E_TREE.items()}
        write_zip(archive, files, prefix="zipped_templates")
        monkeypatch.syspath_prepend(str(archive))

        origin = locate(package="zipped_templates")
        assert isinstance(origin, ArchiveOrigin)
        assert origin.archive == archive
        assert origin.inner == "zipped_templates/archetype"


# ---------------------------------------------------------------------------
# open_root / walk
# ---------------------------------------------------------------------------


class TestTemplateTree:
    def test_filesystem_walk(self, template_dir: Path) -> None:
        with resolve(override=template_dir) as tree:
            walked = [(entry.relative_path, entry.kind) for entry in tree.walk()]
        assert walked == EXPECTED_WALK

    def test_archive_walk_matches_filesystem(self, template_zip: Path) -> None:
        with resolve(override=template_zip) as tree:
            walked = [(entry.relative_path, entry.kind) for entry in tree.walk()]
        assert walked == EXPECTED_WALK

    def test_directories_precede_their_contents(self, template_dir: Path) -> None:
        with resolve(override=template_dir) as tree:
            paths = [entry.relative_path for entry in tree.walk()]
        for index, path in enumerate(paths):
            parent = path.rsplit("/", 1)[0] if "/" in path else ""
            if path:
                assert paths.index(parent) < index

    def test_empty_directory_is_walked(self, tmp_path: Path) -> None:
        root = write_tree(tmp_path / "t", {"empty": None})
        with resolve(override=root) as tree:
            assert [entry.relative_path for entry in tree.walk()] == ["", "empty"]

    def test_read_from_archive(self, template_zip: Path) -> None:
        with resolve(override=template_zip) as tree:
            assert tree.read_text("pom.xml.j2") == E2E_TREE["pom.xml.j2"]
            assert tree.exists("src/main/java")
            assert not tree.exists("missing.txt")

    def test_missing_inner_directory(self, template_zip: Path) -> None:
        with pytest.raises(TemplateRootNotFound):
            with resolve(override=f"{template_zip}!/other"):
                pass

    def test_archive_closed_on_success(self, template_zip: Path) -> None:
        with resolve(override=template_zip) as tree:
            archive = tree.root.root
        assert archive.fp is None

    def test_archive_closed_when_walk_fails(self, template_zip: Path) -> None:
        with pytest.raises(RuntimeError):
            with resolve(override=template_zip) as tree:
                archive = tree.root.root
                raise RuntimeError("boom")
        assert archive.fp is None

    def test_corrupt_archive(self, tmp_path: Path) -> None:
        origin = ArchiveOrigin(tmp_path / "broken.zip", "archetype")
        origin.archive.write_bytes(b"not a zip")
        with pytest.raises(UnsupportedOrigin):
            with open_root(origin):
                pass

    def test_missing_directory_origin(self, tmp_path: Path) -> None:
        with pytest.raises(TemplateRootNotFound):
            with open_root(FilesystemOrigin(tmp_path / "gone")):
                pass

    def test_unsupported_traversable(self) -> None:
        class Opaque:
            pass

        with patch("crafter.scaffolder.resources.resources.files") as mock_files:
            mock_files.return_value.joinpath.return_value = Opaque()
            with pytest.raises(UnsupportedOrigin, match="Opaque"):
                locate()
