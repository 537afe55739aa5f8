"""Template root resolution.

A template root is identified by a short logical name (``"archetype"``) and
ships as package data next to this module.  Depending on how crafter was
installed that data is either a plain directory on disk or an entry inside a
zip archive (zipapp, zipimport, or an explicit ``--templates pack.zip``).
This module hides the difference: callers get a :class:`TemplateTree` and
never look at where it came from.

Quick usage::

    from crafter.scaffolder.resources import resolve

    with resolve("archetype") as tree:
        for entry in tree.walk():
            ...
"""

from __future__ import annotations

import zipfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path

from crafter.errors import TemplateRootNotFound, UnsupportedOrigin

from .paths import EntryKind, classify_entry

ARCHETYPE_ROOT = "archetype"

_DEFAULT_PACKAGE = "crafter.scaffolder"

# Separates the archive path from the directory inside it, as in
# ``templates.zip!/archetype``.
ARCHIVE_SEPARATOR = "!/"


# ---------------------------------------------------------------------------
# Origins
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FilesystemOrigin:
    """Template root stored as a plain directory."""

    path: Path

    def describe(self) -> str:
        return str(self.path)


@dataclass(frozen=True)
class ArchiveOrigin:
    """Template root stored as a directory inside a zip archive."""

    archive: Path
    inner: str

    def describe(self) -> str:
        return f"{self.archive}{ARCHIVE_SEPARATOR}{self.inner}"


TemplateOrigin = FilesystemOrigin | ArchiveOrigin


@dataclass(frozen=True)
class TemplateEntry:
    """One node of the template tree, relative to the tree root."""

    relative_path: str
    kind: EntryKind

    @property
    def name(self) -> str:
        return self.relative_path.rsplit("/", 1)[-1]


# ---------------------------------------------------------------------------
# TemplateTree
# ---------------------------------------------------------------------------


class TemplateTree:
    """Enumerable, randomly navigable view over a template root.

    Works on any :class:`~importlib.resources.abc.Traversable`, which both
    :class:`pathlib.Path` and :class:`zipfile.Path` implement.
    """

    def __init__(self, root: Traversable, origin: TemplateOrigin) -> None:
        self.root = root
        self.origin = origin

    def walk(self) -> Iterator[TemplateEntry]:
        """Yield every node depth-first, pre-order, siblings sorted by name.

        The root itself comes first as a directory entry with an empty
        relative path, so a directory is always yielded before anything
        beneath it.
        """
        yield TemplateEntry("", EntryKind.DIRECTORY)
        yield from self._walk(self.root, "")

    def _walk(self, node: Traversable, prefix: str) -> Iterator[TemplateEntry]:
        for child in sorted(node.iterdir(), key=lambda item: item.name):
            relative = f"{prefix}{child.name}"
            is_dir = child.is_dir()
            yield TemplateEntry(relative, classify_entry(child.name, is_dir=is_dir))
            if is_dir:
                yield from self._walk(child, f"{relative}/")

    def node(self, relative: str) -> Traversable:
        """Return the traversable for a ``/``-separated relative path."""
        parts = [part for part in relative.split("/") if part]
        if not parts:
            return self.root
        return self.root.joinpath(*parts)

    def read_bytes(self, relative: str) -> bytes:
        return self.node(relative).read_bytes()

    def read_text(self, relative: str, encoding: str = "utf-8") -> str:
        return self.node(relative).read_text(encoding=encoding)

    def exists(self, relative: str) -> bool:
        node = self.node(relative)
        return node.is_file() or node.is_dir()


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def _origin_from_override(root_id: str, override: str | Path) -> TemplateOrigin:
    text = str(override)
    if ARCHIVE_SEPARATOR in text:
        archive_text, inner = text.split(ARCHIVE_SEPARATOR, 1)
        archive = Path(archive_text).expanduser()
        if not archive.is_file():
            raise TemplateRootNotFound(root_id, archive)
        if not zipfile.is_zipfile(archive):
            raise UnsupportedOrigin(f"{archive} is not a zip archive")
        return ArchiveOrigin(archive, inner.strip("/"))

    path = Path(text).expanduser()
    if path.is_dir():
        return FilesystemOrigin(path)
    if path.is_file():
        if zipfile.is_zipfile(path):
            return ArchiveOrigin(path, root_id)
        raise UnsupportedOrigin(f"{path} is neither a directory nor a zip archive")
    raise TemplateRootNotFound(root_id, path)


def locate(
    root_id: str = ARCHETYPE_ROOT,
    *,
    override: str | Path | None = None,
    package: str = _DEFAULT_PACKAGE,
) -> TemplateOrigin:
    """Resolve *root_id* to a concrete origin.

    Args:
        root_id: Logical name of the template root inside *package*.
        override: Optional directory, zip archive, or
            ``archive.zip!/inner/dir`` to use instead of the packaged root.
        package: Package whose data directory holds the template root.

    Returns:
        A :class:`FilesystemOrigin` or :class:`ArchiveOrigin`.

    Raises:
        TemplateRootNotFound: If nothing exists under the identifier.
        UnsupportedOrigin: If something exists but is neither a directory nor
            a directory inside a zip archive.
    """
    if override is not None:
        return _origin_from_override(root_id, override)

    try:
        candidate = resources.files(package).joinpath(root_id)
    except ModuleNotFoundError as exc:
        raise TemplateRootNotFound(root_id, package) from exc

    if isinstance(candidate, Path):
        if candidate.is_dir():
            return FilesystemOrigin(candidate)
        if candidate.exists():
            raise UnsupportedOrigin(f"{candidate} is not a directory")
        raise TemplateRootNotFound(root_id, candidate.parent)

    if isinstance(candidate, zipfile.Path):
        if not candidate.is_dir():
            raise TemplateRootNotFound(root_id, candidate.root.filename)
        return ArchiveOrigin(Path(candidate.root.filename), candidate.at.rstrip("/"))

    raise UnsupportedOrigin(f"{type(candidate).__name__} for {package}/{root_id}")


@contextmanager
def open_root(origin: TemplateOrigin) -> Iterator[TemplateTree]:
    """Open *origin* for the duration of a ``with`` block.

    Archive origins are mounted by opening the zip file; it is closed again on
    every exit path, including exceptions raised while the tree is walked.
    """
    if isinstance(origin, FilesystemOrigin):
        if not origin.path.is_dir():
            raise TemplateRootNotFound(origin.path.name, origin.path)
        yield TemplateTree(origin.path, origin)
        return

    if isinstance(origin, ArchiveOrigin):
        try:
            archive = zipfile.ZipFile(origin.archive)
        except (OSError, zipfile.BadZipFile) as exc:
            raise UnsupportedOrigin(f"cannot open archive {origin.archive}: {exc}") from exc
        try:
            inner = origin.inner.strip("/")
            root = zipfile.Path(archive, at=f"{inner}/" if inner else "")
            if inner and not root.exists():
                raise TemplateRootNotFound(inner or "/", origin.archive)
            yield TemplateTree(root, origin)
        finally:
            archive.close()
        return

    raise UnsupportedOrigin(repr(origin))


@contextmanager
def resolve(
    root_id: str = ARCHETYPE_ROOT,
    *,
    override: str | Path | None = None,
    package: str = _DEFAULT_PACKAGE,
) -> Iterator[TemplateTree]:
    """:func:`locate` and :func:`open_root` in one step."""
    origin = locate(root_id, override=override, package=package)
    with open_root(origin) as tree:
        yield tree
