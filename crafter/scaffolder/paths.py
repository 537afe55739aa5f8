"""Template path conventions: entry classification and output path rewriting.

Everything here is pure string manipulation so it can be tested without a
filesystem.  Template paths are always relative and ``/``-separated,
regardless of the host platform or of whether the template tree lives in a
directory or inside a zip archive.
"""

from __future__ import annotations

from enum import Enum

from crafter.config import ScaffoldConfig

# Literal project name baked into the template tree.
TEMPLATE_TOKEN = "template-example"

# A file with this name only exists so that its directory is kept.
SKIP_MARKER = ".keep"

# Files ending in this suffix are rendered; the suffix is dropped on output.
TEMPLATE_SUFFIX = ".j2"

# Language source roots.  The template tree encodes one package level right
# below each of them; it is expanded to the full base package.
SOURCE_MARKERS: tuple[str, ...] = ("src/main/java", "src/test/java")


class EntryKind(str, Enum):
    """How the scaffold generator treats one node of the template tree."""

    DIRECTORY = "directory"
    SKIP = "skip"
    TEMPLATE = "template"
    PLAIN = "plain"


def classify_entry(name: str, *, is_dir: bool) -> EntryKind:
    """Classify a template tree node by its kind and file name."""
    if is_dir:
        return EntryKind.DIRECTORY
    if name == SKIP_MARKER:
        return EntryKind.SKIP
    if name.endswith(TEMPLATE_SUFFIX):
        return EntryKind.TEMPLATE
    return EntryKind.PLAIN


def strip_template_suffix(path: str) -> str:
    """Drop a trailing ``.j2`` from *path*; other paths are returned unchanged."""
    if path.endswith(TEMPLATE_SUFFIX):
        return path[: -len(TEMPLATE_SUFFIX)]
    return path


def _find_segments(segments: list[str], needle: list[str]) -> int | None:
    """Return the index where *needle* starts inside *segments*, or ``None``."""
    width = len(needle)
    for start in range(len(segments) - width + 1):
        if segments[start:start + width] == needle:
            return start
    return None


def rewrite_path(relative: str, config: ScaffoldConfig, *, is_dir: bool = False) -> str:
    """Map a template-relative path to its output-relative path.

    Two substitutions are applied, in order:

    1. Every occurrence of :data:`TEMPLATE_TOKEN` becomes
       ``config.project_name``.
    2. If the result contains one of :data:`SOURCE_MARKERS` as whole
       segments, the single segment right after the marker is replaced by
       the base package expanded into directories.  Everything after that
       segment is kept.  The segment is only replaced when it names a
       directory; a plain file sitting directly in the source root stays
       where it is.

    Examples (``project_name="demo"``, ``base_package="x.y"``)::

        "template-example.iml"                        -> "demo.iml"
        "src/main/java/template-example"              -> "src/main/java/x/y"
        "src/main/java/template-example/App.java.j2"  -> "src/main/java/x/y/App.java.j2"
        "src/main/java/Main.java"                     -> "src/main/java/Main.java"
    """
    rewritten = relative.replace(TEMPLATE_TOKEN, config.project_name)
    segments = [segment for segment in rewritten.split("/") if segment]

    for marker in SOURCE_MARKERS:
        marker_segments = marker.split("/")
        start = _find_segments(segments, marker_segments)
        if start is None:
            continue
        target = start + len(marker_segments)
        # A file directly under the source root is not moved into the
        # package directory; only a directory segment is expanded.
        names_directory = is_dir or target < len(segments) - 1
        if target < len(segments) and names_directory:
            segments[target:target + 1] = config.base_package.split(".")
        break

    return "/".join(segments)
