"""Seam to the external foundry code generator.

crafter does not generate database-driven code itself.  A foundry generator
is any callable that accepts :class:`~crafter.config.FoundryInputs` and
returns an object with a ``generate()`` method.  Installed generators are
discovered through the ``crafter.foundry`` entry point group::

    [project.entry-points."crafter.foundry"]
    mybatis = "my_foundry.generator:MyBatisGenerator"

This module also locates the project descriptor (``pom.xml``) a foundry-only
run must start from.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Callable
from dataclasses import dataclass
from importlib.metadata import entry_points
from pathlib import Path
from typing import Protocol

from crafter.config import FoundryInputs
from crafter.errors import FoundryUnavailable, NoProjectDescriptor

ENTRY_POINT_GROUP = "crafter.foundry"

PROJECT_DESCRIPTOR = "pom.xml"


class FoundryGenerator(Protocol):
    """What the orchestrator needs from a foundry generator."""

    def generate(self) -> None: ...


FoundryFactory = Callable[[FoundryInputs], FoundryGenerator]


# ---------------------------------------------------------------------------
# Generator discovery
# ---------------------------------------------------------------------------


def available_generators() -> list[str]:
    """Return the names of all installed foundry generators, sorted."""
    return sorted(ep.name for ep in entry_points(group=ENTRY_POINT_GROUP))


def load_foundry_factory(name: str | None = None) -> FoundryFactory:
    """Load a foundry generator factory from the entry point group.

    Args:
        name: Entry point name.  May be omitted when exactly one generator
            is installed.

    Raises:
        FoundryUnavailable: If no generator matches, or *name* is omitted
            while several are installed.
    """
    candidates = {ep.name: ep for ep in entry_points(group=ENTRY_POINT_GROUP)}
    if not candidates:
        raise FoundryUnavailable(
            f"No foundry generator installed (entry point group '{ENTRY_POINT_GROUP}')"
        )
    if name is None:
        if len(candidates) > 1:
            raise FoundryUnavailable(
                "Several foundry generators installed, choose one with --foundry: "
                + ", ".join(sorted(candidates))
            )
        (entry_point,) = candidates.values()
    else:
        try:
            entry_point = candidates[name]
        except KeyError:
            raise FoundryUnavailable(
                f"Unknown foundry generator '{name}'. Installed: {', '.join(sorted(candidates))}"
            ) from None
    return entry_point.load()


# ---------------------------------------------------------------------------
# Project descriptor
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProjectDescriptor:
    """The build descriptor of an existing project."""

    path: Path
    artifact_id: str

    @property
    def project_dir(self) -> Path:
        return self.path.parent


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def read_project_descriptor(directory: str | Path) -> ProjectDescriptor:
    """Read ``pom.xml`` in *directory* and return its ``artifactId``.

    Raises:
        NoProjectDescriptor: If the file is missing, not valid XML, or has no
            top-level ``artifactId``.
    """
    path = Path(directory) / PROJECT_DESCRIPTOR
    if not path.is_file():
        raise NoProjectDescriptor(path, f"No {PROJECT_DESCRIPTOR} found")
    try:
        root = ET.parse(path).getroot()
    except (ET.ParseError, OSError) as exc:
        raise NoProjectDescriptor(path, f"Unreadable {PROJECT_DESCRIPTOR} ({exc})") from exc

    for child in root:
        if _local_name(child.tag) == "artifactId" and child.text and child.text.strip():
            return ProjectDescriptor(path, child.text.strip())
    raise NoProjectDescriptor(path, f"{PROJECT_DESCRIPTOR} declares no artifactId")
