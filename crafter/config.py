"""crafter configuration models.

Typed configuration for both bootstrap phases.  All settings use Pydantic v2
models so they are validated at construction time: a ``ScaffoldConfig`` or
``FoundryInputs`` that exists is complete and immutable for the rest of the
run.  ``BootstrapOptions`` carries the raw, possibly incomplete values coming
from the command line before the resolver fills the gaps.
"""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from crafter.errors import ConfigFileError
from crafter.utils import blank_to_none

DEFAULT_VERSION = "1.0.0"

PACKAGE_PATTERN = re.compile(r"^[A-Za-z_]\w*(\.[A-Za-z_]\w*)*$")


class Phase(str, Enum):
    """The two independent generation stages."""

    SKELETON = "skeleton"
    FOUNDRY = "foundry"


# ---------------------------------------------------------------------------
# Resolved configuration
# ---------------------------------------------------------------------------


def _require_text(value: str | None, field: str) -> str:
    cleaned = blank_to_none(value)
    if cleaned is None:
        raise ValueError(f"{field} must not be blank")
    return cleaned


def _require_package(value: str | None) -> str:
    package = _require_text(value, "base_package")
    if not PACKAGE_PATTERN.match(package):
        raise ValueError(f"base_package is not a dotted identifier: {package!r}")
    return package


class ScaffoldConfig(BaseModel):
    """Data model for the skeleton phase.

    Fed both to the path rewriter (``project_name``, ``base_package``) and to
    every rendered template (see :meth:`context`).
    """

    model_config = ConfigDict(frozen=True)

    group_id: str = Field(..., description="Organisation identifier, e.g. reverse-DNS")
    project_name: str = Field(..., description="Output project directory name")
    version: str = Field(default=DEFAULT_VERSION, description="Project version")
    base_package: str = Field(..., description="Dotted base namespace, e.g. com.example.demo")
    description: str = Field(default="", description="Free-form project description")

    @field_validator("group_id", mode="before")
    @classmethod
    def _not_blank(cls, value: Any, info: ValidationInfo) -> str:
        return _require_text(value, info.field_name)

    @field_validator("project_name", mode="before")
    @classmethod
    def _directory_name(cls, value: Any) -> str:
        name = _require_text(value, "project_name")
        if "/" in name or "\\" in name or name in {".", ".."}:
            raise ValueError(f"project_name must be a single directory name: {name!r}")
        return name

    @field_validator("base_package", mode="before")
    @classmethod
    def _valid_package(cls, value: Any) -> str:
        return _require_package(value)

    @field_validator("version", mode="before")
    @classmethod
    def _default_version(cls, value: Any) -> str:
        return blank_to_none(value) or DEFAULT_VERSION

    @field_validator("description", mode="before")
    @classmethod
    def _default_description(cls, value: Any) -> str:
        return blank_to_none(value) or ""

    @property
    def package_path(self) -> str:
        """``base_package`` with dots turned into ``/`` separators."""
        return self.base_package.replace(".", "/")

    def context(self) -> dict[str, str]:
        """Return the template data model."""
        return {
            "group_id": self.group_id,
            "project_name": self.project_name,
            "version": self.version,
            "base_package": self.base_package,
            "package_path": self.package_path,
            "description": self.description,
        }


class FoundryInputs(BaseModel):
    """Resolved configuration handed to the external foundry generator.

    The table selector is kept as the raw comma-delimited string; splitting it
    is the generator's job.
    """

    model_config = ConfigDict(frozen=True)

    project_name: str
    project_dir: Path
    base_package: str
    url: str
    driver: str
    username: str
    password: str | None = None
    tables: str
    overwrite: bool = False
    step_in: bool = Field(
        default=False,
        description="True when foundry runs inside an existing project without a skeleton phase",
    )

    @field_validator("project_name", "url", "driver", "username", "tables", mode="before")
    @classmethod
    def _not_blank(cls, value: Any, info: ValidationInfo) -> str:
        return _require_text(value, info.field_name)

    @field_validator("base_package", mode="before")
    @classmethod
    def _valid_package(cls, value: Any) -> str:
        return _require_package(value)

    @field_validator("password", mode="before")
    @classmethod
    def _optional_password(cls, value: Any) -> str | None:
        return blank_to_none(value)


# ---------------------------------------------------------------------------
# Raw options
# ---------------------------------------------------------------------------


class BootstrapOptions(BaseModel):
    """Everything the caller may pass explicitly; unset fields stay ``None``."""

    phase: Phase | None = None

    group_id: str | None = None
    project_name: str | None = None
    version: str | None = None
    base_package: str | None = None
    description: str | None = None

    url: str | None = None
    driver: str | None = None
    username: str | None = None
    password: str | None = None
    tables: str | None = None
    overwrite: bool | None = None

    config_file: Path | None = None
    output_dir: Path = Field(default_factory=Path.cwd)
    templates: str | None = Field(
        default=None,
        description="Template directory, zip archive or 'archive.zip!/inner' override",
    )
    interactive: bool | None = Field(
        default=None,
        description="Force (True) or forbid (False) prompting; None probes the terminal",
    )
    verbose: bool = False

    @property
    def run_skeleton(self) -> bool:
        return self.phase is not Phase.FOUNDRY

    @property
    def run_foundry(self) -> bool:
        return self.phase is not Phase.SKELETON


# ---------------------------------------------------------------------------
# Config file
# ---------------------------------------------------------------------------

# Recognised config-file keys -> FoundryInputs / BootstrapOptions field.
CONFIG_FILE_KEYS: dict[str, str] = {
    "archetype.package": "base_package",
    "database.url": "url",
    "database.driver": "driver",
    "database.username": "username",
    "database.password": "password",
    "database.tables": "tables",
    "tables.overwrite": "overwrite",
}


def parse_properties(text: str) -> dict[str, str]:
    """Parse flat ``key=value`` text.

    Blank lines and lines starting with ``#`` or ``!`` are ignored.  The first
    ``=`` (or ``:``) separates key from value; both are stripped.  Lines with
    no separator map the whole line to an empty value.  Later keys win.
    """
    result: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith(("#", "!")):
            continue
        match = re.match(r"^([^=:]*?)\s*[=:]\s*(.*)$", line)
        if match:
            key, value = match.group(1), match.group(2)
        else:
            key, value = line, ""
        if key:
            result[key] = value.strip()
    return result


def load_properties(path: str | Path) -> dict[str, str]:
    """Load a config file, keeping only the recognised keys.

    Args:
        path: The file to read.

    Returns:
        Mapping of resolver field name -> raw string value.

    Raises:
        ConfigFileError: If *path* is missing, not a regular file, or cannot
            be read as UTF-8 text.
    """
    file_path = Path(path)
    if not file_path.exists():
        raise ConfigFileError(file_path, "file does not exist")
    if not file_path.is_file():
        raise ConfigFileError(file_path, "not a regular file")
    try:
        text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigFileError(file_path, str(exc)) from exc

    properties = parse_properties(text)
    return {
        field: properties[key]
        for key, field in CONFIG_FILE_KEYS.items()
        if key in properties
    }
