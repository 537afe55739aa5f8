"""Exception hierarchy for the crafter bootstrap tool.

Every error raised on purpose derives from :class:`CrafterError` so the CLI
can report it as a single line and exit non-zero.  None of them are retried.
"""

from __future__ import annotations

from pathlib import Path


class CrafterError(Exception):
    """Base class for all expected crafter failures."""


# ---------------------------------------------------------------------------
# Template root resolution
# ---------------------------------------------------------------------------


class TemplateRootNotFound(CrafterError):
    """Raised when the template root identifier resolves to nothing."""

    def __init__(self, root_id: str, location: str | Path | None = None) -> None:
        self.root_id = root_id
        self.location = location
        where = f" (looked in {location})" if location else ""
        super().__init__(f"Template root not found: {root_id}{where}")


class UnsupportedOrigin(CrafterError):
    """Raised when a template root exists but cannot be walked."""

    def __init__(self, description: str) -> None:
        self.description = description
        super().__init__(f"Unsupported template origin: {description}")


# ---------------------------------------------------------------------------
# Scaffold generation
# ---------------------------------------------------------------------------


class ScaffoldIOError(CrafterError):
    """Raised when writing the scaffold fails at *path*."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        super().__init__(f"Cannot write {self.path}: {reason}")


class TemplateRenderError(CrafterError):
    """Raised when a template file fails to render."""

    def __init__(self, template: str, reason: str) -> None:
        self.template = template
        super().__init__(f"Failed to render template {template}: {reason}")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class MissingRequiredField(CrafterError):
    """Raised when a required configuration field is still blank."""

    def __init__(self, field: str, label: str | None = None) -> None:
        self.field = field
        self.label = label or field
        super().__init__(
            f"The {self.label} ({field}) has not been configured. "
            "Please check the configuration file or command-line parameters"
        )


class InvalidFieldValue(CrafterError):
    """Raised when a configured field is present but malformed."""

    def __init__(self, field: str, reason: str, label: str | None = None) -> None:
        self.field = field
        self.label = label or field
        self.reason = reason
        super().__init__(f"The {self.label} ({field}) is invalid: {reason}")


class ConfigFileError(CrafterError):
    """Raised when an explicitly configured config file cannot be loaded."""

    def __init__(self, path: str | Path, cause: str) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Cannot load config file {self.path}: {cause}")


class NoProjectDescriptor(CrafterError):
    """Raised when the foundry phase runs outside an existing project."""

    def __init__(self, path: str | Path, reason: str | None = None) -> None:
        self.path = Path(path)
        detail = reason or "no valid project descriptor found"
        super().__init__(
            f"{detail} at {self.path}. Please run from the project's root directory."
        )


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


class FoundryUnavailable(CrafterError):
    """Raised when no foundry code generator is installed or selectable."""


class BootstrapError(CrafterError):
    """Top-level failure wrapping whatever made a phase fail."""

    def __init__(self, message: str, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"{message}: {cause}")
