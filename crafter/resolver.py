"""Configuration resolution for the skeleton and foundry phases.

Each phase needs a handful of fields.  They are taken, in strict order of
precedence, from:

1. explicit values (command-line options),
2. the optional ``key=value`` config file (foundry phase only),
3. interactive prompts, only when attached to a terminal.

When prompting is not possible (or a config file was given for the foundry
phase) missing required fields are an error instead.  Blank and
whitespace-only values count as absent everywhere.
"""

from __future__ import annotations

import re
import sys
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError
from rich.markup import escape

from crafter.config import (
    DEFAULT_VERSION,
    PACKAGE_PATTERN,
    BootstrapOptions,
    FoundryInputs,
    ScaffoldConfig,
    load_properties,
)
from crafter.errors import InvalidFieldValue, MissingRequiredField
from crafter.utils import blank_to_none, console, print_warning

InteractivityProbe = Callable[[], bool]
LineReader = Callable[[str], str]
_Model = TypeVar("_Model", bound=BaseModel)

TRUE_TOKENS = frozenset({"y", "yes", "true", "1"})
FALSE_TOKENS = frozenset({"n", "no", "false", "0"})


def terminal_attached() -> bool:
    """Default :data:`InteractivityProbe`: both stdin and stdout are TTYs."""
    stdin, stdout = sys.stdin, sys.stdout
    if stdin is None or stdout is None:
        return False
    return stdin.isatty() and stdout.isatty()


# ---------------------------------------------------------------------------
# Boolean parsing
# ---------------------------------------------------------------------------


def parse_flag_token(token: str) -> bool | None:
    """Parse an interactive yes/no answer.

    Returns ``True`` or ``False`` for a recognised token (case-insensitive)
    and ``None`` for anything else, including the empty string.
    """
    normalized = token.strip().lower()
    if normalized in TRUE_TOKENS:
        return True
    if normalized in FALSE_TOKENS:
        return False
    return None


def parse_flag_value(value: str | None) -> bool:
    """Parse a config-file flag: a true token is ``True``, anything else ``False``."""
    return value is not None and value.strip().lower() in TRUE_TOKENS


# ---------------------------------------------------------------------------
# Prompting
# ---------------------------------------------------------------------------


def _console_reader(prompt: str) -> str:
    return console.input(escape(prompt))


def _console_secret_reader(prompt: str) -> str:
    return console.input(escape(prompt), password=True)


class Prompter:
    """Blocking terminal prompts.

    ``read_line`` receives the prompt text and returns the raw answer; the
    default reads from the Rich console.  Tests inject a fake.
    """

    def __init__(
        self,
        read_line: LineReader | None = None,
        read_secret: LineReader | None = None,
    ) -> None:
        self.read_line = read_line or _console_reader
        if read_secret is None:
            read_secret = _console_secret_reader if read_line is None else read_line
        self.read_secret = read_secret

    def ask_required(
        self,
        label: str,
        *,
        secret: bool = False,
        pattern: re.Pattern[str] | None = None,
    ) -> str:
        """Ask until a non-blank answer is given.

        With *pattern*, answers it does not match are rejected with a warning
        and asked again.
        """
        reader = self.read_secret if secret else self.read_line
        while True:
            answer = blank_to_none(reader(f"{label} [required]: "))
            if answer is None:
                continue
            if pattern is not None and not pattern.match(answer):
                print_warning(f"Invalid {label}: {answer}")
                continue
            return answer

    def ask_optional(
        self, label: str, default: str | None, *, secret: bool = False
    ) -> str | None:
        """Ask once; a blank answer yields *default*."""
        reader = self.read_secret if secret else self.read_line
        hint = f"optional, default {default}" if default else "optional"
        answer = blank_to_none(reader(f"{label} [{hint}]: "))
        return default if answer is None else answer

    def ask_flag(self, question: str, default: bool) -> bool:
        """Ask a yes/no question.

        A blank answer yields *default*; unrecognised answers ask again.
        """
        hint = "Y/n, default Y" if default else "y/N, default N"
        while True:
            answer = self.read_line(f"{question} ({hint}): ")
            if not answer.strip():
                return default
            parsed = parse_flag_token(answer)
            if parsed is not None:
                return parsed


# ---------------------------------------------------------------------------
# Field tables
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldSpec:
    """One resolvable configuration field."""

    name: str
    label: str
    required: bool = True
    default: str | None = None
    secret: bool = False
    pattern: re.Pattern[str] | None = None


# Prompt order follows the table order.
SKELETON_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("group_id", "Group ID"),
    FieldSpec("project_name", "Artifact ID"),
    FieldSpec("version", "Version", required=False, default=DEFAULT_VERSION),
    FieldSpec("base_package", "Base Package", pattern=PACKAGE_PATTERN),
    FieldSpec("description", "Description", required=False, default=""),
)

FOUNDRY_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("base_package", "Base Package", pattern=PACKAGE_PATTERN),
    FieldSpec("url", "Database URL"),
    FieldSpec("driver", "Driver Class"),
    FieldSpec("username", "Username"),
    FieldSpec("password", "Password", required=False, secret=True),
    FieldSpec("tables", "Table Names"),
)

OVERWRITE_QUESTION = "Overwrite existing files?"


# ---------------------------------------------------------------------------
# ConfigResolver
# ---------------------------------------------------------------------------


class ConfigResolver:
    """Builds validated phase configurations from layered sources.

    Args:
        probe: Decides whether prompting is possible.  Defaults to
            :func:`terminal_attached`.  ``BootstrapOptions.interactive``
            overrides it when set.
        prompter: Source of interactive answers.
    """

    def __init__(
        self,
        *,
        probe: InteractivityProbe | None = None,
        prompter: Prompter | None = None,
    ) -> None:
        self.probe = probe or terminal_attached
        self.prompter = prompter or Prompter()

    def is_interactive(self, options: BootstrapOptions) -> bool:
        if options.interactive is not None:
            return options.interactive
        return self.probe()

    # -- Skeleton ----------------------------------------------------------

    def resolve_skeleton(self, options: BootstrapOptions) -> ScaffoldConfig:
        """Resolve the skeleton phase configuration.

        Raises:
            MissingRequiredField: When not interactive and a required field
                (``group_id``, ``project_name``, ``base_package``) is blank.
            InvalidFieldValue: When a given value is malformed, e.g. a
                ``base_package`` that is not a dotted identifier.
        """
        values = _explicit_values(options, SKELETON_FIELDS)
        _check_formats(SKELETON_FIELDS, values)
        if self.is_interactive(options):
            values = self._prompt_missing(SKELETON_FIELDS, values)
        else:
            _require(SKELETON_FIELDS, values)
        return _build(ScaffoldConfig, SKELETON_FIELDS, **values)

    # -- Foundry -----------------------------------------------------------

    def resolve_foundry(
        self,
        options: BootstrapOptions,
        *,
        project_name: str,
        project_dir: Path,
        step_in: bool = False,
        base_package: str | None = None,
    ) -> FoundryInputs:
        """Resolve the foundry phase configuration.

        Args:
            options: Explicit values and the optional config file path.
            project_name: Name of the project the code is generated into.
            project_dir: Root directory of that project.
            step_in: ``True`` when no skeleton phase ran before.
            base_package: Package already settled by the skeleton phase.
                When given it beats every other source and is never asked
                for again.

        Raises:
            ConfigFileError: If a config file was given but cannot be loaded.
            MissingRequiredField: When strict validation applies and one of
                ``base_package``, ``url``, ``driver``, ``username`` or
                ``tables`` is blank.
            InvalidFieldValue: When a given value is malformed.
        """
        values = _explicit_values(options, FOUNDRY_FIELDS)
        if base_package is not None:
            values["base_package"] = base_package
        overwrite = options.overwrite
        file_loaded = False

        if options.config_file is not None:
            properties = load_properties(options.config_file)
            console.print(f"Load config: {Path(options.config_file).resolve()}")
            for spec in FOUNDRY_FIELDS:
                if values[spec.name] is None:
                    values[spec.name] = blank_to_none(properties.get(spec.name))
            if overwrite is None and "overwrite" in properties:
                overwrite = parse_flag_value(properties["overwrite"])
            file_loaded = True

        _check_formats(FOUNDRY_FIELDS, values)
        if file_loaded or not self.is_interactive(options):
            _require(FOUNDRY_FIELDS, values)
        else:
            values = self._prompt_missing(FOUNDRY_FIELDS, values)
            if overwrite is None:
                overwrite = self.prompter.ask_flag(OVERWRITE_QUESTION, default=False)

        return _build(
            FoundryInputs,
            FOUNDRY_FIELDS,
            project_name=project_name,
            project_dir=project_dir,
            overwrite=bool(overwrite),
            step_in=step_in,
            **values,
        )

    # -- Helpers -----------------------------------------------------------

    def _prompt_missing(
        self, specs: Iterable[FieldSpec], values: dict[str, str | None]
    ) -> dict[str, str | None]:
        """Prompt for every field still ``None``; present fields are kept."""
        resolved = dict(values)
        for spec in specs:
            if resolved[spec.name] is not None:
                continue
            if spec.required:
                resolved[spec.name] = self.prompter.ask_required(
                    spec.label, secret=spec.secret, pattern=spec.pattern
                )
            else:
                resolved[spec.name] = self.prompter.ask_optional(
                    spec.label, spec.default, secret=spec.secret
                )
        return resolved


def _explicit_values(
    options: BootstrapOptions, specs: Iterable[FieldSpec]
) -> dict[str, str | None]:
    return {spec.name: blank_to_none(getattr(options, spec.name)) for spec in specs}


def _require(specs: Iterable[FieldSpec], values: dict[str, str | None]) -> None:
    for spec in specs:
        if spec.required and values.get(spec.name) is None:
            raise MissingRequiredField(spec.name, spec.label)


def _check_formats(specs: Iterable[FieldSpec], values: dict[str, str | None]) -> None:
    for spec in specs:
        value = values.get(spec.name)
        if spec.pattern is not None and value is not None and not spec.pattern.match(value):
            raise InvalidFieldValue(
                spec.name, f"{value!r} does not match {spec.pattern.pattern}", spec.label
            )


def _build(model: type[_Model], specs: Iterable[FieldSpec], **values: object) -> _Model:
    """Construct *model*, reporting the first validation failure by field."""
    try:
        return model(**values)
    except ValidationError as exc:
        error = exc.errors()[0]
        field = str(error["loc"][0]) if error["loc"] else model.__name__
        labels = {spec.name: spec.label for spec in specs}
        raise InvalidFieldValue(field, error["msg"], labels.get(field)) from exc
