"""Shared pytest fixtures for the crafter test suite.

Provides reusable fixtures for:
- Resolved skeleton configurations
- Small template trees on disk and inside zip archives
- Scripted prompt answers
- Fake foundry generators
"""

from __future__ import annotations

import zipfile
from collections.abc import Callable, Iterable
from pathlib import Path

import pytest

from crafter.config import BootstrapOptions, FoundryInputs, ScaffoldConfig
from crafter.resolver import ConfigResolver, Prompter


# ---------------------------------------------------------------------------
# Template trees
# ---------------------------------------------------------------------------

# The smallest tree exercising every entry kind.
E2E_TREE: dict[str, str | None] = {
    "pom.xml.j2": "<artifactId>{{ project_name }}</artifactId>\n",
    "src/main/java/template-example/App.java.j2": "package {{ base_package }};\n",
    "src/main/resources/.keep": "",
}


def write_tree(root: Path, files: dict[str, str | bytes | None]) -> Path:
    """Create *files* below *root*.  A ``None`` value creates a directory."""
    root.mkdir(parents=True, exist_ok=True)
    for relative, content in files.items():
        path = root.joinpath(*relative.split("/"))
        if content is None:
            path.mkdir(parents=True, exist_ok=True)
            continue
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


def write_zip(archive: Path, files: dict[str, str | bytes | None], prefix: str = "") -> Path:
    """Create a zip archive holding *files* below *prefix*.

    Only file entries are written; directories are implied, as in archives
    produced by most packaging tools.
    """
    archive.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(archive, "w") as zf:
        for relative, content in files.items():
            if content is None:
                continue
            name = f"{prefix}/{relative}" if prefix else relative
            zf.writestr(name, content)
    return archive


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """The end-to-end template tree as a plain directory."""
    return write_tree(tmp_path / "templates", E2E_TREE)


@pytest.fixture
def template_zip(tmp_path: Path) -> Path:
    """The end-to-end template tree inside ``templates.zip`` under ``archetype/``."""
    return write_zip(tmp_path / "templates.zip", E2E_TREE, prefix="archetype")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@pytest.fixture
def scaffold_config() -> ScaffoldConfig:
    """Skeleton configuration used by the end-to-end examples."""
    return ScaffoldConfig(
        group_id="com.example",
        project_name="demo",
        base_package="x.y",
    )


@pytest.fixture
def batch_options(tmp_path: Path) -> BootstrapOptions:
    """Fully specified, non-interactive options for both phases."""
    return BootstrapOptions(
        group_id="com.example",
        project_name="demo",
        base_package="com.example.demo",
        url="jdbc:h2:mem:demo",
        driver="org.h2.Driver",
        username="sa",
        tables="users,orders",
        output_dir=tmp_path / "out",
        interactive=False,
    )


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


class ScriptedInput:
    """Line reader returning canned answers and recording every prompt."""

    def __init__(self, answers: Iterable[str]) -> None:
        self.answers = list(answers)
        self.prompts: list[str] = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.answers:
            raise AssertionError(f"unexpected prompt: {prompt!r}")
        return self.answers.pop(0)


@pytest.fixture
def scripted() -> Callable[..., ScriptedInput]:
    """Factory for :class:`ScriptedInput` readers."""
    return lambda *answers: ScriptedInput(answers)


def interactive_resolver(reader: ScriptedInput) -> ConfigResolver:
    return ConfigResolver(probe=lambda: True, prompter=Prompter(read_line=reader))


def batch_resolver() -> ConfigResolver:
    def _no_prompts(prompt: str) -> str:
        raise AssertionError(f"prompted in batch mode: {prompt!r}")

    return ConfigResolver(probe=lambda: False, prompter=Prompter(read_line=_no_prompts))


# ---------------------------------------------------------------------------
# Foundry
# ---------------------------------------------------------------------------


class RecordingFoundry:
    """Foundry factory that remembers the inputs it was built with."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.inputs: list[FoundryInputs] = []
        self.generated = 0

    def __call__(self, inputs: FoundryInputs) -> RecordingFoundry:
        self.inputs.append(inputs)
        return self

    def generate(self) -> None:
        if self.error is not None:
            raise self.error
        self.generated += 1


@pytest.fixture
def recording_foundry() -> RecordingFoundry:
    return RecordingFoundry()
