"""Skeleton generation: walk a template tree and materialize the project.

Takes a ``ScaffoldConfig`` and a template root and generates the project
directory under ``<output_dir>/<project_name>``.  Every directory of the
template tree is recreated (after path rewriting), ``.keep`` markers are
dropped, ``.j2`` templates are rendered and everything else is copied byte
for byte.  Existing files are overwritten.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from crafter.config import ScaffoldConfig
from crafter.errors import ScaffoldIOError
from crafter.utils import print_file_action

from .paths import EntryKind, rewrite_path, strip_template_suffix
from .resources import ARCHETYPE_ROOT, TemplateTree, resolve
from .templates import TemplateRenderer


@dataclass
class ScaffoldResult:
    """What a generation run wrote, for reporting."""

    project_root: Path
    directories: list[Path] = field(default_factory=list)
    rendered: list[Path] = field(default_factory=list)
    copied: list[Path] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def file_count(self) -> int:
        return len(self.rendered) + len(self.copied)


class SkeletonGenerator:
    """Generates a project skeleton from a template tree.

    The template tree is resolved once per :meth:`generate` call; archive
    based roots stay mounted only while the tree is being walked.
    """

    def __init__(
        self,
        config: ScaffoldConfig,
        *,
        templates: str | Path | None = None,
        root_id: str = ARCHETYPE_ROOT,
        verbose: bool = False,
    ) -> None:
        self.config = config
        self.templates = templates
        self.root_id = root_id
        self.verbose = verbose

    # -- Public API --------------------------------------------------------

    def generate(self, output_dir: str | Path) -> ScaffoldResult:
        """Generate the project skeleton.

        Args:
            output_dir: Parent directory where the project folder will be
                created.  A subdirectory named after the project is created
                inside it.

        Returns:
            A :class:`ScaffoldResult` whose ``project_root`` is the generated
            project directory.
        """
        project_root = Path(output_dir) / self.config.project_name
        with resolve(self.root_id, override=self.templates) as tree:
            return self.walk(tree, project_root)

    def walk(self, tree: TemplateTree, project_root: Path) -> ScaffoldResult:
        """Single pre-order pass over *tree*, writing below *project_root*.

        Raises:
            ScaffoldIOError: On the first filesystem failure.  Whatever was
                written before stays on disk.
            TemplateRenderError: If a template fails to render.
        """
        renderer = TemplateRenderer(tree)
        context = self.config.context()
        result = ScaffoldResult(project_root)

        for entry in tree.walk():
            if entry.kind is EntryKind.SKIP:
                result.skipped.append(entry.relative_path)
                continue

            is_dir = entry.kind is EntryKind.DIRECTORY
            relative = rewrite_path(entry.relative_path, self.config, is_dir=is_dir)
            if entry.kind is EntryKind.TEMPLATE:
                relative = strip_template_suffix(relative)
            target = self._target(project_root, relative)

            if is_dir:
                _make_dir(target)
                result.directories.append(target)
                action = "mkdir"
            elif entry.kind is EntryKind.TEMPLATE:
                content = renderer.render(entry.relative_path, context)
                _write_bytes(target, content.encode("utf-8"))
                result.rendered.append(target)
                action = "render"
            else:
                _write_bytes(target, _read_source(tree, entry.relative_path))
                result.copied.append(target)
                action = "copy"

            if self.verbose:
                print_file_action(action, target)

        return result

    # -- Helpers -----------------------------------------------------------

    @staticmethod
    def _target(project_root: Path, relative: str) -> Path:
        target = project_root.joinpath(*relative.split("/")) if relative else project_root
        root = project_root.resolve()
        resolved = target.resolve()
        if resolved != root and root not in resolved.parents:
            raise ScaffoldIOError(target, "path escapes the project root")
        return target


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _make_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ScaffoldIOError(path, exc.strerror or str(exc)) from exc


def _write_bytes(path: Path, content: bytes) -> None:
    try:
        path.write_bytes(content)
    except OSError as exc:
        raise ScaffoldIOError(path, exc.strerror or str(exc)) from exc


def _read_source(tree: TemplateTree, relative: str) -> bytes:
    try:
        return tree.read_bytes(relative)
    except OSError as exc:
        raise ScaffoldIOError(relative, exc.strerror or str(exc)) from exc
