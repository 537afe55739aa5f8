"""crafter bootstrap orchestrator.

Runs the two generation phases:

skeleton -- Resolve the project identity and materialize the template tree.
foundry  -- Resolve the data-source settings and hand them to the installed
            foundry code generator.

Without ``--phase`` both run, skeleton first.  ``--phase foundry`` must be
started from the root of an existing project.

Usage::

    crafter --group-id com.example --project-name demo --package com.example.demo \\
        --phase skeleton
    crafter --phase foundry --config-file crafter.properties
    python -m crafter.bootstrap --help
"""

from __future__ import annotations

import argparse
import sys
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from rich.markup import escape

from crafter import __version__
from crafter.config import BootstrapOptions, FoundryInputs, Phase, ScaffoldConfig
from crafter.errors import BootstrapError, CrafterError
from crafter.foundry import FoundryFactory, load_foundry_factory, read_project_descriptor
from crafter.resolver import ConfigResolver
from crafter.scaffolder import ScaffoldResult, SkeletonGenerator
from crafter.utils import (
    console,
    format_duration,
    print_banner,
    print_error,
    print_phase_header,
    print_success,
    print_summary_table,
)


@dataclass
class BootstrapResult:
    """Outcome of a successful run."""

    skeleton: ScaffoldConfig | None = None
    scaffold: ScaffoldResult | None = None
    foundry: FoundryInputs | None = None
    duration: float = 0.0


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class Bootstrap:
    """Sequences configuration resolution and the generation phases.

    Attributes:
        options: Explicit values gathered from the caller.
        resolver: Fills the gaps in ``options`` per phase.
        foundry_factory: Builds the foundry generator.  Loaded lazily from the
            ``crafter.foundry`` entry points when not given.
        cwd: Directory a foundry-only run treats as the project root.
    """

    def __init__(
        self,
        options: BootstrapOptions,
        *,
        resolver: ConfigResolver | None = None,
        foundry_factory: FoundryFactory | None = None,
        foundry_name: str | None = None,
        cwd: str | Path | None = None,
    ) -> None:
        self.options = options
        self.resolver = resolver or ConfigResolver()
        self.foundry_factory = foundry_factory
        self.foundry_name = foundry_name
        self.cwd = Path(cwd) if cwd is not None else Path.cwd()

    def run(self) -> BootstrapResult:
        """Execute the selected phases.

        Returns:
            A :class:`BootstrapResult` describing what was generated.

        Raises:
            NoProjectDescriptor: For a foundry-only run outside a project;
                raised before anything else happens.
            BootstrapError: Wrapping whatever made configuration resolution
                or a phase fail.  The original exception is the ``__cause__``.
        """
        start = time.monotonic()
        run_skeleton = self.options.run_skeleton
        run_foundry = self.options.run_foundry

        descriptor = None
        if not run_skeleton:
            descriptor = read_project_descriptor(self.cwd)

        print_banner(
            f"Execution plan:\n"
            f"  - Generate skeleton: {str(run_skeleton).lower()}\n"
            f"  - Generate foundry : {str(run_foundry).lower()}",
            title="crafter - Starting execution",
        )

        result = BootstrapResult()
        try:
            if run_skeleton:
                result.skeleton = self.resolver.resolve_skeleton(self.options)
            if run_foundry:
                if result.skeleton is not None:
                    project_name = result.skeleton.project_name
                    project_dir = self.options.output_dir / project_name
                    base_package = result.skeleton.base_package
                else:
                    project_name = descriptor.artifact_id
                    project_dir = descriptor.project_dir
                    base_package = None
                result.foundry = self.resolver.resolve_foundry(
                    self.options,
                    project_name=project_name,
                    project_dir=project_dir,
                    step_in=not run_skeleton,
                    base_package=base_package,
                )

            if result.skeleton is not None:
                _print_skeleton_summary(result.skeleton)
            if result.foundry is not None:
                _print_foundry_summary(result.foundry, with_project=not run_skeleton)

            if result.skeleton is not None:
                print_phase_header(Phase.SKELETON.value, "Skeleton generation")
                result.scaffold = SkeletonGenerator(
                    result.skeleton,
                    templates=self.options.templates,
                    verbose=self.options.verbose,
                ).generate(self.options.output_dir)
                print_success(
                    f"Skeleton generation completed: {result.scaffold.project_root} "
                    f"({result.scaffold.file_count} files)"
                )

            if result.foundry is not None:
                print_phase_header(Phase.FOUNDRY.value, "Foundry generation")
                factory = self.foundry_factory or load_foundry_factory(self.foundry_name)
                factory(result.foundry).generate()
                print_success("Foundry generation completed.")
        except Exception as exc:
            print_error(f"crafter - Execution failed: {exc}")
            raise BootstrapError("Generation failed", exc) from exc

        result.duration = time.monotonic() - start
        print_banner(
            f"[bold green]Execution completed![/bold green]\n"
            f"Duration : {format_duration(result.duration)}",
            title="crafter",
            style="bold green",
        )
        return result


# ---------------------------------------------------------------------------
# Summaries
# ---------------------------------------------------------------------------


def _print_skeleton_summary(config: ScaffoldConfig) -> None:
    print_summary_table(
        {
            "Group ID": config.group_id,
            "Artifact ID": config.project_name,
            "Version": config.version,
            "Base Package": config.base_package,
            "Description": config.description,
        },
        title="Project Skeleton Configuration",
    )


def _print_foundry_summary(inputs: FoundryInputs, *, with_project: bool) -> None:
    data: dict[str, str] = {}
    if with_project:
        data["Artifact ID"] = inputs.project_name
        data["Base Package"] = inputs.base_package
    data.update(
        {
            "Database URL": inputs.url,
            "Driver Class": inputs.driver,
            "Database User": inputs.username,
            "Table Names": inputs.tables,
            "Overwrite Files": str(inputs.overwrite).lower(),
        }
    )
    print_summary_table(data, title="Code Generation Configuration")


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crafter",
        description="crafter -- project skeleton and code generation bootstrap",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  crafter --group-id com.example --project-name demo --package com.example.demo\n"
            "  crafter --phase skeleton -o ./work --batch --group-id g --project-name p --package a.b\n"
            "  crafter --phase foundry --config-file crafter.properties\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--phase",
        choices=[phase.value for phase in Phase],
        default=None,
        help="Run only this phase (default: skeleton then foundry)",
    )

    skeleton = parser.add_argument_group("project skeleton")
    skeleton.add_argument("--group-id", dest="group_id", help="Group ID, e.g. com.example")
    skeleton.add_argument(
        "--project-name", "--artifact-id", dest="project_name",
        help="Artifact ID, also the generated project directory name",
    )
    skeleton.add_argument(
        "--project-version", dest="version",
        help="Project version (default: 1.0.0)",
    )
    skeleton.add_argument("--package", dest="base_package", help="Base package, e.g. com.example.demo")
    skeleton.add_argument("--description", help="Project description")

    foundry = parser.add_argument_group("code generation")
    foundry.add_argument("--db-url", dest="url", help="Database connection URL")
    foundry.add_argument("--db-driver", dest="driver", help="Database driver class")
    foundry.add_argument("--db-username", dest="username", help="Database user")
    foundry.add_argument("--db-password", dest="password", help="Database password")
    foundry.add_argument("--tables", help="Comma-separated table names")
    foundry.add_argument(
        "--overwrite",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Overwrite existing generated files",
    )
    foundry.add_argument(
        "--config-file", type=Path, default=None,
        help="key=value file with database.* / archetype.package settings",
    )
    foundry.add_argument("--foundry", dest="foundry_name", help="Foundry generator to use")

    general = parser.add_argument_group("general")
    general.add_argument(
        "--output", "-o", type=Path, default=Path("."),
        help="Directory the project folder is created in (default: .)",
    )
    general.add_argument(
        "--templates",
        help="Template directory, zip archive, or archive.zip!/dir (default: bundled archetype)",
    )
    general.add_argument(
        "--batch", action="store_true",
        help="Never prompt; fail on missing required values",
    )
    general.add_argument("--verbose", "-v", action="store_true", help="List every generated file")
    return parser


def options_from_args(args: argparse.Namespace) -> BootstrapOptions:
    """Translate parsed CLI arguments into :class:`BootstrapOptions`."""
    return BootstrapOptions(
        phase=Phase(args.phase) if args.phase else None,
        group_id=args.group_id,
        project_name=args.project_name,
        version=args.version,
        base_package=args.base_package,
        description=args.description,
        url=args.url,
        driver=args.driver,
        username=args.username,
        password=args.password,
        tables=args.tables,
        overwrite=args.overwrite,
        config_file=args.config_file,
        output_dir=args.output,
        templates=args.templates,
        interactive=False if args.batch else None,
        verbose=args.verbose,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point for ``crafter`` / ``python -m crafter.bootstrap``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    options = options_from_args(args)

    try:
        Bootstrap(options, foundry_name=args.foundry_name).run()
    except BootstrapError:
        # Already reported by the orchestrator.
        sys.exit(1)
    except CrafterError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        sys.exit(1)


if __name__ == "__main__":
    main()
