"""crafter scaffolder -- generates project skeletons from a template tree.

This module takes a ``ScaffoldConfig`` and a template root (the bundled
``archetype`` directory, another directory, or a zip archive) and renders a
ready-to-build project directory.

Quick usage::

    from crafter.config import ScaffoldConfig
    from crafter.scaffolder import SkeletonGenerator

    config = ScaffoldConfig(
        group_id="com.example",
        project_name="demo",
        base_package="com.example.demo",
    )
    result = SkeletonGenerator(config).generate("/tmp/output")
    print(result.project_root)
"""

from crafter.scaffolder.generator import ScaffoldResult, SkeletonGenerator
from crafter.scaffolder.paths import EntryKind, classify_entry, rewrite_path
from crafter.scaffolder.resources import TemplateTree, locate, resolve
from crafter.scaffolder.templates import TemplateRenderer

__all__ = [
    "EntryKind",
    "ScaffoldResult",
    "SkeletonGenerator",
    "TemplateRenderer",
    "TemplateTree",
    "classify_entry",
    "locate",
    "resolve",
    "rewrite_path",
]
