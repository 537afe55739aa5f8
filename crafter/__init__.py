"""crafter -- template-driven project skeleton generator.

Materializes a ready-to-build project from a template tree and hands the
database-driven code generation phase to an installed foundry generator.
"""

__version__ = "1.0.0"
