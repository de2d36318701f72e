"""Main Typer application: imports and registers all CLI commands.

Entry point: ``s3checksums`` (configured via pyproject.toml console scripts).

Commands: reconcile, debug, report.
"""

from __future__ import annotations

import typer

from s3checksums.cli.commands.debug_cmd import debug_cmd
from s3checksums.cli.commands.reconcile import reconcile_cmd
from s3checksums.cli.commands.report_cmd import report_cmd

app = typer.Typer(
    name="s3checksums",
    help="Reconcile per-artifact SHA-1 checksum records in an S3-compatible bucket.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="reconcile", help="Classify records, write the plan and repair it.")(reconcile_cmd)
app.command(name="debug", help="Compare mirrored records with the bucket (read-only).")(debug_cmd)
app.command(name="report", help="Show the last run report.")(report_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
