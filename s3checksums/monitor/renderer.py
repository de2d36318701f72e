"""Rich terminal renderer for plans, execution summaries and debug tables.

Color scheme
------------
- green     : valid / ok
- yellow    : missing (generate)
- magenta   : empty
- bold red  : corrupt / failed
"""

from __future__ import annotations

from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from s3checksums.models.classification import ClassificationOutcome, OrphanSets
from s3checksums.models.plan import ItemOutcome
from s3checksums.models.reports import DebugReport, ReconcileReport


# ---------------------------------------------------------------------------
# Outcome -> Rich markup mapping
# ---------------------------------------------------------------------------

_CLASSIFICATION_ICONS: dict[ClassificationOutcome, str] = {
    ClassificationOutcome.VALID: "[green]valid[/green]",
    ClassificationOutcome.MISSING: "[yellow]missing[/yellow]",
    ClassificationOutcome.EMPTY: "[magenta]empty[/magenta]",
    ClassificationOutcome.CORRUPT: "[bold red]corrupt[/bold red]",
}

_OUTCOME_ICONS: dict[ItemOutcome, str] = {
    ItemOutcome.OK: "[green]OK[/green]",
    ItemOutcome.FAILED: "[bold red]FAILED[/bold red]",
}


def _yes_no(flag: bool, *, good: bool = True) -> str:
    if flag:
        return "[green]yes[/green]" if good else "[yellow]yes[/yellow]"
    return "[red]no[/red]" if good else "[dim]no[/dim]"


class ReportRenderer:
    """Renders reports as Rich terminal output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    # ------------------------------------------------------------------
    # Plan summary
    # ------------------------------------------------------------------

    def render_plan(self, report: ReconcileReport) -> Panel:
        """Render the processing plan summary as a Panel."""
        table = Table(show_header=False, box=None, pad_edge=False)
        table.add_column("Metric", style="bold")
        table.add_column("Count", justify="right")
        table.add_row("Already valid", f"[green]{report.already_valid}[/green]")
        table.add_row("Missing records", f"[yellow]{report.missing}[/yellow]")
        table.add_row("Empty records", f"[magenta]{report.empty}[/magenta]")
        table.add_row("Corrupt records", f"[bold red]{report.corrupt}[/bold red]")
        table.add_row("Total to process", f"[bold]{report.total_to_process}[/bold]")
        if report.orphans_checked:
            table.add_row("Orphaned records", str(report.orphaned_records))
            table.add_row("Orphaned artifacts", str(report.orphaned_artifacts))
        else:
            table.add_row("Orphans", "[dim]not checked[/dim]")

        parts: list[str] = [f"[bold]Mode:[/bold] {report.mode}"]
        if report.bucket:
            parts.append(f"[bold]Bucket:[/bold] {report.bucket}")
        if report.prefix:
            parts.append(f"[bold]Prefix:[/bold] {report.prefix}")
        if report.sync is not None:
            sync_style = "green" if report.sync.status == "complete" else "bold red"
            parts.append(
                f"[bold]Sync:[/bold] {report.sync.strategy} "
                f"[{sync_style}]{report.sync.status}[/{sync_style}]"
            )

        return Panel(
            Group(table, Text(""), Text.from_markup("  |  ".join(parts))),
            title="[bold]Processing Plan[/bold]",
            subtitle=f"{report.generated_at.strftime('%Y-%m-%d %H:%M:%S UTC')}",
            border_style="blue",
            padding=(1, 2),
        )

    def render_items(self, report: ReconcileReport, limit: int = 20) -> Table:
        """Table of the first *limit* planned items with their outcomes."""
        table = Table(show_header=True, header_style="bold cyan", expand=True)
        table.add_column("#", style="dim", width=5, justify="right")
        table.add_column("Key", min_width=30)
        table.add_column("Record", justify="center")
        table.add_column("Action", justify="center")
        table.add_column("Outcome", justify="center")

        for i, item in enumerate(report.items[:limit], start=1):
            outcome = _OUTCOME_ICONS[item.outcome] if item.outcome else "[dim]-[/dim]"
            table.add_row(
                str(i),
                escape(item.key),
                _CLASSIFICATION_ICONS.get(item.classification, item.classification.value),
                item.action.value,
                outcome,
            )
        if len(report.items) > limit:
            table.caption = f"... and {len(report.items) - limit} more item(s)"
        return table

    def render_execution(self, report: ReconcileReport) -> Panel | None:
        if report.execution is None:
            return None
        ex = report.execution
        failed_style = "bold red" if ex.failed else "dim"
        lines = [
            f"[bold]Records generated:[/bold] [green]{ex.generated}[/green]",
            f"[bold]Records fixed:[/bold]     [green]{ex.fixed}[/green]",
            f"[bold]Failed:[/bold]            [{failed_style}]{ex.failed}[/{failed_style}]",
            f"[bold]Upload batches:[/bold]    {ex.batches}",
        ]
        return Panel(
            "\n".join(lines),
            title="[bold]Execution Summary[/bold]",
            border_style="red" if ex.failed else "green",
            padding=(1, 2),
        )

    def render_orphans(self, orphans: OrphanSets, *, record_prefix: str, limit: int = 20) -> Table:
        table = Table(show_header=True, header_style="bold cyan", title="Orphaned Files")
        table.add_column("Kind")
        table.add_column("Key")
        shown = 0
        for key in orphans.orphaned_records[:limit]:
            table.add_row("[yellow]record[/yellow]", escape(f"{record_prefix}{key}"))
            shown += 1
        for key in orphans.orphaned_artifacts[:limit]:
            table.add_row("[yellow]artifact[/yellow]", escape(key))
            shown += 1
        total = len(orphans.orphaned_records) + len(orphans.orphaned_artifacts)
        if total > shown:
            table.caption = f"... and {total - shown} more file(s)"
        return table

    def render_debug(self, report: DebugReport) -> Table:
        """Side-by-side local vs remote comparison with per-strategy decisions."""
        strategies: list[str] = []
        for entry in report.entries:
            for decision in entry.decisions:
                if decision.strategy not in strategies:
                    strategies.append(decision.strategy)

        table = Table(
            show_header=True,
            header_style="bold cyan",
            expand=True,
            title=f"Local vs remote records (first {report.limit} under {report.prefix})",
        )
        table.add_column("Key", min_width=24)
        table.add_column("Local", justify="center")
        table.add_column("Exact", justify="center")
        table.add_column("Normalized", justify="center")
        for name in strategies:
            table.add_column(f"{name}?", justify="center")

        for entry in report.entries:
            decisions = {d.strategy: d.would_download for d in entry.decisions}
            row = [
                escape(entry.key),
                _yes_no(entry.local_present),
                _yes_no(entry.exact_match),
                _yes_no(entry.normalized_match),
            ]
            row.extend(
                _yes_no(decisions[name], good=False) if name in decisions else "[dim]-[/dim]"
                for name in strategies
            )
            table.add_row(*row)

        table.caption = (
            f"sampled={report.sampled} exact={report.exact_matches} "
            f"whitespace-only={report.normalized_only_matches} "
            f"mismatched={report.mismatches} missing-local={report.missing_local}"
        )
        return table

    # ------------------------------------------------------------------
    # Standalone print
    # ------------------------------------------------------------------

    def print_report(self, report: ReconcileReport, *, items: int = 20) -> None:
        self.console.print(self.render_plan(report))
        if report.items and items > 0:
            self.console.print(self.render_items(report, limit=items))
        execution = self.render_execution(report)
        if execution is not None:
            self.console.print(execution)

    def print_debug(self, report: DebugReport) -> None:
        self.console.print(self.render_debug(report))
