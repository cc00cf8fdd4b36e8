"""Summary of a playlist folder load for terminal output."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path


@dataclass
class LoadedFile:
    path: Path
    playlist_id: str
    title: str


@dataclass
class SkippedFile:
    path: Path
    reason: str  # "malformed", "unreadable", or "duplicate id"
    detail: str = ""


@dataclass
class LoadReport:
    directory: Path
    timestamp: datetime = field(default_factory=datetime.now)
    loaded: list[LoadedFile] = field(default_factory=list)
    skipped: list[SkippedFile] = field(default_factory=list)
    created_directory: bool = False

    @property
    def total(self) -> int:
        return len(self.loaded) + len(self.skipped)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


def print_report(report: LoadReport) -> None:
    """Print a concise terminal summary of the load report."""
    import click

    ts = report.timestamp.strftime("%Y-%m-%d %H:%M")

    click.echo()
    click.echo("═" * 42)
    click.echo(f"  Playlist Check  {ts}")
    click.echo(f"  Folder: {report.directory}")
    click.echo("═" * 42)

    if report.created_directory:
        click.echo("  Folder did not exist and was created.")

    for item in report.loaded:
        title = item.title or "(untitled)"
        click.echo(f"  OK       {item.path.name}  {title}  [{item.playlist_id}]")

    for item in report.skipped:
        line = f"  SKIPPED  {item.path.name}  ({item.reason})"
        if item.detail:
            line += f": {item.detail}"
        click.echo(line)

    click.echo("─" * 42)
    click.echo(
        f"  TOTALS: {report.total} files"
        f" | {len(report.loaded)} loaded"
        f" | {report.skipped_count} skipped"
    )
    click.echo("─" * 42)
