"""Command-line interface for gitclusters."""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog
import typer
from pydantic import TypeAdapter
from rich.console import Console
from rich.table import Table

from gitclusters.grouping import group_commits_multi_signal
from gitclusters.llm import PromptTemplates, apply_clustering_response
from gitclusters.models import (
    ClusteringResult,
    Commit,
    CommitEvidence,
    GroupingOptions,
    GroupingResult,
    Sensitivity,
    Settings,
    build_lookup_tables,
)
from gitclusters.models.enrichment import enrichment_list_adapter

app = typer.Typer(
    name="gitclusters",
    help="Multi-signal commit clustering - group commits into coherent units of work",
    add_completion=False,
)
console = Console()

commit_list_adapter = TypeAdapter(List[Commit])
evidence_list_adapter = TypeAdapter(List[CommitEvidence])
overrides_adapter = TypeAdapter(Dict[str, Optional[str]])


def configure_logging(level: str) -> None:
    """Route structlog output to stderr at the given minimum level."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _read_json(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, default=str)


def _print_grouping(result: GroupingResult) -> None:
    table = Table(title="Commit Groups")
    table.add_column("Key", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Name")
    table.add_column("Commits", justify="right")
    table.add_column("Issues", justify="right")
    table.add_column("Sprint", style="dim")

    for group in result.groups:
        table.add_row(
            group.group_key,
            group.group_type.value,
            group.group_name,
            str(len(group.commits)),
            str(len(group.issues)),
            group.sprint or "",
        )
    console.print(table)

    if result.ungrouped_commits:
        console.print(f"\n[bold]Ungrouped ({len(result.ungrouped_commits)}):[/bold]")
        for entry in result.ungrouped_commits:
            tickets = ", ".join(issue.key for issue in entry.issues)
            console.print(
                f"  [cyan]{entry.commit.short_hash}[/cyan] {entry.commit.summary}"
                + (f" [dim]({tickets})[/dim]" if tickets else "")
            )


def _print_clustering(result: ClusteringResult) -> None:
    table = Table(title="AI-Suggested Groups")
    table.add_column("Name", style="cyan")
    table.add_column("Theme", style="magenta")
    table.add_column("Commits", justify="right")
    table.add_column("Confidence", justify="right")
    table.add_column("Reasoning", style="dim")

    for group in result.groups:
        table.add_row(
            group.name,
            group.theme,
            str(len(group.commit_hashes)),
            f"{group.confidence:.2f}",
            group.reasoning,
        )
    console.print(table)
    console.print(f"\n[bold]Ungrouped:[/bold] {len(result.ungrouped)}")


@app.command()
def group(
    commits_file: Path = typer.Argument(..., help="JSON file with a list of commits"),
    enrichments: Optional[Path] = typer.Option(
        None, "--enrichments", "-e", help="JSON file with issue and pull request records"
    ),
    overrides: Optional[Path] = typer.Option(
        None, "--overrides", help="JSON object mapping commit hash to epic key or null"
    ),
    time_window: Optional[float] = typer.Option(
        None, "--time-window", "-w", help="Sprint time window in days"
    ),
    overlap: Optional[float] = typer.Option(
        None, "--overlap", help="File-overlap threshold (0-1]"
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write result as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Group commits by PR, epic, sprint and file overlap."""
    try:
        settings = Settings()
        configure_logging("DEBUG" if verbose else settings.log_level)

        commits = commit_list_adapter.validate_python(_read_json(commits_file))
        issue_table, pr_table = {}, {}
        if enrichments:
            records = enrichment_list_adapter.validate_python(_read_json(enrichments))
            issue_table, pr_table = build_lookup_tables(records)
        override_map = overrides_adapter.validate_python(_read_json(overrides)) if overrides else None

        options = GroupingOptions(
            time_window_days=settings.time_window_days if time_window is None else time_window,
            overlap_threshold=settings.overlap_threshold if overlap is None else overlap,
        )

        console.print(f"[bold green]Grouping {len(commits)} commits[/bold green]")
        result = group_commits_multi_signal(
            commits, issue_table, pr_table, options=options, overrides=override_map
        )
        _print_grouping(result)

        if output:
            _write_json(output, result.model_dump(mode="json"))
            console.print(f"[bold green]✓[/bold green] Saved to {output}")

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def prompt(
    evidence_file: Path = typer.Argument(..., help="JSON file with per-commit evidence"),
) -> None:
    """Print the clustering prompt for a batch of commits."""
    try:
        settings = Settings()
        evidence = evidence_list_adapter.validate_python(_read_json(evidence_file))
        templates = PromptTemplates(
            max_files=settings.max_prompt_files,
            max_diff_lines=settings.max_diff_lines,
        )
        typer.echo(templates.commit_clustering(evidence))
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command(name="filter")
def filter_response(
    evidence_file: Path = typer.Argument(..., help="JSON file with per-commit evidence"),
    response_file: Path = typer.Argument(..., help="Raw model response to the clustering prompt"),
    sensitivity: Optional[Sensitivity] = typer.Option(
        None, "--sensitivity", "-s", help="strict, balanced or loose"
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write result as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Apply confidence filtering to a saved model response."""
    try:
        settings = Settings()
        configure_logging("DEBUG" if verbose else settings.log_level)

        evidence = evidence_list_adapter.validate_python(_read_json(evidence_file))
        response_text = response_file.read_text(encoding="utf-8")

        result = apply_clustering_response(
            evidence, response_text, settings.confidence_thresholds(sensitivity)
        )
        _print_clustering(result)

        if output:
            _write_json(output, result.model_dump(mode="json"))
            console.print(f"[bold green]✓[/bold green] Saved to {output}")

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from gitclusters import __version__

    console.print(f"[bold]gitclusters[/bold] version {__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
