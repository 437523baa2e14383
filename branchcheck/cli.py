"""branchcheck CLI — Typer + Rich terminal interface.

Commands: run (inside GitHub Actions), preview (offline rendering).
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from branchcheck import __version__
from branchcheck.ci.tracker import TrackerResult, evaluate, run_check
from branchcheck.exceptions import BranchCheckError, NotAPullRequestError
from branchcheck.github.client import GitHubClient
from branchcheck.schemas.config import CheckConfig
from branchcheck.schemas.github import IssueComment
from branchcheck.schemas.report import ActionKind, Conclusion, PipelineObservation
from branchcheck.settings import load_check_config

console = Console()

app = typer.Typer(
    name="branchcheck",
    help="Track failing main-branch workflows in a pull request comment.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Placeholders for preview mode, which never talks to GitHub
_PREVIEW_REPOSITORY = "preview/preview"
_PREVIEW_WORKFLOW_REF = "preview/preview/.github/workflows/preview.yml@refs/heads/main"


# ── Version callback ───────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"branchcheck {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Enable debug logging.",
    ),
) -> None:
    """branchcheck — main-branch workflow status tracker."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
    )


# ── Helpers ──────────────────────────────────────────────────────


def _escape_command(message: str) -> str:
    """Escape a value for a GitHub Actions workflow command."""
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _set_failed(message: str) -> NoReturn:
    """Emit an error annotation and exit non-zero."""
    typer.echo(f"::error::{_escape_command(message)}")
    raise typer.Exit(1)


def _write_github_output(result: TrackerResult) -> None:
    """Append the decision to $GITHUB_OUTPUT when running in Actions."""
    output_file = os.environ.get("GITHUB_OUTPUT")
    if not output_file:
        return
    with open(output_file, "a", encoding="utf-8") as f:
        f.write(f"action={result.action.kind}\n")
        f.write(f"overridden={str(result.overridden).lower()}\n")
        f.write(f"outcome={result.outcome.reason}\n")


_ACTION_STYLE = {
    ActionKind.NOOP: "dim",
    ActionKind.CREATE: "bold yellow",
    ActionKind.UPDATE: "bold yellow",
    ActionKind.DELETE: "bold green",
}


def _print_result(result: TrackerResult) -> None:
    grid = Table.grid(padding=(0, 2))
    if result.observation is not None:
        grid.add_row("[bold]Workflow:[/bold]", Text(result.observation.name))
        grid.add_row("[bold]Conclusion:[/bold]", str(result.observation.conclusion))
        grid.add_row("[bold]Overridden:[/bold]", "yes" if result.overridden else "no")
    style = _ACTION_STYLE.get(result.action.kind, "white")
    grid.add_row("[bold]Comment:[/bold]", f"[{style}]{result.action.kind.upper()}[/{style}]")
    outcome_style = "bold green" if result.outcome.passed else "bold red"
    grid.add_row(
        "[bold]Outcome:[/bold]",
        f"[{outcome_style}]{result.outcome.reason.upper()}[/{outcome_style}]",
    )
    console.print(Panel(grid, title="[bold blue]Workflow Status[/bold blue]", border_style="blue"))

    for note in result.overrides.diagnostics:
        console.print(Text(note, style="yellow"))


# ── branchcheck run ──────────────────────────────────────────────


@app.command()
def run(
    config_file: str = typer.Option(
        None, "--config", "-c",
        help="TOML file overriding the packaged [check] defaults",
    ),
) -> None:
    """Reconcile the status comment for the current pull request."""
    try:
        config = load_check_config(Path(config_file) if config_file else None)
        result = run_check(config, GitHubClient.from_config(config))
    except NotAPullRequestError as e:
        _set_failed(str(e))
    except BranchCheckError as e:
        _set_failed(f"Action failed with error: {e}")

    _print_result(result)
    _write_github_output(result)

    if not result.outcome.passed:
        _set_failed(result.outcome.message)
    console.print(result.outcome.message, markup=False, highlight=False, soft_wrap=True)


# ── branchcheck preview ──────────────────────────────────────────


@app.command()
def preview(
    workflow: str = typer.Option(..., "--workflow", "-w", help="Workflow name"),
    url: str = typer.Option(..., "--url", "-u", help="URL of the observed run"),
    conclusion: str = typer.Option(
        ..., "--conclusion",
        help="Run conclusion (success, failure, cancelled, ...)",
    ),
    existing: str = typer.Option(
        None, "--existing", "-e",
        help="File holding the current status comment body",
    ),
    pr_text: str = typer.Option(
        None, "--pr-text", "-p",
        help="File holding the pull request description",
    ),
    main_branch: str = typer.Option("main", "--main-branch", help="Tracked branch"),
    allow_override_all: bool = typer.Option(
        False, "--allow-override-all",
        help="Honor unscoped override directives",
    ),
    fmt: str = typer.Option(
        "text", "--format", "-f",
        help="Output format: text or json",
    ),
) -> None:
    """Show the comment action and body for an observation, without GitHub."""
    existing_comment = None
    if existing:
        existing_path = Path(existing)
        if not existing_path.exists():
            console.print(Text.assemble(("Comment file not found: ", "red"), existing))
            raise typer.Exit(1) from None
        existing_comment = IssueComment(id=0, body=existing_path.read_text(encoding="utf-8"))

    pr_body = None
    if pr_text:
        pr_path = Path(pr_text)
        if not pr_path.exists():
            console.print(Text.assemble(("PR text file not found: ", "red"), pr_text))
            raise typer.Exit(1) from None
        pr_body = pr_path.read_text(encoding="utf-8")

    config = CheckConfig(
        repository=_PREVIEW_REPOSITORY,
        pr_number=1,
        workflow_name=workflow,
        workflow_ref=_PREVIEW_WORKFLOW_REF,
        main_branch=main_branch,
        allow_override_all=allow_override_all,
    )
    observation = PipelineObservation(
        name=workflow,
        url=url,
        conclusion=Conclusion.from_github(conclusion),
    )
    result = evaluate(config, observation, existing_comment, pr_body)

    if fmt == "json":
        typer.echo(json.dumps(result.model_dump(mode="json"), indent=2))
    else:
        _print_result(result)
        if result.action.kind in (ActionKind.CREATE, ActionKind.UPDATE):
            console.print()
            console.print(result.action.body, markup=False, highlight=False, soft_wrap=True)

    if not result.outcome.passed:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
