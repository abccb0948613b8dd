"""Main CLI interface for Codebird."""

import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from codebird.core.errors import CodebirdError, MergeConflict
from codebird.core.repository import CodebirdRepository, find_project_root
from codebird.models.state import DEFAULT_BRANCH

console = Console()


def get_repo_or_exit(ctx: click.Context) -> CodebirdRepository:
    """Get the CodebirdRepository for this invocation or exit with an error."""
    project_path: Optional[str] = ctx.obj.get("project_path")
    project_root = Path(project_path).resolve() if project_path else find_project_root()

    if project_root is None or not CodebirdRepository(project_root).exists():
        console.print(
            "[red]Codebird not initialized. Run 'codebird init' first.[/red]"
        )
        raise click.Abort()
    return CodebirdRepository(project_root)


def _fail(error: CodebirdError) -> None:
    console.print(f"[red]Error: {escape(str(error))}[/red]")
    raise click.Abort() from error


def _configure_logging(verbose: bool) -> None:
    logger = logging.getLogger("codebird")
    if verbose:
        logger.setLevel(logging.DEBUG)
        if not any(isinstance(h, RichHandler) for h in logger.handlers):
            logger.addHandler(RichHandler(console=Console(stderr=True)))
    else:
        logger.setLevel(logging.ERROR)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="codebird")
@click.option(
    "--project-path",
    type=click.Path(file_okay=False),
    envvar="CODEBIRD_PROJECT",
    help="Path to project directory (default: search upward from cwd)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def main(ctx: click.Context, project_path: Optional[str], verbose: bool):
    """Codebird - A simple version control system."""
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["project_path"] = project_path


@main.command()
@click.option(
    "--default-branch",
    default=DEFAULT_BRANCH,
    show_default=True,
    help="Name of the initial branch",
)
@click.pass_context
def init(ctx: click.Context, default_branch: str):
    """Initialize a new Codebird repository."""
    project_root = Path(ctx.obj.get("project_path") or ".").resolve()
    if not project_root.is_dir():
        console.print(f"[red]Error: {project_root} is not a directory[/red]")
        raise click.Abort()

    try:
        CodebirdRepository(project_root).init(default_branch=default_branch)
    except CodebirdError as e:
        _fail(e)

    console.print(f"[green]Initialized Codebird repository in {project_root}[/green]")


@main.command()
@click.argument("files", nargs=-1, required=True)
@click.pass_context
def add(ctx: click.Context, files):
    """Add files to the repository."""
    repo = get_repo_or_exit(ctx)

    for name in files:
        try:
            added = repo.add_file(name)
        except CodebirdError as e:
            _fail(e)
        if added:
            console.print(f"File added: {name}")
        else:
            console.print(f"[yellow]Already tracked: {name}[/yellow]")


@main.command()
@click.argument("files", nargs=-1)
@click.pass_context
def commit(ctx: click.Context, files):
    """Commit changes made to FILES on the current branch."""
    repo = get_repo_or_exit(ctx)

    try:
        new_commit = repo.commit(list(files))
    except CodebirdError as e:
        _fail(e)

    console.print(
        f"[green]Commit {new_commit.short_id} made on branch "
        f"{new_commit.branch_name}[/green] with message: {new_commit.message}"
    )


@main.command()
@click.option("--limit", type=int, default=None, help="Number of commits to show")
@click.option("--oneline", is_flag=True, help="Show compact one-line format")
@click.pass_context
def log(ctx: click.Context, limit: Optional[int], oneline: bool):
    """Show the commit history of the current branch."""
    repo = get_repo_or_exit(ctx)

    try:
        branch = repo.status()
        commits = list(repo.history())
    except CodebirdError as e:
        _fail(e)

    if limit is not None:
        commits = commits[-limit:] if limit > 0 else []

    if not commits:
        console.print(f"[yellow]No commits on branch {branch}[/yellow]")
        return

    if oneline:
        for c in commits:
            console.print(f"[cyan]{c.short_id}[/cyan] {c.message}")
        return

    table = Table(title=f"Commit History for branch {branch}")
    table.add_column("Commit", style="cyan", no_wrap=True)
    table.add_column("Message", style="green")
    table.add_column("Timestamp", style="magenta")
    table.add_column("Changes", style="yellow")

    for c in commits:
        table.add_row(
            c.id,
            c.message,
            c.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            c.change_description,
        )

    console.print(table)


@main.command()
@click.pass_context
def status(ctx: click.Context):
    """Show the current status of the repository."""
    repo = get_repo_or_exit(ctx)

    try:
        branch = repo.status()
        files = repo.tracked_files()
    except CodebirdError as e:
        _fail(e)

    console.print(f"[bold]Project:[/bold] {repo.project_root}")
    console.print(f"Currently on branch: [green]{branch}[/green]")
    console.print(f"[bold]Tracked files:[/bold] {len(files)}")


@main.command()
@click.argument("branch_name")
@click.pass_context
def create(ctx: click.Context, branch_name: str):
    """Create a new branch."""
    repo = get_repo_or_exit(ctx)

    try:
        repo.create_branch(branch_name)
    except CodebirdError as e:
        _fail(e)

    console.print(f"[green]Branch {branch_name} created.[/green]")


@main.command()
@click.argument("branch_name")
@click.pass_context
def switch(ctx: click.Context, branch_name: str):
    """Switch to an existing branch."""
    repo = get_repo_or_exit(ctx)

    try:
        repo.switch_branch(branch_name)
    except CodebirdError as e:
        _fail(e)

    console.print(f"[green]Switched to branch {branch_name}[/green]")


@main.command()
@click.argument("branch_name")
@click.pass_context
def merge(ctx: click.Context, branch_name: str):
    """Merge a branch into the current branch."""
    repo = get_repo_or_exit(ctx)

    try:
        current = repo.status()
        console.print(f"Merging branch {branch_name} into {current}")
        merged = repo.merge(branch_name)
    except MergeConflict as e:
        console.print(
            "[red]Conflict detected! Merge cannot be completed automatically.[/red]"
        )
        if e.files:
            console.print("Please resolve conflicts manually in the following files:")
            for name in e.files:
                console.print(f"  • {name}")
        console.print("[red]Merge aborted.[/red]")
        raise click.Abort() from e
    except CodebirdError as e:
        _fail(e)

    console.print(
        f"[green]Merge completed successfully! "
        f"({len(merged)} commits from {branch_name})[/green]"
    )


@main.command()
@click.pass_context
def branches(ctx: click.Context):
    """List all branches."""
    repo = get_repo_or_exit(ctx)

    try:
        current = repo.status()
        rows = repo.branches()
    except CodebirdError as e:
        _fail(e)

    table = Table(title="Branches")
    table.add_column("", style="green", no_wrap=True)
    table.add_column("Branch", style="cyan")
    table.add_column("Commits", style="yellow", justify="right")

    for name, count in rows:
        table.add_row("*" if name == current else "", name, str(count))

    console.print(table)


@main.command()
@click.pass_context
def files(ctx: click.Context):
    """List tracked files."""
    repo = get_repo_or_exit(ctx)

    try:
        tracked = repo.tracked_files()
    except CodebirdError as e:
        _fail(e)

    if not tracked:
        console.print("[yellow]No tracked files[/yellow]")
        return

    for name in tracked:
        console.print(name)


if __name__ == "__main__":
    main()
