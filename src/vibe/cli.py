"""Command-line interface for vibe."""

import logging
from pathlib import Path
from typing import NoReturn

import click
from git.exc import GitCommandError
from rich.console import Console
from rich.logging import RichHandler

from .config import Config
from .context import RepoContext
from .editor import capture_task
from .merge import MergeFlow
from .orchestrator import Orchestrator
from .report import Severity, line_count_report
from .utils import GitUtils
from .worktree import Worktree

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)

EXIT_CONFLICT = 1
EXIT_ERROR = 2
CREATE_COMMAND = "new"
FROM_OPTION = "--from"
HANDLED_ERRORS = (ValueError, RuntimeError, GitCommandError)

CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"],
    # Unknown options reach TaskGroup.resolve_command, which reports them.
    "ignore_unknown_options": True,
}


def info(message: str) -> None:
    console.print(message, style="green", markup=False, soft_wrap=True)


def warn(message: str) -> None:
    console.print(message, style="yellow", markup=False, soft_wrap=True)


def fail(ctx: click.Context, error: Exception | str) -> NoReturn:
    """Print a fatal error and exit."""
    err_console.print(f"Error: {error}", style="red", markup=False, soft_wrap=True)
    ctx.exit(EXIT_ERROR)


def setup_logging(config: Config, verbose: bool = False) -> None:
    """Route log records through rich on stderr, plus an optional log file."""
    level = logging.DEBUG if verbose else getattr(logging, config.log_level, logging.WARNING)
    handler = RichHandler(console=err_console, show_time=False, show_path=False,
                          markup=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(message)s"))
    handlers: list[logging.Handler] = [handler]

    if config.log_file:
        config.ensure_directories()
        file_handler = logging.FileHandler(config.log_file)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)


def repo_context(ctx: click.Context) -> RepoContext:
    """Repository context for the current invocation, discovered on first use."""
    if "repo" not in ctx.obj:
        try:
            repo = RepoContext.discover(config=ctx.obj.get("config"))
        except HANDLED_ERRORS as e:
            fail(ctx, e)
        setup_logging(repo.config, ctx.obj.get("verbose", False))
        ctx.obj["repo"] = repo
    return ctx.obj["repo"]


class TaskGroup(click.Group):
    """Group that treats anything that is not a command name as a task.

    A command name anywhere in the arguments wins, so ``vibe "x" merge`` merges.
    The value of ``--from`` is a branch and never a command. Unknown options
    seen before a command are rejected here.
    """

    def resolve_command(self, ctx: click.Context, args: list[str]):
        index = 0
        while index < len(args):
            token = args[index]
            if token == FROM_OPTION:
                index += 2
                continue
            command = self.commands.get(token)
            if command is not None and token != CREATE_COMMAND:
                return token, command, args[index + 1:]
            if (token.startswith("-") and token != "-"
                    and not token.startswith(f"{FROM_OPTION}=")
                    and token not in ctx.help_option_names):
                raise click.NoSuchOption(token, ctx=ctx)
            index += 1
        return CREATE_COMMAND, self.commands[CREATE_COMMAND], args


@click.group(cls=TaskGroup, invoke_without_command=True, context_settings=CONTEXT_SETTINGS)
@click.option('--config', '-c', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.pass_context
def main(ctx: click.Context, config: Path | None, verbose: bool) -> None:
    """Vibe - git worktrees with Claude Code.

    \b
    Usage:
      vibe "task description"    Create worktree with Claude Code
      vibe                       Write the task description in $EDITOR
      vibe merge                 Merge current worktree into another
      vibe list                  List all worktrees
      vibe clean                 Prune stale worktrees, list removable ones
      vibe check [red|yellow|green]
                                 Report line counts of tracked files

    \b
    Options for task creation:
      --from BRANCH              Start worktree from a specific branch
                                 (default: current branch, then master, then main)

    \b
    Examples:
      vibe "add user authentication"
      vibe "fix login bug" --from develop
      vibe merge
    """
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    try:
        ctx.obj['config'] = Config.load_from_file(config) if config else None
    except ValueError as e:
        fail(ctx, f"Invalid configuration file {config}: {e}")

    if ctx.invoked_subcommand is None:
        repo = repo_context(ctx)
        try:
            task = capture_task(repo.editor)
        except HANDLED_ERRORS as e:
            fail(ctx, e)
        ctx.invoke(new, task=(task,), from_branch=None)


@main.command(name=CREATE_COMMAND, hidden=True)
@click.argument('task', nargs=-1)
@click.option(FROM_OPTION, 'from_branch', metavar='BRANCH', help='Start worktree from a specific branch')
@click.pass_context
def new(ctx: click.Context, task: tuple[str, ...], from_branch: str | None) -> None:
    """Create a worktree for TASK, run Claude Code in it, then open a shell there."""
    if len(task) > 1:
        raise click.UsageError("Multiple task descriptions provided", ctx=ctx.parent)
    if not task:
        click.echo(ctx.parent.get_help())
        return

    description = task[0]
    repo = repo_context(ctx)
    try:
        orchestrator = Orchestrator(repo)
        worktree = orchestrator.create_worktree(description, from_branch)
        handoff = orchestrator.handoff(worktree)
    except HANDLED_ERRORS as e:
        fail(ctx, e)

    info(f"✅ Created worktree at: {worktree.path}")
    info(f"📝 Task: {description}")
    info(f"🌿 Current branch: {GitUtils.get_current_branch(worktree.path)}")

    if repo.assistant.is_available():
        info("🤖 Starting Claude Code...")
    if orchestrator.launch_assistant(worktree, description) is None:
        warn("Claude Code not found. Install it to get AI assistance.")
    else:
        info("Claude Code session ended. Starting shell in worktree directory...")

    handoff.execute()


@main.command(name='list')
@click.pass_context
def list_worktrees(ctx: click.Context) -> None:
    """List all worktrees."""
    repo = repo_context(ctx)
    try:
        worktrees = Orchestrator(repo).list_worktrees()
    except HANDLED_ERRORS as e:
        fail(ctx, e)

    console.print("Git worktrees:", markup=False)
    for worktree in worktrees:
        console.print(f"  {worktree.display_branch:<20} {worktree.path}",
                      markup=False, soft_wrap=True)


@main.command()
@click.pass_context
def clean(ctx: click.Context) -> None:
    """Prune stale worktree references and list worktrees that could be removed."""
    repo = repo_context(ctx)
    try:
        report = Orchestrator(repo).clean()
    except HANDLED_ERRORS as e:
        fail(ctx, e)

    if report.pruned_paths:
        info("Pruned stale worktree references:")
        for path in report.pruned_paths:
            console.print(f"  {path}", markup=False, soft_wrap=True)

    console.print("Worktrees that might be safe to remove:", markup=False)
    for candidate in report.candidates:
        console.print(f"  {candidate.branch} -> {candidate.path}", markup=False, soft_wrap=True)


def choose_target(candidates: list[Worktree]) -> str:
    """Print the numbered merge targets and read the answer."""
    console.print("Available branches to merge into:", markup=False)
    for number, worktree in enumerate(candidates, start=1):
        console.print(f"{number:>2}) {worktree.branch}:{worktree.path}", markup=False, soft_wrap=True)
    return click.prompt("Select target branch number", default="", show_default=False)


def confirm_removal(message: str) -> bool:
    return click.confirm(message, default=False)


@main.command()
@click.pass_context
def merge(ctx: click.Context) -> None:
    """Merge the current worktree's branch into another worktree."""
    repo = repo_context(ctx)
    try:
        flow = MergeFlow(repo, choose=choose_target, confirm=confirm_removal)
        result = flow.run()
    except HANDLED_ERRORS as e:
        fail(ctx, e)

    if not result.succeeded:
        warn("❌ Conflicts detected!")
        info(f"Try running: claude 'resolve these git conflicts and continue the {result.strategy}'")
        info(f"After resolving, run: git {result.strategy} --continue")
        if result.stash_label:
            warn(f"Uncommitted changes of {result.target_branch} are stashed as '{result.stash_label}'")
        ctx.exit(EXIT_CONFLICT)

    info(f"✅ Merged {result.source_branch} into {result.target_branch}")
    if result.stash_label and not result.stash_restored:
        warn(f"Could not restore stash '{result.stash_label}', see git stash list")
    if result.source_removed:
        info(f"Removed worktree for {result.source_branch}")


@main.command()
@click.argument('severity', required=False, type=click.Choice([s.value for s in Severity]))
@click.pass_context
def check(ctx: click.Context, severity: str | None) -> None:
    """Report line counts of tracked files, largest first.

    SEVERITY keeps only red (>500 lines), yellow (>400) or green files.
    """
    repo = repo_context(ctx)
    try:
        counts = line_count_report(repo.repo_path, repo.config,
                                   Severity(severity) if severity else None)
    except HANDLED_ERRORS as e:
        fail(ctx, e)

    for count in counts:
        console.print(f"{count.lines:>6} {count.path}", style=count.severity.value,
                      markup=False, soft_wrap=True)


if __name__ == '__main__':
    main()
