import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rapidfuzz import fuzz
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape as markup_escape
from rich.prompt import Confirm
from rich.table import Table

from aliasguard import __version__
from aliasguard.backup import BackupOrchestrator
from aliasguard.config import Config
from aliasguard.errors import NotFoundError, Outcome
from aliasguard.grammar import AliasGrammar
from aliasguard.models import AliasDefinition, ShellDialect
from aliasguard.retention import RetentionEngine, is_compressed
from aliasguard.shell_config import ShellConfigFile
from aliasguard.shell_detector import ShellDetector

console = Console()
config = Config()

FUZZY_THRESHOLD = 60


class Session:
    """Objects shared by every subcommand of one invocation"""

    def __init__(self, dialect: ShellDialect, tracked_path: Path, backup_dir: Optional[Path] = None):
        self.dialect = dialect
        engine = RetentionEngine(tracked_path, backup_root=backup_dir, policy=config.retention_policy())
        self.backups = BackupOrchestrator(tracked_path, engine=engine)
        self.shell_config = ShellConfigFile(tracked_path, dialect, backups=self.backups)

    @property
    def tracked_path(self) -> Path:
        return self.shell_config.path


def _style(key: str) -> str:
    return config.get_theme()[key]


def _report(outcome: Outcome, success: str = None) -> None:
    """Print an outcome; exit non-zero if it failed"""
    for warning in outcome.warnings:
        console.print(f"[{_style('warning_color')}]⚠[/] {warning}")
    if not outcome.ok:
        console.print(f"[{_style('error_color')}]✗[/] {outcome.message}")
        sys.exit(1)
    if success:
        console.print(f"[{_style('success_color')}]✔[/] {success}")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def matches(alias: AliasDefinition, term: str, fuzzy: bool = True) -> bool:
    """Case-insensitive substring or fuzzy match on name and command"""
    term = term.lower()
    haystacks = [alias.name.lower(), alias.command.lower()]
    if any(term in text for text in haystacks):
        return True
    if fuzzy:
        return max(fuzz.partial_ratio(term, text) for text in haystacks) >= FUZZY_THRESHOLD
    return False


@click.group()
@click.option("--shell", "-s", type=click.Choice([d.value for d in ShellDialect if d is not ShellDialect.UNKNOWN]),
              help="Shell syntax to use (auto-detect if not specified)")
@click.option("--file", "-f", "config_file", type=click.Path(dir_okay=False), help="Shell startup file to manage")
@click.option("--backup-dir", type=click.Path(file_okay=False), help="Directory for backups")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.version_option(version=__version__, prog_name="aliasguard")
@click.pass_context
def main(ctx, shell, config_file, backup_dir, verbose):
    """aliasguard - manage shell aliases with automatic backups"""
    _setup_logging(verbose)

    detector = ShellDetector()
    if shell:
        dialect = ShellDialect(shell)
    else:
        dialect = config.get_dialect() or detector.detect_current_shell()

    if config_file:
        tracked = Path(config_file).expanduser()
    else:
        tracked = config.get_path("config_file") or detector.get_config_file(dialect)

    backup_root = Path(backup_dir).expanduser() if backup_dir else config.get_path("backup_dir")
    ctx.obj = Session(dialect, tracked, backup_root)


@main.command(name="list")
@click.option("--search", "-q", help="Only show aliases matching this text")
@click.option("--exact", is_flag=True, help="Disable fuzzy matching")
@click.pass_obj
def list_aliases(session, search, exact):
    """List aliases defined in the startup file"""
    loaded = session.shell_config.load_aliases()
    _report(loaded)

    aliases = loaded.value
    if search:
        aliases = [a for a in aliases if matches(a, search, fuzzy=not exact)]

    if not aliases:
        console.print("[yellow]No aliases found.[/]")
        return

    table = Table(title=f"Aliases in {session.tracked_path}", border_style=_style("border_color"))
    table.add_column("Name", style=_style("header_color"), no_wrap=True)
    table.add_column("Command")
    for alias in aliases:
        table.add_row(alias.name, markup_escape(alias.command))
    console.print(table)
    console.print(f"[dim]{len(aliases)} alias(es)[/]")


@main.command()
@click.argument("name")
@click.argument("command")
@click.option("--description", "-d", help="Description of the alias")
@click.pass_obj
def add(session, name, command, description):
    """Append an alias to the startup file (backed up first)"""
    alias = AliasDefinition(name=name, command=command.strip(), description=description)
    added = session.shell_config.add_alias(alias)
    _report(added, f"Added alias: [cyan]{name}[/]")
    console.print(f"[dim]{markup_escape(added.value)}[/]", highlight=False)
    console.print(f"[dim]💡 Run 'source {session.tracked_path}' to use it in this session[/]")


@main.command()
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def remove(session, name, yes):
    """Remove an alias from the startup file (backed up first)"""
    if config.get("confirm_delete", True) and not yes:
        if not Confirm.ask(f"Remove alias '{name}'?", console=console):
            console.print("[dim]Cancelled[/]")
            return
    removed = session.shell_config.remove_alias(name)
    _report(removed, f"Removed alias: [cyan]{name}[/]")


@main.command()
@click.argument("name")
@click.argument("command")
@click.pass_obj
def render(session, name, command):
    """Print the alias line for the current shell without saving it"""
    alias = AliasDefinition(name=name, command=command)
    problem = AliasGrammar.validation_error(alias)
    if problem:
        console.print(f"[{_style('error_color')}]✗[/] {problem}")
        sys.exit(1)
    click.echo(AliasGrammar(session.dialect).render(alias))


@main.command()
@click.pass_obj
def backup(session):
    """Snapshot the startup file now"""
    taken = session.backups.snapshot()
    _report(taken, f"Backup created: {taken.value}")


@main.command()
@click.pass_obj
def backups(session):
    """List available backups, newest first"""
    snapshots = session.backups.list_snapshots()
    if not snapshots:
        console.print(f"[yellow]No backup files found for {session.tracked_path.name}.[/]")
        return

    table = Table(title="Available Backups", border_style=_style("border_color"))
    table.add_column("#", justify="right", no_wrap=True)
    table.add_column("Tier", no_wrap=True)
    table.add_column("Modified", no_wrap=True)
    table.add_column("Path", style=_style("header_color"), overflow="fold")
    for rank, (path, modified) in enumerate(snapshots, 1):
        tier = "xz" if is_compressed(path) else "raw"
        table.add_row(str(rank), tier, modified.strftime("%Y-%m-%d %H:%M:%S"), str(path))
    console.print(table)


@main.command()
@click.argument("snapshot", required=False, type=click.Path())
@click.option("--latest", is_flag=True, help="Restore the most recent backup")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def restore(session, snapshot, latest, yes):
    """Overwrite the startup file with a backup"""
    if snapshot and latest:
        raise click.UsageError("Give a backup path or --latest, not both")
    if snapshot:
        source = Path(snapshot)
    else:
        source = session.backups.most_recent()
        if source is None:
            _report(Outcome.failure(NotFoundError("No backup found")))

    if not yes:
        if not Confirm.ask(f"Restore {session.tracked_path} from {source}?", console=console):
            console.print("[dim]Cancelled[/]")
            return
    restored = session.backups.restore(source)
    _report(restored, f"Restored {session.tracked_path} from {restored.value}")


@main.command()
@click.pass_obj
def info(session):
    """Show the detected shell and file locations"""
    console.print(f"Shell:       [cyan]{session.dialect.value}[/]")
    console.print(f"Config file: {session.tracked_path}")
    console.print(f"Backups:     {session.backups.engine.backup_directory()}")
    latest = session.backups.most_recent()
    console.print(f"Last backup: {latest if latest else '[dim]none[/]'}")


@main.group(name="config")
def config_group():
    """Read or change aliasguard settings"""


@config_group.command(name="get")
@click.argument("key", required=False)
def config_get(key):
    """Show one setting, or all of them"""
    if key is None:
        click.echo(json.dumps(config.config, indent=2))
    elif key not in config.config:
        console.print(f"[{_style('error_color')}]✗[/] Unknown setting: {key}")
        sys.exit(1)
    else:
        click.echo(json.dumps(config.get(key)))


@config_group.command(name="set")
@click.argument("key")
@click.argument("value")
def config_set(key, value):
    """Change a setting (VALUE is parsed as JSON when possible)"""
    if key not in Config.DEFAULT_CONFIG:
        console.print(f"[{_style('error_color')}]✗[/] Unknown setting: {key}")
        sys.exit(1)
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value
    if key == "theme" and parsed not in Config.THEMES:
        console.print(f"[{_style('error_color')}]✗[/] Unknown theme: {parsed}")
        sys.exit(1)
    config.set(key, parsed)
    console.print(f"[{_style('success_color')}]✔[/] {key} = {json.dumps(parsed)}")


if __name__ == "__main__":
    main()
