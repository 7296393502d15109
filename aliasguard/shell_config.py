"""Read and rewrite the alias lines of a shell startup file"""

import os
import stat
from pathlib import Path
from typing import Dict, List, Optional

from aliasguard.backup import BackupOrchestrator
from aliasguard.errors import IOFailure, NotFoundError, Outcome, ValidationError
from aliasguard.grammar import AliasGrammar
from aliasguard.models import AliasDefinition, ShellDialect

FILE_MODE = 0o644

DEFAULT_CONFIG_FILES = {
    ShellDialect.BASH: ".bashrc",
    ShellDialect.ZSH: ".zshrc",
    ShellDialect.FISH: ".config/fish/config.fish",
    ShellDialect.UNKNOWN: ".bashrc",
}


def default_config_path(dialect: ShellDialect, home_dir: Optional[Path] = None) -> Path:
    """Startup file a dialect reads its aliases from"""
    return (home_dir or Path.home()) / DEFAULT_CONFIG_FILES[dialect]


class ShellConfigFile:
    """Alias-level access to one shell startup file"""

    def __init__(
        self,
        path: Path,
        dialect: ShellDialect = ShellDialect.BASH,
        backups: Optional[BackupOrchestrator] = None,
    ):
        self.path = Path(path)
        self.grammar = AliasGrammar(dialect)
        self.backups = backups

    @property
    def dialect(self) -> ShellDialect:
        return self.grammar.dialect

    def exists(self) -> bool:
        return self.path.exists()

    def read_lines(self) -> List[str]:
        with open(self.path, "r") as f:
            return f.read().splitlines()

    def write_lines(self, lines: List[str]) -> Outcome[Path]:
        """Replace the whole file with `lines`"""
        try:
            with open(self.path, "w") as f:
                f.write("\n".join(lines))
                if lines:
                    f.write("\n")
            self._set_permissions()
        except OSError as e:
            return Outcome.failure(IOFailure(f"Cannot write {self.path}: {e}"))
        return Outcome.success(self.path)

    def load_aliases(self) -> Outcome[List[AliasDefinition]]:
        """Every parseable alias line, in file order"""
        if not self.exists():
            return Outcome.failure(NotFoundError(f"Config file does not exist: {self.path}"))
        try:
            lines = self.read_lines()
        except OSError as e:
            return Outcome.failure(IOFailure(f"Cannot open config file for reading: {e}"))

        aliases = []
        for line in lines:
            if self.grammar.is_alias_line(line):
                parsed = self.grammar.parse(line)
                if parsed.is_parsed:
                    aliases.append(parsed)
        return Outcome.success(aliases)

    def aliases_by_name(self) -> Dict[str, AliasDefinition]:
        """Aliases keyed by name; a later definition replaces an earlier one"""
        loaded = self.load_aliases()
        return {alias.name: alias for alias in loaded.value or []}

    def add_alias(self, definition: AliasDefinition) -> Outcome[str]:
        """Append a definition to the file, snapshotting it first"""
        problem = self.grammar.validation_error(definition)
        if problem:
            return Outcome.failure(ValidationError(problem))

        warnings = []
        if self.exists():
            taken = self._snapshot()
            if not taken.ok:
                return Outcome.failure(taken.error)
            warnings = taken.warnings

        line = self.grammar.render(definition)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            prefix = ""
            if self.exists() and self.path.stat().st_size > 0:
                with open(self.path, "rb") as f:
                    f.seek(-1, os.SEEK_END)
                    if f.read(1) != b"\n":
                        prefix = "\n"
            with open(self.path, "a") as f:
                f.write(f"{prefix}{line}\n")
            self._set_permissions()
        except OSError as e:
            return Outcome.failure(IOFailure(f"Cannot open config file for writing: {e}"), warnings)

        return Outcome.success(line, warnings)

    def remove_alias(self, name: str) -> Outcome[int]:
        """Drop every line defining `name`; value is the number of lines removed"""
        if not self.exists():
            return Outcome.failure(NotFoundError(f"Config file does not exist: {self.path}"))
        try:
            lines = self.read_lines()
        except OSError as e:
            return Outcome.failure(IOFailure(f"Failed to read config file: {e}"))

        kept = [
            line for line in lines
            if not (self.grammar.is_alias_line(line) and self.grammar.parse(line).name == name)
        ]
        removed = len(lines) - len(kept)
        if not removed:
            return Outcome.failure(NotFoundError(f"Alias not found: {name}"))

        taken = self._snapshot()
        if not taken.ok:
            return Outcome.failure(taken.error)

        written = self.write_lines(kept)
        if not written.ok:
            return Outcome.failure(written.error, taken.warnings)
        return Outcome.success(removed, taken.warnings)

    def check_permissions(self) -> bool:
        """Owner can read and write the file"""
        try:
            mode = self.path.stat().st_mode
        except OSError:
            return False
        return bool(mode & stat.S_IRUSR) and bool(mode & stat.S_IWUSR)

    def _snapshot(self) -> Outcome[Path]:
        if self.backups is None:
            return Outcome.success()
        taken = self.backups.snapshot()
        if not taken.ok:
            return Outcome.failure(IOFailure(f"Backup failed, change cancelled: {taken.message}"))
        return taken

    def _set_permissions(self) -> None:
        os.chmod(self.path, FILE_MODE)
