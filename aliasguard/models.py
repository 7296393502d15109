"""Data models for aliases and shell dialects"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


class ShellDialect(Enum):
    """Shell syntax families an alias line can be written in"""

    BASH = "bash"
    ZSH = "zsh"
    FISH = "fish"
    UNKNOWN = "unknown"

    @classmethod
    def from_name(cls, name: Optional[str]) -> "ShellDialect":
        """Map a shell name or path (e.g. '/usr/bin/zsh') to a dialect"""
        if not name:
            return cls.UNKNOWN
        basename = name.strip().rsplit("/", 1)[-1].lower().lstrip("-")
        for dialect in (cls.ZSH, cls.BASH, cls.FISH):
            if dialect.value in basename:
                return dialect
        return cls.UNKNOWN


@dataclass(frozen=True)
class AliasDefinition:
    """A single name-to-command mapping from a shell startup file"""
    name: str
    command: str
    description: Optional[str] = field(default=None, compare=False)
    enabled: bool = field(default=True, compare=False)
    created_at: date = field(default_factory=date.today, compare=False)
    last_used: date = field(default_factory=date.today, compare=False)

    @property
    def is_parsed(self) -> bool:
        """False for the empty-name result of an unrecognized line"""
        return bool(self.name)

    def to_dict(self) -> dict:
        """Convert alias to a plain dictionary"""
        return {
            "name": self.name,
            "command": self.command,
            "description": self.description,
            "enabled": self.enabled,
            "created_at": self.created_at.isoformat(),
            "last_used": self.last_used.isoformat(),
        }

    def __str__(self) -> str:
        return f"{self.name} = {self.command}"


# Returned by the grammar for lines it cannot parse
UNPARSED = AliasDefinition(name="", command="")
