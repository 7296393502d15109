"""Recognize, parse and render alias definition lines"""

import re
from typing import Optional

from aliasguard.escaping import escape, unescape
from aliasguard.models import AliasDefinition, ShellDialect, UNPARSED

KEYWORD = "alias"
QUOTES = ("'", '"')
MAX_NAME_LENGTH = 255
MAX_COMMAND_LENGTH = 2048
HORIZONTAL_WS = " \t"


class AliasGrammar:
    """Alias line syntax for one shell dialect"""

    NAME_PATTERN = re.compile(r"[A-Za-z0-9_][A-Za-z0-9_\-]*")

    def __init__(self, dialect: ShellDialect = ShellDialect.BASH):
        self.dialect = dialect

    @classmethod
    def validate_name(cls, name: str) -> bool:
        """Check a name against the alias identifier rules"""
        if not name or len(name) > MAX_NAME_LENGTH:
            return False
        return cls.NAME_PATTERN.fullmatch(name) is not None

    @staticmethod
    def validate_command(command: str) -> bool:
        return bool(command) and len(command) <= MAX_COMMAND_LENGTH

    @classmethod
    def validation_error(cls, definition: AliasDefinition) -> Optional[str]:
        """Describe why a definition is invalid, or None if it is fine"""
        if not cls.validate_name(definition.name):
            return f"Invalid alias name: {definition.name!r}"
        if not cls.validate_command(definition.command):
            if not definition.command:
                return f"Command for alias '{definition.name}' is empty"
            return (
                f"Command for alias '{definition.name}' is longer than "
                f"{MAX_COMMAND_LENGTH} characters"
            )
        return None

    @staticmethod
    def is_alias_line(line: str) -> bool:
        """True when the first token after leading whitespace is `alias`.

        Commented lines are not special-cased: the '#' sits where the
        keyword should be, so they are rejected.
        """
        stripped = line.lstrip(HORIZONTAL_WS)
        if not stripped.startswith(KEYWORD):
            return False
        rest = stripped[len(KEYWORD):]
        return not rest or rest[0] in HORIZONTAL_WS

    @classmethod
    def parse(cls, line: str) -> AliasDefinition:
        """Parse a `alias name=VALUE` line.

        Returns the empty-name ``UNPARSED`` definition when the line is not
        an alias, has no name, or uses the fish `alias name 'cmd'` form.
        """
        if not cls.is_alias_line(line):
            return UNPARSED
        rest = line.lstrip(HORIZONTAL_WS)[len(KEYWORD):]

        eq = rest.find("=")
        if eq == -1:
            # fish form, not parsed
            return UNPARSED

        name = rest[:eq].strip(HORIZONTAL_WS)
        if not name:
            return UNPARSED

        value = rest[eq + 1:].lstrip(HORIZONTAL_WS)
        if not value:
            return AliasDefinition(name=name, command="")

        if value[0] in QUOTES:
            command = _quoted_body(value)
        else:
            comment = value.find("#")
            command = value if comment == -1 else value[:comment]
            command = command.rstrip(HORIZONTAL_WS)

        return AliasDefinition(name=name, command=unescape(command))

    def render(self, definition: AliasDefinition) -> str:
        """Format a definition for this dialect, or '' if it is invalid"""
        if not (self.validate_name(definition.name) and self.validate_command(definition.command)):
            return ""

        escaped = escape(definition.command)
        dialect = self.dialect
        if dialect in (ShellDialect.BASH, ShellDialect.ZSH, ShellDialect.UNKNOWN):
            quote = '"' if "'" in definition.command else "'"
            return f"{KEYWORD} {definition.name}={quote}{escaped}{quote}"
        elif dialect is ShellDialect.FISH:
            return f"{KEYWORD} {definition.name} '{escaped}'"
        raise ValueError(f"Unsupported shell dialect: {dialect!r}")


def _quoted_body(value: str) -> str:
    """Text between the opening quote and its unescaped partner.

    An unterminated quote runs to the end of the line.
    """
    quote = value[0]
    i = 1
    while i < len(value):
        c = value[i]
        if c == "\\":
            i += 2
            continue
        if c == quote:
            return value[1:i]
        i += 1
    return value[1:]
