"""Backslash escaping for alias commands.

This is not full shell quoting. It is a reversible encoding that is enough
to round-trip the commands the grammar wraps in quotes.
"""

RESERVED = frozenset("'\"\\$`!*?")


def escape(raw: str) -> str:
    """Put a backslash in front of every reserved character"""
    return "".join("\\" + c if c in RESERVED else c for c in raw)


def unescape(encoded: str) -> str:
    """Drop one backslash before any character; keep a trailing lone backslash"""
    out = []
    pending = False
    for c in encoded:
        if pending:
            out.append(c)
            pending = False
        elif c == "\\":
            pending = True
        else:
            out.append(c)
    if pending:
        out.append("\\")
    return "".join(out)
