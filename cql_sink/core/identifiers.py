"""CQL identifier rendering and bind-variable scanning.

Identifiers are kept in their internal (case-preserving) form everywhere in
the package and only rendered when statement text is produced.

Rendering rules:
    - Simple identifiers (lower-case ASCII letters, digits and underscores,
      not starting with a digit) are emitted as-is.
    - Anything else is wrapped in double quotes, with embedded double quotes
      doubled.

Example:
    >>> render("c1")
    'c1'
    >>> render("My Col")
    '"My Col"'
"""

from __future__ import annotations

import re

_SIMPLE_IDENTIFIER = re.compile(r"[a-z_][a-z0-9_]*")
_BIND_NAME_CHAR = re.compile(r"[A-Za-z0-9_]")

# Bind variable carrying the record write time in INSERT/UPDATE statements.
TIMESTAMP_VARNAME = "kafka_internal_timestamp"


def is_simple_identifier(identifier: str) -> bool:
    """Check whether an identifier can be written unquoted in CQL."""
    return _SIMPLE_IDENTIFIER.fullmatch(identifier) is not None


def render(identifier: str) -> str:
    """Render an identifier for use in CQL text.

    Args:
        identifier: Internal form of a keyspace, table or column name.

    Returns:
        The identifier, double-quoted when it is not simple.
    """
    if is_simple_identifier(identifier):
        return identifier
    escaped = identifier.replace('"', '""')
    return f'"{escaped}"'


def render_bind(identifier: str) -> str:
    """Render a named bind marker (``:name`` or ``:"Quoted Name"``)."""
    return f":{render(identifier)}"


def extract_bind_variables(cql: str) -> list[str]:
    """List the named bind variables of a statement, left to right.

    Quoted markers are returned in internal form (quotes removed, doubled
    quotes collapsed). Colons inside single-quoted literals and inside
    quoted identifiers are skipped.

    Args:
        cql: Statement text.

    Returns:
        Bind variable names in order of appearance, duplicates included.

    Raises:
        ValueError: If a quoted identifier or bind marker is not terminated.
    """
    names: list[str] = []
    pos = 0
    length = len(cql)
    while pos < length:
        char = cql[pos]
        if char == "'":
            pos = _skip_string_literal(cql, pos)
            continue
        if char == '"':
            _identifier, pos = read_quoted_identifier(cql, pos)
            continue
        if char != ":" or pos + 1 >= length:
            pos += 1
            continue

        nxt = cql[pos + 1]
        if nxt == '"':
            name, pos = read_quoted_identifier(cql, pos + 1)
            names.append(name)
        elif _BIND_NAME_CHAR.match(nxt):
            end = pos + 1
            while end < length and _BIND_NAME_CHAR.match(cql[end]):
                end += 1
            names.append(cql[pos + 1:end])
            pos = end
        else:
            pos += 1
    return names


def _skip_string_literal(cql: str, start: int) -> int:
    """Return the index just past the single-quoted literal at ``start``."""
    pos = start + 1
    while pos < len(cql):
        if cql[pos] == "'":
            if cql.startswith("''", pos):
                pos += 2
                continue
            return pos + 1
        pos += 1
    return pos


def read_quoted_identifier(text: str, start: int) -> tuple[str, int]:
    """Read a double-quoted identifier starting at ``start``.

    Returns:
        Tuple of (unescaped identifier, index just past the closing quote).
    """
    chars: list[str] = []
    pos = start + 1
    while pos < len(text):
        char = text[pos]
        if char == '"':
            if text.startswith('""', pos):
                chars.append('"')
                pos += 2
                continue
            return "".join(chars), pos + 1
        chars.append(char)
        pos += 1
    raise ValueError(f"Unterminated quoted identifier at position {start}")
