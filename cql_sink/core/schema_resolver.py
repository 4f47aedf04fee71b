"""Resolve configured keyspace and table names against a schema snapshot.

Lookup rules:
    1. Exact lookup of the configured name (internal, case-sensitive form).
    2. On miss, lookup of the lower-cased name. A hit here means the user
       most likely typed a mixed-case name for an unquoted (lower-case)
       object, so the error names the object that was found.
    3. Otherwise the error just says the object was not found.

The exact form always wins: a suggestion is only produced when step 1
fails. Nothing is cached; each call reads the snapshot it is given.
"""

from __future__ import annotations

from cql_sink.core.schema import KeyspaceMetadata, SchemaSnapshot, TableMetadata
from cql_sink.core.topic_config import ConfigError, TopicConfig


def resolve_keyspace(schema: SchemaSnapshot, name: str, setting: str) -> KeyspaceMetadata:
    """Look up a keyspace by its configured name.

    Args:
        schema: Schema snapshot.
        name: Keyspace name as configured.
        setting: Setting key, used in error messages.

    Returns:
        The keyspace metadata.

    Raises:
        ConfigError: If no keyspace matches exactly.
    """
    keyspace = schema.get_keyspace(name)
    if keyspace is not None:
        return keyspace

    candidate = schema.get_keyspace(name.lower())
    if candidate is not None:
        raise ConfigError(setting, name, _suggestion("Keyspace", "keyspace", candidate.name))
    raise ConfigError(setting, f'"{name}"', "Not found")


def resolve_table(keyspace: KeyspaceMetadata, name: str, setting: str) -> TableMetadata:
    """Look up a table by its configured name within a keyspace.

    Raises:
        ConfigError: If no table matches exactly.
    """
    table = keyspace.get_table(name)
    if table is not None:
        return table

    candidate = keyspace.get_table(name.lower())
    if candidate is not None:
        raise ConfigError(setting, name, _suggestion("Table", "table", candidate.name))
    raise ConfigError(setting, f'"{name}"', "Not found")


def resolve_topic_table(schema: SchemaSnapshot, topic_config: TopicConfig) -> TableMetadata:
    """Resolve the keyspace and table a topic writes to."""
    keyspace = resolve_keyspace(schema, topic_config.keyspace, topic_config.keyspace_setting)
    return resolve_table(keyspace, topic_config.table, topic_config.table_setting)


def _suggestion(kind: str, kind_lower: str, found: str) -> str:
    return (
        f"{kind} does not exist, however a {kind_lower} {found} was found. "
        + f"Update the config to use {found} if desired."
    )
