"""Primary key lookup per topic binding."""

from __future__ import annotations

from cql_sink.core.identifiers import render
from cql_sink.core.schema import SchemaSnapshot, TableMetadata
from cql_sink.core.schema_resolver import resolve_topic_table
from cql_sink.core.topic_config import SinkConfig


def primary_key_names(table: TableMetadata) -> list[str]:
    """Primary key column names, partition key first, then clustering columns."""
    return [column.name for column in table.primary_key]


def compute_primary_keys(
    schema: SchemaSnapshot,
    sink_config: SinkConfig,
) -> dict[str, list[str]]:
    """Compute the primary key of every table a topic writes to.

    Tables are resolved once per (keyspace, table) pair within a call;
    nothing is kept between calls.

    Args:
        schema: Schema snapshot.
        sink_config: Sink configuration with one entry per topic.

    Returns:
        Mapping of ``<keyspace>.<rendered table>`` to ordered primary key
        column names.

    Raises:
        ConfigError: If a keyspace or table cannot be resolved.

    Example:
        >>> compute_primary_keys(schema, config)
        {'ks1."MyTable"': ['c1', 'c3']}
    """
    resolved: dict[tuple[str, str], TableMetadata] = {}
    primary_keys: dict[str, list[str]] = {}

    for topic_config in sink_config.topic_configs.values():
        pair = (topic_config.keyspace, topic_config.table)
        table = resolved.get(pair)
        if table is None:
            table = resolve_topic_table(schema, topic_config)
            resolved[pair] = table

        key = f"{topic_config.keyspace}.{render(topic_config.table)}"
        primary_keys[key] = primary_key_names(table)

    return primary_keys
