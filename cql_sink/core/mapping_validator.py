"""Check a topic mapping against the columns of its target table.

A mapping is valid when every mapped column exists in the table and every
primary key column is mapped. Non-key columns may be left out; the
validator reports whether the mapping covers the whole table, which decides
between INSERT and a partial UPDATE and whether deletes can be prepared.
"""

from __future__ import annotations

from typing import NoReturn

from cql_sink.core.identifiers import TIMESTAMP_VARNAME, render
from cql_sink.core.primary_keys import primary_key_names
from cql_sink.core.schema import SchemaSnapshot, TableMetadata
from cql_sink.core.schema_resolver import resolve_topic_table
from cql_sink.core.topic_config import ConfigError, TopicConfig


def validate_mapping_columns(schema: SchemaSnapshot, topic_config: TopicConfig) -> bool:
    """Validate a topic mapping against the live table definition.

    Args:
        schema: Schema snapshot.
        topic_config: Topic configuration holding the mapping.

    Returns:
        True if every table column is mapped, False if only the primary key
        and some of the other columns are.

    Raises:
        ConfigError: If the keyspace/table cannot be resolved, a mapped
            column does not exist, a primary key column is not mapped, or
            the mapping is otherwise unusable.
    """
    table = resolve_topic_table(schema, topic_config)
    return validate_mapping_against_table(topic_config, table)


def validate_mapping_against_table(topic_config: TopicConfig, table: TableMetadata) -> bool:
    """Validate a topic mapping against an already resolved table.

    See validate_mapping_columns() for the contract.
    """
    mapping = topic_config.mapping

    unknown = [column for column in mapping.columns if table.get_column(column) is None]
    if unknown:
        _fail(
            topic_config,
            "the following mapped fields do not exist in table "
            + f"{render(topic_config.table)}: {_join(unknown)}",
        )

    key_names = primary_key_names(table)
    if TIMESTAMP_VARNAME in key_names:
        _fail(
            topic_config,
            f"table {render(topic_config.table)} has a primary key column named "
            + f"{TIMESTAMP_VARNAME}, which is reserved for the write timestamp bind "
            + "variable; the table cannot be written by this sink",
        )

    if TIMESTAMP_VARNAME in mapping:
        _fail(
            topic_config,
            f"column {TIMESTAMP_VARNAME} cannot be mapped, its name is reserved "
            + "for the write timestamp bind variable",
        )

    missing_keys = [key for key in key_names if key not in mapping]
    if missing_keys:
        _fail(
            topic_config,
            "the following columns are part of the primary key but are not mapped: "
            + _join(missing_keys),
        )

    regular = [column for column in mapping.columns if column not in key_names]
    counters = [column for column in regular if _is_counter(table, column)]
    if counters and len(counters) != len(regular):
        plain = [column for column in regular if column not in counters]
        _fail(
            topic_config,
            "counter and non-counter columns cannot be mapped together; "
            + f"counter columns: {_join(counters)}, other columns: {_join(plain)}",
        )
    if table.has_counter_columns and not counters:
        _fail(
            topic_config,
            f"table {render(topic_config.table)} is a counter table; "
            + "map at least one counter column",
        )

    return set(mapping.columns) == set(table.columns)


def _is_counter(table: TableMetadata, column: str) -> bool:
    metadata = table.get_column(column)
    return metadata is not None and metadata.is_counter


def _join(columns: list[str]) -> str:
    return ", ".join(render(column) for column in columns)


def _fail(topic_config: TopicConfig, message: str) -> NoReturn:
    raise ConfigError(topic_config.mapping_setting, topic_config.mapping_string, message)
