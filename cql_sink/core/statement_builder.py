"""CQL statement generation for sink topics.

Builds the parameterized statements a sink task prepares for a topic:

    INSERT          every table column is mapped (or only the primary key)
    UPDATE          some non-key columns are left out of the mapping
    UPDATE_COUNTER  the table has counter columns
    DELETE          deletes are enabled and every column is mapped

Column lists follow the mapping order; WHERE clauses follow the primary key
order (partition key, then clustering columns). Every identifier goes
through ``render`` so non-simple names are quoted.

Example:
    >>> make_insert_statement(config)
    'INSERT INTO ks.tbl(c1,"My Col") VALUES (:c1,:"My Col") USING TIMESTAMP :kafka_internal_timestamp'
    >>> make_delete_statement(config, table)
    'DELETE FROM ks.tbl WHERE c1 = :c1'
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from cql_sink.core.identifiers import (
    TIMESTAMP_VARNAME,
    extract_bind_variables,
    render,
    render_bind,
)
from cql_sink.core.mapping_validator import validate_mapping_against_table
from cql_sink.core.primary_keys import primary_key_names
from cql_sink.core.schema import SchemaSnapshot, TableMetadata
from cql_sink.core.schema_resolver import resolve_topic_table
from cql_sink.core.topic_config import TopicConfig
from cql_sink.helpers.helpers_logging import print_warning

__all__ = [
    "TIMESTAMP_VARNAME",
    "GeneratedStatement",
    "StatementKind",
    "TopicStatements",
    "build_topic_statements",
    "make_delete_statement",
    "make_insert_statement",
    "make_update_counter_statement",
    "make_update_statement",
    "statement_kind",
]


class StatementKind(Enum):
    """Shape of the write statement prepared for a topic."""

    INSERT = "insert"
    UPDATE = "update"
    UPDATE_COUNTER = "update_counter"


@dataclass(frozen=True)
class GeneratedStatement:
    """Statement text plus its bind variables in order of appearance."""

    cql: str
    bind_variables: tuple[str, ...]

    @classmethod
    def from_cql(cls, cql: str) -> GeneratedStatement:
        return cls(cql=cql, bind_variables=tuple(extract_bind_variables(cql)))


@dataclass(frozen=True)
class TopicStatements:
    """Statements prepared for one topic.

    Attributes:
        topic: Topic name.
        kind: Shape of the write statement.
        statement: The write statement.
        delete_statement: DELETE by primary key, when deletes apply.
        all_columns_mapped: Whether the mapping covers every table column.
    """

    topic: str
    kind: StatementKind
    statement: GeneratedStatement
    delete_statement: GeneratedStatement | None
    all_columns_mapped: bool


# ---------------------------------------------------------------------------
# Statement text
# ---------------------------------------------------------------------------


def make_insert_statement(topic_config: TopicConfig) -> str:
    """Build the INSERT statement for a fully mapped topic."""
    columns = topic_config.mapping.columns
    column_list = ",".join(render(column) for column in columns)
    bind_list = ",".join(render_bind(column) for column in columns)
    return (
        f"INSERT INTO {_qualified_table(topic_config)}({column_list}) "
        + f"VALUES ({bind_list}) {_write_options(topic_config)}"
    )


def make_update_statement(topic_config: TopicConfig, table: TableMetadata) -> str:
    """Build a plain UPDATE that only sets the mapped non-key columns."""
    assignments = ",".join(
        f"{render(column)} = {render_bind(column)}"
        for column in _regular_columns(topic_config, table)
    )
    return (
        f"UPDATE {_qualified_table(topic_config)} {_write_options(topic_config)} "
        + f"SET {assignments} WHERE {_where_clause(table)}"
    )


def make_update_counter_statement(topic_config: TopicConfig, table: TableMetadata) -> str:
    """Build the counter UPDATE; bound values are increments.

    Counter writes take no TTL or client timestamp.
    """
    assignments = ",".join(
        f"{render(column)} = {render(column)} + {render_bind(column)}"
        for column in _regular_columns(topic_config, table)
    )
    return (
        f"UPDATE {_qualified_table(topic_config)} SET {assignments} "
        + f"WHERE {_where_clause(table)}"
    )


def make_delete_statement(topic_config: TopicConfig, table: TableMetadata) -> str:
    """Build the DELETE-by-primary-key statement."""
    return f"DELETE FROM {_qualified_table(topic_config)} WHERE {_where_clause(table)}"


def _qualified_table(topic_config: TopicConfig) -> str:
    return f"{render(topic_config.keyspace)}.{render(topic_config.table)}"


def _write_options(topic_config: TopicConfig) -> str:
    options = f"USING TIMESTAMP {render_bind(TIMESTAMP_VARNAME)}"
    if topic_config.has_ttl:
        options += f" AND TTL {topic_config.ttl}"
    return options


def _where_clause(table: TableMetadata) -> str:
    return " AND ".join(
        f"{render(key)} = {render_bind(key)}" for key in primary_key_names(table)
    )


def _regular_columns(topic_config: TopicConfig, table: TableMetadata) -> list[str]:
    """Mapped columns that are not part of the primary key, in mapping order."""
    key_names = set(primary_key_names(table))
    return [column for column in topic_config.mapping.columns if column not in key_names]


# ---------------------------------------------------------------------------
# Per-topic planning
# ---------------------------------------------------------------------------


def statement_kind(topic_config: TopicConfig, table: TableMetadata) -> StatementKind:
    """Decide which write statement a topic needs.

    Args:
        topic_config: Topic configuration (assumed validated).
        table: Resolved target table.

    Returns:
        UPDATE_COUNTER for counter tables, INSERT if the mapping covers the
        table or only its primary key, else UPDATE.
    """
    if table.has_counter_columns:
        return StatementKind.UPDATE_COUNTER

    regular = _regular_columns(topic_config, table)
    if not regular or set(topic_config.mapping.columns) == set(table.columns):
        return StatementKind.INSERT
    return StatementKind.UPDATE


def build_topic_statements(schema: SchemaSnapshot, topic_config: TopicConfig) -> TopicStatements:
    """Validate a topic against the schema and build its statements.

    Args:
        schema: Schema snapshot.
        topic_config: Topic configuration.

    Returns:
        TopicStatements with the write statement and, when deletes are
        enabled on a fully mapped non-counter table, a DELETE statement.

    Raises:
        ConfigError: If resolution or mapping validation fails.
    """
    table = resolve_topic_table(schema, topic_config)
    all_mapped = validate_mapping_against_table(topic_config, table)
    kind = statement_kind(topic_config, table)

    if kind is StatementKind.UPDATE_COUNTER:
        if topic_config.has_ttl:
            print_warning(
                f"Topic {topic_config.topic}: ttl {topic_config.ttl} ignored, "
                + f"counter table {topic_config.keyspace}.{topic_config.table} "
                + "does not support TTL",
            )
        cql = make_update_counter_statement(topic_config, table)
    elif kind is StatementKind.UPDATE:
        cql = make_update_statement(topic_config, table)
    else:
        cql = make_insert_statement(topic_config)

    delete_statement = None
    if topic_config.deletes_enabled and all_mapped and kind is not StatementKind.UPDATE_COUNTER:
        delete_statement = GeneratedStatement.from_cql(
            make_delete_statement(topic_config, table),
        )

    return TopicStatements(
        topic=topic_config.topic,
        kind=kind,
        statement=GeneratedStatement.from_cql(cql),
        delete_statement=delete_statement,
        all_columns_mapped=all_mapped,
    )
