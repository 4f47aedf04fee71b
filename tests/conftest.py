"""Shared fixtures for the CQL sink test suite.

Every test works against the same small table unless it asks otherwise:

    myks.mytable
        c1                                                          text
        "This is column 2, and its name desperately needs quoting"  text
        c3                                                          text
    primary key (c1)
"""

from __future__ import annotations

from collections.abc import Callable

import pytest

from cql_sink.core.schema import (
    ClusterSchema,
    ColumnMetadata,
    KeyspaceMetadata,
    TableMetadata,
)
from cql_sink.core.topic_config import SinkConfig, TopicConfig, topic_setting_name

C1 = "c1"
C2 = "This is column 2, and its name desperately needs quoting"
C3 = "c3"

TOPIC = "mytopic"

MakeTable = Callable[..., TableMetadata]
MakeSchema = Callable[..., ClusterSchema]
MakeSettings = Callable[..., dict[str, object]]


def _build_table(
    *,
    keyspace: str = "myks",
    name: str = "mytable",
    partition_key: list[str] | None = None,
    clustering_columns: list[str] | None = None,
    types: dict[str, str] | None = None,
) -> TableMetadata:
    column_types = {C1: "text", C2: "text", C3: "text", **(types or {})}
    return TableMetadata(
        keyspace=keyspace,
        name=name,
        columns={
            col: ColumnMetadata(name=col, cql_type=cql_type)
            for col, cql_type in column_types.items()
        },
        partition_key=partition_key if partition_key is not None else [C1],
        clustering_columns=clustering_columns or [],
    )


@pytest.fixture()
def make_table() -> MakeTable:
    """Factory for the default table, with optional key/type overrides."""
    return _build_table


@pytest.fixture()
def make_schema() -> MakeSchema:
    """Factory for a snapshot holding the given tables.

    Tables are grouped into keyspaces by their ``keyspace`` attribute.
    With no arguments the snapshot holds just the default table.
    """

    def _make(*tables: TableMetadata) -> ClusterSchema:
        keyspaces: dict[str, KeyspaceMetadata] = {}
        for table in tables or (_build_table(),):
            keyspace = keyspaces.setdefault(
                table.keyspace, KeyspaceMetadata(name=table.keyspace),
            )
            keyspace.tables[table.name] = table
        return ClusterSchema(keyspaces=keyspaces)

    return _make


@pytest.fixture()
def make_settings() -> MakeSettings:
    """Factory for flat ``topic.mytopic.*`` settings."""

    def _make(
        keyspace: str,
        table: str,
        mapping: str,
        ttl: int = -1,
        topic: str = TOPIC,
    ) -> dict[str, object]:
        return {
            topic_setting_name(topic, "keyspace"): keyspace,
            topic_setting_name(topic, "table"): table,
            topic_setting_name(topic, "mapping"): mapping,
            topic_setting_name(topic, "ttl"): str(ttl),
        }

    return _make


@pytest.fixture()
def make_config(make_settings: MakeSettings) -> Callable[..., SinkConfig]:
    """Factory for a SinkConfig with a single topic."""

    def _make(keyspace: str, table: str, mapping: str, ttl: int = -1) -> SinkConfig:
        return SinkConfig.from_settings(make_settings(keyspace, table, mapping, ttl))

    return _make


@pytest.fixture()
def make_topic_config(make_config: Callable[..., SinkConfig]) -> Callable[..., TopicConfig]:
    """Factory for the ``mytopic`` TopicConfig."""

    def _make(keyspace: str, table: str, mapping: str, ttl: int = -1) -> TopicConfig:
        return make_config(keyspace, table, mapping, ttl).topic_configs[TOPIC]

    return _make


@pytest.fixture()
def full_mapping() -> str:
    """Mapping string covering every column of the default table."""
    return f'{C1}=key.f1, "{C2}"=key.f2, {C3}=key.f3'
