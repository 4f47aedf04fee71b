"""Tests for keyspace/table resolution and case-mismatch diagnostics."""

from collections.abc import Callable

import pytest

from cql_sink.core.schema import ClusterSchema, KeyspaceMetadata, TableMetadata
from cql_sink.core.schema_resolver import (
    resolve_keyspace,
    resolve_table,
    resolve_topic_table,
)
from cql_sink.core.topic_config import ConfigError, TopicConfig

_KS_SETTING = "topic.mytopic.keyspace"
_TABLE_SETTING = "topic.mytopic.table"


class TestResolveKeyspace:
    """Tests for resolve_keyspace()."""

    def test_exact_match(self, make_schema: Callable[..., ClusterSchema]) -> None:
        keyspace = resolve_keyspace(make_schema(), "myks", _KS_SETTING)
        assert keyspace.name == "myks"

    def test_suggests_lower_case_keyspace(
        self, make_schema: Callable[..., ClusterSchema],
    ) -> None:
        with pytest.raises(ConfigError) as exc_info:
            resolve_keyspace(make_schema(), "MyKs", _KS_SETTING)
        assert str(exc_info.value) == (
            "Invalid value MyKs for configuration topic.mytopic.keyspace: "
            "Keyspace does not exist, however a keyspace myks was found. "
            "Update the config to use myks if desired."
        )

    def test_not_found(self, make_schema: Callable[..., ClusterSchema]) -> None:
        with pytest.raises(ConfigError) as exc_info:
            resolve_keyspace(make_schema(), "Other", _KS_SETTING)
        assert str(exc_info.value) == (
            'Invalid value "Other" for configuration topic.mytopic.keyspace: Not found'
        )

    def test_exact_case_wins_over_lower_case(
        self,
        make_schema: Callable[..., ClusterSchema],
        make_table: Callable[..., TableMetadata],
    ) -> None:
        schema = make_schema(make_table(keyspace="myks"), make_table(keyspace="MyKs"))
        assert resolve_keyspace(schema, "MyKs", _KS_SETTING).name == "MyKs"
        assert resolve_keyspace(schema, "myks", _KS_SETTING).name == "myks"

    def test_lower_case_name_does_not_match_mixed_case_keyspace(
        self,
        make_schema: Callable[..., ClusterSchema],
        make_table: Callable[..., TableMetadata],
    ) -> None:
        schema = make_schema(make_table(keyspace="MyKs"))
        with pytest.raises(ConfigError, match="Not found"):
            resolve_keyspace(schema, "myks", _KS_SETTING)


class TestResolveTable:
    """Tests for resolve_table()."""

    @pytest.fixture()
    def keyspace(
        self,
        make_schema: Callable[..., ClusterSchema],
        make_table: Callable[..., TableMetadata],
    ) -> KeyspaceMetadata:
        schema = make_schema(make_table(keyspace="ks1", name="mytable"))
        keyspace = schema.get_keyspace("ks1")
        assert keyspace is not None
        return keyspace

    def test_exact_match(self, keyspace: KeyspaceMetadata) -> None:
        assert resolve_table(keyspace, "mytable", _TABLE_SETTING).name == "mytable"

    def test_suggests_lower_case_table(self, keyspace: KeyspaceMetadata) -> None:
        with pytest.raises(ConfigError) as exc_info:
            resolve_table(keyspace, "MyTable", _TABLE_SETTING)
        assert str(exc_info.value) == (
            "Invalid value MyTable for configuration topic.mytopic.table: "
            "Table does not exist, however a table mytable was found. "
            "Update the config to use mytable if desired."
        )

    def test_not_found(self, keyspace: KeyspaceMetadata) -> None:
        with pytest.raises(ConfigError) as exc_info:
            resolve_table(keyspace, "Nope", _TABLE_SETTING)
        assert str(exc_info.value) == (
            'Invalid value "Nope" for configuration topic.mytopic.table: Not found'
        )
        assert exc_info.value.name == _TABLE_SETTING


class TestResolveTopicTable:
    """Tests for resolve_topic_table()."""

    def test_resolves_both(
        self,
        make_schema: Callable[..., ClusterSchema],
        make_topic_config: Callable[..., TopicConfig],
    ) -> None:
        table = resolve_topic_table(
            make_schema(), make_topic_config("myks", "mytable", "c1=value.f1"),
        )
        assert (table.keyspace, table.name) == ("myks", "mytable")

    def test_keyspace_error_uses_topic_setting(
        self,
        make_schema: Callable[..., ClusterSchema],
        make_topic_config: Callable[..., TopicConfig],
    ) -> None:
        with pytest.raises(ConfigError, match=r"configuration topic\.mytopic\.keyspace"):
            resolve_topic_table(
                make_schema(), make_topic_config("MyKs", "mytable", "c1=value.f1"),
            )
