"""Read-only cluster schema snapshot.

The sink never talks to the cluster from here; callers hand in a snapshot
(built from driver metadata, or loaded from a YAML file) and every lookup
returns ``None`` when the object is absent.

Schema file layout:
    keyspaces:
      ks:
        tables:
          tbl:
            columns:
              c1: text
              c2: counter
            partition_key: [c1]
            clustering_columns: []

Example:
    >>> schema = load_schema_file(Path("schema.yaml"))
    >>> table = schema.get_keyspace("ks").get_table("tbl")
    >>> [c.name for c in table.primary_key]
    ['c1']
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol, cast

from cql_sink.helpers.yaml_loader import load_yaml_file

COUNTER_TYPE = "counter"


@dataclass(frozen=True)
class ColumnMetadata:
    """A table column.

    Attributes:
        name: Column name in internal (case-preserving) form.
        cql_type: Declared CQL type, lower-cased (e.g. 'text', 'counter').
    """

    name: str
    cql_type: str

    @property
    def is_counter(self) -> bool:
        return self.cql_type == COUNTER_TYPE


@dataclass(frozen=True)
class TableMetadata:
    """A table and its key layout.

    Attributes:
        keyspace: Owning keyspace name.
        name: Table name.
        columns: Columns by name, in declaration order.
        partition_key: Partition key column names, in declaration order.
        clustering_columns: Clustering column names, in declaration order.
    """

    keyspace: str
    name: str
    columns: dict[str, ColumnMetadata]
    partition_key: list[str]
    clustering_columns: list[str] = field(default_factory=list[str])

    def __post_init__(self) -> None:
        missing = [
            key for key in [*self.partition_key, *self.clustering_columns]
            if key not in self.columns
        ]
        if missing:
            msg = (
                f"Table {self.keyspace}.{self.name}: primary key columns "
                + f"not declared as columns: {', '.join(missing)}"
            )
            raise ValueError(msg)

    def get_column(self, name: str) -> ColumnMetadata | None:
        return self.columns.get(name)

    @property
    def primary_key(self) -> list[ColumnMetadata]:
        """Primary key columns: partition key first, then clustering columns."""
        return [
            self.columns[key]
            for key in [*self.partition_key, *self.clustering_columns]
        ]

    @property
    def has_counter_columns(self) -> bool:
        return any(col.is_counter for col in self.columns.values())


@dataclass(frozen=True)
class KeyspaceMetadata:
    """A keyspace and its tables."""

    name: str
    tables: dict[str, TableMetadata] = field(default_factory=dict[str, TableMetadata])

    def get_table(self, name: str) -> TableMetadata | None:
        return self.tables.get(name)


class SchemaSnapshot(Protocol):
    """Anything that can look up keyspaces by exact (internal) name."""

    def get_keyspace(self, name: str) -> KeyspaceMetadata | None:
        ...


@dataclass(frozen=True)
class ClusterSchema:
    """In-memory schema snapshot."""

    keyspaces: dict[str, KeyspaceMetadata] = field(
        default_factory=dict[str, KeyspaceMetadata],
    )

    def get_keyspace(self, name: str) -> KeyspaceMetadata | None:
        return self.keyspaces.get(name)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClusterSchema:
        """Build a snapshot from the schema file structure.

        Args:
            data: Parsed schema file (top-level ``keyspaces`` mapping).

        Returns:
            ClusterSchema with every keyspace, table and column.

        Raises:
            ValueError: If a section has the wrong shape or a table has no
                partition key.
        """
        keyspaces_raw = data.get("keyspaces", {})
        if not isinstance(keyspaces_raw, dict):
            raise ValueError("'keyspaces' must be a mapping")

        keyspaces: dict[str, KeyspaceMetadata] = {}
        for ks_name, ks_raw in cast(dict[Any, Any], keyspaces_raw).items():
            ks_data = cast(dict[str, Any], ks_raw or {})
            tables_raw = ks_data.get("tables", {})
            if not isinstance(tables_raw, dict):
                raise ValueError(f"Keyspace {ks_name}: 'tables' must be a mapping")

            tables: dict[str, TableMetadata] = {}
            for table_name, table_raw in cast(dict[Any, Any], tables_raw).items():
                tables[str(table_name)] = _table_from_dict(
                    str(ks_name), str(table_name), cast(dict[str, Any], table_raw or {}),
                )
            keyspaces[str(ks_name)] = KeyspaceMetadata(name=str(ks_name), tables=tables)

        return cls(keyspaces=keyspaces)


def _table_from_dict(
    keyspace: str,
    table_name: str,
    data: dict[str, Any],
) -> TableMetadata:
    """Build one TableMetadata from its schema file entry."""
    columns_raw = data.get("columns", {})
    if not isinstance(columns_raw, dict) or not columns_raw:
        raise ValueError(f"Table {keyspace}.{table_name}: 'columns' must be a non-empty mapping")

    columns = {
        str(name): ColumnMetadata(name=str(name), cql_type=str(cql_type).strip().lower())
        for name, cql_type in cast(dict[Any, Any], columns_raw).items()
    }

    partition_key = _name_list(data.get("partition_key"))
    if not partition_key:
        raise ValueError(f"Table {keyspace}.{table_name}: 'partition_key' is required")

    return TableMetadata(
        keyspace=keyspace,
        name=table_name,
        columns=columns,
        partition_key=partition_key,
        clustering_columns=_name_list(data.get("clustering_columns")),
    )


def _name_list(raw: object) -> list[str]:
    """Normalize a single name or list of names to a list."""
    if raw is None:
        return []
    if isinstance(raw, str):
        return [raw]
    if isinstance(raw, list):
        return [str(item) for item in cast(list[object], raw)]
    raise ValueError(f"Expected a column name or list of names, got {raw!r}")


def load_schema_file(file_path: Path) -> ClusterSchema:
    """Load a schema snapshot from a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file structure is invalid.
    """
    return ClusterSchema.from_dict(load_yaml_file(file_path))
