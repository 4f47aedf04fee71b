"""Schema resolution, mapping validation and CQL statement generation."""

from cql_sink.core.mapping_validator import validate_mapping_columns
from cql_sink.core.primary_keys import compute_primary_keys
from cql_sink.core.statement_builder import (
    build_topic_statements,
    make_delete_statement,
    make_insert_statement,
    make_update_counter_statement,
    make_update_statement,
)
from cql_sink.core.topic_config import ConfigError

__all__ = [
    "ConfigError",
    "build_topic_statements",
    "compute_primary_keys",
    "make_delete_statement",
    "make_insert_statement",
    "make_update_counter_statement",
    "make_update_statement",
    "validate_mapping_columns",
]
