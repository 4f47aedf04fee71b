"""
CQL Sink

Statement generation and schema/mapping validation for a Kafka to
Cassandra sink: resolves configured keyspaces and tables against a schema
snapshot, checks topic mappings and builds the parameterized CQL a sink
task prepares.
"""

__version__ = "0.1.0"

from cql_sink.core.statement_builder import build_topic_statements
from cql_sink.cli.commands import main

__all__ = [
    "build_topic_statements",
    "main",
]
