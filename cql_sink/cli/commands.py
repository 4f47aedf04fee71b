#!/usr/bin/env python3
"""CQL Sink CLI - Main Entry Point.

Usage:
    cql-sink <command> --config sink.yaml --schema schema.yaml [options]

Commands:
    validate        Check every topic mapping against the schema snapshot
    primary-keys    Show the primary key of each configured table
    generate        Print the CQL statements prepared for each topic

Exit codes:
    0  all topics are valid
    1  at least one topic failed validation
    2  a file could not be loaded
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from cql_sink.core.mapping_validator import validate_mapping_columns
from cql_sink.core.primary_keys import compute_primary_keys
from cql_sink.core.schema import ClusterSchema, load_schema_file
from cql_sink.core.statement_builder import build_topic_statements
from cql_sink.core.topic_config import ConfigError, SinkConfig, TopicConfig, load_sink_config
from cql_sink.helpers.helpers_logging import (
    print_cql,
    print_error,
    print_header,
    print_info,
    print_success,
    print_warning,
)

_EXIT_INVALID = 1
_EXIT_LOAD_ERROR = 2

_config_option = click.option(
    "--config", "config_path", required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Sink settings YAML (topic.<topic>.<option> keys)",
)
_schema_option = click.option(
    "--schema", "schema_path", required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Schema snapshot YAML",
)
_topic_option = click.option(
    "--topic", "topics", multiple=True,
    help="Only process this topic (repeatable)",
)


def _load_inputs(config_path: Path, schema_path: Path) -> tuple[SinkConfig, ClusterSchema]:
    """Load sink settings and schema, turning load failures into ClickException."""
    try:
        sink_config = load_sink_config(config_path)
        schema = load_schema_file(schema_path)
    except (FileNotFoundError, ValueError) as e:
        exc = click.ClickException(str(e))
        exc.exit_code = _EXIT_LOAD_ERROR
        raise exc from e
    return sink_config, schema


def _selected_topics(sink_config: SinkConfig, topics: tuple[str, ...]) -> list[TopicConfig]:
    if not sink_config.topic_configs:
        print_warning("No topic.* settings found in the sink config")
        return []

    unknown = [topic for topic in topics if topic not in sink_config.topic_configs]
    if unknown:
        exc = click.ClickException(f"Unknown topic(s): {', '.join(unknown)}")
        exc.exit_code = _EXIT_LOAD_ERROR
        raise exc

    return [
        config for name, config in sink_config.topic_configs.items()
        if not topics or name in topics
    ]


@click.group()
def _click_cli() -> None:
    """Validate Kafka topic mappings and generate sink CQL statements."""


@_click_cli.command(name="validate", help="Check topic mappings against the schema")
@_config_option
@_schema_option
@_topic_option
def validate_cmd(config_path: Path, schema_path: Path, topics: tuple[str, ...]) -> int:
    sink_config, schema = _load_inputs(config_path, schema_path)
    print_header(f"Validating {config_path} against {schema_path}")

    failures = 0
    for topic_config in _selected_topics(sink_config, topics):
        try:
            all_mapped = validate_mapping_columns(schema, topic_config)
        except ConfigError as e:
            failures += 1
            print_error(f"{topic_config.topic}: {e}")
            continue

        if all_mapped:
            print_success(f"{topic_config.topic}: all columns mapped")
        else:
            print_success(f"{topic_config.topic}: primary key mapped (partial mapping)")

    if failures:
        print_info(f"\n{failures} topic(s) failed validation")
        return _EXIT_INVALID
    return 0


@_click_cli.command(name="primary-keys", help="Show the primary key of each table")
@_config_option
@_schema_option
def primary_keys_cmd(config_path: Path, schema_path: Path) -> int:
    sink_config, schema = _load_inputs(config_path, schema_path)
    try:
        primary_keys = compute_primary_keys(schema, sink_config)
    except ConfigError as e:
        print_error(str(e))
        return _EXIT_INVALID

    for table, keys in primary_keys.items():
        print_info(f"{table}: {', '.join(keys)}")
    return 0


@_click_cli.command(name="generate", help="Print the CQL prepared for each topic")
@_config_option
@_schema_option
@_topic_option
def generate_cmd(config_path: Path, schema_path: Path, topics: tuple[str, ...]) -> int:
    sink_config, schema = _load_inputs(config_path, schema_path)

    failures = 0
    for topic_config in _selected_topics(sink_config, topics):
        try:
            statements = build_topic_statements(schema, topic_config)
        except ConfigError as e:
            failures += 1
            print_error(f"{topic_config.topic}: {e}")
            continue

        print_header(f"{statements.topic} ({statements.kind.value})")
        print_cql(statements.kind.value, statements.statement.cql)
        print_cql("binds", ", ".join(statements.statement.bind_variables))
        if statements.delete_statement is not None:
            print_cql("delete", statements.delete_statement.cql)

    return _EXIT_INVALID if failures else 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    try:
        result = _click_cli.main(
            args=sys.argv[1:] if argv is None else argv,
            prog_name="cql-sink",
            standalone_mode=False,
        )
    except click.Abort:
        print("\n⚠️  Cancelled by user")
        return 130
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    return 0 if result is None else int(result)


if __name__ == "__main__":
    sys.exit(main())
