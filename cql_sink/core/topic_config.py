"""Per-topic sink configuration.

Settings use the Kafka Connect property layout, one key per topic option:

    topic.<topic>.keyspace         Target keyspace (required)
    topic.<topic>.table            Target table (required)
    topic.<topic>.mapping          Column-to-field mapping (required)
    topic.<topic>.ttl              TTL in seconds, -1 for none (default -1)
    topic.<topic>.deletesEnabled   Prepare DELETE statements (default true)

Mapping syntax:
    col1=value.f1, "Quoted Col"=value.f2, c3=key

Whitespace around ``,`` and ``=`` is ignored. The column side is either a
literal name or a double-quoted name (``""`` escapes a quote); the field side
is passed through untouched.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path

from cql_sink.core.identifiers import read_quoted_identifier, render
from cql_sink.helpers.yaml_loader import load_yaml_file

KEYSPACE_OPT = "keyspace"
TABLE_OPT = "table"
MAPPING_OPT = "mapping"
TTL_OPT = "ttl"
DELETES_ENABLED_OPT = "deletesEnabled"

TOPIC_OPTIONS = frozenset({
    KEYSPACE_OPT, TABLE_OPT, MAPPING_OPT, TTL_OPT, DELETES_ENABLED_OPT,
})

_TOPIC_PREFIX = "topic."
_NO_TTL = -1


class ConfigError(ValueError):
    """Invalid configuration value.

    The string form follows Kafka's ConfigException:
    ``Invalid value <value> for configuration <name>[: <message>]``.
    """

    def __init__(self, name: str, value: object, message: str | None = None) -> None:
        text = f"Invalid value {value} for configuration {name}"
        if message:
            text += f": {message}"
        super().__init__(text)
        self.name = name
        self.value = value
        self.message = message


def topic_setting_name(topic: str, option: str) -> str:
    """Build the full setting key for a topic option.

    Example:
        >>> topic_setting_name("mytopic", "keyspace")
        'topic.mytopic.keyspace'
    """
    return f"{_TOPIC_PREFIX}{topic}.{option}"


# ---------------------------------------------------------------------------
# Column mapping
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ColumnMapping:
    """Ordered (column, field) pairs, unique by column."""

    entries: tuple[tuple[str, str], ...]

    def __post_init__(self) -> None:
        seen: set[str] = set()
        duplicates: list[str] = []
        for column, _field in self.entries:
            if column in seen and column not in duplicates:
                duplicates.append(column)
            seen.add(column)
        if duplicates:
            names = ", ".join(render(c) for c in duplicates)
            raise ValueError(f"columns mapped more than once: {names}")

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, column: object) -> bool:
        return any(column == c for c, _field in self.entries)

    @property
    def columns(self) -> list[str]:
        return [column for column, _field in self.entries]

    def field_for(self, column: str) -> str | None:
        for c, field_ref in self.entries:
            if c == column:
                return field_ref
        return None


def parse_mapping(raw: str, setting: str) -> ColumnMapping:
    """Parse a mapping string into a ColumnMapping.

    Args:
        raw: Mapping string (e.g. ``c1=value.f1, "My Col"=value.f2``).
        setting: Setting key, used in error messages.

    Returns:
        ColumnMapping in declaration order.

    Raises:
        ConfigError: If the string is empty or malformed, or maps a column
            twice.
    """
    if not raw.strip():
        raise ConfigError(setting, raw, "mapping must not be empty")

    entries: list[tuple[str, str]] = []
    pos = 0
    while True:
        column, pos = _read_column(raw, pos, setting)
        pos = _skip_spaces(raw, pos)
        if pos >= len(raw) or raw[pos] != "=":
            raise ConfigError(
                setting, raw, f"expected '=' after column {render(column)}",
            )

        end = raw.find(",", pos + 1)
        if end == -1:
            end = len(raw)
        field_ref = raw[pos + 1:end].strip()
        if not field_ref:
            raise ConfigError(
                setting, raw, f"missing field for column {render(column)}",
            )
        entries.append((column, field_ref))

        if end == len(raw):
            break
        pos = end + 1

    try:
        return ColumnMapping(tuple(entries))
    except ValueError as e:
        raise ConfigError(setting, raw, str(e)) from e


def _skip_spaces(raw: str, pos: int) -> int:
    while pos < len(raw) and raw[pos].isspace():
        pos += 1
    return pos


def _read_column(raw: str, pos: int, setting: str) -> tuple[str, int]:
    """Read the column side of one mapping entry."""
    pos = _skip_spaces(raw, pos)
    if pos >= len(raw):
        raise ConfigError(setting, raw, f"expected a column name at position {pos}")

    if raw[pos] == '"':
        try:
            return read_quoted_identifier(raw, pos)
        except ValueError as e:
            raise ConfigError(setting, raw, str(e)) from e

    end = pos
    while end < len(raw) and raw[end] not in "=,":
        end += 1
    column = raw[pos:end].strip()
    if not column:
        raise ConfigError(setting, raw, f"expected a column name at position {pos}")
    return column, end


# ---------------------------------------------------------------------------
# Topic / sink configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TopicConfig:
    """Sink settings for one Kafka topic.

    Attributes:
        topic: Topic name.
        keyspace: Keyspace name as configured.
        table: Table name as configured.
        mapping: Parsed column mapping.
        mapping_string: Raw mapping string, echoed in error messages.
        ttl: TTL in seconds; -1 means no TTL clause.
        deletes_enabled: Whether a DELETE statement is prepared.
    """

    topic: str
    keyspace: str
    table: str
    mapping: ColumnMapping
    mapping_string: str
    ttl: int = _NO_TTL
    deletes_enabled: bool = True

    def setting_name(self, option: str) -> str:
        return topic_setting_name(self.topic, option)

    @property
    def keyspace_setting(self) -> str:
        return self.setting_name(KEYSPACE_OPT)

    @property
    def table_setting(self) -> str:
        return self.setting_name(TABLE_OPT)

    @property
    def mapping_setting(self) -> str:
        return self.setting_name(MAPPING_OPT)

    @property
    def has_ttl(self) -> bool:
        return self.ttl >= 0

    @classmethod
    def from_settings(cls, topic: str, settings: Mapping[str, object]) -> TopicConfig:
        """Build a TopicConfig from flat ``topic.<topic>.<option>`` settings.

        Raises:
            ConfigError: If a required option is missing or a value is invalid.
        """
        keyspace = _required(settings, topic_setting_name(topic, KEYSPACE_OPT))
        table = _required(settings, topic_setting_name(topic, TABLE_OPT))
        mapping_setting = topic_setting_name(topic, MAPPING_OPT)
        mapping_string = _required(settings, mapping_setting)

        return cls(
            topic=topic,
            keyspace=keyspace,
            table=table,
            mapping=parse_mapping(mapping_string, mapping_setting),
            mapping_string=mapping_string,
            ttl=_parse_ttl(settings, topic_setting_name(topic, TTL_OPT)),
            deletes_enabled=_parse_bool(
                settings, topic_setting_name(topic, DELETES_ENABLED_OPT), default=True,
            ),
        )


def _required(settings: Mapping[str, object], name: str) -> str:
    value = settings.get(name)
    if value is None or not str(value).strip():
        raise ConfigError(name, value, "Missing required configuration")
    return str(value).strip()


def _parse_ttl(settings: Mapping[str, object], name: str) -> int:
    value = settings.get(name)
    if value is None:
        return _NO_TTL
    if isinstance(value, bool):
        raise ConfigError(name, value, "must be an integer")
    try:
        ttl = int(str(value).strip())
    except ValueError as e:
        raise ConfigError(name, value, "must be an integer") from e
    if ttl < _NO_TTL:
        raise ConfigError(name, value, "must be -1 (no TTL) or a non-negative number of seconds")
    return ttl


def _parse_bool(settings: Mapping[str, object], name: str, *, default: bool) -> bool:
    value = settings.get(name)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("true", "false"):
        return text == "true"
    raise ConfigError(name, value, "must be true or false")


@dataclass(frozen=True)
class SinkConfig:
    """All topic configurations of one sink, keyed by topic name."""

    topic_configs: dict[str, TopicConfig]

    @property
    def topics(self) -> list[str]:
        return list(self.topic_configs)

    @classmethod
    def from_settings(cls, settings: Mapping[str, object]) -> SinkConfig:
        """Discover topics from ``topic.*`` keys and parse each of them.

        Keys outside the ``topic.`` namespace are ignored. Topic names may
        contain dots; the option is always the last key segment.

        Raises:
            ConfigError: If a topic key names an unknown option, or a topic
                configuration is invalid.
        """
        topics: list[str] = []
        for key in settings:
            if not key.startswith(_TOPIC_PREFIX):
                continue
            topic, _, option = key[len(_TOPIC_PREFIX):].rpartition(".")
            if not topic or option not in TOPIC_OPTIONS:
                allowed = ", ".join(sorted(TOPIC_OPTIONS))
                raise ConfigError(
                    key, settings[key], f"unknown topic setting (expected one of: {allowed})",
                )
            if topic not in topics:
                topics.append(topic)

        return cls(topic_configs={
            topic: TopicConfig.from_settings(topic, settings) for topic in topics
        })


def load_sink_config(file_path: Path) -> SinkConfig:
    """Load sink settings from a flat YAML mapping.

    Example file:
        topic.orders.keyspace: shop
        topic.orders.table: orders
        topic.orders.mapping: "id=key, total=value.total"
        topic.orders.ttl: 3600

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigError: If any topic configuration is invalid.
    """
    return SinkConfig.from_settings(load_yaml_file(file_path))
