"""YAML loading for sink configuration and schema snapshot files.

Both files are plain mappings; ruamel.yaml keeps their key order, which
matters for schema files (column declaration order).
"""

from pathlib import Path
from typing import Union, cast

from ruamel.yaml import YAML

# Recursive type for nested YAML structures
ConfigValue = Union[str, int, float, bool, None, 'ConfigDict', list['ConfigValue']]
ConfigDict = dict[str, ConfigValue]


def _create_yaml_loader() -> YAML:
    """Create the shared round-trip YAML instance.

    Returns:
        YAML loader that preserves mapping order.
    """
    yaml_obj = YAML()
    yaml_obj.preserve_quotes = True
    return yaml_obj


yaml = _create_yaml_loader()


def load_yaml_file(file_path: Path) -> ConfigDict:
    """Load a YAML mapping file.

    Args:
        file_path: Path to YAML file to load

    Returns:
        Top-level mapping; an empty file yields an empty dict.

    Raises:
        FileNotFoundError: If file does not exist
        ValueError: If the top level is not a mapping
    """
    if not file_path.exists():
        raise FileNotFoundError(f"YAML file not found: {file_path}")

    with file_path.open(encoding='utf-8') as f:
        raw: ConfigValue = yaml.load(f)

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"Expected a mapping at the top of {file_path}")
    return cast(ConfigDict, raw)
