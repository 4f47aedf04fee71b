"""Helper utilities for the CQL sink tooling."""

from cql_sink.helpers.helpers_logging import (
    print_error,
    print_info,
    print_success,
    print_warning,
)
from cql_sink.helpers.yaml_loader import load_yaml_file

__all__ = [
    "load_yaml_file",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
]
