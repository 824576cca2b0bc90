"""
Configuration loader.

This module provides the public API for loading and validating
reporter configuration from disk, YAML strings, or inline mappings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import yaml

from .models import ReporterConfig
from .parser import ConfigParser
from .validation import ConfigValidator, ValidationResult


def load_config(
    path: str | Path,
    environ: Mapping[str, str] | None = None,
) -> tuple[ReporterConfig | None, ValidationResult]:
    """
    Load and validate reporter configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file
        environ: Environment used for ``{{env.NAME}}`` interpolation
            (defaults to ``os.environ``)

    Returns:
        Tuple of (ReporterConfig or None, ValidationResult)
        If validation fails, ReporterConfig will be None.

    Example:
        config, result = load_config("reportbridge.yaml")
        if not result.is_valid:
            print(result)
            sys.exit(1)
    """
    path = Path(path)

    # Check file exists
    if not path.exists():
        result = ValidationResult()
        result.add_error(
            str(path),
            "File not found",
            suggestion="Check the file path is correct"
        )
        return None, result

    # Parse YAML
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        result = ValidationResult()
        result.add_error(
            str(path),
            f"Invalid YAML syntax: {e}",
            suggestion="Check YAML formatting (indentation, colons, etc.)"
        )
        return None, result

    # An empty file means "all defaults"
    if data is None:
        data = {}

    if not isinstance(data, dict):
        result = ValidationResult()
        result.add_error(
            str(path),
            "File must contain a YAML object (not a list or scalar)",
            value=type(data).__name__
        )
        return None, result

    return config_from_dict(data, environ)


def validate_config_yaml(
    yaml_string: str,
    environ: Mapping[str, str] | None = None,
) -> tuple[ReporterConfig | None, ValidationResult]:
    """
    Validate reporter configuration from a YAML string (useful for testing).

    Args:
        yaml_string: YAML content as a string
        environ: Environment used for interpolation

    Returns:
        Tuple of (ReporterConfig or None, ValidationResult)
    """
    try:
        data = yaml.safe_load(yaml_string)
    except yaml.YAMLError as e:
        result = ValidationResult()
        result.add_error("yaml", f"Invalid YAML syntax: {e}")
        return None, result

    if data is None:
        data = {}

    if not isinstance(data, dict):
        result = ValidationResult()
        result.add_error(
            "yaml",
            "Content must be a YAML object",
            value=type(data).__name__
        )
        return None, result

    return config_from_dict(data, environ)


def config_from_dict(
    data: dict[str, Any],
    environ: Mapping[str, str] | None = None,
) -> tuple[ReporterConfig | None, ValidationResult]:
    """
    Validate and parse an inline configuration mapping.

    This is the entry point used when the host test runner hands the
    plugin its options directly instead of through a file.
    """
    validator = ConfigValidator(data)
    result = validator.validate()

    if not result.is_valid:
        return None, result

    parser = ConfigParser(data, environ)
    return parser.parse(), result
