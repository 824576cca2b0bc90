"""
Reporter Configuration

This package provides tools for loading, validating, and working with
the reporting plugin's configuration.

Usage:
    from reportbridge.config import load_config, validate_config_yaml

    # Load from file
    config, result = load_config("reportbridge.yaml")
    if not result.is_valid:
        print(result)

    # Or validate from string
    config, result = validate_config_yaml(yaml_string)
"""

# Public API
from .loader import config_from_dict, load_config, validate_config_yaml

# Models (for type hints and isinstance checks)
from .models import LaunchAttribute, ReportBridgeConfigError, ReporterConfig

# Parsing and validation (for custom loading if needed)
from .parser import ConfigParser
from .validation import ConfigValidator, ValidationError, ValidationResult

__all__ = [
    # Loader functions
    "load_config",
    "validate_config_yaml",
    "config_from_dict",
    # Models
    "ReporterConfig",
    "LaunchAttribute",
    "ReportBridgeConfigError",
    # Parsing and validation
    "ConfigParser",
    "ConfigValidator",
    "ValidationResult",
    "ValidationError",
]
