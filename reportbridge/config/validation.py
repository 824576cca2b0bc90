"""
Validation for reporter configuration.

This module checks raw parsed YAML (or an inline mapping handed over by
the host test runner) against the configuration schema and reports
errors with helpful messages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


# Host-ecosystem spellings accepted for each canonical key
KEY_ALIASES = {
    "apiKey": "token",
    "api_key": "token",
    "projectName": "project",
    "launchName": "launch_name",
    "launchDescription": "launch_description",
    "launchAttributes": "launch_attributes",
    "attributes": "launch_attributes",
    "rerunOf": "rerun_of",
    "outputDir": "output_dir",
    "resultLinkFile": "result_link_file",
    "runsWithWorkers": "runs_with_workers",
    "deriveLocalStatus": "derive_local_status",
    "timeoutMs": "timeout_ms",
}


def normalize_keys(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``data`` with aliased keys renamed to canonical ones."""
    normalized: dict[str, Any] = {}
    for key, value in data.items():
        normalized[KEY_ALIASES.get(key, key)] = value
    return normalized


# ─────────────────────────────────────────────────────────────────────────────
# Validation Result Types
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class ValidationError:
    """Represents a single validation error with context."""
    path: str  # e.g., "launch_attributes[0].value"
    message: str
    value: Any = None
    suggestion: str | None = None

    def __str__(self) -> str:
        parts = [f"❌ {self.path}: {self.message}"]
        if self.value is not None:
            parts.append(f"   Got: {repr(self.value)}")
        if self.suggestion:
            parts.append(f"   💡 {self.suggestion}")
        return "\n".join(parts)


@dataclass
class ValidationResult:
    """Result of configuration validation."""
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(
        self,
        path: str,
        message: str,
        value: Any = None,
        suggestion: str | None = None
    ) -> None:
        self.errors.append(ValidationError(path, message, value, suggestion))

    def __str__(self) -> str:
        if self.is_valid:
            return "✅ Configuration is valid"
        lines = [f"Configuration validation failed with {len(self.errors)} error(s):\n"]
        lines.extend(str(e) for e in self.errors)
        return "\n".join(lines)


# ─────────────────────────────────────────────────────────────────────────────
# Config Validator
# ─────────────────────────────────────────────────────────────────────────────

class ConfigValidator:
    """Validates a raw configuration mapping."""

    REQUIRED_WHEN_ENABLED = ("endpoint", "token", "project")
    STRING_KEYS = {"endpoint", "token", "project", "launch_name", "launch_description", "rerun_of"}
    BOOL_KEYS = {"enabled", "debug", "rerun", "runs_with_workers", "derive_local_status"}
    PATH_KEYS = {"output_dir", "result_link_file"}
    VALID_KEYS = (
        STRING_KEYS | BOOL_KEYS | PATH_KEYS | {"launch_attributes", "timeout_ms"}
    )

    def __init__(self, data: dict[str, Any]):
        self.data = normalize_keys(data)
        self.result = ValidationResult()

    def validate(self) -> ValidationResult:
        """Run all validation checks and return result."""
        self._validate_keys()
        self._validate_types()
        self._validate_endpoint()
        self._validate_timeout()
        self._validate_attributes()
        self._validate_required()
        return self.result

    def _validate_keys(self) -> None:
        for key in self.data:
            if key not in self.VALID_KEYS:
                self.result.add_error(
                    key,
                    f"Unknown configuration key '{key}'",
                    suggestion=f"Valid keys are: {', '.join(sorted(self.VALID_KEYS))}"
                )

    def _validate_types(self) -> None:
        for key in sorted(self.STRING_KEYS | self.PATH_KEYS):
            value = self.data.get(key)
            if value is not None and not isinstance(value, str):
                self.result.add_error(key, "Must be a string", value=value)

        for key in sorted(self.BOOL_KEYS):
            value = self.data.get(key)
            if value is not None and not isinstance(value, bool):
                self.result.add_error(
                    key,
                    "Must be a boolean",
                    value=value,
                    suggestion=f"Use '{key}: true' or '{key}: false'"
                )

    def _validate_endpoint(self) -> None:
        endpoint = self.data.get("endpoint")
        if not endpoint or not isinstance(endpoint, str):
            return
        if not (endpoint.startswith("http://") or endpoint.startswith("https://")):
            self.result.add_error(
                "endpoint",
                "Must be a valid HTTP(S) URL",
                value=endpoint,
                suggestion="URL should start with 'http://' or 'https://'"
            )

    def _validate_timeout(self) -> None:
        timeout = self.data.get("timeout_ms")
        if timeout is None:
            return
        if isinstance(timeout, bool) or not isinstance(timeout, int) or timeout <= 0:
            self.result.add_error(
                "timeout_ms",
                "Must be a positive integer (milliseconds)",
                value=timeout
            )

    def _validate_attributes(self) -> None:
        attributes = self.data.get("launch_attributes")
        if attributes is None:
            return
        if not isinstance(attributes, list):
            self.result.add_error(
                "launch_attributes",
                "Must be a list",
                value=attributes,
                suggestion="Use a list of 'key:value' strings or {key, value} objects"
            )
            return

        for i, attribute in enumerate(attributes):
            path = f"launch_attributes[{i}]"
            if isinstance(attribute, str):
                if not attribute.strip():
                    self.result.add_error(path, "Cannot be empty")
            elif isinstance(attribute, dict):
                if attribute.get("value") in (None, ""):
                    self.result.add_error(
                        f"{path}.value",
                        "Required field 'value' is missing",
                        suggestion="Each attribute needs at least a 'value'"
                    )
                unknown = set(attribute) - {"key", "value", "system"}
                for key in sorted(unknown):
                    self.result.add_error(
                        f"{path}.{key}",
                        f"Unknown attribute field '{key}'",
                        suggestion="Valid fields are: key, system, value"
                    )
            else:
                self.result.add_error(
                    path,
                    "Must be a string or an object",
                    value=attribute
                )

    def _validate_required(self) -> None:
        if self.data.get("enabled") is not True:
            return
        for key in self.REQUIRED_WHEN_ENABLED:
            if not self.data.get(key):
                self.result.add_error(
                    key,
                    f"Required when 'enabled' is true",
                    suggestion=f"Add '{key}:' to your configuration"
                )
