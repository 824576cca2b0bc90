"""
Typed configuration structures for the reporting plugin.

This module contains the dataclasses that represent a parsed and
validated reporter configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


DEFAULT_OUTPUT_DIR = Path("output")
DEFAULT_RESULT_LINK_FILE = Path("../test_result_env.sh")
DEFAULT_TIMEOUT_MS = 30000


class ReportBridgeConfigError(Exception):
    """Raised when configuration is invalid or missing."""

    pass


# ─────────────────────────────────────────────────────────────────────────────
# Launch attributes
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class LaunchAttribute:
    """
    A free-form tag attached to a launch.

    Attributes without a key are shown as plain labels by the backend.
    """
    value: str
    key: str | None = None
    system: bool = False

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"value": self.value}
        if self.key:
            result["key"] = self.key
        if self.system:
            result["system"] = True
        return result

    @classmethod
    def parse(cls, raw: str | dict[str, Any]) -> LaunchAttribute:
        """Parse ``"key:value"``, ``"value"`` or a ``{key, value}`` mapping."""
        if isinstance(raw, dict):
            return cls(
                value=str(raw["value"]),
                key=str(raw["key"]) if raw.get("key") is not None else None,
                system=bool(raw.get("system", False)),
            )
        key, sep, value = str(raw).partition(":")
        if sep:
            return cls(value=value, key=key or None)
        return cls(value=key)


# ─────────────────────────────────────────────────────────────────────────────
# Reporter configuration
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class ReporterConfig:
    """Configuration for a reporting run."""

    enabled: bool = False

    # Backend connection
    endpoint: str = ""
    token: str = ""
    project: str = ""
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    # Launch
    launch_name: str = ""
    launch_description: str = ""
    launch_attributes: list[LaunchAttribute] = field(default_factory=list)
    rerun: bool = False
    rerun_of: str | None = None

    # Behavior
    debug: bool = False
    runs_with_workers: bool = False
    derive_local_status: bool = False

    # Paths
    output_dir: Path = field(default_factory=lambda: DEFAULT_OUTPUT_DIR)
    result_link_file: Path = field(default_factory=lambda: DEFAULT_RESULT_LINK_FILE)

    @property
    def masked_token(self) -> str:
        """Token with everything but the last four characters hidden."""
        if not self.token:
            return ""
        if len(self.token) <= 4:
            return "*" * len(self.token)
        return "*" * (len(self.token) - 4) + self.token[-4:]
