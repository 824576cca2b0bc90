"""
Configuration parser.

This module converts validated configuration data into a typed
ReporterConfig, resolving ``{{env.NAME}}`` placeholders on the way.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Mapping

from .models import (
    DEFAULT_OUTPUT_DIR,
    DEFAULT_RESULT_LINK_FILE,
    DEFAULT_TIMEOUT_MS,
    LaunchAttribute,
    ReporterConfig,
)
from .validation import normalize_keys


class ConfigParser:
    """Parses and converts validated data to a typed ReporterConfig."""

    # Regex for environment interpolation: {{env.KEY}}
    TEMPLATE_PATTERN = re.compile(r"\{\{\s*env\.(\w+)\s*\}\}")

    def __init__(self, data: dict[str, Any], environ: Mapping[str, str] | None = None):
        self.data = normalize_keys(data)
        self.environ = os.environ if environ is None else environ

    def parse(self) -> ReporterConfig:
        """Convert validated data to typed ReporterConfig."""
        return ReporterConfig(
            enabled=self.data.get("enabled", False),
            endpoint=self._string("endpoint").rstrip("/"),
            token=self._string("token"),
            project=self._string("project"),
            timeout_ms=self.data.get("timeout_ms", DEFAULT_TIMEOUT_MS),
            launch_name=self._string("launch_name"),
            launch_description=self._string("launch_description"),
            launch_attributes=self._parse_attributes(),
            rerun=self.data.get("rerun", False),
            rerun_of=self._string("rerun_of") or None,
            debug=self.data.get("debug", False),
            runs_with_workers=self._runs_with_workers(),
            derive_local_status=self.data.get("derive_local_status", False),
            output_dir=Path(self._string("output_dir") or DEFAULT_OUTPUT_DIR),
            result_link_file=Path(self._string("result_link_file") or DEFAULT_RESULT_LINK_FILE),
        )

    def interpolate(self, value: str) -> str:
        """Replace ``{{env.NAME}}`` placeholders; unknown names are kept."""
        def replace_env(match: re.Match) -> str:
            return self.environ.get(match.group(1), match.group(0))
        return self.TEMPLATE_PATTERN.sub(replace_env, value)

    def _string(self, key: str) -> str:
        value = self.data.get(key)
        if value is None:
            return ""
        return self.interpolate(str(value))

    def _parse_attributes(self) -> list[LaunchAttribute]:
        attributes = []
        for raw in self.data.get("launch_attributes") or []:
            if isinstance(raw, str):
                raw = self.interpolate(raw)
            elif isinstance(raw, dict):
                raw = {
                    k: self.interpolate(v) if isinstance(v, str) else v
                    for k, v in raw.items()
                }
            attributes.append(LaunchAttribute.parse(raw))
        return attributes

    def _runs_with_workers(self) -> bool:
        if self.environ.get("RUNS_WITH_WORKERS"):
            return True
        return self.data.get("runs_with_workers", False)
