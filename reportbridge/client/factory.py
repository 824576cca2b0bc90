"""
Client factory for creating report clients from configuration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import BaseReportClient
from .http import HTTPReportClient

if TYPE_CHECKING:
    from ..config import ReporterConfig


def create_client(config: ReporterConfig) -> BaseReportClient:
    """
    Create a report client from ReporterConfig.

    Args:
        config: Parsed reporter configuration

    Returns:
        An HTTPReportClient pointed at the configured backend

    Raises:
        ValueError: If the endpoint or project is missing
    """
    if not config.endpoint:
        raise ValueError("Report client requires an 'endpoint' in config")
    if not config.project:
        raise ValueError("Report client requires a 'project' in config")

    return HTTPReportClient(
        endpoint=config.endpoint,
        project=config.project,
        token=config.token,
        timeout_ms=config.timeout_ms,
    )
