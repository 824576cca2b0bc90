"""
Report Backend Client

This package provides the client interface used to mirror a test run
into an external reporting service, plus an HTTP implementation for
the ReportPortal REST API.

Usage:
    from reportbridge.client import create_client, ItemDescriptor, ItemType, LaunchOptions
    from reportbridge.config import load_config

    config, _ = load_config("reportbridge.yaml")
    client = create_client(config)

    async with client:
        launch_id = await client.start_launch(LaunchOptions(name="nightly"))
        suite_id = await client.start_test_item(
            ItemDescriptor(name="Login", type=ItemType.SUITE), launch_id
        )
"""

# Factory
from .factory import create_client

# Client implementations
from .base import BaseReportClient
from .http import HTTPReportClient

# Models
from .models import (
    APIError,
    APIErrorCode,
    APIResponse,
    Attachment,
    FinishOptions,
    ItemDescriptor,
    ItemType,
    LaunchOptions,
    LaunchResult,
    LogEntry,
    LogLevel,
    ReportClientError,
)

__all__ = [
    # Factory
    "create_client",
    # Base
    "BaseReportClient",
    # Implementations
    "HTTPReportClient",
    # Models
    "APIError",
    "APIErrorCode",
    "APIResponse",
    "Attachment",
    "FinishOptions",
    "ItemDescriptor",
    "ItemType",
    "LaunchOptions",
    "LaunchResult",
    "LogEntry",
    "LogLevel",
    "ReportClientError",
]
