"""
Base client interface for the reporting service.

This module defines the abstract base class that all report client
implementations must follow.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import (
        Attachment,
        FinishOptions,
        ItemDescriptor,
        LaunchOptions,
        LaunchResult,
        LogEntry,
    )


class BaseReportClient(ABC):
    """
    Abstract base class for report backend clients.

    Clients open a launch, create, start and finish report items, and
    upload log entries with optional binary attachments. Every method
    that talks to the backend raises ReportClientError on failure.
    """

    def __init__(self) -> None:
        self._last_now = 0

    @abstractmethod
    async def connect(self) -> None:
        """Prepare the client for use (e.g. open an HTTP session)."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Release any resources held by the client."""
        pass

    @abstractmethod
    async def start_launch(self, options: LaunchOptions) -> str:
        """
        Open a launch.

        Returns:
            The launch id, once the backend has acknowledged it
        """
        pass

    @abstractmethod
    async def start_test_item(
        self,
        descriptor: ItemDescriptor,
        launch_id: str,
        parent_id: str | None = None,
    ) -> str:
        """
        Start a report item under a launch, optionally under a parent item.

        Returns:
            The id of the new item
        """
        pass

    @abstractmethod
    async def finish_test_item(self, item_id: str, options: FinishOptions) -> None:
        """Finish a previously started item."""
        pass

    @abstractmethod
    async def send_log(
        self,
        item_id: str,
        entry: LogEntry,
        attachment: Attachment | None = None,
    ) -> None:
        """Attach a log entry (and optionally a file) to an item."""
        pass

    @abstractmethod
    async def finish_launch(self, launch_id: str, options: FinishOptions) -> LaunchResult:
        """Close a launch and return its result link."""
        pass

    def now(self) -> int:
        """Current time in epoch milliseconds, never going backwards."""
        current = int(time.time() * 1000)
        if current < self._last_now:
            current = self._last_now
        self._last_now = current
        return current

    async def __aenter__(self) -> BaseReportClient:
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.disconnect()
