"""
State of a single reporting pass.

A ReportingPass owns everything that is mutable while the hierarchy is
being built: the launch handle, the suite title to item id map, the
aggregate launch status and the lookup failures seen so far. It is
created for one pass and discarded afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ..client import (
    Attachment,
    BaseReportClient,
    FinishOptions,
    ItemDescriptor,
    ItemType,
    LogEntry,
    LogLevel,
    ReportClientError,
)
from .errors import ItemLookupError, SuiteLookupError
from .models import ItemStatus, TestRecord

logger = logging.getLogger(__name__)


@dataclass
class ReportingPass:
    """Per-pass state shared by the driver and the meta-step resolver."""
    client: BaseReportClient
    launch_id: str | None = None
    launch_status: ItemStatus = ItemStatus.PASSED
    suite_ids: dict[str, str | None] = field(default_factory=dict)
    lookup_failures: list[ItemLookupError] = field(default_factory=list)

    async def start_item(
        self,
        name: str,
        item_type: ItemType,
        parent_id: str | None = None,
    ) -> str | None:
        """
        Start a report item.

        Returns:
            The new item id, or None when the backend call failed
        """
        try:
            item_id = await self.client.start_test_item(
                ItemDescriptor(name=name, type=item_type, start_time=self.client.now()),
                self.launch_id,
                parent_id,
            )
        except ReportClientError as e:
            logger.error(f"Failed to start {item_type.value} '{name}': {e}")
            return None
        logger.debug(f"{item_id}: started {item_type.value} '{name}' (parent={parent_id})")
        return item_id

    async def finish_item(self, item_id: str, status: Any) -> None:
        """Finish a report item; failures are logged."""
        try:
            await self.client.finish_test_item(
                item_id,
                FinishOptions(status=status, end_time=self.client.now()),
            )
        except ReportClientError as e:
            logger.error(f"Failed to finish item {item_id}: {e}")
            return
        logger.debug(f"{item_id}: finished with status {getattr(status, 'value', status)}")

    async def send_log(
        self,
        item_id: str,
        level: LogLevel,
        message: str,
        attachment: Attachment | None = None,
    ) -> None:
        """Send a log entry to an item; failures are logged."""
        try:
            await self.client.send_log(
                item_id,
                LogEntry(level=level, message=message, time=self.client.now()),
                attachment,
            )
        except ReportClientError as e:
            logger.error(f"Failed to send {level.value} log to item {item_id}: {e}")

    def suite_id_for(self, test: TestRecord) -> str:
        """
        Resolve the item id of a test's parent suite.

        Raises:
            SuiteLookupError: If the suite is unknown or its item never opened
        """
        suite_id = self.suite_ids.get(test.parent_title) if test.parent_title is not None else None
        if suite_id is None:
            raise SuiteLookupError(test.title, test.parent_title)
        return suite_id

    def record_lookup_failure(self, error: ItemLookupError) -> None:
        logger.error(f"Report hierarchy is broken: {error}")
        self.lookup_failures.append(error)
