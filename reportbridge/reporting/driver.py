"""
Reporting driver.

Runs the end-of-run reporting pass: opens a launch, mirrors every suite,
test and step (with its wrapping meta-steps) as report items, attaches
failure artifacts, closes the launch and persists the launch link for
CI tooling.

All backend calls are awaited one after another: a parent item's id must
be known before any child can reference it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ..client import (
    BaseReportClient,
    FinishOptions,
    ItemType,
    LaunchOptions,
    LaunchResult,
    LogLevel,
    ReportClientError,
)
from .aggregator import ResultAggregator
from .attachments import AttachmentCollector, clear_string
from .context import ReportingPass
from .errors import (
    HierarchyError,
    MetaStepLookupError,
    ParentItemLookupError,
    ResultLinkPersistError,
    SuiteLookupError,
)
from .metasteps import MetaStepResolver
from .models import AggregatedResult, ItemStatus, StepRecord, TestRecord, format_error, rp_status

if TYPE_CHECKING:
    from ..config import ReporterConfig

logger = logging.getLogger(__name__)

RESULT_LINK_VARIABLE = "REPORT_PORTAL_RESULT_LINK"
DEFAULT_LAUNCH_NAME = "Test run"


def write_result_link(link: str, path: Path) -> None:
    """
    Write a shell-sourceable file exporting the launch link.

    Raises:
        ResultLinkPersistError: If the file cannot be written
    """
    path = Path(path)
    try:
        path.write_text(f'export {RESULT_LINK_VARIABLE}="{link}"\n')
    except OSError as e:
        raise ResultLinkPersistError(path, e) from e
    logger.debug(f"Result link written to {path}")


class ReportingDriver:
    """
    Builds the report hierarchy for one run.

    Example:
        driver = ReportingDriver(config, client, aggregator, attachments)
        async with client:
            launch = await driver.run(worker_result)
        print(launch.link)
    """

    def __init__(
        self,
        config: ReporterConfig,
        client: BaseReportClient,
        aggregator: ResultAggregator,
        attachments: AttachmentCollector | None = None,
    ):
        self.config = config
        self.client = client
        self.aggregator = aggregator
        self.attachments = attachments or AttachmentCollector(config.output_dir)

    async def run(self, result: AggregatedResult | None = None) -> LaunchResult | None:
        """
        Run the full reporting pass.

        Args:
            result: Worker-aggregated result; None to use locally collected events

        Returns:
            The finished launch, or None if closing the launch failed

        Raises:
            ReportClientError: If the launch could not be opened
            ResultLinkPersistError: If the launch link could not be written
            HierarchyError: If any item could not be placed under its parent;
                a failed link write is chained as its cause
        """
        self.aggregator.merge(result)
        context = ReportingPass(client=self.client)

        await self._start_launch(context)
        try:
            await self._report_suites(context)
            reported = await self._report_tests(context)
            for test, item_id in reported:
                await self._report_steps(context, test, item_id)
        finally:
            launch = await self._finish_launch(context)

        if launch is not None and launch.link:
            try:
                write_result_link(launch.link, self.config.result_link_file)
            except ResultLinkPersistError as e:
                if not context.lookup_failures:
                    raise
                raise HierarchyError(context.lookup_failures) from e

        if context.lookup_failures:
            raise HierarchyError(context.lookup_failures)
        return launch

    # ─────────────────────────────────────────────────────────────────────
    # Launch
    # ─────────────────────────────────────────────────────────────────────

    async def _start_launch(self, context: ReportingPass) -> None:
        titles = self.aggregator.suite_titles
        name = self.config.launch_name or (titles[0] if titles else DEFAULT_LAUNCH_NAME)
        options = LaunchOptions(
            name=name,
            description=self.config.launch_description,
            attributes=[a.to_dict() for a in self.config.launch_attributes],
            rerun=self.config.rerun,
            rerun_of=self.config.rerun_of,
            start_time=self.client.now(),
        )
        context.launch_id = await self.client.start_launch(options)
        logger.info(f"{context.launch_id}: launch '{name}' started")

    async def _finish_launch(self, context: ReportingPass) -> LaunchResult | None:
        try:
            launch = await self.client.finish_launch(
                context.launch_id,
                FinishOptions(status=context.launch_status, end_time=self.client.now()),
            )
        except ReportClientError as e:
            logger.error(f"Failed to finish launch {context.launch_id}: {e}")
            return None
        logger.info(f"{context.launch_id}: launch finished ({context.launch_status.value}) {launch.link}")
        return launch

    # ─────────────────────────────────────────────────────────────────────
    # Suites and tests
    # ─────────────────────────────────────────────────────────────────────

    async def _report_suites(self, context: ReportingPass) -> None:
        # Suites carry no status of their own
        for title in self.aggregator.suite_titles:
            item_id = await context.start_item(title, ItemType.SUITE)
            context.suite_ids[title] = item_id
            if item_id is not None:
                await context.finish_item(item_id, ItemStatus.PASSED)

    async def _report_tests(self, context: ReportingPass) -> list[tuple[TestRecord, str]]:
        reported: list[tuple[TestRecord, str]] = []
        for batch in self.aggregator.batches(self.config.derive_local_status):
            for test in batch.tests:
                try:
                    parent_id = context.suite_id_for(test)
                except SuiteLookupError as e:
                    context.record_lookup_failure(e)
                    continue

                status = self.aggregator.status_of(test, batch)
                if status == ItemStatus.FAILED:
                    context.launch_status = ItemStatus.FAILED

                item_id = await context.start_item(test.title, ItemType.TEST, parent_id)
                if item_id is None:
                    if test.steps:
                        context.record_lookup_failure(ParentItemLookupError(test.title))
                    continue

                await self._attach_recording(context, test, item_id)
                await context.finish_item(item_id, status)
                reported.append((test, item_id))
        return reported

    async def _attach_recording(self, context: ReportingPass, test: TestRecord, item_id: str) -> None:
        if not test.uid or not self.attachments.has_recording(test.uid):
            return
        path = self.attachments.recording_path(test.uid)
        recording = await self.attachments.screen_recording(path)
        if recording is None:
            return
        await context.send_log(item_id, LogLevel.DEBUG, "Screen record", recording)
        logger.debug(f"Screen record sent for '{test.title}': {path}")

    # ─────────────────────────────────────────────────────────────────────
    # Steps
    # ─────────────────────────────────────────────────────────────────────

    async def _report_steps(self, context: ReportingPass, test: TestRecord, test_item_id: str) -> None:
        resolver = MetaStepResolver(context, test_item_id)
        try:
            for step in test.steps:
                try:
                    open_meta = await resolver.ensure_open(step)
                except MetaStepLookupError as e:
                    context.record_lookup_failure(e)
                    continue

                parent_id = open_meta.item_id if open_meta else test_item_id
                status = rp_status(step.status or ItemStatus.PASSED)

                item_id = await context.start_item(step.title, ItemType.STEP, parent_id)
                if item_id is None:
                    continue
                await context.finish_item(item_id, status)

                if status == ItemStatus.FAILED:
                    await self._log_step_failure(context, item_id, step, test)
        finally:
            await resolver.close_all()

    async def _log_step_failure(
        self,
        context: ReportingPass,
        item_id: str,
        step: StepRecord,
        test: TestRecord,
    ) -> None:
        # A step can be failed only because its test failed; fall back to the test's error
        error = step.error if step.error is not None else test.error
        if error is None:
            return

        await context.send_log(item_id, LogLevel.ERROR, f"[FAILED STEP] - {format_error(error)}")
        screenshot = await self.attachments.screenshot(f"{clear_string(test.title)}.failed.png")
        await context.send_log(item_id, LogLevel.DEBUG, "Last seen screenshot", screenshot)
