"""
Host test-runner integration.

ReportPortalPlugin wires the result aggregator, screen recording and the
end-of-run reporting pass onto a host EventDispatcher. Reporting is a
side effect of the run: nothing raised while reporting ever reaches the
host.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from ..client import BaseReportClient, LaunchResult, create_client
from ..config import ReportBridgeConfigError, ReporterConfig, config_from_dict
from ..events import Event, EventDispatcher
from .aggregator import ResultAggregator
from .attachments import AttachmentCollector, RecordingCapability, ScreenshotCapability
from .driver import ReportingDriver
from .models import AggregatedResult, TestRecord

logger = logging.getLogger(__name__)

ClientFactory = Callable[[ReporterConfig], BaseReportClient]


class ReportPortalPlugin:
    """
    Mirrors a test run into the reporting service.

    Example:
        plugin = ReportPortalPlugin.from_options(options, dispatcher)
        plugin.attach()
        # ... the host emits lifecycle events ...
        print(plugin.launch.link)
    """

    def __init__(
        self,
        config: ReporterConfig,
        dispatcher: EventDispatcher,
        client_factory: ClientFactory = create_client,
        screenshot: ScreenshotCapability | None = None,
        recorder: RecordingCapability | None = None,
    ):
        self.config = config
        self.dispatcher = dispatcher
        self.client_factory = client_factory
        self.aggregator = ResultAggregator()
        self.attachments = AttachmentCollector(config.output_dir, screenshot, recorder)
        self.launch: LaunchResult | None = None
        self._attached = False
        self._reported = False

        if config.debug:
            logging.getLogger("reportbridge").setLevel(logging.DEBUG)

    @classmethod
    def from_options(
        cls,
        options: dict[str, Any],
        dispatcher: EventDispatcher,
        **kwargs: Any,
    ) -> ReportPortalPlugin:
        """
        Create a plugin from the host runner's inline plugin options.

        Raises:
            ReportBridgeConfigError: If the options are invalid
        """
        config, result = config_from_dict(options)
        if config is None:
            raise ReportBridgeConfigError(str(result))
        return cls(config, dispatcher, **kwargs)

    def attach(self) -> bool:
        """
        Subscribe to the dispatcher.

        Returns:
            False when reporting is disabled, True otherwise
        """
        if not self.config.enabled:
            logger.debug("Reporting is disabled; not subscribing to events")
            return False
        if self._attached:
            return True

        self.aggregator.subscribe(self.dispatcher)
        if self.attachments.recorder is not None:
            self.dispatcher.on(Event.TEST_STARTED, self._on_test_started)
            self.dispatcher.on(Event.TEST_FINISHED, self._on_test_finished)
        self.dispatcher.on(Event.WORKERS_RESULT, self._on_workers_result)
        self.dispatcher.on(Event.ALL_RESULT, self._on_all_result)
        self._attached = True
        return True

    async def _on_test_started(self, test: TestRecord) -> None:
        logger.debug(f"test.started - {test.title}")
        await self.attachments.start_recording()

    async def _on_test_finished(self, test: TestRecord) -> None:
        logger.debug(f"test.finished - {test.title}")
        await self.attachments.stop_recording(test.uid)

    async def _on_workers_result(self, result: AggregatedResult | dict[str, Any]) -> None:
        if isinstance(result, dict):
            result = AggregatedResult.from_dict(result)
        await self.report(result)

    async def _on_all_result(self, *args: Any) -> None:
        # Sharded runs are reported from the workers' merged result instead
        if self.config.runs_with_workers:
            return
        await self.report()

    async def report(self, result: AggregatedResult | None = None) -> LaunchResult | None:
        """
        Run the reporting pass once.

        Failures are logged, never raised.
        """
        if self._reported:
            logger.warning("Reporting pass already ran for this run; ignoring")
            return self.launch
        self._reported = True

        try:
            client = self.client_factory(self.config)
            driver = ReportingDriver(self.config, client, self.aggregator, self.attachments)
            async with client:
                self.launch = await driver.run(result)
        except Exception:
            logger.exception("Reporting pass failed")
        return self.launch
