"""
Result aggregation.

Collects suites, tests and steps from lifecycle events as they happen,
or takes an authoritative merged result from parallel workers, and
hands the reporting pass the tests to report together with the status
each group should get.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ..events import Event, EventDispatcher
from .models import (
    AggregatedResult,
    ItemStatus,
    StepRecord,
    SuiteRecord,
    TestRecord,
    rp_status,
)

logger = logging.getLogger(__name__)


@dataclass
class TestBatch:
    """Tests to report, with the status they are reported under."""
    __test__ = False  # not a pytest test class

    tests: list[TestRecord]
    status: ItemStatus | None  # None: use each test's own status


class ResultAggregator:
    """Accumulates run results from lifecycle events."""

    def __init__(self) -> None:
        # dict keeps insertion order and collapses duplicate titles
        self._suites: dict[str, None] = {}
        self.tests: list[TestRecord] = []
        self.steps: list[StepRecord] = []
        self._merged: AggregatedResult | None = None

    @property
    def suite_titles(self) -> list[str]:
        return list(self._suites)

    @property
    def is_sharded(self) -> bool:
        """True once a worker-aggregated result has been merged."""
        return self._merged is not None

    def subscribe(self, dispatcher: EventDispatcher) -> None:
        """Register the collecting handlers on a dispatcher."""
        dispatcher.on(Event.SUITE_BEFORE, self.on_suite)
        dispatcher.on(Event.STEP_FAILED, self.on_step)
        dispatcher.on(Event.STEP_PASSED, self.on_step)
        dispatcher.on(Event.TEST_FAILED, self.on_test_failed)
        dispatcher.on(Event.TEST_PASSED, self.on_test_passed)

    def on_suite(self, suite: SuiteRecord) -> None:
        self._suites[suite.title] = None

    def on_step(self, step: StepRecord, error: Any = None) -> None:
        if error is not None and step.error is None:
            step.error = error
        self.steps.append(step)

    def on_test_failed(self, test: TestRecord, error: Any = None) -> None:
        if error is not None and test.error is None:
            test.error = error
        if test.status is None:
            test.status = "failed"
        self.tests.append(test)

    def on_test_passed(self, test: TestRecord) -> None:
        if test.status is None:
            test.status = "success"
        self.tests.append(test)

    def merge(self, result: AggregatedResult | None) -> None:
        """
        Replace locally observed suites and tests with a worker result.

        With no result the locally collected state is kept.
        """
        if result is None:
            return
        self._suites = {suite.title: None for suite in result.suites}
        self.tests = list(result.passed) + list(result.failed)
        self._merged = result

    def batches(self, derive_local_status: bool = False) -> list[TestBatch]:
        """
        Group tests by the status they are reported with.

        Worker results carry explicit passed/failed groups. Locally
        collected tests are all reported as FAILED unless
        ``derive_local_status`` is set, in which case each test keeps the
        status recorded from its own events.
        """
        if self._merged is not None:
            return [
                TestBatch(list(self._merged.passed), ItemStatus.PASSED),
                TestBatch(list(self._merged.failed), ItemStatus.FAILED),
            ]
        if derive_local_status:
            return [TestBatch(list(self.tests), None)]
        if self.tests:
            logger.warning(
                f"Run was not sharded; reporting all {len(self.tests)} collected test(s) as FAILED"
            )
        return [TestBatch(list(self.tests), ItemStatus.FAILED)]

    @staticmethod
    def status_of(test: TestRecord, batch: TestBatch) -> Any:
        """Status a test is reported with inside a batch."""
        if batch.status is not None:
            return batch.status
        if rp_status(test.status) == ItemStatus.PASSED or str(test.status).lower() == "passed":
            return ItemStatus.PASSED
        return ItemStatus.FAILED
