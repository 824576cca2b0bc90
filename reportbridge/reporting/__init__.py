"""
Reporting for Test Runs

This package mirrors a test run's suites, tests and steps into an
external reporting service as a nested launch → suite → test → step
hierarchy.

Features:
    - Suite/test/step collection from lifecycle events
    - Worker-aggregated result support
    - Nested meta-step items, opened lazily and exactly once
    - Screenshot and screen recording attachments on failure
    - Launch link persisted for CI tooling

Usage:
    from reportbridge.events import EventDispatcher
    from reportbridge.reporting import ReportPortalPlugin

    dispatcher = EventDispatcher()
    plugin = ReportPortalPlugin.from_options(
        {"enabled": True, "endpoint": "https://rp.example.com",
         "token": "{{env.RP_TOKEN}}", "project": "web"},
        dispatcher,
    )
    plugin.attach()

    # ... the host runner emits events, then Event.ALL_RESULT ...
    print(plugin.launch.link)
"""

# Models
from .models import (
    AggregatedResult,
    ItemStatus,
    MetaStep,
    MetaStepKey,
    StepRecord,
    SuiteRecord,
    TestRecord,
    format_error,
    rp_status,
)

# Errors
from .errors import (
    HierarchyError,
    ItemLookupError,
    MetaStepLookupError,
    ParentItemLookupError,
    ResultLinkPersistError,
    SuiteLookupError,
)

# Components
from .aggregator import ResultAggregator, TestBatch
from .attachments import (
    AttachmentCollector,
    RecordingCapability,
    ScreenshotCapability,
    clear_string,
)
from .context import ReportingPass
from .metasteps import MetaStepResolver, OpenMetaStep
from .driver import ReportingDriver, write_result_link
from .plugin import ReportPortalPlugin

__all__ = [
    # Models
    "AggregatedResult",
    "ItemStatus",
    "MetaStep",
    "MetaStepKey",
    "StepRecord",
    "SuiteRecord",
    "TestRecord",
    "format_error",
    "rp_status",
    # Errors
    "HierarchyError",
    "ItemLookupError",
    "MetaStepLookupError",
    "ParentItemLookupError",
    "ResultLinkPersistError",
    "SuiteLookupError",
    # Components
    "ResultAggregator",
    "TestBatch",
    "AttachmentCollector",
    "RecordingCapability",
    "ScreenshotCapability",
    "clear_string",
    "ReportingPass",
    "MetaStepResolver",
    "OpenMetaStep",
    "ReportingDriver",
    "write_result_link",
    "ReportPortalPlugin",
]
