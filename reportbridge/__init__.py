"""
ReportBridge - Test Run Reporting Adapter

This package listens to a test runner's lifecycle events and mirrors the
run into an external test-reporting service as a nested
launch → suite → test → step report, with screenshots and screen
recordings attached to failures.

Subpackages:
    - config: Load and validate reporter configuration
    - client: Report backend client (ReportPortal over HTTP)
    - reporting: Result aggregation, meta-step resolution, reporting pass

Usage:
    from reportbridge import EventDispatcher, ReportPortalPlugin

    dispatcher = EventDispatcher()
    plugin = ReportPortalPlugin.from_options(options, dispatcher)
    plugin.attach()

    # The host runner emits lifecycle events...
    await dispatcher.emit(Event.SUITE_BEFORE, SuiteRecord("Login"))
    await dispatcher.emit(Event.TEST_PASSED, test)
    await dispatcher.emit(Event.ALL_RESULT)

    print(plugin.launch.link)
"""

__version__ = "0.1.0"

# Re-export config for convenience
from .config import (
    # Loader functions
    load_config,
    validate_config_yaml,
    config_from_dict,
    # Models
    ReporterConfig,
    LaunchAttribute,
    ReportBridgeConfigError,
    # Validation
    ValidationResult,
    ValidationError,
)

# Re-export client for convenience
from .client import (
    # Factory
    create_client,
    # Base
    BaseReportClient,
    # Implementations
    HTTPReportClient,
    # Models
    Attachment,
    ItemType,
    LaunchResult,
    LogLevel,
    ReportClientError,
)

# Re-export events for convenience
from .events import Event, EventDispatcher

# Re-export reporting for convenience
from .reporting import (
    # Models
    AggregatedResult,
    ItemStatus,
    MetaStep,
    StepRecord,
    SuiteRecord,
    TestRecord,
    rp_status,
    # Errors
    HierarchyError,
    ResultLinkPersistError,
    # Components
    ResultAggregator,
    ReportingDriver,
    ReportPortalPlugin,
)

__all__ = [
    # Package info
    "__version__",
    # Config
    "load_config",
    "validate_config_yaml",
    "config_from_dict",
    "ReporterConfig",
    "LaunchAttribute",
    "ReportBridgeConfigError",
    "ValidationResult",
    "ValidationError",
    # Client
    "create_client",
    "BaseReportClient",
    "HTTPReportClient",
    "Attachment",
    "ItemType",
    "LaunchResult",
    "LogLevel",
    "ReportClientError",
    # Events
    "Event",
    "EventDispatcher",
    # Reporting - Models
    "AggregatedResult",
    "ItemStatus",
    "MetaStep",
    "StepRecord",
    "SuiteRecord",
    "TestRecord",
    "rp_status",
    # Reporting - Errors
    "HierarchyError",
    "ResultLinkPersistError",
    # Reporting - Components
    "ResultAggregator",
    "ReportingDriver",
    "ReportPortalPlugin",
]
