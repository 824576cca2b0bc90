"""Shared fixtures for ReportBridge unit tests."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest

from reportbridge.client import (
    APIError,
    Attachment,
    BaseReportClient,
    FinishOptions,
    ItemDescriptor,
    LaunchOptions,
    LaunchResult,
    LogEntry,
    ReportClientError,
)
from reportbridge.config import ReporterConfig
from reportbridge.reporting import (
    AttachmentCollector,
    MetaStep,
    ResultAggregator,
    ReportingDriver,
    StepRecord,
    TestRecord,
)


# ---------------------------------------------------------------------------
# Fake report client
# ---------------------------------------------------------------------------

@dataclass
class StartedItem:
    item_id: str
    name: str
    type: str
    parent_id: str | None


@dataclass
class SentLog:
    item_id: str
    level: str
    message: str
    attachment: Attachment | None


class FakeReportClient(BaseReportClient):
    """In-memory client that records every call in order."""

    def __init__(self, fail_names: set[str] | None = None, fail_launch: bool = False):
        super().__init__()
        self.fail_names = fail_names or set()
        self.fail_launch = fail_launch
        self.calls: list[tuple[Any, ...]] = []
        self.items: dict[str, StartedItem] = {}
        self.finished: dict[str, list[Any]] = {}
        self.logs: list[SentLog] = []
        self.launch_options: LaunchOptions | None = None
        self.launch_status: Any = None
        self.connected = False
        self._counter = 0
        self._clock = 1_000

    def now(self) -> int:
        self._clock += 1
        return self._clock

    async def connect(self) -> None:
        self.connected = True

    async def disconnect(self) -> None:
        self.connected = False

    async def start_launch(self, options: LaunchOptions) -> str:
        if self.fail_launch:
            raise ReportClientError(APIError.connection_error("backend down"))
        self.launch_options = options
        self.calls.append(("start_launch", "launch-1"))
        return "launch-1"

    async def start_test_item(
        self,
        descriptor: ItemDescriptor,
        launch_id: str,
        parent_id: str | None = None,
    ) -> str:
        if descriptor.name in self.fail_names:
            raise ReportClientError(APIError.http_error(f"HTTP 500: cannot start {descriptor.name}"))
        self._counter += 1
        item_id = f"item-{self._counter}"
        self.items[item_id] = StartedItem(item_id, descriptor.name, descriptor.type.value, parent_id)
        self.calls.append(("start", item_id))
        return item_id

    async def finish_test_item(self, item_id: str, options: FinishOptions) -> None:
        self.finished.setdefault(item_id, []).append(options.to_dict()["status"])
        self.calls.append(("finish", item_id))

    async def send_log(
        self,
        item_id: str,
        entry: LogEntry,
        attachment: Attachment | None = None,
    ) -> None:
        self.logs.append(SentLog(item_id, entry.level_name, entry.message, attachment))
        self.calls.append(("log", item_id))

    async def finish_launch(self, launch_id: str, options: FinishOptions) -> LaunchResult:
        self.launch_status = options.to_dict()["status"]
        self.calls.append(("finish_launch", launch_id))
        return LaunchResult(launch_id=launch_id, link=f"https://rp.example.com/ui/#proj/launches/all/{launch_id}")

    # -- query helpers -----------------------------------------------------

    def named(self, name: str) -> list[StartedItem]:
        return [item for item in self.items.values() if item.name == name]

    def one(self, name: str) -> StartedItem:
        matches = self.named(name)
        assert len(matches) == 1, f"expected one item named {name!r}, got {len(matches)}"
        return matches[0]

    def status_of(self, name: str) -> Any:
        return self.finished[self.one(name).item_id][-1]

    def children_of(self, item_id: str | None) -> list[str]:
        return [item.name for item in self.items.values() if item.parent_id == item_id]

    def assert_well_nested(self) -> None:
        """Every item is finished exactly once, never after a parent still open at its start."""
        for item_id in self.items:
            assert len(self.finished.get(item_id, [])) == 1, f"{item_id} finished {self.finished.get(item_id)}"

        position = {call: index for index, call in enumerate(self.calls)}
        for item in self.items.values():
            if item.parent_id is None:
                continue
            parent_finish = position[("finish", item.parent_id)]
            if parent_finish > position[("start", item.item_id)]:
                assert position[("finish", item.item_id)] < parent_finish, (
                    f"{item.name} outlived its parent"
                )


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def make_test(title: str = "logs in", parent: str | None = "Login", **overrides) -> TestRecord:
    defaults: dict[str, Any] = {"title": title, "parent_title": parent, "uid": title.replace(" ", "-")}
    defaults.update(overrides)
    return TestRecord(**defaults)


def make_step(name: str = "click", actor: str = "I", **overrides) -> StepRecord:
    defaults: dict[str, Any] = {"actor": actor, "name": name, "status": "success"}
    defaults.update(overrides)
    return StepRecord(**defaults)


def make_meta(name: str, started_at: int, wraps: MetaStep | None = None, **overrides) -> MetaStep:
    defaults: dict[str, Any] = {"actor": "loginPage", "name": name, "started_at": started_at, "wraps": wraps}
    defaults.update(overrides)
    return MetaStep(**defaults)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def package_logger():
    """Restore the package logger after the CLI or a debug plugin reconfigures it."""
    logger = logging.getLogger("reportbridge")
    saved = (logger.handlers[:], logger.level, logger.propagate)
    yield logger
    logger.handlers, logger.propagate = saved[0], saved[2]
    logger.setLevel(saved[1])


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    path = tmp_path / "output"
    path.mkdir()
    return path


@pytest.fixture
def config(tmp_path: Path, output_dir: Path) -> ReporterConfig:
    """An enabled configuration writing into the temporary directory."""
    return ReporterConfig(
        enabled=True,
        endpoint="https://rp.example.com",
        token="secret-token",
        project="proj",
        launch_name="nightly",
        output_dir=output_dir,
        result_link_file=tmp_path / "test_result_env.sh",
    )


@pytest.fixture
def client() -> FakeReportClient:
    return FakeReportClient()


@pytest.fixture
def aggregator() -> ResultAggregator:
    return ResultAggregator()


class FakeScreenshotter:
    """Screenshot capability that writes a tiny PNG into the output directory."""

    def __init__(self, output_dir: Path):
        self.output_dir = output_dir
        self.saved: list[str] = []

    async def save_screenshot(self, file_name: str) -> None:
        self.saved.append(file_name)
        (self.output_dir / file_name).write_bytes(b"\x89PNG fresh")


class FakeRecorder:
    """Recording capability that writes a tiny MP4 on stop."""

    def __init__(self):
        self.started = 0
        self.stopped: list[str] = []

    async def start_record(self) -> None:
        self.started += 1

    async def stop_record(self, file_name: str) -> None:
        self.stopped.append(file_name)
        Path(file_name).write_bytes(b"mp4-bytes")


@pytest.fixture
def screenshotter(output_dir: Path) -> FakeScreenshotter:
    return FakeScreenshotter(output_dir)


@pytest.fixture
def recorder() -> FakeRecorder:
    return FakeRecorder()


@pytest.fixture
def make_driver(config, client, aggregator, output_dir, screenshotter):
    """Build a ReportingDriver around the fake client."""
    def _make(**kwargs) -> ReportingDriver:
        attachments = kwargs.pop("attachments", None) or AttachmentCollector(
            output_dir, screenshot=screenshotter, recorder=kwargs.pop("recorder", None)
        )
        return ReportingDriver(
            kwargs.pop("config", config),
            kwargs.pop("client", client),
            kwargs.pop("aggregator", aggregator),
            attachments,
        )
    return _make
