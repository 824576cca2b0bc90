"""Tests for wiring the reporting pass onto a host dispatcher."""

from __future__ import annotations

import logging

import pytest

from conftest import FakeReportClient, make_step, make_test
from reportbridge.config import ReportBridgeConfigError
from reportbridge.events import Event, EventDispatcher
from reportbridge.reporting import ReportPortalPlugin, SuiteRecord


@pytest.fixture
def dispatcher():
    return EventDispatcher()


@pytest.fixture
def make_plugin(config, dispatcher, client):
    def _make(**kwargs) -> ReportPortalPlugin:
        factory = kwargs.pop("client_factory", lambda _config: client)
        return ReportPortalPlugin(kwargs.pop("config", config), dispatcher, client_factory=factory, **kwargs)
    return _make


WORKER_RESULT = {
    "suites": [{"title": "S1"}],
    "tests": {
        "passed": [{"title": "T1", "uid": "u1", "parent": {"title": "S1"}, "steps": [
            {"actor": "I", "name": "amOnPage", "args": ["/"], "status": "success"},
        ]}],
        "failed": [{"title": "T2", "uid": "u2", "parent": {"title": "S1"}}],
    },
}


# ---------------------------------------------------------------------------
# 1. Construction
# ---------------------------------------------------------------------------

class TestFromOptions:

    def test_builds_plugin_from_inline_options(self, dispatcher):
        plugin = ReportPortalPlugin.from_options(
            {"enabled": True, "endpoint": "https://rp.example.com", "apiKey": "t", "projectName": "web"},
            dispatcher,
        )
        assert plugin.config.token == "t"
        assert plugin.config.project == "web"

    def test_invalid_options_raise(self, dispatcher):
        with pytest.raises(ReportBridgeConfigError):
            ReportPortalPlugin.from_options({"enabled": True}, dispatcher)

    def test_debug_option_enables_debug_logging(self, make_plugin, config):
        config.debug = True
        make_plugin()
        assert logging.getLogger("reportbridge").level == logging.DEBUG


# ---------------------------------------------------------------------------
# 2. Subscriptions
# ---------------------------------------------------------------------------

class TestAttach:

    def test_disabled_plugin_does_not_subscribe(self, make_plugin, config, dispatcher):
        config.enabled = False

        assert make_plugin().attach() is False
        assert dispatcher.handlers(Event.ALL_RESULT) == []
        assert dispatcher.handlers(Event.SUITE_BEFORE) == []

    def test_attach_is_idempotent(self, make_plugin, dispatcher):
        plugin = make_plugin()

        assert plugin.attach() is True
        assert plugin.attach() is True
        assert len(dispatcher.handlers(Event.ALL_RESULT)) == 1

    def test_recording_handlers_only_with_recorder(self, make_plugin, config, dispatcher, recorder):
        make_plugin().attach()
        assert dispatcher.handlers(Event.TEST_STARTED) == []

        other = EventDispatcher()
        ReportPortalPlugin(config, other, recorder=recorder).attach()
        assert len(other.handlers(Event.TEST_STARTED)) == 1
        assert len(other.handlers(Event.TEST_FINISHED)) == 1

    @pytest.mark.asyncio
    async def test_recording_follows_test_lifecycle(self, make_plugin, dispatcher, recorder, output_dir):
        make_plugin(recorder=recorder).attach()
        test = make_test()

        await dispatcher.emit(Event.TEST_STARTED, test)
        await dispatcher.emit(Event.TEST_FINISHED, test)

        assert recorder.started == 1
        assert recorder.stopped == [str(output_dir / "record-test-logs-in.mp4")]


# ---------------------------------------------------------------------------
# 3. Reporting pass
# ---------------------------------------------------------------------------

class TestReport:

    @pytest.mark.asyncio
    async def test_all_result_reports_local_run(self, make_plugin, dispatcher, client):
        plugin = make_plugin()
        plugin.attach()

        await dispatcher.emit(Event.SUITE_BEFORE, SuiteRecord("Login"))
        await dispatcher.emit(Event.STEP_PASSED, make_step())
        await dispatcher.emit(Event.TEST_PASSED, make_test())
        await dispatcher.emit(Event.ALL_RESULT)

        assert client.one("logs in").parent_id == client.one("Login").item_id
        assert plugin.launch.launch_id == "launch-1"
        assert not client.connected

    @pytest.mark.asyncio
    async def test_all_result_ignored_when_running_with_workers(self, make_plugin, config, dispatcher, client):
        config.runs_with_workers = True
        make_plugin().attach()

        await dispatcher.emit(Event.ALL_RESULT)

        assert client.calls == []

    @pytest.mark.asyncio
    async def test_workers_result_dict_is_reported(self, make_plugin, config, dispatcher, client):
        config.runs_with_workers = True
        plugin = make_plugin()
        plugin.attach()

        await dispatcher.emit(Event.WORKERS_RESULT, WORKER_RESULT)
        await dispatcher.emit(Event.ALL_RESULT)

        assert client.status_of("T1") == "PASSED"
        assert client.status_of("T2") == "FAILED"
        assert client.children_of(client.one("T1").item_id) == ['[STEP] - I amOnPage ["/"]']
        assert client.launch_status == "FAILED"

    @pytest.mark.asyncio
    async def test_reporting_pass_runs_once(self, make_plugin, dispatcher, client):
        plugin = make_plugin()
        plugin.attach()

        await dispatcher.emit(Event.WORKERS_RESULT, WORKER_RESULT)
        await dispatcher.emit(Event.ALL_RESULT)

        assert [call for call in client.calls if call[0] == "start_launch"] == [("start_launch", "launch-1")]

    @pytest.mark.asyncio
    async def test_launch_failure_is_logged_not_raised(self, make_plugin, caplog):
        plugin = make_plugin(client_factory=lambda _config: FakeReportClient(fail_launch=True))

        assert await plugin.report() is None
        assert "Reporting pass failed" in caplog.text

    @pytest.mark.asyncio
    async def test_hierarchy_failure_is_logged_not_raised(self, make_plugin, client, caplog):
        plugin = make_plugin()
        plugin.aggregator.on_test_failed(make_test(parent="Missing"))

        await plugin.report()

        assert client.calls[-1] == ("finish_launch", "launch-1")
        assert "could not be placed" in caplog.text

    @pytest.mark.asyncio
    async def test_client_factory_error_is_logged_not_raised(self, make_plugin, caplog):
        def broken_factory(_config):
            raise ValueError("endpoint is required")

        plugin = make_plugin(client_factory=broken_factory)

        assert await plugin.report() is None
        assert "endpoint is required" in caplog.text
