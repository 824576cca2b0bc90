"""
HTTP client for the ReportPortal REST API.

This module implements BaseReportClient on top of aiohttp, using the
asynchronous (v2) API so that item creation returns as soon as the
backend has assigned an id:
- JSON requests for launches, items and plain log entries
- multipart requests for log entries carrying an attachment
- bearer-token authentication
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import aiohttp

from .base import BaseReportClient
from .models import (
    APIError,
    APIResponse,
    Attachment,
    FinishOptions,
    ItemDescriptor,
    LaunchOptions,
    LaunchResult,
    LogEntry,
    ReportClientError,
)

logger = logging.getLogger(__name__)

# Content types
JSON_CONTENT_TYPE = "application/json"

# Multipart field names expected by the log endpoint
JSON_REQUEST_PART = "json_request_part"
FILE_PART = "file"


class HTTPReportClient(BaseReportClient):
    """
    ReportPortal client over HTTP.

    Use as an async context manager, or call connect()/disconnect()
    explicitly around a reporting pass.
    """

    def __init__(
        self,
        endpoint: str,
        project: str,
        token: str,
        timeout_ms: int = 30000,
    ):
        """
        Initialize the HTTP client.

        Args:
            endpoint: Base URL of the ReportPortal instance
            project: Project name the launch belongs to
            token: API token used for bearer authentication
            timeout_ms: Per-request timeout in milliseconds
        """
        super().__init__()
        self.endpoint = endpoint.rstrip("/")
        self.project = project
        self.timeout_ms = timeout_ms
        self._token = token
        self._session: aiohttp.ClientSession | None = None
        self._connected = False
        self._launch_id: str | None = None

    @property
    def is_connected(self) -> bool:
        return self._connected and self._session is not None

    @property
    def base_url(self) -> str:
        return f"{self.endpoint}/api/v2/{self.project}"

    def launch_link(self, launch_id: str) -> str:
        """UI permalink for a launch, used when the backend returns none."""
        return f"{self.endpoint}/ui/#{self.project}/launches/all/{launch_id}"

    def _build_headers(self) -> dict[str, str]:
        headers = {"Accept": JSON_CONTENT_TYPE}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def connect(self) -> None:
        """Create the HTTP session."""
        if self._session is None:
            self._session = aiohttp.ClientSession()
        self._connected = True

    async def disconnect(self) -> None:
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None
        self._connected = False

    async def _request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
        form: aiohttp.FormData | None = None,
    ) -> APIResponse:
        """
        Send a request and decode the JSON body.

        Never raises; failures are returned as an APIResponse with an error.
        """
        if not self.is_connected:
            return APIResponse.from_error(
                APIError.connection_error("Client not connected. Call connect() first.")
            )

        url = f"{self.base_url}{path}"
        timeout = aiohttp.ClientTimeout(total=self.timeout_ms / 1000)
        kwargs: dict[str, Any] = {"headers": self._build_headers(), "timeout": timeout}
        if form is not None:
            kwargs["data"] = form
        elif payload is not None:
            kwargs["json"] = payload

        try:
            async with self._session.request(method, url, **kwargs) as resp:
                body = await resp.read()
                text = body.decode("utf-8", errors="replace")

                if resp.status >= 300:
                    return APIResponse.from_error(
                        APIError.http_error(
                            f"HTTP {resp.status}: {resp.reason}",
                            data={"url": url, "body": text[:500]},
                        ),
                        status=resp.status,
                    )

                try:
                    data = json.loads(body) if body else {}
                except (json.JSONDecodeError, UnicodeDecodeError) as e:
                    return APIResponse.from_error(
                        APIError.invalid_response(
                            f"Invalid JSON response: {e}",
                            data={"url": url, "body": text[:500]},
                        ),
                        status=resp.status,
                    )
                return APIResponse(success=True, result=data, status=resp.status)

        except asyncio.TimeoutError:
            return APIResponse.from_error(
                APIError.timeout_error(
                    f"Request timed out after {self.timeout_ms}ms",
                    data={"url": url, "method": method},
                )
            )
        except aiohttp.ClientConnectorError as e:
            return APIResponse.from_error(
                APIError.connection_error(f"Connection failed: {e}", data={"url": url})
            )
        except aiohttp.ClientError as e:
            return APIResponse.from_error(
                APIError.connection_error(f"HTTP error: {e}", data={"url": url})
            )

    @staticmethod
    def _require_id(response: APIResponse) -> str:
        response.raise_for_error()
        item_id = response.result.get("id") if isinstance(response.result, dict) else None
        if not item_id:
            raise ReportClientError(
                APIError.invalid_response("Response has no 'id'", data=response.result)
            )
        return str(item_id)

    async def start_launch(self, options: LaunchOptions) -> str:
        payload = options.to_dict()
        if payload["startTime"] is None:
            payload["startTime"] = self.now()

        response = await self._request("POST", "/launch", payload)
        launch_id = self._require_id(response)
        self._launch_id = launch_id
        logger.info(f"Launch started: {launch_id} ({options.name})")
        return launch_id

    async def start_test_item(
        self,
        descriptor: ItemDescriptor,
        launch_id: str,
        parent_id: str | None = None,
    ) -> str:
        payload = descriptor.to_dict()
        payload["launchUuid"] = launch_id
        if payload["startTime"] is None:
            payload["startTime"] = self.now()

        path = f"/item/{parent_id}" if parent_id else "/item"
        response = await self._request("POST", path, payload)
        item_id = self._require_id(response)
        self._launch_id = launch_id
        return item_id

    async def finish_test_item(self, item_id: str, options: FinishOptions) -> None:
        payload = options.to_dict()
        payload["launchUuid"] = self._launch_id
        if payload["endTime"] is None:
            payload["endTime"] = self.now()

        response = await self._request("PUT", f"/item/{item_id}", payload)
        response.raise_for_error()

    async def send_log(
        self,
        item_id: str,
        entry: LogEntry,
        attachment: Attachment | None = None,
    ) -> None:
        payload: dict[str, Any] = {
            "launchUuid": self._launch_id,
            "itemUuid": item_id,
            "time": entry.time if entry.time is not None else self.now(),
            "level": entry.level_name,
            "message": entry.message,
        }

        if attachment is None:
            response = await self._request("POST", "/log", payload)
        else:
            payload["file"] = {"name": attachment.name}
            form = aiohttp.FormData()
            form.add_field(
                JSON_REQUEST_PART,
                json.dumps([payload]),
                content_type=JSON_CONTENT_TYPE,
            )
            form.add_field(
                FILE_PART,
                attachment.content,
                filename=attachment.name,
                content_type=attachment.mime_type,
            )
            response = await self._request("POST", "/log", form=form)

        response.raise_for_error()

    async def finish_launch(self, launch_id: str, options: FinishOptions) -> LaunchResult:
        payload = options.to_dict()
        if payload["endTime"] is None:
            payload["endTime"] = self.now()

        response = await self._request("PUT", f"/launch/{launch_id}/finish", payload)
        response.raise_for_error()

        data = response.result if isinstance(response.result, dict) else {}
        link = data.get("link") or self.launch_link(launch_id)
        logger.info(f"Launch finished: {launch_id} ({payload['status']})")
        return LaunchResult(launch_id=launch_id, link=link, raw_response=data)

    def __repr__(self) -> str:
        status = "connected" if self.is_connected else "disconnected"
        return f"HTTPReportClient(endpoint={self.endpoint!r}, project={self.project!r}, status={status})"
