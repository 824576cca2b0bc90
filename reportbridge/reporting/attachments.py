"""
Failure artifacts: screenshots and screen recordings.

The host automation driver may expose a screenshot capability, a screen
recording capability, both, or neither. The collector turns whatever is
available into Attachment blobs; anything missing or unreadable yields
None and a warning, never an exception.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Protocol, runtime_checkable

from ..client import Attachment

logger = logging.getLogger(__name__)

PNG_MIME_TYPE = "image/png"
MP4_MIME_TYPE = "video/mp4"

# Characters that are unsafe in file names and what they become
_CLEAR_TABLE = str.maketrans({
    " ": "_",
    '"': "'",
    "/": "_",
    "\\": "_",
    "<": "(",
    ">": ")",
    ":": "_",
    "|": "_",
    "?": ".",
    "*": "^",
})


def clear_string(value: str) -> str:
    """Make a test title safe to use as a file name."""
    return value.translate(_CLEAR_TABLE).replace("'", "")


@runtime_checkable
class ScreenshotCapability(Protocol):
    """A UI driver that can save a screenshot into the output directory."""

    async def save_screenshot(self, file_name: str) -> None:
        ...


@runtime_checkable
class RecordingCapability(Protocol):
    """A mobile driver that can record the screen while a test runs."""

    async def start_record(self) -> None:
        ...

    async def stop_record(self, file_name: str) -> None:
        ...


class AttachmentCollector:
    """Packages screenshots and screen recordings for upload."""

    def __init__(
        self,
        output_dir: Path,
        screenshot: ScreenshotCapability | None = None,
        recorder: RecordingCapability | None = None,
        clock: Callable[[], int] | None = None,
    ):
        self.output_dir = Path(output_dir)
        self.screenshot_capability = screenshot
        self.recorder = recorder
        self._clock = clock or (lambda: int(time.time() * 1000))

    def recording_path(self, test_uid: str) -> Path:
        return self.output_dir / f"record-test-{test_uid}.mp4"

    def has_recording(self, test_uid: str) -> bool:
        return self.recording_path(test_uid).exists()

    async def start_recording(self) -> None:
        if self.recorder is not None:
            await self.recorder.start_record()

    async def stop_recording(self, test_uid: str) -> None:
        if self.recorder is not None:
            await self.recorder.stop_record(str(self.recording_path(test_uid)))

    async def screen_recording(self, path: Path) -> Attachment | None:
        """Read a finished recording and remove it from disk."""
        if self.recorder is None:
            return None
        try:
            content = path.read_bytes()
            path.unlink()
        except OSError as e:
            logger.warning(f"Screen recording unavailable: {path} ({e})")
            return None
        return Attachment(name=clear_string(path.name), mime_type=MP4_MIME_TYPE, content=content)

    async def screenshot(self, file_name: str | None = None) -> Attachment | None:
        """
        Load a screenshot from the output directory.

        With a file name, the already-saved screenshot is read and left in
        place. Without one, a fresh screenshot is captured, read, and
        removed.
        """
        if self.screenshot_capability is None:
            return None

        if file_name is None:
            file_name = f"{self._clock()}_failed.png"
            path = self.output_dir / file_name
            try:
                await self.screenshot_capability.save_screenshot(file_name)
                content = path.read_bytes()
                path.unlink()
            except Exception as e:
                logger.warning(f"Couldn't save screenshot {file_name}: {e}")
                return None
        else:
            path = self.output_dir / file_name
            try:
                content = path.read_bytes()
            except OSError as e:
                logger.warning(f"Screenshot unavailable: {path} ({e})")
                return None

        return Attachment(name=file_name, mime_type=PNG_MIME_TYPE, content=content)
