"""
Exceptions raised by the reporting pass.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class ItemLookupError(LookupError):
    """A report item's parent could not be found among the open items."""
    pass


class SuiteLookupError(ItemLookupError):
    """A test declares a parent suite that has no open suite item."""

    def __init__(self, test_title: str, suite_title: str | None):
        super().__init__(f"No suite item for '{suite_title}' (parent of test '{test_title}')")
        self.test_title = test_title
        self.suite_title = suite_title


class MetaStepLookupError(ItemLookupError):
    """A meta-step's wrapper, or the meta-step itself, was never opened."""

    def __init__(self, key: Any, step_title: str):
        super().__init__(f"Meta-step {tuple(key)!r} is not open (needed by '{step_title}')")
        self.key = key
        self.step_title = step_title


class ParentItemLookupError(ItemLookupError):
    """A test item failed to open, so its steps have nowhere to go."""

    def __init__(self, test_title: str):
        super().__init__(f"Test item '{test_title}' was not opened; its steps were skipped")
        self.test_title = test_title


class HierarchyError(LookupError):
    """Raised after a pass that hit one or more lookup failures."""

    def __init__(self, failures: list[ItemLookupError]):
        summary = "; ".join(str(f) for f in failures)
        super().__init__(f"{len(failures)} report item(s) could not be placed: {summary}")
        self.failures = failures


class ResultLinkPersistError(Exception):
    """Writing the result-link file failed."""

    def __init__(self, path: Path, cause: OSError):
        super().__init__(f"Could not write result link to {path}: {cause}")
        self.path = path
