"""
Meta-step resolution.

Steps executed inside higher-level actions carry a chain of wrapping
meta-steps. The resolver opens a report item for each wrapper the first
time a step needs it, outermost first, so the report shows the same
nesting as the test. Wrappers are matched by (actor, name, start time),
so two calls to the same action within a test become separate items
while every step inside one call shares a single item.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..client import ItemType
from .context import ReportingPass
from .errors import MetaStepLookupError
from .models import ItemStatus, MetaStep, MetaStepKey, StepRecord, rp_status

logger = logging.getLogger(__name__)


@dataclass
class OpenMetaStep:
    """A meta-step whose report item is currently open."""
    source: MetaStep
    item_id: str


class MetaStepResolver:
    """
    Opens wrapper items on demand for the steps of one test.

    The registry is scoped to a single test: call close_all() once the
    test's steps are reported, before moving on to the next test.
    """

    def __init__(self, context: ReportingPass, test_item_id: str):
        self.context = context
        self.test_item_id = test_item_id
        self.registry: dict[MetaStepKey, OpenMetaStep] = {}

    async def ensure_open(self, step: StepRecord) -> OpenMetaStep | None:
        """
        Make sure every wrapper of ``step`` has an open item.

        Returns:
            The innermost wrapper's open item, or None if the step is unwrapped

        Raises:
            MetaStepLookupError: If a wrapper's item could not be opened
        """
        chain = step.meta_chain()
        if not chain:
            return None

        outermost = len(chain) - 1
        for index in range(outermost, -1, -1):
            meta = chain[index]
            if meta.key in self.registry:
                continue

            if index == outermost:
                parent_id = self.test_item_id
            else:
                outer = self.registry.get(chain[index + 1].key)
                if outer is None:
                    raise MetaStepLookupError(chain[index + 1].key, step.title)
                parent_id = outer.item_id

            item_id = await self.context.start_item(meta.title, ItemType.STEP, parent_id)
            if item_id is None:
                continue
            self.registry[meta.key] = OpenMetaStep(source=meta, item_id=item_id)

        innermost = self.registry.get(chain[0].key)
        if innermost is None:
            raise MetaStepLookupError(chain[0].key, step.title)
        return innermost

    async def close_all(self) -> None:
        """Finish every open wrapper, inner before outer, and clear the registry."""
        for open_meta in reversed(list(self.registry.values())):
            status = rp_status(open_meta.source.status) or ItemStatus.PASSED
            await self.context.finish_item(open_meta.item_id, status)
        self.registry.clear()
