"""
Run data models for the reporting pass.

This module defines the suites, tests, steps and meta-steps collected
from the host test runner, the aggregated result shape produced by
parallel workers, and the status mapping used when items are finished.
"""

from __future__ import annotations

import json
import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NamedTuple


class ItemStatus(str, Enum):
    """Final status of a report item."""
    PASSED = "PASSED"
    FAILED = "FAILED"


def rp_status(status: Any) -> Any:
    """
    Map a runner status onto a report status.

    "success" becomes PASSED, "failed" becomes FAILED, and anything else
    is passed through unchanged.
    """
    if status == "success":
        return ItemStatus.PASSED
    if status == "failed":
        return ItemStatus.FAILED
    return status


def format_args(args: Any) -> str:
    """Serialize step arguments for display; arbitrary values are stringified."""
    return json.dumps(args if args is not None else {}, default=str, ensure_ascii=False)


def format_error(error: Any) -> str:
    """
    Render an error for a log message.

    Exceptions get their formatted traceback, objects with a ``stack``
    get the stack, anything else is dumped as JSON.
    """
    if isinstance(error, BaseException):
        return "".join(traceback.format_exception(type(error), error, error.__traceback__)).rstrip()
    if isinstance(error, dict):
        stack = error.get("stack")
    else:
        stack = getattr(error, "stack", None)
    if stack:
        return str(stack)
    return json.dumps(error, default=str, ensure_ascii=False)


# ─────────────────────────────────────────────────────────────────────────────
# Meta-steps
# ─────────────────────────────────────────────────────────────────────────────

class MetaStepKey(NamedTuple):
    """Value identity of a meta-step occurrence."""
    actor: str
    name: str
    started_at: Any


@dataclass(eq=False)
class MetaStep:
    """
    A higher-level action that wraps one or more steps.

    ``wraps`` points at the next outer meta-step, if any, so a meta-step
    is the innermost link of a chain that ends at the outermost wrapper.
    Two meta-steps denote the same occurrence when their keys match, even
    if they are different objects.
    """
    actor: str
    name: str
    args: Any = None
    started_at: Any = None
    status: Any = None
    wraps: MetaStep | None = None

    @property
    def key(self) -> MetaStepKey:
        return MetaStepKey(self.actor, self.name, self.started_at)

    @property
    def title(self) -> str:
        if self.args:
            return f"{self.actor} {self.name} {format_args(self.args)}"
        return f"{self.actor} {self.name}"

    def chain(self) -> list[MetaStep]:
        """This meta-step and its wrappers, innermost first."""
        chain: list[MetaStep] = []
        seen: set[int] = set()
        current: MetaStep | None = self
        while current is not None and id(current) not in seen:
            seen.add(id(current))
            chain.append(current)
            current = current.wraps
        return chain

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MetaStep:
        """Build a chain from nested ``metaStep`` mappings, innermost first."""
        raw_chain = []
        current: dict[str, Any] | None = data
        while current:
            raw_chain.append(current)
            current = current.get("metaStep")

        outer: MetaStep | None = None
        for raw in reversed(raw_chain):
            outer = cls(
                actor=raw.get("actor", ""),
                name=raw.get("name", ""),
                args=raw.get("args"),
                started_at=raw.get("startTime", raw.get("startedAt")),
                status=raw.get("status"),
                wraps=outer,
            )
        return outer


# ─────────────────────────────────────────────────────────────────────────────
# Steps, tests, suites
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class StepRecord:
    """A single action executed within a test."""
    actor: str
    name: str
    args: Any = None
    status: Any = None
    error: Any = None
    meta_step: MetaStep | None = None

    @property
    def title(self) -> str:
        return f"[STEP] - {self.actor} {self.name} {format_args(self.args)}"

    def meta_chain(self) -> list[MetaStep]:
        """Wrapping meta-steps, innermost first (empty when unwrapped)."""
        if self.meta_step is None:
            return []
        return self.meta_step.chain()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StepRecord:
        meta = data.get("metaStep")
        return cls(
            actor=data.get("actor", ""),
            name=data.get("name", ""),
            args=data.get("args"),
            status=data.get("status"),
            error=data.get("err"),
            meta_step=MetaStep.from_dict(meta) if meta else None,
        )


@dataclass
class TestRecord:
    """An executed test and the steps it ran."""
    __test__ = False  # not a pytest test class

    title: str
    parent_title: str | None = None
    uid: str = ""
    status: Any = None
    error: Any = None
    steps: list[StepRecord] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TestRecord:
        parent = data.get("parent") or {}
        return cls(
            title=data.get("title", ""),
            parent_title=parent.get("title") if isinstance(parent, dict) else None,
            uid=str(data.get("uid") or data.get("id") or ""),
            status=data.get("state", data.get("status")),
            error=data.get("err"),
            steps=[StepRecord.from_dict(s) for s in data.get("steps") or []],
        )


@dataclass
class SuiteRecord:
    """A discovered test suite; suites are identified by title."""
    title: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SuiteRecord:
        return cls(title=data.get("title", ""))


@dataclass
class AggregatedResult:
    """
    Merged summary produced when tests run across worker processes.

    Mirrors the worker payload ``{suites: [...], tests: {passed: [...],
    failed: [...]}}``.
    """
    suites: list[SuiteRecord] = field(default_factory=list)
    passed: list[TestRecord] = field(default_factory=list)
    failed: list[TestRecord] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AggregatedResult:
        tests = data.get("tests") or {}
        return cls(
            suites=[SuiteRecord.from_dict(s) for s in data.get("suites") or []],
            passed=[TestRecord.from_dict(t) for t in tests.get("passed") or []],
            failed=[TestRecord.from_dict(t) for t in tests.get("failed") or []],
        )
