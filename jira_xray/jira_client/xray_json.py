"""
Xray JSON Results Format.

Dataclasses mirroring the "Xray JSON" import format: a Test Execution
with optional info block and one entry per Test Run, each of which may
carry evidences, per-case results, examples, steps and linked defects.
"""

from __future__ import annotations

import base64
import mimetypes
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from loguru import logger

# Xray-compatible status values
VALID_STATUSES = {"PASS", "FAIL", "TODO", "EXECUTING", "ABORTED"}

Timestamp = Union[datetime, str, None]


def _normalize_status(status: str, owner: str) -> str:
    normalized = status.upper()
    if normalized not in VALID_STATUSES:
        logger.warning(
            f"Invalid status '{status}' for {owner}, "
            f"defaulting to 'TODO'. Valid: {sorted(VALID_STATUSES)}"
        )
        return "TODO"
    return normalized


def _timestamp(value: Timestamp) -> Optional[str]:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _put(target: Dict[str, Any], key: str, value: Any) -> None:
    """Set key only when value is non-empty."""
    if value is None or value == "" or value == []:
        return
    target[key] = value


@dataclass
class XrayEvidence:
    """An attachment proving a Test Run or step outcome."""

    data: str
    filename: str
    content_type: str = ""

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> XrayEvidence:
        """Read a file and base64-encode it as evidence."""
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            data=base64.b64encode(path.read_bytes()).decode("ascii"),
            filename=path.name,
            content_type=content_type or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {"data": self.data, "filename": self.filename}
        _put(result, "contentType", self.content_type)
        return result


@dataclass
class XrayTestStep:
    """Outcome of a single manual Test step."""

    status: str
    comment: str = ""
    evidences: List[XrayEvidence] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.status = _normalize_status(self.status, "test step")

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"status": self.status}
        _put(result, "comment", self.comment)
        _put(result, "evidences", [e.to_dict() for e in self.evidences])
        return result


@dataclass
class XrayTestCaseResult:
    """Result of one test case within a Test Run (e.g. a generic test)."""

    name: str
    status: str
    duration: Optional[float] = None
    log: str = ""
    examples: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.status = _normalize_status(self.status, self.name)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"name": self.name, "status": self.status}
        _put(result, "duration", self.duration)
        _put(result, "log", self.log)
        _put(result, "examples", list(self.examples))
        return result


@dataclass
class XrayTestRun:
    """
    Result of a single Test within the execution.

    Attributes:
        test_key: Jira issue key of the Test (e.g., "CALC-101").
        status: Overall status of the run.
        comment: Free text about the run.
        start: When the run started.
        finish: When the run finished.
        executed_by: Jira user who executed the run.
        evidences: Attachments for the run as a whole.
        results: Per-case results.
        examples: Statuses of data-driven examples, in order.
        steps: Per-step outcomes.
        defects: Keys of bugs raised during the run.
    """

    test_key: str
    status: str = "TODO"
    comment: str = ""
    start: Timestamp = None
    finish: Timestamp = None
    executed_by: str = ""
    evidences: List[XrayEvidence] = field(default_factory=list)
    results: List[XrayTestCaseResult] = field(default_factory=list)
    examples: List[str] = field(default_factory=list)
    steps: List[XrayTestStep] = field(default_factory=list)
    defects: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.status = _normalize_status(self.status, self.test_key)
        self.examples = [_normalize_status(e, self.test_key) for e in self.examples]

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"testKey": self.test_key, "status": self.status}
        _put(result, "comment", self.comment)
        _put(result, "start", _timestamp(self.start))
        _put(result, "finish", _timestamp(self.finish))
        _put(result, "executedBy", self.executed_by)
        _put(result, "evidences", [e.to_dict() for e in self.evidences])
        _put(result, "results", [r.to_dict() for r in self.results])
        _put(result, "examples", list(self.examples))
        _put(result, "steps", [s.to_dict() for s in self.steps])
        _put(result, "defects", list(self.defects))
        return result


@dataclass
class XrayExecutionInfo:
    """Metadata for a Test Execution created by the import."""

    summary: str = ""
    project: str = ""
    description: str = ""
    user: str = ""
    version: str = ""
    revision: str = ""
    start_date: Timestamp = None
    finish_date: Timestamp = None
    test_plan_key: str = ""
    test_environments: Union[str, Sequence[str], None] = None

    def to_dict(self) -> Dict[str, Any]:
        # Local import; import_request depends on this module.
        from jira_xray.jira_client.import_request import split_test_environments

        result: Dict[str, Any] = {}
        _put(result, "project", self.project)
        _put(result, "summary", self.summary)
        _put(result, "description", self.description)
        _put(result, "user", self.user)
        _put(result, "version", self.version)
        _put(result, "revision", self.revision)
        _put(result, "startDate", _timestamp(self.start_date))
        _put(result, "finishDate", _timestamp(self.finish_date))
        _put(result, "testPlanKey", self.test_plan_key)
        _put(result, "testEnvironments", split_test_environments(self.test_environments))
        return result


@dataclass
class XrayExecutionResults:
    """
    A complete Xray JSON import payload.

    Usage::

        results = XrayExecutionResults(
            info=XrayExecutionInfo(summary="Nightly run", project="CALC"),
        )
        results.add_test_run(XrayTestRun(test_key="CALC-101", status="PASS"))
        client.import_exec_results_from_xray(results)
    """

    tests: List[XrayTestRun] = field(default_factory=list)
    test_execution_key: str = ""
    info: Optional[XrayExecutionInfo] = None

    def add_test_run(self, run: XrayTestRun) -> None:
        """Append a Test Run to the execution."""
        self.tests.append(run)
        logger.debug(f"Test run added: {run.test_key} -> {run.status}")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the Xray JSON import format."""
        payload: Dict[str, Any] = {"tests": [t.to_dict() for t in self.tests]}
        _put(payload, "testExecutionKey", self.test_execution_key)
        if self.info is not None:
            _put(payload, "info", self.info.to_dict() or None)
        return payload
