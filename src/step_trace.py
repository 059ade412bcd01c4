"""Step tracing: run a named unit of work and report how it ended.

``StepTracer.run_step`` announces the step, runs it, records a
``StepResult`` and tells every listener. A failing step is reported and
then re-raised to the caller unchanged; catching it here and carrying on
would turn a broken run green.
"""

import inspect
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Protocol


logger = logging.getLogger(__name__)


class StepOutcome(str, Enum):
    PASSED = "passed"
    FAILED = "failed"


@dataclass(frozen=True)
class StepResult:
    name: str
    outcome: StepOutcome
    started_at: str  # ISO-8601
    duration_ms: float
    error: str = ""

    @property
    def passed(self) -> bool:
        return self.outcome == StepOutcome.PASSED

    def to_dict(self) -> dict:
        d = {
            "name": self.name,
            "status": self.outcome.value,
            "started_at": self.started_at,
            "duration_ms": round(self.duration_ms, 2),
        }
        if self.error:
            d["error"] = self.error
        return d


class StepListener(Protocol):
    def step_started(self, name: str) -> None: ...

    def step_passed(self, result: StepResult) -> None: ...

    def step_failed(self, result: StepResult, error: BaseException) -> None: ...


class StepTracer:
    def __init__(self, listeners: list | None = None, scenario: str = ""):
        self.listeners = list(listeners or [])
        self.scenario = scenario
        self.results: list[StepResult] = []

    def _prefix(self) -> str:
        return f"[{self.scenario}] " if self.scenario else ""

    async def run_step(self, name: str, action: Callable[[], Any]):
        if not name or not name.strip():
            raise ValueError("step name must not be empty")
        logger.info("%sSTEP START: %s", self._prefix(), name)
        self._notify("step_started", name)
        started_at = datetime.now(timezone.utc).isoformat()
        start = time.monotonic()
        try:
            value = action()
            if inspect.isawaitable(value):
                value = await value
        except BaseException as e:
            result = StepResult(
                name=name,
                outcome=StepOutcome.FAILED,
                started_at=started_at,
                duration_ms=(time.monotonic() - start) * 1000,
                error=f"{type(e).__name__}: {e}",
            )
            self.results.append(result)
            logger.error("%sSTEP FAIL : %s", self._prefix(), name, exc_info=e)
            self._notify("step_failed", result, e)
            # must re-raise: swallowing here would report a failing run as passed
            raise
        result = StepResult(
            name=name,
            outcome=StepOutcome.PASSED,
            started_at=started_at,
            duration_ms=(time.monotonic() - start) * 1000,
        )
        self.results.append(result)
        logger.info("%sSTEP OK   : %s", self._prefix(), name)
        self._notify("step_passed", result)
        return value

    def _notify(self, event: str, *args) -> None:
        for listener in self.listeners:
            handler = getattr(listener, event, None)
            if handler is None:
                continue
            try:
                handler(*args)
            except Exception:
                logger.exception("step listener %r failed on %s", listener, event)
