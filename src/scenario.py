import logging
import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Iterable, Sequence

from step_trace import StepResult, StepTracer


logger = logging.getLogger(__name__)


class ScenarioState(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"


@dataclass(frozen=True)
class NamedAction:
    name: str
    action: Callable[[], Any]


@dataclass(frozen=True)
class ScenarioCase:
    label: str
    expected_url: re.Pattern


@dataclass(frozen=True)
class ScenarioResult:
    name: str
    state: ScenarioState
    steps: tuple[StepResult, ...]
    started_at: str  # ISO-8601
    duration_ms: float
    error: str = ""
    failed_step: str = ""
    screenshot: str = ""

    @property
    def passed(self) -> bool:
        return self.state == ScenarioState.PASSED

    @property
    def failed_index(self) -> int:
        """1-based position of the failing step, 0 when nothing failed."""
        for idx, step in enumerate(self.steps, start=1):
            if not step.passed:
                return idx
        return 0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "status": self.state.value,
            "error": self.error,
            "failed_step": self.failed_step,
            "screenshot": self.screenshot,
            "started_at": self.started_at,
            "duration_ms": round(self.duration_ms, 2),
            "steps": [s.to_dict() for s in self.steps],
        }


async def run_scenario(steps: Iterable[NamedAction], tracer: StepTracer | None = None, name: str = "") -> ScenarioResult:
    """Run ``steps`` in order through the tracer, stopping at the first failure."""
    tracer = tracer or StepTracer(scenario=name)
    started_at = datetime.now(timezone.utc).isoformat()
    start = time.monotonic()
    error = ""
    failed_step = ""
    for step in steps:
        try:
            await tracer.run_step(step.name, step.action)
        except Exception as e:
            failed_step = step.name
            error = f"{type(e).__name__}: {e}"
            break
    return ScenarioResult(
        name=name,
        state=ScenarioState.FAILED if failed_step else ScenarioState.PASSED,
        steps=tuple(tracer.results),
        started_at=started_at,
        duration_ms=(time.monotonic() - start) * 1000,
        error=error,
        failed_step=failed_step,
    )


@dataclass
class Scenario:
    """One user-facing flow: shared setup steps followed by its own steps.

    ``build`` and ``setup`` receive the page of the browser session the
    scenario runs in and return the actions to trace, in order.
    """

    name: str
    build: Callable[[Any], Sequence[NamedAction]]
    setup: Callable[[Any], Sequence[NamedAction]] | None = None
    state: ScenarioState = field(default=ScenarioState.NOT_STARTED, init=False)

    def steps_for(self, page) -> list[NamedAction]:
        steps = list(self.setup(page)) if self.setup else []
        steps.extend(self.build(page))
        return steps

    async def run(self, page, listeners: list | None = None) -> ScenarioResult:
        if self.state != ScenarioState.NOT_STARTED:
            raise RuntimeError(f"scenario {self.name!r} already {self.state.value}")
        self.state = ScenarioState.RUNNING
        tracer = StepTracer(listeners, scenario=self.name)
        try:
            result = await run_scenario(self.steps_for(page), tracer, name=self.name)
        except BaseException:
            self.state = ScenarioState.FAILED
            raise
        self.state = result.state
        logger.info("scenario %s: %s", self.name, result.state.value)
        return result


class ScenarioSet:
    """Static table of cases driving one scenario template."""

    def __init__(self, cases: Iterable[ScenarioCase]):
        self.cases = tuple(cases)
        seen = set()
        for case in self.cases:
            if case.label in seen:
                raise ValueError(f"duplicate scenario label: {case.label!r}")
            seen.add(case.label)

    def __iter__(self):
        return iter(self.cases)

    def __len__(self):
        return len(self.cases)

    def expand(
        self,
        template: Callable[[ScenarioCase, Any], Sequence[NamedAction]],
        name_format: str = "{label}",
        setup: Callable[[Any], Sequence[NamedAction]] | None = None,
    ) -> list[Scenario]:
        scenarios = []
        for case in self.cases:
            # bind case now; the lambda runs later against the session page
            scenarios.append(Scenario(
                name=name_format.format(label=case.label),
                build=lambda page, case=case: template(case, page),
                setup=setup,
            ))
        return scenarios
