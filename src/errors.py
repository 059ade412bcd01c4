"""Failure taxonomy for scenario steps.

Every error raised inside a traced step is one of these (or propagates
unchanged from the action), so a report can tell a missing element apart
from a predicate that never became true or a driver that blew up.
"""

import re


class ScenarioError(Exception):
    """Base class for failures raised by the scenario runner."""


class ElementNotFound(ScenarioError):
    def __init__(self, descriptors, timeout: float | None = None):
        self.descriptors = tuple(descriptors)
        self.timeout = timeout
        attempted = " OR ".join(_describe(d) for d in self.descriptors) or "<no descriptors>"
        msg = f"No visible element for {attempted}"
        if timeout is not None:
            msg += f" within {timeout:g}s"
        super().__init__(msg)


class AssertionTimeout(ScenarioError):
    def __init__(self, subject: str, expected, last_observed, timeout: float):
        self.subject = subject
        self.expected = expected
        self.last_observed = last_observed
        self.timeout = timeout
        super().__init__(
            f"{subject}: expected {_render(expected)} within {timeout:g}s, "
            f"last observed {_render(last_observed)}"
        )


class UnexpectedInteractionFailure(ScenarioError):
    def __init__(self, operation: str, target: str, cause: BaseException):
        self.operation = operation
        self.target = target
        self.cause = cause
        super().__init__(f"{operation} {target} failed: {type(cause).__name__}: {cause}")


def _describe(descriptor) -> str:
    describe = getattr(descriptor, "describe", None)
    return describe() if callable(describe) else str(descriptor)


def _render(value) -> str:
    pattern = getattr(value, "pattern", None)
    if isinstance(pattern, str):
        return f"/{pattern}/" + ("i" if value.flags & re.I else "")
    return repr(value)
