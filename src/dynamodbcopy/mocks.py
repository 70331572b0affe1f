"""Scripted stand-in for the boto3 DynamoDB client, used by the test suites."""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Callable, Mapping
from functools import partial
from typing import Any, NamedTuple

Request = Mapping[str, Any]
Matcher = Mapping[str, Any] | Callable[[Request], None]


class _Wildcard:
    def __repr__(self) -> str:  # pragma: no cover
        return "ANY"


ANY: Any = _Wildcard()


def _check(expected: Any, actual: Any, path: str) -> None:
    if expected is ANY:
        return

    if isinstance(expected, Mapping):
        if not isinstance(actual, Mapping):
            raise AssertionError(f"{path}: expected dict, got {type(actual).__name__}")
        missing = [key for key in expected if key not in actual]
        if missing:
            raise AssertionError(f"{path}: missing key {missing[0]!r}")
        for key, want in expected.items():
            _check(want, actual[key], f"{path}.{key}")
    elif isinstance(expected, list):
        if not isinstance(actual, list):
            raise AssertionError(f"{path}: expected list, got {type(actual).__name__}")
        if len(actual) != len(expected):
            raise AssertionError(f"{path}: expected {len(expected)} items, got {len(actual)}")
        for i, want in enumerate(expected):
            _check(want, actual[i], f"{path}[{i}]")
    elif expected != actual:
        raise AssertionError(f"{path}: expected {expected!r}, got {actual!r}")


class _Step(NamedTuple):
    method: str
    matcher: Matcher | None
    response: Request | None
    error: BaseException | None


class FakeDynamoDBClient:
    """Answers the DynamoDB operations the copier uses from a script.

    Each call pops the next scripted step, checks the request against it
    (a partial dict where :data:`ANY` matches anything, or a callable that
    asserts), then raises the scripted error or returns the response. The
    script is shared safely between reader and writer threads.
    """

    OPERATIONS = frozenset({"describe_table", "update_table", "scan", "batch_write_item"})

    def __init__(self) -> None:
        self._script: deque[_Step] = deque()
        self._lock = threading.Lock()
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def expect(
        self,
        method: str,
        matcher: Matcher | None = None,
        *,
        response: Request | None = None,
        error: BaseException | None = None,
    ) -> None:
        if method not in self.OPERATIONS:
            raise ValueError(f"unsupported operation: {method}")
        self._script.append(_Step(method, matcher, response, error))

    def assert_no_pending(self) -> None:
        if self._script:
            raise AssertionError(f"pending expected calls: {[step.method for step in self._script]}")

    def __getattr__(self, name: str) -> Callable[..., Mapping[str, Any]]:
        if name not in self.OPERATIONS:
            raise AttributeError(name)
        return partial(self._answer, name)

    def _answer(self, method: str, **req: Any) -> Mapping[str, Any]:
        with self._lock:
            self.calls.append((method, dict(req)))
            step = self._script.popleft() if self._script else None

        if step is None:
            raise AssertionError(f"unexpected call: {method}")
        if step.method != method:
            raise AssertionError(f"expected {step.method}, got {method}")

        if callable(step.matcher):
            step.matcher(req)
        elif step.matcher is not None:
            _check(step.matcher, req, method)

        if step.error is not None:
            raise step.error
        return dict(step.response or {})
