from __future__ import annotations

from collections.abc import Callable
from typing import Any

from botocore.exceptions import ClientError

from .mocks import ANY, FakeDynamoDBClient
from .model import BILLING_MODE_PROVISIONED, TABLE_STATUS_ACTIVE
from .retry import Sleeper


def no_sleep(requested_ms: int) -> int:
    return requested_ms


def fixed_sleeper(jitter_ms: int, *, calls: list[int] | None = None) -> Sleeper:
    """Sleeper that never blocks and reports ``requested + jitter_ms`` as slept."""
    if jitter_ms < 0:
        raise ValueError("jitter_ms must be >= 0")

    def sleeper(requested_ms: int) -> int:
        if calls is not None:
            calls.append(requested_ms)
        return requested_ms + jitter_ms

    return sleeper


def step_clock(step_ms: float, *, start_ms: float = 0.0) -> Callable[[], float]:
    """Monotonic millisecond clock advancing ``step_ms`` on every read."""
    current = start_ms - step_ms

    def now() -> float:
        nonlocal current
        current += step_ms
        return current

    return now


def client_error(code: str, message: str = "", *, operation: str = "Operation") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message or code}}, operation)


def describe_response(
    table_name: str,
    *,
    status: str = TABLE_STATUS_ACTIVE,
    billing_mode: str | None = BILLING_MODE_PROVISIONED,
    read: int = 0,
    write: int = 0,
) -> dict[str, Any]:
    table: dict[str, Any] = {
        "TableName": table_name,
        "TableStatus": status,
        "ProvisionedThroughput": {"ReadCapacityUnits": read, "WriteCapacityUnits": write},
    }
    if billing_mode is not None:
        table["BillingModeSummary"] = {"BillingMode": billing_mode}
    return {"Table": table}


__all__ = [
    "ANY",
    "FakeDynamoDBClient",
    "client_error",
    "describe_response",
    "fixed_sleeper",
    "no_sleep",
    "step_clock",
]
