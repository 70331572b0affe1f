from __future__ import annotations

from botocore.exceptions import BotoCoreError, ClientError

from .errors import AwsError, NotFoundError, ThrottledError

THROTTLING_ERROR_CODES = frozenset(
    {
        "ProvisionedThroughputExceededException",
        "ThrottlingException",
        "RequestLimitExceeded",
    }
)


def error_code(err: ClientError) -> str:
    return str(err.response.get("Error", {}).get("Code", ""))


def is_throttling_error(err: ClientError) -> bool:
    return error_code(err) in THROTTLING_ERROR_CODES


def map_client_error(
    err: ClientError,
    *,
    table_name: str,
    operation: str,
    segment: int | None = None,
) -> AwsError:
    code = error_code(err)
    message = str(err.response.get("Error", {}).get("Message", ""))

    kwargs = {
        "code": code or "UnknownError",
        "message": message or str(err),
        "table_name": table_name,
        "operation": operation,
        "segment": segment,
    }
    if code in THROTTLING_ERROR_CODES:
        return ThrottledError(**kwargs)
    if code == "ResourceNotFoundException":
        return NotFoundError(**kwargs)

    return AwsError(**kwargs)


def map_botocore_error(
    err: BotoCoreError,
    *,
    table_name: str,
    operation: str,
    segment: int | None = None,
) -> AwsError:
    """Wrap transport and credential failures, which carry no service error code."""
    return AwsError(
        code=type(err).__name__,
        message=str(err),
        table_name=table_name,
        operation=operation,
        segment=segment,
    )
