from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .aws_errors import is_throttling_error, map_botocore_error, map_client_error
from .errors import ValidationError
from .model import Capacity, Item, Page, TableDescription
from .retry import MAX_RETRY_ELAPSED_MS, RetryExecutor, Sleeper

logger = logging.getLogger(__name__)

MAX_BATCH_WRITE_SIZE = 25

T = TypeVar("T")


def _chunked(items: Sequence[T], size: int) -> Sequence[Sequence[T]]:
    if size <= 0:
        raise ValueError("size must be > 0")
    return [items[i : i + size] for i in range(0, len(items), size)]


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class TableService:
    """Retry-aware access to a single DynamoDB table."""

    def __init__(
        self,
        table_name: str,
        *,
        client: Any | None = None,
        sleeper: Sleeper | None = None,
        max_elapsed_ms: int = MAX_RETRY_ELAPSED_MS,
        batch_size: int = MAX_BATCH_WRITE_SIZE,
        now: Callable[[], float] | None = None,
    ) -> None:
        if not table_name:
            raise ValueError("table_name is required")
        if batch_size <= 0 or batch_size > MAX_BATCH_WRITE_SIZE:
            raise ValueError(f"batch_size must be between 1 and {MAX_BATCH_WRITE_SIZE}")

        self._table_name = table_name
        self._client: Any = client or boto3.client("dynamodb")
        self._retry = RetryExecutor(sleeper=sleeper, max_elapsed_ms=max_elapsed_ms)
        self._batch_size = batch_size
        self._now = now or _monotonic_ms

    @property
    def table_name(self) -> str:
        return self._table_name

    def describe(self) -> TableDescription:
        try:
            resp = self._client.describe_table(TableName=self._table_name)
        except ClientError as err:
            raise map_client_error(err, table_name=self._table_name, operation="describe_table") from err
        except BotoCoreError as err:
            raise map_botocore_error(err, table_name=self._table_name, operation="describe_table") from err

        return TableDescription.from_response(resp)

    def update_capacity(self, capacity: Capacity) -> None:
        capacity.validate()

        logger.info(
            "updating %s with read: %d, write: %d",
            self._table_name,
            capacity.read,
            capacity.write,
        )
        try:
            self._client.update_table(
                TableName=self._table_name,
                ProvisionedThroughput=capacity.to_throughput(),
            )
        except ClientError as err:
            raise map_client_error(err, table_name=self._table_name, operation="update_table") from err
        except BotoCoreError as err:
            raise map_botocore_error(err, table_name=self._table_name, operation="update_table") from err

        self.wait_for_ready()

    def wait_for_ready(self) -> None:
        def is_active(attempt: int, elapsed_ms: int) -> bool:
            description = self.describe()
            if not description.is_active:
                logger.debug(
                    "%s is %s, waiting (elapsed %d ms, attempt %d)",
                    self._table_name,
                    description.status,
                    elapsed_ms,
                    attempt,
                )
            return description.is_active

        self._retry.run(is_active, table_name=self._table_name, operation_name="wait_for_ready")

    def scan(self, total_segments: int, segment: int, sink: Callable[[Page], None]) -> int:
        if total_segments <= 0:
            raise ValidationError("total_segments has to be greater than 0")
        if segment < 0 or segment >= total_segments:
            raise ValidationError(f"segment must be in [0, {total_segments}), got {segment}")

        req: dict[str, Any] = {"TableName": self._table_name}
        if total_segments > 1:
            req["Segment"] = segment
            req["TotalSegments"] = total_segments

        scanned = 0
        while True:
            try:
                resp = self._client.scan(**req)
            except ClientError as err:
                raise map_client_error(
                    err, table_name=self._table_name, operation="scan", segment=segment
                ) from err
            except BotoCoreError as err:
                raise map_botocore_error(
                    err, table_name=self._table_name, operation="scan", segment=segment
                ) from err

            items: Page = list(resp.get("Items") or [])
            scanned += len(items)
            logger.debug(
                "%s table scanned page with %d items (reader %d)",
                self._table_name,
                len(items),
                segment,
            )
            sink(items)

            last = resp.get("LastEvaluatedKey")
            if not last:
                break
            req["ExclusiveStartKey"] = last

        logger.debug("%s table scanned a total of %d items (reader %d)", self._table_name, scanned, segment)
        return scanned

    def batch_write(self, items: Sequence[Item]) -> int:
        logger.debug("writing batch of %d to %s", len(items), self._table_name)
        if not items:
            return 0

        requests = [{"PutRequest": {"Item": item}} for item in items]
        written = 0
        for chunk in _chunked(requests, self._batch_size):
            written += self._write_chunk(list(chunk))
        return written

    def _write_chunk(self, requests: list[dict[str, Any]]) -> int:
        pending = requests

        def submit(attempt: int, elapsed: int) -> bool:
            nonlocal pending
            try:
                resp = self._client.batch_write_item(RequestItems={self._table_name: pending})
            except ClientError as err:
                if is_throttling_error(err):
                    logger.debug(
                        "batch write to %s throttled (%s): waited %d ms (attempt %d)",
                        self._table_name,
                        err.response.get("Error", {}).get("Code", ""),
                        elapsed,
                        attempt,
                    )
                    return False
                raise map_client_error(err, table_name=self._table_name, operation="batch_write_item") from err
            except BotoCoreError as err:
                raise map_botocore_error(err, table_name=self._table_name, operation="batch_write_item") from err

            pending = list((resp.get("UnprocessedItems") or {}).get(self._table_name) or [])
            return True

        # Throttling and unprocessed resubmissions share one ceiling per chunk.
        started = self._now()
        elapsed_ms = 0
        while pending:
            elapsed_ms = max(elapsed_ms, int(self._now() - started))
            elapsed_ms = self._retry.run(
                submit,
                elapsed_ms=elapsed_ms,
                table_name=self._table_name,
                operation_name="batch_write_item",
            )
            if pending:
                logger.debug("%d unprocessed items for %s, resubmitting", len(pending), self._table_name)

        return len(requests)
