from __future__ import annotations

import logging
import queue
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Protocol

from .errors import DynamodbcopyError, PipelineFault, ValidationError
from .model import Item, Page

logger = logging.getLogger(__name__)


class ScanSource(Protocol):
    @property
    def table_name(self) -> str: ...

    def scan(self, total_segments: int, segment: int, sink: Any) -> int: ...


class BatchTarget(Protocol):
    @property
    def table_name(self) -> str: ...

    def batch_write(self, items: list[Item]) -> int: ...


class _Closed:
    def __repr__(self) -> str:  # pragma: no cover
        return "CLOSED"


_CLOSED: Any = _Closed()


class _Cancelled(Exception):
    pass


class Copier:
    """Copies every item of the source table into the target table.

    ``readers`` threads each scan one segment of the source and push pages
    onto a channel holding at most ``writers`` pages, so readers stall when
    the writers fall behind. ``writers`` threads drain the channel into
    ``batch_write`` on the target.

    The first fault reported by any thread is raised from :meth:`copy` once
    every thread has finished. After a fault readers stop at the next page
    and writers discard what is left in the channel.
    """

    def __init__(self, source: ScanSource, target: BatchTarget, *, readers: int, writers: int) -> None:
        if readers < 1:
            raise ValidationError("readers must be >= 1")
        if writers < 1:
            raise ValidationError("writers must be >= 1")

        self._source = source
        self._target = target
        self._readers = readers
        self._writers = writers

    def copy(self) -> int:
        pages: queue.Queue[Page] = queue.Queue(maxsize=self._writers)
        results: queue.Queue[DynamodbcopyError] = queue.Queue(maxsize=self._readers + self._writers)
        failed = threading.Event()
        written = [0] * self._writers

        def report(err: DynamodbcopyError) -> None:
            failed.set()
            results.put_nowait(err)

        def read(reader_id: int) -> None:
            def push(page: Page) -> None:
                if failed.is_set():
                    raise _Cancelled()
                pages.put(page)

            try:
                self._source.scan(self._readers, reader_id, push)
            except _Cancelled:
                logger.debug("reader %d stopped after a pipeline fault", reader_id)
            except DynamodbcopyError as err:
                report(err)
            except BaseException as err:
                report(PipelineFault(role="reader", worker_id=reader_id, cause=err))

        def write(writer_id: int) -> None:
            while True:
                page = pages.get()
                if page is _CLOSED:
                    break
                if failed.is_set():
                    continue

                try:
                    self._target.batch_write(page)
                except DynamodbcopyError as err:
                    report(err)
                    continue
                except BaseException as err:
                    report(PipelineFault(role="writer", worker_id=writer_id, cause=err))
                    continue
                written[writer_id] += len(page)

            logger.debug("writer %d wrote %d items", writer_id, written[writer_id])

        logger.info(
            "copying %s to %s with %d readers and %d writers",
            self._source.table_name,
            self._target.table_name,
            self._readers,
            self._writers,
        )
        with ThreadPoolExecutor(
            max_workers=self._readers + self._writers,
            thread_name_prefix="dynamodbcopy",
        ) as ex:
            reader_futures = [ex.submit(read, i) for i in range(self._readers)]
            writer_futures = [ex.submit(write, i) for i in range(self._writers)]

            wait(reader_futures)
            for _ in range(self._writers):
                pages.put(_CLOSED)
            wait(writer_futures)

        for fut in reader_futures + writer_futures:
            fut.result()

        first: DynamodbcopyError | None = None
        while not results.empty():
            err = results.get_nowait()
            if first is None:
                first = err
            else:
                logger.debug("dropping additional copy fault: %s", err)

        if first is not None:
            raise first

        total = sum(written)
        logger.info("copied %d items to %s", total, self._target.table_name)
        return total
