from __future__ import annotations

from dataclasses import dataclass

from .errors import ValidationError
from .model import Capacity, Provisioning


@dataclass(frozen=True)
class CopyConfig:
    """Operator settings for one copy job.

    ``read_capacity`` is the minimum read capacity wanted on the source table
    while copying, ``write_capacity`` the minimum write capacity on the target.
    Zero leaves the table as it is.
    """

    read_capacity: int = 0
    write_capacity: int = 0
    reader_count: int = 1
    writer_count: int = 1

    def validate(self) -> None:
        if self.reader_count < 1:
            raise ValidationError("reader_count must be >= 1")
        if self.writer_count < 1:
            raise ValidationError("writer_count must be >= 1")
        if self.read_capacity < 0:
            raise ValidationError("read_capacity must be >= 0")
        if self.write_capacity < 0:
            raise ValidationError("write_capacity must be >= 0")

    def workers(self) -> tuple[int, int]:
        return self.reader_count, self.writer_count

    def provisioning(self, current: Provisioning) -> Provisioning:
        return provisioning_policy(self, current)


def provisioning_policy(config: CopyConfig, current: Provisioning) -> Provisioning:
    src = current.source
    if src is not None and config.read_capacity > src.read:
        src = Capacity(read=config.read_capacity, write=src.write)

    trg = current.target
    if trg is not None and config.write_capacity > trg.write:
        trg = Capacity(read=trg.read, write=config.write_capacity)

    return Provisioning(source=src, target=trg)
