from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .errors import ValidationError

TABLE_STATUS_ACTIVE = "ACTIVE"

BILLING_MODE_PROVISIONED = "PROVISIONED"
BILLING_MODE_PAY_PER_REQUEST = "PAY_PER_REQUEST"

Item = dict[str, Any]
Page = list[Item]


@dataclass(frozen=True)
class Capacity:
    read: int
    write: int

    def validate(self) -> None:
        if self.read <= 0 or self.write <= 0:
            raise ValidationError(
                f"invalid update capacity read {self.read}, write {self.write}: "
                "capacity units must be greater than 0"
            )

    def to_throughput(self) -> dict[str, int]:
        return {"ReadCapacityUnits": int(self.read), "WriteCapacityUnits": int(self.write)}


@dataclass(frozen=True)
class Provisioning:
    """Capacity of the source and target tables.

    A side is None when that table is billed on demand, meaning its capacity
    is never updated.
    """

    source: Capacity | None = None
    target: Capacity | None = None


@dataclass(frozen=True)
class TableDescription:
    name: str
    status: str
    billing_mode: str
    capacity: Capacity | None = None

    @property
    def is_active(self) -> bool:
        return self.status == TABLE_STATUS_ACTIVE

    @property
    def is_provisioned(self) -> bool:
        return self.billing_mode == BILLING_MODE_PROVISIONED

    @classmethod
    def from_response(cls, resp: Mapping[str, Any]) -> TableDescription:
        table = resp.get("Table") or {}

        # Tables created as PROVISIONED before on-demand billing existed omit the summary.
        summary = table.get("BillingModeSummary") or {}
        billing_mode = str(summary.get("BillingMode") or BILLING_MODE_PROVISIONED)

        capacity: Capacity | None = None
        if billing_mode == BILLING_MODE_PROVISIONED:
            throughput = table.get("ProvisionedThroughput") or {}
            capacity = Capacity(
                read=int(throughput.get("ReadCapacityUnits") or 0),
                write=int(throughput.get("WriteCapacityUnits") or 0),
            )

        return cls(
            name=str(table.get("TableName") or ""),
            status=str(table.get("TableStatus") or ""),
            billing_mode=billing_mode,
            capacity=capacity,
        )
