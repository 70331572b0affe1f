from __future__ import annotations

import logging

from .model import Capacity, Provisioning
from .table import TableService

logger = logging.getLogger(__name__)


def needs_update(current: Capacity | None, wanted: Capacity | None) -> bool:
    return current is not None and wanted is not None and current != wanted


class Provisioner:
    """Reads and changes the provisioned capacity of the source and target tables."""

    def __init__(self, source: TableService, target: TableService) -> None:
        self._source = source
        self._target = target

    def fetch(self) -> Provisioning:
        src = self._source.describe()
        trg = self._target.describe()
        return Provisioning(source=src.capacity, target=trg.capacity)

    def update(self, provisioning: Provisioning) -> Provisioning:
        """Apply ``provisioning`` to both tables, source first.

        The current values are fetched again rather than trusted from the
        caller. A side is left alone when either value is missing (on-demand
        table) or already matches. A failure on the target does not undo a
        source change that already succeeded.
        """
        current = self.fetch()

        src = provisioning.source
        if src is not None and needs_update(current.source, src):
            self._source.update_capacity(src)
            logger.info(
                "updated source table %s r: %d w: %d",
                self._source.table_name,
                src.read,
                src.write,
            )

        trg = provisioning.target
        if trg is not None and needs_update(current.target, trg):
            self._target.update_capacity(trg)
            logger.info(
                "updated target table %s r: %d w: %d",
                self._target.table_name,
                trg.read,
                trg.write,
            )

        return provisioning
