from __future__ import annotations

import logging
from dataclasses import dataclass

from .config import CopyConfig
from .copier import Copier
from .errors import ProvisioningRestoreError
from .model import Provisioning
from .provisioner import Provisioner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CopyReport:
    initial: Provisioning
    boosted: Provisioning
    written: int


def run_copy_table(config: CopyConfig, provisioner: Provisioner, copier: Copier) -> CopyReport:
    """Boost capacity, copy every item, then put the original capacity back.

    The restore runs whether or not the boost and the copy succeeded. When
    the restore fails a :class:`ProvisioningRestoreError` is raised, carrying
    the boost or copy failure (if any) so the operator knows capacity may
    still be boosted.
    """
    config.validate()

    initial = provisioner.fetch()
    boosted = config.provisioning(initial)
    logger.info("initial provisioning %s, copy provisioning %s", initial, boosted)

    copy_error: Exception | None = None
    written = 0
    try:
        # A boost can fail after one table was already changed.
        provisioner.update(boosted)
        written = copier.copy()
    except Exception as err:
        copy_error = err
        logger.error("copy failed, restoring provisioning: %s", err)

    try:
        provisioner.update(initial)
    except Exception as err:
        logger.error("unable to restore provisioning %s: %s", initial, err)
        raise ProvisioningRestoreError(
            message=f"unable to restore provisioning: {err}",
            copy_error=copy_error,
        ) from err

    if copy_error is not None:
        raise copy_error

    return CopyReport(initial=initial, boosted=boosted, written=written)
