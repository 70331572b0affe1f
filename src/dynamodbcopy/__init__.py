from __future__ import annotations

import json
import re
from importlib.resources import files
from typing import TYPE_CHECKING, Any

from .errors import (
    AwsError,
    DynamodbcopyError,
    NotFoundError,
    PipelineFault,
    ProvisioningRestoreError,
    RetryTimeoutError,
    ThrottledError,
    ValidationError,
)
from .model import Capacity, Item, Page, Provisioning, TableDescription

if TYPE_CHECKING:
    from .config import CopyConfig, provisioning_policy
    from .copier import Copier
    from .copytable import CopyReport, run_copy_table
    from .provisioner import Provisioner
    from .retry import RetryExecutor, jitter_sleeper
    from .runtime import create_boto3_config, create_dynamodb_client, create_session
    from .table import TableService


def _read_repo_version() -> str:
    try:
        data = json.loads(files(__package__).joinpath("version.json").read_text(encoding="utf-8"))
    except Exception:
        return "0.0.0"

    version = data.get("version")
    return version if isinstance(version, str) and version else "0.0.0"


def _normalize_repo_version(repo_version: str) -> str:
    match = re.match(r"^(\d+\.\d+\.\d+)-rc\.?([0-9]+)$", repo_version)
    if match:
        return f"{match.group(1)}rc{match.group(2)}"
    return repo_version


__repo_version__ = _read_repo_version()
__version__ = _normalize_repo_version(__repo_version__)


def __getattr__(name: str) -> Any:
    if name in {"CopyConfig", "provisioning_policy"}:
        from . import config

        return getattr(config, name)
    if name == "Copier":
        from .copier import Copier

        return Copier
    if name in {"CopyReport", "run_copy_table"}:
        from . import copytable

        return getattr(copytable, name)
    if name == "Provisioner":
        from .provisioner import Provisioner

        return Provisioner
    if name in {"RetryExecutor", "jitter_sleeper"}:
        from . import retry

        return getattr(retry, name)
    if name in {"create_boto3_config", "create_dynamodb_client", "create_session"}:
        from . import runtime

        return getattr(runtime, name)
    if name == "TableService":
        from .table import TableService

        return TableService
    raise AttributeError(name)


__all__ = [
    "AwsError",
    "Capacity",
    "Copier",
    "CopyConfig",
    "CopyReport",
    "create_boto3_config",
    "create_dynamodb_client",
    "create_session",
    "DynamodbcopyError",
    "Item",
    "jitter_sleeper",
    "NotFoundError",
    "Page",
    "PipelineFault",
    "Provisioner",
    "Provisioning",
    "provisioning_policy",
    "ProvisioningRestoreError",
    "RetryExecutor",
    "RetryTimeoutError",
    "run_copy_table",
    "TableDescription",
    "TableService",
    "ThrottledError",
    "ValidationError",
    "__repo_version__",
    "__version__",
]
