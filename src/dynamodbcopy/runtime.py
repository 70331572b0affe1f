from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, cast

import boto3
from botocore.config import Config

logger = logging.getLogger(__name__)

DEFAULT_SESSION_NAME = "dynamodbcopy"


def create_boto3_config(
    *,
    connect_timeout: float = 5.0,
    read_timeout: float = 30.0,
    max_attempts: int = 3,
    max_pool_connections: int = 10,
) -> Config:
    return Config(
        connect_timeout=connect_timeout,
        read_timeout=read_timeout,
        retries={"max_attempts": max_attempts, "mode": "standard"},
        max_pool_connections=max_pool_connections,
    )


def create_session(
    *,
    profile: str | None = None,
    role_arn: str | None = None,
    region: str | None = None,
    session_name: str = DEFAULT_SESSION_NAME,
    duration_seconds: int = 3600,
    sts_client: Any | None = None,
    session_factory: Callable[..., Any] | None = None,
) -> Any:
    """Build a boto3 session from a shared-config profile, optionally assuming a role with it."""
    factory = session_factory or boto3.session.Session
    base = factory(profile_name=profile or None, region_name=region)
    if not role_arn:
        return base

    sts: Any = sts_client or cast(Any, base).client("sts")
    logger.debug("assuming role %s", role_arn)
    resp = sts.assume_role(
        RoleArn=role_arn,
        RoleSessionName=session_name,
        DurationSeconds=duration_seconds,
    )
    creds = resp.get("Credentials") or {}

    access_key_id = str(creds.get("AccessKeyId") or "")
    secret_access_key = str(creds.get("SecretAccessKey") or "")
    session_token = str(creds.get("SessionToken") or "")
    if not access_key_id or not secret_access_key or not session_token:
        raise ValueError("AssumeRole did not return credentials")

    return factory(
        aws_access_key_id=access_key_id,
        aws_secret_access_key=secret_access_key,
        aws_session_token=session_token,
        region_name=region or getattr(base, "region_name", None),
    )


def create_dynamodb_client(
    *,
    profile: str | None = None,
    role_arn: str | None = None,
    region: str | None = None,
    endpoint_url: str | None = None,
    config: Config | None = None,
    sts_client: Any | None = None,
    session_factory: Callable[..., Any] | None = None,
) -> Any:
    session = create_session(
        profile=profile,
        role_arn=role_arn,
        region=region,
        sts_client=sts_client,
        session_factory=session_factory,
    )
    kwargs: dict[str, Any] = {"config": config or create_boto3_config()}
    if region:
        kwargs["region_name"] = region
    if endpoint_url:
        kwargs["endpoint_url"] = endpoint_url
    return session.client("dynamodb", **kwargs)
