"""Command-line interface for copying DynamoDB tables."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass

import click
from botocore.exceptions import BotoCoreError, ClientError

from . import __version__
from .config import CopyConfig
from .copier import Copier
from .copytable import run_copy_table
from .errors import DynamodbcopyError, ProvisioningRestoreError
from .provisioner import Provisioner
from .runtime import create_dynamodb_client
from .table import TableService

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Deps:
    copier: Copier
    provisioner: Provisioner


def wire_dependencies(
    config: CopyConfig,
    *,
    source_table: str,
    target_table: str,
    source_profile: str | None = None,
    target_profile: str | None = None,
    source_role_arn: str | None = None,
    target_role_arn: str | None = None,
    region: str | None = None,
    endpoint_url: str | None = None,
) -> Deps:
    src = TableService(
        source_table,
        client=create_dynamodb_client(
            profile=source_profile,
            role_arn=source_role_arn,
            region=region,
            endpoint_url=endpoint_url,
        ),
    )
    trg = TableService(
        target_table,
        client=create_dynamodb_client(
            profile=target_profile,
            role_arn=target_role_arn,
            region=region,
            endpoint_url=endpoint_url,
        ),
    )

    readers, writers = config.workers()
    return Deps(
        copier=Copier(src, trg, readers=readers, writers=writers),
        provisioner=Provisioner(src, trg),
    )


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """dynamodbcopy: copy DynamoDB tables with temporary capacity boosts."""


@cli.command("copy-table")
@click.argument("source_table")
@click.argument("target_table")
@click.option("--source-profile", "-s", default="", help="Profile to use for the source table")
@click.option("--target-profile", "-t", default="", help="Profile to use for the target table")
@click.option("--source-role-arn", default="", help="Role to assume for the source table")
@click.option("--target-role-arn", default="", help="Role to assume for the target table")
@click.option("--region", help="AWS region (default: use boto3 defaults)")
@click.option("--endpoint-url", help="DynamoDB endpoint URL (e.g. DynamoDB Local)")
@click.option(
    "--read-capacity",
    default=0,
    type=click.IntRange(min=0),
    help="Read provisioned capacity for the source table while copying",
)
@click.option(
    "--write-capacity",
    default=0,
    type=click.IntRange(min=0),
    help="Write provisioned capacity for the target table while copying",
)
@click.option("--reader-count", "-r", default=1, type=click.IntRange(min=1), help="Number of read workers")
@click.option("--writer-count", "-w", default=1, type=click.IntRange(min=1), help="Number of write workers")
@click.option("--debug", is_flag=True, help="Log every page and retry")
def copy_table(
    source_table: str,
    target_table: str,
    source_profile: str,
    target_profile: str,
    source_role_arn: str,
    target_role_arn: str,
    region: str | None,
    endpoint_url: str | None,
    read_capacity: int,
    write_capacity: int,
    reader_count: int,
    writer_count: int,
    debug: bool,
) -> None:
    """Copy every item from SOURCE_TABLE to TARGET_TABLE."""
    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO, format=LOG_FORMAT)

    config = CopyConfig(
        read_capacity=read_capacity,
        write_capacity=write_capacity,
        reader_count=reader_count,
        writer_count=writer_count,
    )
    try:
        deps = wire_dependencies(
            config,
            source_table=source_table,
            target_table=target_table,
            source_profile=source_profile or None,
            target_profile=target_profile or None,
            source_role_arn=source_role_arn or None,
            target_role_arn=target_role_arn or None,
            region=region,
            endpoint_url=endpoint_url,
        )
    except (BotoCoreError, ClientError) as err:
        click.echo(f"copy-table error: unable to create AWS clients: {err}", err=True)
        sys.exit(1)

    try:
        report = run_copy_table(config, deps.provisioner, deps.copier)
    except ProvisioningRestoreError as err:
        click.echo(f"copy-table error: {err}", err=True)
        click.echo(
            "Warning: provisioned capacity may still be boosted; restore it manually.",
            err=True,
        )
        sys.exit(2)
    except DynamodbcopyError as err:
        click.echo(f"copy-table error: {err}", err=True)
        sys.exit(1)

    click.echo(f"copied {report.written} items from {source_table} to {target_table}")


def main() -> None:
    cli(auto_envvar_prefix="DYNAMODBCOPY")


if __name__ == "__main__":
    main()
