import asyncio
import logging

import click

from openapi_audit.config import (
    DEFAULT_REPORT_PATH,
    DEFAULT_SCHEMA_PATH,
    DEFAULT_TRAFFIC_DIR,
    AuditorOptions,
)
from openapi_audit.errors import SpecificationUnavailableError
from openapi_audit.orchestrator import AuditOrchestrator
from openapi_audit.storage.local import LocalFileOperations
from openapi_audit.storage.s3 import S3FileOperations

logger = logging.getLogger(__name__)


def _artifact_options(fn):
    fn = click.option("--region", envvar="AWS_DEFAULT_REGION")(fn)
    fn = click.option("--prefix", envvar="OPENAPI_AUDIT_PREFIX", default="", help="Key prefix inside --bucket")(fn)
    fn = click.option(
        "--bucket", envvar="OPENAPI_AUDIT_BUCKET",
        help="Read and write artifacts in this S3 bucket instead of the local disk",
    )(fn)
    fn = click.option(
        "--output", "report_path", envvar="OPENAPI_AUDIT_REPORT_PATH",
        default=DEFAULT_REPORT_PATH, show_default=True,
    )(fn)
    fn = click.option(
        "--traffic-dir", envvar="OPENAPI_AUDIT_TRAFFIC_DIR",
        default=DEFAULT_TRAFFIC_DIR, show_default=True,
    )(fn)
    fn = click.option(
        "--schema", "schema_path", envvar="OPENAPI_AUDIT_SCHEMA_PATH",
        default=DEFAULT_SCHEMA_PATH, show_default=True,
    )(fn)
    return fn


def _orchestrator(schema_path, traffic_dir, report_path, bucket, prefix, region) -> AuditOrchestrator:
    options = AuditorOptions(schema_path=schema_path, traffic_dir=traffic_dir, report_path=report_path)
    if bucket:
        file_ops = S3FileOperations(bucket, prefix=prefix, region=region)
    else:
        file_ops = LocalFileOperations()
    return AuditOrchestrator(options, file_ops)


@click.group()
@click.version_option(package_name="openapi-audit")
@click.option("-v", "--verbose", is_flag=True, help="Log audit progress to stderr")
def cli(verbose):
    """Compare recorded API traffic with the service's OpenAPI document."""
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@_artifact_options
@click.option("--dry-run", is_flag=True, help="Print the report without writing it")
def report(schema_path, traffic_dir, report_path, bucket, prefix, region, dry_run):
    """Build the audit report from the stored schema and traffic snapshots."""
    orchestrator = _orchestrator(schema_path, traffic_dir, report_path, bucket, prefix, region)

    if dry_run:
        try:
            text = asyncio.run(orchestrator.generate_report())
        except SpecificationUnavailableError as e:
            click.echo(f"Error: {e}", err=True)
            raise click.exceptions.Exit(1)
        click.echo(text)
        return

    written = asyncio.run(orchestrator.teardown())
    if written is None:
        click.echo("Error: audit report was not written (run with -v for details)", err=True)
        raise click.exceptions.Exit(1)
    click.echo(f"Audit report written to {written}")


@cli.command()
@_artifact_options
def clean(schema_path, traffic_dir, report_path, bucket, prefix, region):
    """Delete the schema snapshot, traffic snapshots and report."""
    orchestrator = _orchestrator(schema_path, traffic_dir, report_path, bucket, prefix, region)
    asyncio.run(orchestrator.prepare())
    click.echo("Generated artifacts removed.")
