import asyncio
from typing import List, Optional, Tuple

import click

from config.settings import settings
from migration.jobs.v2_migration_job import V2MigrationJob
from migration.providers.provider_factory import get_async_web3
from utils.logger_utils import configure_logging, get_logger

logger = get_logger("Run V2 Migration")


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option(
    "-p",
    "--provider-url",
    default=settings.chain.provider_url,
    show_default=True,
    type=str,
    help="JSON-RPC URL of the hardhat node running the fork.",
)
@click.option(
    "-n",
    "--network",
    default=settings.chain.network,
    show_default=True,
    type=str,
    help="Network key of the version data registry to bind legacy contracts from.",
)
@click.option(
    "--only",
    multiple=True,
    type=str,
    help=(
        "Run only the given step(s), e.g. --only upgrade-master. "
        "Contract binding and AB impersonation always run first."
    ),
)
@click.option("--stop-after", default=None, type=str, help="Stop once the given step has run.")
@click.option("--include-skipped", is_flag=True, default=False, help="Also run steps that are skipped by default.")
@click.option("--list-steps", is_flag=True, default=False, help="Print the migration steps and exit.")
@click.option("--log-file", default=None, show_default=True, type=str, help="Path to the log file.")
def run_v2_migration(
    provider_url: str,
    network: str,
    only: Tuple[str, ...],
    stop_after: Optional[str],
    include_skipped: bool,
    list_steps: bool,
    log_file: Optional[str] = None,
):
    """Replays the v1 to v2 protocol migration against a forked chain."""
    configure_logging(log_file, settings.app.log_level)

    web3 = get_async_web3(provider_url, timeout=settings.chain.rpc_timeout)
    try:
        job = V2MigrationJob(
            web3,
            network=network,
            only=list(only),
            stop_after=stop_after,
            include_skipped=include_skipped,
        )
    except ValueError as e:
        raise click.BadParameter(str(e))

    if list_steps:
        for line in _describe_steps(job):
            click.echo(line)
        return

    try:
        asyncio.run(_run(job, web3))
    except KeyboardInterrupt:
        logger.info("Migration interrupted by user.")
    except Exception as e:
        logger.exception(f"Migration failed after steps: {job.completed_steps}")
        raise e


def _describe_steps(job: V2MigrationJob) -> List[str]:
    selected = {step.key for step in job.selected_steps}
    lines = []
    for step in job.steps:
        marker = "x" if step.key in selected else " "
        suffix = " (skipped by default)" if step.skip else ""
        lines.append(f"[{marker}] {step.key}: {step.description}{suffix}")
    return lines


async def _run(job: V2MigrationJob, web3):
    try:
        await job.run()
    finally:
        await web3.provider.disconnect()
