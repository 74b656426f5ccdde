import asyncio
from typing import Optional

import click

from config.settings import settings
from migration.clients.version_data_client import VersionDataClient
from utils.logger_utils import configure_logging, get_logger

logger = get_logger("List Contracts")


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option(
    "-n",
    "--network",
    default=settings.chain.network,
    show_default=True,
    type=str,
    help="Network key of the version data registry.",
)
@click.option("--url", default=settings.version_data.url, show_default=True, type=str, help="Version data URL.")
@click.option("--log-file", default=None, show_default=True, type=str, help="Path to the log file.")
def list_contracts(network: str, url: str, log_file: Optional[str] = None):
    """Prints the contract codes and addresses published in the version data registry."""
    configure_logging(log_file, settings.app.log_level)

    try:
        records = asyncio.run(_fetch_records(url, network))
    except Exception as e:
        logger.exception("Could not load version data:")
        raise e

    for code, record in sorted(records.items()):
        click.echo(f"{code:<10} {record.address}")


async def _fetch_records(url: str, network: str):
    async with VersionDataClient(url=url) as client:
        return await client.get_contract_records(network)
