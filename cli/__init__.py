import click

from cli.list_contracts import list_contracts
from cli.run_unit_tests import run_unit_tests
from cli.run_v2_migration import run_v2_migration


@click.group()
@click.version_option(version="2.0.0")
@click.pass_context
def cli(ctx):
    pass


# Fork migration
cli.add_command(run_v2_migration, "run_v2_migration")

# Contract module unit suites
cli.add_command(run_unit_tests, "run_unit_tests")

# Version data registry
cli.add_command(list_contracts, "list_contracts")
