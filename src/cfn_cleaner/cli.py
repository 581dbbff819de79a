"""CLI interface for cfn-cleaner"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import click

from cfn_cleaner.application.stack_finder import find_stacks
from cfn_cleaner.application.sweep_service import StackSweeper
from cfn_cleaner.domain.errors import SweepFailedError
from cfn_cleaner.domain.models.sweep_result import SweepResult
from cfn_cleaner.infrastructure.cloudformation.client import CloudFormationGateway
from cfn_cleaner.infrastructure.config.config_manager import ConfigManager

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    logging.getLogger().setLevel(level)
    # botocore is chatty at DEBUG
    logging.getLogger("botocore").setLevel(logging.INFO if verbose else logging.WARNING)


def _die(message: str, verbose: bool = False, exc: Optional[Exception] = None) -> None:
    """Exit with a user-friendly error message"""
    if exc is not None:
        logger.error(message, exc_info=verbose)
    else:
        logger.error(message)
    raise click.ClickException(message)


def confirm_deletion() -> bool:
    """Ask whether to remove the listed stacks.

    Anything other than y/yes/n/no (including an empty line) asks again.
    """
    return click.confirm("Remove Stacks?", default=None)


def _output_stack_list(stack_names: List[str]) -> None:
    click.echo("Remove stacks")
    for name in stack_names:
        click.echo(f"\t{name}")


def _output_sweep_results(result: SweepResult, verbose: bool) -> None:
    """Output sweep results to console, exiting with an error if any stack failed"""
    click.echo(f"\nDeleted {len(result.succeeded)}/{len(result.deletions)} stacks")
    if result.is_successful:
        return

    for deletion in result.failed:
        click.echo(f"FAILED: {deletion.stack_name}: {deletion.error}", err=True)
    _die(f"Failed to delete {len(result.failed)} stack(s)", verbose=verbose)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--prefix", "-p", type=str, help="The prefix for name of CloudFormation Stack")
@click.option("--region", "-r", type=str, help="The region of CloudFormation Stack")
@click.option("--yes", "-y", is_flag=True, help="Delete without asking for confirmation")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to .cfn-cleaner.yml config file",
)
@click.option("--verbose", is_flag=True, help="Enable verbose (DEBUG) logging")
@click.version_option(None, "--version", "-v", package_name="cfn-cleaner")
@click.pass_context
def cli(
    ctx,
    prefix: Optional[str],
    region: Optional[str],
    yes: bool,
    config: Optional[Path],
    verbose: bool,
):
    """cfn-cleaner - delete CloudFormation stacks whose name starts with a prefix"""
    setup_logging(verbose)

    if not prefix:
        click.echo(ctx.get_help(), err=True)
        _die("Prefix is required")
    logger.info(f"Prefix: {prefix}")

    try:
        config_manager = ConfigManager(config_path=config)
        aws_config = config_manager.get_aws_config()
        region = region or aws_config.region
        if region:
            logger.info(f"Region: {region}")

        gateway = CloudFormationGateway(region=region, profile=aws_config.profile)
        stack_names = asyncio.run(find_stacks(gateway, prefix))
        if not stack_names:
            click.echo(f"No stacks matched prefix '{prefix}'")
            return

        _output_stack_list(stack_names)
        if not (yes or confirm_deletion()):
            click.echo("canceled")
            return

        sweeper = StackSweeper(
            gateway,
            sweep_config=config_manager.get_sweep_config(),
            retry_options=config_manager.get_retry_config(),
        )
        try:
            result = asyncio.run(sweeper.sweep(stack_names))
        except SweepFailedError as e:
            result = e.result
        _output_sweep_results(result, verbose)

    except (click.ClickException, click.Abort):
        raise
    except Exception as e:
        _die(f"Fatal error: {e}", verbose=verbose, exc=e)


def main():
    """Main entry point"""
    cli()


if __name__ == "__main__":
    main()
