"""Main console script for uaspire.

Copyright © 2024 Pixelgen Technologies AB.
"""

import sys

import click

from uaspire import __version__
from uaspire.cli.common import list_designs, logger
from uaspire.cli.demux import demux
from uaspire.logging import LoggingSetup


@click.group(name="uaspire")
@click.version_option(__version__)
@click.option(
    "--verbose",
    type=click.BOOL,
    default=False,
    is_flag=True,
    help="Show extended messages during execution",
)
@click.option(
    "--log-file",
    required=False,
    default=None,
    type=click.Path(exists=False),
    help="The path to the log file (it is created if it does not exist)",
)
@click.option(
    "--list-designs",
    is_flag=True,
    metavar="",
    is_eager=True,
    expose_value=False,
    required=False,
    callback=list_designs,
    help="List available designs and exit.",
)
@click.pass_context
def main_cli(ctx, verbose: bool, log_file: str):
    """Run the main CLI entrypoint for uaspire."""
    # early out if run in help mode
    if any(x in sys.argv for x in ["--help", "--version"]):
        return 0

    # Pass arguments to other commands
    ctx.ensure_object(dict)

    # Registered as a context resource so the listener is shut down
    # when the command is done.
    ctx.obj["LOGGER"] = ctx.with_resource(LoggingSetup(log_file, verbose=verbose))
    ctx.obj["VERBOSE"] = verbose

    if verbose:
        logger.info("Running in VERBOSE mode")
    return 0


main_cli.add_command(demux)


if __name__ == "__main__":
    sys.exit(main_cli())  # pragma: no cover
