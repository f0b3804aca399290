"""Common click CLI helpers for the uaspire CLI.

Copyright © 2024 Pixelgen Technologies AB
"""

import functools
import logging
from typing import Any

import click

from uaspire.units import parse_size
from uaspire.utils import click_echo

logger = logging.getLogger("uaspire.cli")


def output_option(func):
    """Wrap a Click entrypoint to add the --output option."""

    @click.option(
        "--output",
        required=True,
        type=click.Path(exists=False),
        help=(
            "The path where the results will be placed (it is created if it does not"
            " exist)"
        ),
    )
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        return func(*args, **kwargs)

    return wrapper


def threads_option(func):
    """Decorate a click command and add the --threads option."""

    @click.option(
        "--threads",
        default=-1,
        required=False,
        show_default=True,
        help="The number of worker threads classifying reads, all available cores if not positive",
    )
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        return func(*args, **kwargs)

    return wrapper


def design_option(func):
    """Decorate a click command and add the --design and --design-file options."""
    from uaspire.config import uaspire_config

    design_options = uaspire_config.list_design_names()

    @click.option(
        "--design",
        required=False,
        default="uaspire-v1",
        show_default=True,
        type=click.Choice(design_options),
        help="The design to load from the configuration",
    )
    @click.option(
        "--design-file",
        required=False,
        default=None,
        type=click.Path(exists=True, dir_okay=False),
        help="A YAML file with a custom design, takes precedence over --design",
    )
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        return func(*args, **kwargs)

    return wrapper


def size_validator(ctx, param, value):
    """Parse a size option such as `1M` into an integer.

    :param ctx: The click context
    :param param: The click parameter
    :param value: The click value
    :returns: The parsed size
    :raises click.BadParameter: if the value is not a positive size
    """
    try:
        size = int(parse_size(value))
    except ValueError:
        size = 0

    if size < 1:
        raise click.BadParameter(
            "must be a positive integer, optionally with a unit suffix [K, M, G]"
        )
    return size


def list_designs(ctx: click.Context, param: Any, value: Any) -> None:
    """Print the designs supported by the config and exit.

    :param ctx: The click context
    :param param: The click parameter
    :param value: The click value
    """
    from uaspire.config import uaspire_config

    if not value or ctx.resilient_parsing:
        return

    for option in uaspire_config.list_design_names():
        click_echo(option)

    ctx.exit()
