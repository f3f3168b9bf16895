# ruff: noqa: E402
"""Main CLI command group."""

import warnings

# Suppress the Numba FNV hashing warning, which is not relevant to our use case.
# This must be done before any pymc/numba imports happen.
warnings.filterwarnings(
    "ignore",
    message=".*FNV hashing is not implemented in Numba.*",
    category=UserWarning,
    module="numba.cpython.hashing",
)

import click

from pymc_tidy.cli.fit import fit_cli
from pymc_tidy.cli.flatten import flatten_cli
from pymc_tidy.cli.generate import generate_cli
from pymc_tidy.logs import configure_logging

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(context_settings=CONTEXT_SETTINGS)
def cli():
    """pymc-tidy command line interface."""
    configure_logging()


cli.add_command(generate_cli)
cli.add_command(fit_cli)
cli.add_command(flatten_cli)


def main():
    """CLI entrypoint."""
    cli()


if __name__ == "__main__":
    main()
