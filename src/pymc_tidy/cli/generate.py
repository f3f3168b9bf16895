"""CLI commands for generating toy data."""

import click

from pymc_tidy.cli.cli_types import Coefficient
from pymc_tidy.io import write_table
from pymc_tidy.pymc_models.regression import generate_regression_data
from pymc_tidy.schemas import TableReport


@click.group("generate")
def generate_cli():
    """Generate toy datasets."""
    pass


@generate_cli.command("regression")
@click.option(
    "--num-observations", "-n", default=50, help="Number of rows to generate."
)
@click.option(
    "--coef",
    "coefficients",
    multiple=True,
    type=Coefficient(),
    default=["x1:2.0", "x2:-1.0"],
    help="Predictor in name:slope format. Can be specified multiple times.",
)
@click.option("--intercept", default=1.0, help="True intercept.")
@click.option("--sigma", default=1.0, help="Residual standard deviation.")
@click.option("--seed", type=int, default=None, help="Random seed.")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True),
    required=True,
    help="Output file (.csv or .parquet).",
)
def generate_regression(num_observations, coefficients, intercept, sigma, seed, output):
    """Generate data from a known linear model."""
    data = generate_regression_data(
        n_observations=num_observations,
        coefficients=dict(coefficients),
        intercept=intercept,
        sigma=sigma,
        random_seed=seed,
    )
    try:
        write_table(data, output)
    except ValueError as e:
        raise click.UsageError(str(e))
    report = TableReport(rows=len(data), columns=list(data.columns), output=output)
    click.echo(report.model_dump_json(indent=2))
