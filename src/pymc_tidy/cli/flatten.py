"""CLI commands for flattening a saved InferenceData into tables."""

import arviz as az
import click
import pandas as pd

from pymc_tidy.cli.cli_types import Interval
from pymc_tidy.errors import FlattenError
from pymc_tidy.flatten import (
    add_group_key,
    attach_parameters,
    parameter_density,
    parameter_table_from_idata,
    prediction_table_from_idata,
    summarize_predictions,
)
from pymc_tidy.io import read_table, write_table
from pymc_tidy.schemas import IntervalProbs, TableReport

idata_option = click.option(
    "--idata",
    "idata_file",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="InferenceData file (.nc).",
)


def _write_report(table: pd.DataFrame, output: str) -> None:
    try:
        write_table(table, output)
    except ValueError as e:
        raise click.UsageError(str(e))
    report = TableReport(rows=len(table), columns=list(table.columns), output=output)
    click.echo(report.model_dump_json(indent=2))


@click.group("flatten")
def flatten_cli():
    """Turn sampled arrays into tidy tables."""
    pass


@flatten_cli.command("parameters")
@idata_option
@click.option(
    "--var",
    "var_names",
    multiple=True,
    help="Parameter to include. Defaults to every scalar and per-predictor variable.",
)
@click.option("--entity-dim", default="predictor", help="Per-predictor axis name.")
@click.option(
    "--output", "-o", required=True, help="Output file (.csv or .parquet)."
)
def flatten_parameters(idata_file, var_names, entity_dim, output):
    """Write one row per (chain, draw) with a column per parameter."""
    idata = az.from_netcdf(idata_file)
    try:
        table = parameter_table_from_idata(
            idata, var_names=list(var_names) or None, entity_dim=entity_dim
        )
    except FlattenError as e:
        raise click.ClickException(str(e))
    _write_report(table, output)


@flatten_cli.command("predictions")
@idata_option
@click.option(
    "--covariates",
    "covariates_file",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Per-observation covariates (.csv or .parquet).",
)
@click.option("--var", "var_name", required=True, help="Variable to flatten, e.g. mu or y.")
@click.option(
    "--group",
    type=click.Choice(["posterior", "posterior_predictive"]),
    default="posterior_predictive",
    help="InferenceData group holding the variable.",
)
@click.option("--id-column", default="observation", help="Observation identifier column.")
@click.option(
    "--group-key",
    "group_fields",
    multiple=True,
    help="Field to include in a composite 'group' label. Can be repeated.",
)
@click.option(
    "--with-parameters",
    is_flag=True,
    default=False,
    help="Repeat each draw's parameter values on its rows.",
)
@click.option(
    "--summary",
    is_flag=True,
    default=False,
    help="Aggregate draws to a mean and interval per observation.",
)
@click.option(
    "--by",
    multiple=True,
    help="Covariate carried into the summary as an extra group key.",
)
@click.option(
    "--interval",
    type=Interval(),
    default="0.03,0.97",
    help="Summary quantile probabilities as LOW,HIGH.",
)
@click.option(
    "--output", "-o", required=True, help="Output file (.csv or .parquet)."
)
def flatten_predictions(
    idata_file,
    covariates_file,
    var_name,
    group,
    id_column,
    group_fields,
    with_parameters,
    summary,
    by,
    interval: IntervalProbs,
    output,
):
    """Write one row per (chain, draw, observation) joined with covariates."""
    if summary and (with_parameters or group_fields):
        raise click.UsageError(
            "--with-parameters and --group-key apply to per-draw rows "
            "and cannot be combined with --summary."
        )
    idata = az.from_netcdf(idata_file)
    try:
        covariates = read_table(covariates_file)
    except ValueError as e:
        raise click.UsageError(str(e))

    try:
        table = prediction_table_from_idata(
            idata, var_name, covariates, group=group, id_column=id_column
        )
        if summary:
            table = summarize_predictions(
                table, var_name, by=by, probs=interval, id_column=id_column
            )
        else:
            if with_parameters:
                table = attach_parameters(table, parameter_table_from_idata(idata))
            if group_fields:
                table = add_group_key(table, group_fields)
    except FlattenError as e:
        raise click.ClickException(str(e))
    _write_report(table, output)


@flatten_cli.command("density")
@idata_option
@click.option("--column", required=True, help="Parameter column, e.g. sigma or beta[x1].")
@click.option("--points", default=200, help="Number of grid points.")
def flatten_density(idata_file, column, points):
    """Print a KDE curve of one parameter column as JSON."""
    idata = az.from_netcdf(idata_file)
    try:
        curve = parameter_density(parameter_table_from_idata(idata), column, points)
    except FlattenError as e:
        raise click.ClickException(str(e))
    click.echo(curve.model_dump_json())
