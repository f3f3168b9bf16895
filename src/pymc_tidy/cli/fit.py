"""CLI command for fitting the regression model."""

import json

import click
import structlog

from pymc_tidy.errors import FlattenError
from pymc_tidy.io import read_table
from pymc_tidy.pymc_models.regression import fit_regression_model
from pymc_tidy.tracking.mlflow import get_mlflow_client
from pymc_tidy.tracking.mlflow_cache import get_or_create_idata

log = structlog.get_logger()


@click.command("fit")
@click.option(
    "--data",
    "data_file",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Input table (.csv or .parquet) with an 'observation' column.",
)
@click.option(
    "--predictor",
    "predictors",
    multiple=True,
    required=True,
    help="Predictor column. Can be specified multiple times.",
)
@click.option("--target", default="y", help="Target column.")
@click.option("--draws", default=1000, help="Posterior draws per chain.")
@click.option("--tune", default=1000, help="Tuning steps per chain.")
@click.option("--chains", default=4, help="Number of chains.")
@click.option("--seed", type=int, default=None, help="Random seed.")
@click.option(
    "--mlflow-experiment",
    default=None,
    help="Cache the fit in this MLflow experiment (uses MLFLOW_TRACKING_URI).",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True),
    required=True,
    help="Where to write the InferenceData (.nc).",
)
def fit_cli(
    data_file, predictors, target, draws, tune, chains, seed, mlflow_experiment, output
):
    """Fit the linear regression and save the InferenceData."""
    try:
        data = read_table(data_file)
    except ValueError as e:
        raise click.UsageError(str(e))

    fit_params = {
        "predictors": list(predictors),
        "target": target,
        "draws": draws,
        "tune": tune,
        "chains": chains,
        "random_seed": seed,
    }
    try:
        if mlflow_experiment:
            idata = get_or_create_idata(
                experiment_name=mlflow_experiment,
                data=data,
                model_fit_function=fit_regression_model,
                mlflow_client=get_mlflow_client(),
                fit_params=fit_params,
            )
        else:
            idata = fit_regression_model(data, **fit_params)
    except FlattenError as e:
        raise click.ClickException(str(e))

    idata.to_netcdf(output)
    log.info("fit.saved", output=output, groups=list(idata.groups()))
    click.echo(json.dumps({"output": output, "groups": list(idata.groups())}, indent=2))
