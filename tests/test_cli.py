"""Tests for the pymc-tidy command line interface."""

import json

import arviz as az
import pandas as pd
import pytest
from click.testing import CliRunner

from pymc_tidy.cli.main import cli


@pytest.fixture
def runner(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    return CliRunner()


@pytest.fixture
def idata_file(tmp_path, monkeypatch, idata):
    # The commands only need a path; loading returns the in-memory fixture.
    path = tmp_path / "idata.nc"
    path.write_text("")
    monkeypatch.setattr(az, "from_netcdf", lambda _: idata)
    return path


@pytest.fixture
def covariates_file(tmp_path, covariates):
    path = tmp_path / "covariates.csv"
    covariates.to_csv(path, index=False)
    return path


def test_generate_regression(runner, tmp_path):
    output = tmp_path / "toy.csv"
    result = runner.invoke(
        cli,
        ["generate", "regression", "-n", "10", "--coef", "x1:1.5", "--seed", "3", "-o", str(output)],
    )

    assert result.exit_code == 0, result.output
    report = json.loads(result.stdout)
    assert report["rows"] == 10
    assert report["columns"] == ["observation", "x1", "y"]
    assert len(pd.read_csv(output)) == 10


def test_generate_rejects_bad_coefficient(runner, tmp_path):
    result = runner.invoke(
        cli, ["generate", "regression", "--coef", "x1=1.5", "-o", str(tmp_path / "t.csv")]
    )
    assert result.exit_code == 2


def test_flatten_parameters(runner, tmp_path, idata_file):
    output = tmp_path / "params.csv"
    result = runner.invoke(
        cli, ["flatten", "parameters", "--idata", str(idata_file), "-o", str(output)]
    )

    assert result.exit_code == 0, result.output
    table = pd.read_csv(output)
    assert list(table.columns) == ["chain", "draw", "alpha", "beta[x1]", "beta[x2]", "sigma"]
    assert len(table) == 6


def test_flatten_parameters_parquet(runner, tmp_path, idata_file):
    output = tmp_path / "params.parquet"
    result = runner.invoke(
        cli,
        ["flatten", "parameters", "--idata", str(idata_file), "--var", "sigma", "-o", str(output)],
    )

    assert result.exit_code == 0, result.output
    assert list(pd.read_parquet(output).columns) == ["chain", "draw", "sigma"]


def test_flatten_parameters_unknown_format(runner, tmp_path, idata_file):
    result = runner.invoke(
        cli,
        ["flatten", "parameters", "--idata", str(idata_file), "-o", str(tmp_path / "p.json")],
    )
    assert result.exit_code == 2


def test_flatten_predictions(runner, tmp_path, idata_file, covariates_file):
    output = tmp_path / "mu.csv"
    result = runner.invoke(
        cli,
        [
            "flatten", "predictions",
            "--idata", str(idata_file),
            "--covariates", str(covariates_file),
            "--var", "mu",
            "--group", "posterior",
            "--group-key", "observation",
            "--group-key", "chain",
            "--with-parameters",
            "-o", str(output),
        ],
    )

    assert result.exit_code == 0, result.output
    report = json.loads(result.stdout)
    assert report["rows"] == 12
    table = pd.read_csv(output)
    assert {"mu", "x", "y", "alpha", "sigma", "group"}.issubset(table.columns)
    assert table["group"].iloc[0] == "a_0"


def test_flatten_predictions_summary(runner, tmp_path, idata_file, covariates_file):
    output = tmp_path / "summary.csv"
    result = runner.invoke(
        cli,
        [
            "flatten", "predictions",
            "--idata", str(idata_file),
            "--covariates", str(covariates_file),
            "--var", "y",
            "--summary",
            "--by", "x",
            "--interval", "0.1,0.9",
            "-o", str(output),
        ],
    )

    assert result.exit_code == 0, result.output
    table = pd.read_csv(output)
    assert list(table.columns) == ["observation", "x", "pp_mean", "pp_min", "pp_max", "n_draws"]
    assert table["n_draws"].tolist() == [6, 6]


def test_flatten_predictions_missing_covariate(runner, tmp_path, idata_file, covariates):
    partial = tmp_path / "partial.csv"
    covariates.iloc[[0]].to_csv(partial, index=False)

    result = runner.invoke(
        cli,
        [
            "flatten", "predictions",
            "--idata", str(idata_file),
            "--covariates", str(partial),
            "--var", "mu",
            "--group", "posterior",
            "-o", str(tmp_path / "out.csv"),
        ],
    )

    assert result.exit_code == 1
    assert "no covariate row" in result.output
    assert not (tmp_path / "out.csv").exists()


def test_flatten_predictions_bad_interval(runner, tmp_path, idata_file, covariates_file):
    result = runner.invoke(
        cli,
        [
            "flatten", "predictions",
            "--idata", str(idata_file),
            "--covariates", str(covariates_file),
            "--var", "y",
            "--summary",
            "--interval", "0.9,0.1",
            "-o", str(tmp_path / "out.csv"),
        ],
    )
    assert result.exit_code == 2


def test_flatten_density(runner, idata_file):
    result = runner.invoke(
        cli, ["flatten", "density", "--idata", str(idata_file), "--column", "alpha", "--points", "25"]
    )

    assert result.exit_code == 0, result.output
    curve = json.loads(result.stdout)
    assert len(curve["x"]) == len(curve["y"]) == 25


def test_summary_rejects_per_draw_options(runner, tmp_path, idata_file, covariates_file):
    base = [
        "flatten", "predictions",
        "--idata", str(idata_file),
        "--covariates", str(covariates_file),
        "--var", "y",
        "--summary",
        "-o", str(tmp_path / "out.csv"),
    ]

    for extra in (["--with-parameters"], ["--group-key", "observation"]):
        result = runner.invoke(cli, base + extra)
        assert result.exit_code == 2
        assert "--summary" in result.output
    assert not (tmp_path / "out.csv").exists()


def test_generate_fit_and_flatten(runner, tmp_path):
    data_file = tmp_path / "toy.csv"
    idata_path = tmp_path / "idata.nc"

    result = runner.invoke(
        cli,
        ["generate", "regression", "-n", "8", "--coef", "x1:2.0", "--coef", "x2:-1.0",
         "--seed", "1", "-o", str(data_file)],
    )
    assert result.exit_code == 0, result.output

    # Integer identifiers must survive the fit and join back to the same file
    data = pd.read_csv(data_file)
    data["observation"] = range(100, 100 + len(data))
    data.to_csv(data_file, index=False)

    result = runner.invoke(
        cli,
        ["fit", "--data", str(data_file), "--predictor", "x1", "--predictor", "x2",
         "--draws", "20", "--tune", "20", "--chains", "1", "--seed", "2",
         "-o", str(idata_path)],
    )
    assert result.exit_code == 0, result.output
    assert idata_path.exists()

    params = tmp_path / "params.csv"
    result = runner.invoke(
        cli, ["flatten", "parameters", "--idata", str(idata_path), "-o", str(params)]
    )
    assert result.exit_code == 0, result.output
    table = pd.read_csv(params)
    assert set(table.columns) == {"chain", "draw", "alpha", "beta[x1]", "beta[x2]", "sigma"}
    assert len(table) == 20

    predictions = tmp_path / "pp.csv"
    result = runner.invoke(
        cli,
        ["flatten", "predictions", "--idata", str(idata_path),
         "--covariates", str(data_file), "--var", "y", "-o", str(predictions)],
    )
    assert result.exit_code == 0, result.output
    table = pd.read_csv(predictions)
    assert len(table) == 20 * 8
    assert {"y", "y_observed", "x1", "x2"}.issubset(table.columns)
    assert set(table["observation"]) == set(data["observation"])

    summary = tmp_path / "summary.csv"
    result = runner.invoke(
        cli,
        ["flatten", "predictions", "--idata", str(idata_path),
         "--covariates", str(data_file), "--var", "mu", "--group", "posterior",
         "--summary", "-o", str(summary)],
    )
    assert result.exit_code == 0, result.output
    table = pd.read_csv(summary)
    assert table["n_draws"].tolist() == [20] * 8
    assert (table["pp_min"] <= table["pp_max"]).all()
