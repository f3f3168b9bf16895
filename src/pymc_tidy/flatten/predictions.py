"""Flatten per-observation samples into long tables joined with covariates."""

import warnings
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import arviz as az
import numpy as np
import pandas as pd
import structlog
import xarray as xr

from pymc_tidy.errors import InsufficientSamplesWarning, JoinKeyError, ShapeMismatchError
from pymc_tidy.flatten.parameters import get_group
from pymc_tidy.flatten.validation import (
    SAMPLE_DIMS,
    axis_labels,
    check_dims,
    require_columns,
)
from pymc_tidy.schemas import IntervalProbs

log = structlog.get_logger()

# Appended to a covariate column that shares its name with the sampled value,
# e.g. the observed target "y" next to posterior predictive draws of "y".
OBSERVED_SUFFIX = "_observed"


def _check_covariates(
    covariates: pd.DataFrame, id_column: str, observations: np.ndarray
) -> None:
    require_columns(covariates, [id_column], "Covariate table")

    ids = covariates[id_column]
    duplicated = ids[ids.duplicated()].unique().tolist()
    if duplicated:
        raise JoinKeyError(
            f"Covariate table repeats observation identifier(s): {duplicated}.",
            missing=duplicated,
        )

    found = pd.Index(observations).isin(ids)
    if not found.all():
        missing = observations[~found].tolist()
        raise JoinKeyError(
            f"{len(missing)} observation(s) have no covariate row: {missing}.",
            missing=missing,
        )


def build_prediction_table(
    array: xr.DataArray,
    covariates: pd.DataFrame,
    id_column: str = "observation",
    value_name: Optional[str] = None,
    obs_dim: str = "observation",
) -> pd.DataFrame:
    """
    Build a long table with one row per (chain, draw, observation).

    Each row carries the sampled value plus the covariates of its observation.

    Parameters
    ----------
    array : xr.DataArray
        Linear predictor or posterior predictive samples with axes
        {chain, draw, obs_dim}.
    covariates : pd.DataFrame
        Static per-observation data (features and observed target), keyed by
        ``id_column``.
    id_column : str, optional
        Observation identifier column, by default "observation". The output uses
        the same name for the identifier.
    value_name : str, optional
        Name of the sampled value column. Defaults to the array name.
    obs_dim : str, optional
        Name of the observation axis in ``array``, by default "observation".

    Returns
    -------
    pd.DataFrame
        Rows ordered by chain, draw, then observation in axis label order.
        A covariate column whose name clashes with the value column gets the
        ``_observed`` suffix.

    Raises
    ------
    ShapeMismatchError
        If the array axes are not {chain, draw, obs_dim} or the covariate table
        lacks ``id_column``.
    JoinKeyError
        If an observation in the array has no covariate row, or the covariate
        table repeats an identifier.
    """
    name = value_name or array.name or "value"
    pattern = check_dims(array, [SAMPLE_DIMS + (obs_dim,)], name)
    observations = axis_labels(array, obs_dim)
    _check_covariates(covariates, id_column, observations)

    index = pd.MultiIndex.from_product(
        [axis_labels(array, "chain"), axis_labels(array, "draw"), observations],
        names=["chain", "draw", id_column],
    )
    samples = pd.DataFrame(
        {name: array.transpose(*pattern).values.reshape(-1)}, index=index
    ).reset_index()

    # Inner join keeps the left (sample) order
    table = samples.merge(
        covariates,
        on=id_column,
        how="inner",
        validate="many_to_one",
        suffixes=("", OBSERVED_SUFFIX),
    )

    log.debug(
        "predictions.join",
        value=name,
        observations=len(observations),
        rows=len(table),
    )
    return table


def prediction_table_from_idata(
    idata: az.InferenceData,
    var_name: str,
    covariates: pd.DataFrame,
    group: str = "posterior_predictive",
    id_column: str = "observation",
    obs_dim: str = "observation",
) -> pd.DataFrame:
    """Build the prediction table for one variable of an InferenceData group."""
    dataset = get_group(idata, group)
    if var_name not in dataset:
        raise ShapeMismatchError(f"Group '{group}' has no variable '{var_name}'.")
    return build_prediction_table(
        dataset[var_name],
        covariates,
        id_column=id_column,
        value_name=var_name,
        obs_dim=obs_dim,
    )


def add_group_key(
    table: pd.DataFrame,
    fields: Sequence[str],
    name: str = "group",
    sep: str = "_",
) -> pd.DataFrame:
    """
    Return a copy of ``table`` with a composite label column for plotting.

    The label joins the string form of ``fields`` in the order given, e.g.
    fields ``["species", "chain", "draw"]`` give ``"adelie_0_12"``.
    """
    fields = list(fields)
    if not fields:
        raise ShapeMismatchError("At least one field is needed to build a group key.")
    require_columns(table, fields, "Table")

    out = table.copy()
    out[name] = out[fields].astype(str).agg(sep.join, axis=1)
    return out


def summarize_predictions(
    table: pd.DataFrame,
    value_column: str,
    by: Optional[Iterable[str]] = None,
    probs: Union[IntervalProbs, Tuple[float, float]] = (0.03, 0.97),
    prefix: str = "pp",
    id_column: str = "observation",
    observations: Optional[Iterable] = None,
) -> pd.DataFrame:
    """
    Aggregate draws per observation into a mean and a central interval.

    Parameters
    ----------
    table : pd.DataFrame
        Output of :func:`build_prediction_table`.
    value_column : str
        The sampled value to summarize.
    by : Iterable[str], optional
        Static covariates to carry along as extra group keys.
    probs : IntervalProbs or (float, float), optional
        Lower and upper quantile probabilities, by default 0.03 and 0.97 (a 94%
        interval). Quantiles use linear interpolation between order statistics.
    prefix : str, optional
        Prefix of the summary columns, by default "pp".
    id_column : str, optional
        Observation identifier column, by default "observation".
    observations : Iterable, optional
        Identifiers that must appear in the summary. Any with no rows in
        ``table`` get NaN summaries.

    Returns
    -------
    pd.DataFrame
        One row per group with ``<prefix>_mean``, ``<prefix>_min``,
        ``<prefix>_max`` and ``n_draws``, in first-appearance order.

    Warns
    -----
    InsufficientSamplesWarning
        For groups with no non-missing draws. Their summaries are NaN.
    """
    if isinstance(probs, IntervalProbs):
        interval = probs
    else:
        interval = IntervalProbs(low=probs[0], high=probs[1])
    keys: List[str] = [id_column] + [col for col in (by or []) if col != id_column]
    require_columns(table, keys + [value_column], "Prediction table")

    mean_col, low_col, high_col = f"{prefix}_mean", f"{prefix}_min", f"{prefix}_max"
    grouped = table.groupby(keys, sort=False, dropna=False, observed=True)[value_column]
    summary = grouped.agg(
        **{
            mean_col: "mean",
            low_col: lambda s: s.quantile(interval.low),
            high_col: lambda s: s.quantile(interval.high),
            "n_draws": "count",
        }
    ).reset_index()

    if observations is not None:
        expected = pd.Index(list(observations))
        absent = expected[~expected.isin(summary[id_column])]
        if len(absent):
            filler = pd.DataFrame({id_column: absent, "n_draws": 0})
            summary = pd.concat([summary, filler], ignore_index=True)

    empty = summary.loc[summary["n_draws"] == 0, id_column].tolist()
    if empty:
        warnings.warn(
            f"No draws for observation(s) {empty}; their summaries are NaN.",
            InsufficientSamplesWarning,
            stacklevel=2,
        )

    log.debug(
        "predictions.summarize",
        value=value_column,
        groups=len(summary),
        interval=interval.mass,
    )
    return summary


def attach_parameters(
    prediction_table: pd.DataFrame, parameter_table: pd.DataFrame
) -> pd.DataFrame:
    """
    Denormalized view: repeat each draw's parameter values on its prediction rows.

    Parameter columns whose names clash with prediction columns get a
    ``_param`` suffix.
    """
    keys = list(SAMPLE_DIMS)
    require_columns(prediction_table, keys, "Prediction table")
    require_columns(parameter_table, keys, "Parameter table")

    known = pd.MultiIndex.from_frame(parameter_table[keys])
    if known.has_duplicates:
        duplicated = known[known.duplicated()].unique().tolist()
        raise JoinKeyError(
            f"Parameter table repeats (chain, draw) pair(s): {duplicated}.",
            missing=duplicated,
        )

    wanted = pd.MultiIndex.from_frame(prediction_table[keys])
    missing = wanted[~wanted.isin(known)].unique().tolist()
    if missing:
        raise JoinKeyError(
            f"{len(missing)} (chain, draw) pair(s) have no parameter row: {missing}.",
            missing=missing,
        )

    return prediction_table.merge(
        parameter_table,
        on=keys,
        how="left",
        validate="many_to_one",
        suffixes=("", "_param"),
    )
