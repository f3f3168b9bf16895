"""Flatten sampled parameters into one wide table keyed by (chain, draw)."""

from functools import reduce
from typing import List, Mapping, Optional

import arviz as az
import pandas as pd
import structlog
import xarray as xr

from pymc_tidy.errors import ShapeMismatchError
from pymc_tidy.flatten.validation import (
    SAMPLE_DIMS,
    axis_labels,
    check_dims,
    check_shared_axes,
)

log = structlog.get_logger()


def vector_column(name: str, label) -> str:
    """Column name for one entry of a vector parameter, e.g. ``beta[x1]``."""
    return f"{name}[{label}]"


def _sample_grid(array: xr.DataArray) -> pd.MultiIndex:
    return pd.MultiIndex.from_product(
        [axis_labels(array, "chain"), axis_labels(array, "draw")],
        names=list(SAMPLE_DIMS),
    )


def _parameter_frame(name: str, array: xr.DataArray, entity_dim: str) -> pd.DataFrame:
    pattern = check_dims(array, [SAMPLE_DIMS, SAMPLE_DIMS + (entity_dim,)], name)
    grid = _sample_grid(array)
    values = array.transpose(*pattern).values

    if len(pattern) == 2:
        return pd.DataFrame({name: values.reshape(-1)}, index=grid)

    # One column per predictor, in axis label order
    labels = axis_labels(array, entity_dim)
    columns = [vector_column(name, label) for label in labels]
    return pd.DataFrame(
        values.reshape(len(grid), len(labels)), index=grid, columns=columns
    )


def build_parameter_table(
    arrays: Mapping[str, xr.DataArray],
    entity_dim: str = "predictor",
) -> pd.DataFrame:
    """
    Build one wide table of sampled parameters, one row per (chain, draw).

    Parameters
    ----------
    arrays : Mapping[str, xr.DataArray]
        Parameter name to sample array. Each array must have axes
        {chain, draw} (scalar) or {chain, draw, entity_dim} (vector).
    entity_dim : str, optional
        Name of the per-predictor axis, by default "predictor".

    Returns
    -------
    pd.DataFrame
        Columns ``chain``, ``draw``, then one column per scalar parameter and one
        ``name[label]`` column per vector entry, in input order. Rows are ordered
        by chain, then draw.

    Raises
    ------
    ShapeMismatchError
        If the mapping is empty, a parameter has an unexpected axis set, two
        parameters disagree on the labels of a shared axis, or two parameters
        map to the same column name.
    """
    if not arrays:
        raise ShapeMismatchError("At least one parameter is required.")

    frames = [
        _parameter_frame(name, array, entity_dim) for name, array in arrays.items()
    ]
    check_shared_axes(arrays)

    columns = pd.Index([col for frame in frames for col in frame.columns])
    if columns.has_duplicates:
        duplicated = columns[columns.duplicated()].unique().tolist()
        raise ShapeMismatchError(
            f"Parameters produce duplicate column(s): {', '.join(duplicated)}."
        )

    table = reduce(
        lambda left, right: pd.merge(
            left,
            right,
            left_index=True,
            right_index=True,
            how="inner",
            validate="one_to_one",
        ),
        frames,
    ).reset_index()

    log.debug(
        "parameters.flatten",
        parameters=list(arrays),
        rows=len(table),
        columns=len(table.columns),
    )
    return table


def build_parameter_long_table(
    array: xr.DataArray,
    name: Optional[str] = None,
    entity_dim: str = "predictor",
) -> pd.DataFrame:
    """Long view of a vector parameter: one row per (chain, draw, predictor)."""
    name = name or array.name or "value"
    pattern = check_dims(array, [SAMPLE_DIMS + (entity_dim,)], name)
    index = pd.MultiIndex.from_product(
        [axis_labels(array, dim) for dim in pattern], names=list(pattern)
    )
    values = array.transpose(*pattern).values.reshape(-1)
    return pd.DataFrame({name: values}, index=index).reset_index()


def flattenable_var_names(
    dataset: xr.Dataset, entity_dim: str = "predictor"
) -> List[str]:
    """Variables of a dataset whose axes the parameter table accepts."""
    scalar = set(SAMPLE_DIMS)
    vector = scalar | {entity_dim}
    return [
        var_name
        for var_name in dataset.data_vars
        if set(dataset[var_name].dims) in (scalar, vector)
    ]


def get_group(idata: az.InferenceData, group: str) -> xr.Dataset:
    if group not in idata.groups():
        raise ShapeMismatchError(
            f"InferenceData has no '{group}' group (available: {', '.join(idata.groups())})."
        )
    return getattr(idata, group)


def parameter_table_from_idata(
    idata: az.InferenceData,
    var_names: Optional[List[str]] = None,
    group: str = "posterior",
    entity_dim: str = "predictor",
) -> pd.DataFrame:
    """
    Build the parameter table straight from an InferenceData group.

    When ``var_names`` is None every variable with a scalar or per-predictor
    shape is used; per-observation variables are skipped.
    """
    dataset = get_group(idata, group)
    if var_names is None:
        var_names = flattenable_var_names(dataset, entity_dim)
    missing = [var_name for var_name in var_names if var_name not in dataset]
    if missing:
        raise ShapeMismatchError(
            f"Group '{group}' has no variable(s): {', '.join(missing)}."
        )
    return build_parameter_table(
        {var_name: dataset[var_name] for var_name in var_names},
        entity_dim=entity_dim,
    )
