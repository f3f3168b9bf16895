"""Axis and column checks run at the boundary of every builder."""

from typing import Iterable, Mapping, Sequence, Tuple

import numpy as np
import pandas as pd
import xarray as xr

from pymc_tidy.errors import ShapeMismatchError

SAMPLE_DIMS = ("chain", "draw")


def check_dims(
    array: xr.DataArray, patterns: Sequence[Tuple[str, ...]], name: str
) -> Tuple[str, ...]:
    """
    Return the pattern (in canonical order) that matches the array's axes.

    Axis order in the array does not matter, only the set of axis names.
    """
    dims = set(array.dims)
    for pattern in patterns:
        if dims == set(pattern):
            return tuple(pattern)
    expected = " or ".join("{" + ", ".join(p) + "}" for p in patterns)
    raise ShapeMismatchError(
        f"'{name}' has axes {{{', '.join(map(str, array.dims))}}}, expected {expected}."
    )


def axis_labels(array: xr.DataArray, dim: str) -> np.ndarray:
    """Labels along an axis, falling back to 0..n-1 when no coordinate is set."""
    return np.asarray(array[dim].values)


def check_shared_axes(arrays: Mapping[str, xr.DataArray]) -> None:
    """Every array sharing an axis name must agree on its size and labels."""
    seen = {}
    for name, array in arrays.items():
        for dim in array.dims:
            labels = axis_labels(array, dim)
            if dim not in seen:
                seen[dim] = (name, labels)
                continue
            first_name, first_labels = seen[dim]
            if len(labels) != len(first_labels):
                raise ShapeMismatchError(
                    f"Axis '{dim}' has size {len(labels)} in '{name}' "
                    f"but {len(first_labels)} in '{first_name}'."
                )
            if not np.array_equal(labels, first_labels):
                raise ShapeMismatchError(
                    f"Axis '{dim}' labels differ between '{first_name}' and '{name}'."
                )


def require_columns(table: pd.DataFrame, columns: Iterable[str], what: str) -> None:
    missing = [col for col in columns if col not in table.columns]
    if missing:
        raise ShapeMismatchError(
            f"{what} is missing required column(s): {', '.join(map(str, missing))}."
        )
