"""Density curves for parameter columns."""

import numpy as np
import pandas as pd
from scipy import stats

from pymc_tidy.errors import ShapeMismatchError
from pymc_tidy.flatten.validation import require_columns
from pymc_tidy.schemas import PosteriorCurve


def parameter_density(
    table: pd.DataFrame, column: str, n_points: int = 200
) -> PosteriorCurve:
    """
    Gaussian KDE of one parameter column, evaluated between its min and max.

    Parameters
    ----------
    table : pd.DataFrame
        A parameter table, e.g. from :func:`build_parameter_table`.
    column : str
        The parameter column, e.g. ``"sigma"`` or ``"beta[x1]"``.
    n_points : int, optional
        Number of grid points, by default 200.
    """
    require_columns(table, [column], "Parameter table")
    samples = table[column].dropna().to_numpy(dtype=float)
    if samples.size < 2 or np.ptp(samples) == 0:
        raise ShapeMismatchError(
            f"Column '{column}' needs at least two distinct samples for a density."
        )

    kde = stats.gaussian_kde(samples)
    x = np.linspace(samples.min(), samples.max(), n_points)
    y = kde(x)
    return PosteriorCurve(x=x.tolist(), y=y.tolist())
