"""
Shared fixtures: small synthetic sample arrays and InferenceData.

Nothing here runs a sampler; arrays are built by hand so expected rows are known.
"""

import arviz as az
import numpy as np
import pandas as pd
import pytest
import xarray as xr

CHAINS = [0, 1]
DRAWS = [0, 1, 2]
OBSERVATIONS = ["a", "b"]
PREDICTORS = ["x1", "x2"]


def _identity_values(*sizes):
    """value = 100 * chain + 10 * draw + last index, so every cell is traceable."""
    grids = np.meshgrid(*[np.arange(n) for n in sizes], indexing="ij")
    weights = [100, 10, 1][: len(sizes)]
    return sum(w * g for w, g in zip(weights, grids)).astype(float)


@pytest.fixture
def mu_array():
    return xr.DataArray(
        _identity_values(len(CHAINS), len(DRAWS), len(OBSERVATIONS)),
        dims=("chain", "draw", "observation"),
        coords={"chain": CHAINS, "draw": DRAWS, "observation": OBSERVATIONS},
        name="mu",
    )


@pytest.fixture
def covariates():
    return pd.DataFrame({"observation": ["a", "b"], "x": [1, 2], "y": [10, 20]})


@pytest.fixture
def parameter_arrays():
    coords = {"chain": CHAINS, "draw": DRAWS}
    alpha = xr.DataArray(
        _identity_values(len(CHAINS), len(DRAWS)), dims=("chain", "draw"), coords=coords
    )
    sigma = xr.DataArray(
        1.0 + _identity_values(len(CHAINS), len(DRAWS)) / 1000,
        dims=("chain", "draw"),
        coords=coords,
    )
    beta = xr.DataArray(
        _identity_values(len(CHAINS), len(DRAWS), len(PREDICTORS)),
        dims=("chain", "draw", "predictor"),
        coords={**coords, "predictor": PREDICTORS},
    )
    return {"alpha": alpha, "beta": beta, "sigma": sigma}


@pytest.fixture
def idata(parameter_arrays, mu_array):
    rng = np.random.default_rng(0)
    return az.from_dict(
        posterior={
            "alpha": parameter_arrays["alpha"].values,
            "beta": parameter_arrays["beta"].values,
            "sigma": parameter_arrays["sigma"].values,
            "mu": mu_array.values,
        },
        posterior_predictive={
            "y": mu_array.values + rng.normal(size=mu_array.shape),
        },
        coords={"predictor": PREDICTORS, "observation": OBSERVATIONS},
        dims={"beta": ["predictor"], "mu": ["observation"], "y": ["observation"]},
    )
