"""PyMC Bayesian linear regression on a small tabular dataset."""

from typing import Dict, Optional, Sequence

import arviz as az
import numpy as np
import pandas as pd
import pymc as pm

from pymc_tidy.flatten.validation import require_columns


def generate_regression_data(
    n_observations: int,
    coefficients: Dict[str, float],
    intercept: float = 1.0,
    sigma: float = 1.0,
    random_seed: Optional[int] = None,
) -> pd.DataFrame:
    """
    Generate a toy dataset from a known linear model.

    Parameters
    ----------
    n_observations : int
        Number of rows to simulate.
    coefficients : Dict[str, float]
        Predictor name to true slope. Each predictor is drawn from a standard normal.
    intercept : float, optional
        True intercept, by default 1.0.
    sigma : float, optional
        Residual standard deviation, by default 1.0.
    random_seed : int, optional
        A seed for the random number generator.

    Returns
    -------
    pd.DataFrame
        Columns ``observation`` (``obs_0``, ``obs_1``, ...), one column per
        predictor, and the target ``y``.
    """
    rng = np.random.default_rng(random_seed)
    data = pd.DataFrame(
        {"observation": [f"obs_{i}" for i in range(n_observations)]}
    )
    y = np.full(n_observations, intercept, dtype=float)
    for name, slope in coefficients.items():
        data[name] = rng.normal(size=n_observations)
        y += slope * data[name].to_numpy()
    data["y"] = y + rng.normal(scale=sigma, size=n_observations)
    return data


def build_regression_model(
    data: pd.DataFrame,
    predictors: Sequence[str],
    target: str = "y",
    id_column: str = "observation",
) -> pm.Model:
    """
    Build a linear regression with named ``observation`` and ``predictor`` coords.

    The model holds scalar ``alpha`` and ``sigma``, the coefficient vector ``beta``
    (dims predictor), the linear predictor ``mu`` and the likelihood named after
    ``target`` (both dims observation).
    """
    predictors = list(predictors)
    require_columns(data, [id_column, target] + predictors, "Regression data")

    coords = {
        "observation": data[id_column].tolist(),
        "predictor": predictors,
    }
    with pm.Model(coords=coords) as model:
        x = pm.Data(
            "x",
            data[predictors].to_numpy(dtype=float),
            dims=("observation", "predictor"),
        )

        # Weakly informative priors
        alpha = pm.Normal("alpha", mu=0.0, sigma=10.0)
        beta = pm.Normal("beta", mu=0.0, sigma=10.0, dims="predictor")
        sigma = pm.HalfNormal("sigma", sigma=5.0)

        mu = pm.Deterministic("mu", alpha + pm.math.dot(x, beta), dims="observation")
        pm.Normal(
            target,
            mu=mu,
            sigma=sigma,
            observed=data[target].to_numpy(dtype=float),
            dims="observation",
        )

    return model


def fit_regression_model(
    data: pd.DataFrame,
    predictors: Sequence[str],
    target: str = "y",
    draws: int = 1000,
    tune: int = 1000,
    chains: int = 4,
    random_seed: Optional[int] = None,
) -> az.InferenceData:
    """
    Fit the regression and add posterior predictive draws.

    Returns
    -------
    az.InferenceData
        Posterior (``alpha``, ``beta``, ``sigma``, ``mu``) and posterior
        predictive (``target``) groups.
    """
    model = build_regression_model(data, predictors, target=target)
    with model:
        idata = pm.sample(
            draws=draws, tune=tune, chains=chains, cores=1, random_seed=random_seed
        )
        pm.sample_posterior_predictive(
            idata, extend_inferencedata=True, random_seed=random_seed
        )

    return idata
