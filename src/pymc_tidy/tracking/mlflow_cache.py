"""
Cache fitted InferenceData as MLflow run artifacts.

Refitting the regression for every flattening pass is slow, so fits are keyed by
a hash of the input data and the fit settings and stored as ``idata.nc``.
"""

import hashlib
import json
import os
import tempfile
from typing import Any, Callable, Dict, Optional

import arviz as az
import pandas as pd
import structlog
from mlflow.tracking import MlflowClient

log = structlog.get_logger()

ARTIFACT_NAME = "idata.nc"


def cache_key(
    experiment_name: str,
    data: pd.DataFrame | pd.Series,
    fit_params: Optional[Dict[str, Any]] = None,
) -> str:
    """SHA-256 over the experiment name, the data contents and the fit settings."""
    hasher = hashlib.sha256()
    hasher.update(experiment_name.encode())
    hasher.update(pd.util.hash_pandas_object(data, index=True).values)
    hasher.update(json.dumps(fit_params or {}, sort_keys=True, default=str).encode())
    return hasher.hexdigest()


def _get_experiment_id(mlflow_client: MlflowClient, experiment_name: str) -> str:
    experiment = mlflow_client.get_experiment_by_name(name=experiment_name)
    # If the experiment does not exist or was deleted, create/restore it.
    if experiment is None:
        return mlflow_client.create_experiment(
            name=experiment_name,
            artifact_location=os.getenv("MLFLOW_ARTIFACT_LOCATION"),
        )
    if experiment.lifecycle_stage == "deleted":
        mlflow_client.restore_experiment(experiment.experiment_id)
    return experiment.experiment_id


def get_or_create_idata(
    experiment_name: str,
    data: pd.DataFrame | pd.Series,
    model_fit_function: Callable[..., az.InferenceData],
    mlflow_client: MlflowClient,
    fit_params: Optional[Dict[str, Any]] = None,
) -> az.InferenceData:
    """
    Retrieve InferenceData from the MLflow cache, or fit, cache and return it.

    Parameters
    ----------
    experiment_name : str
        The MLflow experiment holding the cached runs.
    data : pd.DataFrame | pd.Series
        The model input. Part of the cache key.
    model_fit_function : Callable[..., az.InferenceData]
        Called as ``model_fit_function(data, **fit_params)`` on a cache miss.
    mlflow_client : MlflowClient
        An initialized MLflow Tracking Client.
    fit_params : Dict[str, Any], optional
        Keyword arguments for the fit. Part of the cache key.

    Returns
    -------
    az.InferenceData
        The cached or newly fitted InferenceData.
    """
    fit_params = fit_params or {}
    experiment_id = _get_experiment_id(mlflow_client, experiment_name)
    data_hash = cache_key(experiment_name, data, fit_params)

    runs = mlflow_client.search_runs(
        experiment_ids=[experiment_id],
        filter_string=f"tags.data_hash = '{data_hash}'",
        max_results=1,
    )

    if runs:
        run_id = runs[0].info.run_id
        log.info("cache.hit", experiment=experiment_name, run_id=run_id)
        with tempfile.TemporaryDirectory() as tmpdir:
            mlflow_client.download_artifacts(run_id, "", tmpdir)
            artifact_path = os.path.join(tmpdir, ARTIFACT_NAME)
            if not os.path.exists(artifact_path):
                raise FileNotFoundError(
                    f"Could not find '{ARTIFACT_NAME}' in the artifacts for run {run_id}. "
                    f"Contents of download dir: {os.listdir(tmpdir)}"
                )
            idata = az.from_netcdf(artifact_path)
            # Load into memory before the temporary directory is deleted.
            idata.load()
        return idata

    run = mlflow_client.create_run(experiment_id=experiment_id)
    run_id = run.info.run_id
    log.info("cache.miss", experiment=experiment_name, run_id=run_id)
    try:
        mlflow_client.set_tag(run_id, "data_hash", data_hash)
        for key, value in fit_params.items():
            mlflow_client.log_param(run_id, key, value)
        idata = model_fit_function(data, **fit_params)

        with tempfile.TemporaryDirectory() as tmpdir:
            idata_path = os.path.join(tmpdir, ARTIFACT_NAME)
            idata.to_netcdf(idata_path)
            mlflow_client.log_artifact(run_id, idata_path)
    except Exception:
        # Drop the run so a half-written fit never becomes a cache hit.
        log.error("cache.fit_failed", experiment=experiment_name, run_id=run_id, exc_info=True)
        mlflow_client.set_terminated(run_id, "FAILED")
        mlflow_client.delete_run(run_id)
        raise

    mlflow_client.set_terminated(run_id, "FINISHED")
    return idata
