"""MLflow client setup."""

import os
from typing import Optional

import mlflow
from mlflow.tracking import MlflowClient

mlflow_client: Optional[MlflowClient] = None


def get_mlflow_client() -> MlflowClient:
    """Return the MLflow client, creating it from MLFLOW_TRACKING_URI on first use."""
    global mlflow_client
    if mlflow_client is None:
        tracking_uri = os.getenv("MLFLOW_TRACKING_URI", "sqlite:///mlflow.db")
        mlflow.set_tracking_uri(tracking_uri)
        mlflow_client = MlflowClient(tracking_uri=tracking_uri)
    return mlflow_client
