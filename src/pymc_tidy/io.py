"""Reading covariate tables and writing flattened tables."""

from pathlib import Path
from typing import Union

import ibis
import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq
import structlog

log = structlog.get_logger()

PathLike = Union[str, Path]


def _suffix(path: PathLike) -> str:
    suffix = Path(path).suffix.lower()
    if suffix not in (".csv", ".parquet"):
        raise ValueError(
            f"Unsupported table format '{suffix}' for {path}. Use .csv or .parquet."
        )
    return suffix


def read_table(path: PathLike) -> pd.DataFrame:
    """Load a CSV or Parquet file into a DataFrame."""
    if _suffix(path) == ".csv":
        expr = ibis.read_csv(str(path))
    else:
        expr = ibis.read_parquet(str(path))
    return expr.execute()


def write_table(table: pd.DataFrame, path: PathLike) -> Path:
    """Write a DataFrame as CSV or Parquet, chosen by file suffix."""
    path = Path(path)
    if _suffix(path) == ".csv":
        table.to_csv(path, index=False)
    else:
        pq.write_table(pa.Table.from_pandas(table, preserve_index=False), path)
    log.info("table.write", path=str(path), rows=len(table))
    return path
