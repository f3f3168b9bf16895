"""Posterior flattening: tidy tables from sampled arrays."""

from pymc_tidy.flatten.density import parameter_density
from pymc_tidy.flatten.parameters import (
    build_parameter_long_table,
    build_parameter_table,
    parameter_table_from_idata,
)
from pymc_tidy.flatten.predictions import (
    add_group_key,
    attach_parameters,
    build_prediction_table,
    prediction_table_from_idata,
    summarize_predictions,
)

__all__ = [
    "add_group_key",
    "attach_parameters",
    "build_parameter_long_table",
    "build_parameter_table",
    "build_prediction_table",
    "parameter_density",
    "parameter_table_from_idata",
    "prediction_table_from_idata",
    "summarize_predictions",
]
