import click
from pydantic import ValidationError

from pymc_tidy.schemas import IntervalProbs


class Interval(click.ParamType):
    """
    A custom Click parameter type that accepts a quantile pair such as
    ``0.03,0.97`` and converts it to validated IntervalProbs.
    """

    name = "interval"

    def convert(self, value, param, ctx):
        if value is None or isinstance(value, IntervalProbs):
            return value
        try:
            low, high = (float(part) for part in str(value).split(","))
            return IntervalProbs(low=low, high=high)
        except (ValueError, ValidationError):
            self.fail(
                f"'{value}' is not a valid interval. Expected two probabilities "
                f"as LOW,HIGH with 0 <= LOW < HIGH <= 1 (e.g., 0.03,0.97)."
            )


class Coefficient(click.ParamType):
    """A ``name:value`` pair, e.g. ``x1:2.5``."""

    name = "coefficient"

    def convert(self, value, param, ctx):
        if isinstance(value, tuple):
            return value
        try:
            name, slope = str(value).split(":")
            return name.strip(), float(slope.strip())
        except ValueError:
            self.fail(f"'{value}' must be in the format 'name:value'.")
