"""Pydantic models shared by the builders and the CLI."""

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


class IntervalProbs(BaseModel):
    """Lower and upper quantile probabilities for a central interval."""

    low: float = Field(default=0.03, ge=0.0, le=1.0)
    high: float = Field(default=0.97, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def check_order(self):
        if self.low >= self.high:
            raise ValueError(
                f"Interval bounds must satisfy low < high, got {self.low} and {self.high}."
            )
        return self

    @property
    def mass(self) -> float:
        """Probability mass covered by the interval (0.94 for 0.03/0.97)."""
        return round(self.high - self.low, 10)


class PosteriorCurve(BaseModel):
    """Represents a posterior curve for plotting."""

    x: List[float]
    y: List[float]


class TableReport(BaseModel):
    """What a CLI command wrote."""

    rows: int
    columns: List[str]
    output: Optional[str] = None
