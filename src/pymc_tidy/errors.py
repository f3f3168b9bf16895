"""Exceptions and warnings raised while flattening posterior samples."""

from typing import Iterable, Optional


class FlattenError(Exception):
    """Base class for errors raised by the table builders."""


class ShapeMismatchError(FlattenError, ValueError):
    """An array's axes (or a table's columns) do not match what a builder expects."""


class JoinKeyError(FlattenError, KeyError):
    """
    A join identifier could not be matched.

    Raised when an observation present in the samples has no covariate row, when
    the covariate table repeats an identifier, or when a (chain, draw) pair is
    missing from a parameter table.
    """

    def __init__(self, message: str, missing: Optional[Iterable] = None):
        super().__init__(message)
        self.message = message
        self.missing = list(missing) if missing is not None else []

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.message


class InsufficientSamplesWarning(UserWarning):
    """An aggregation group had no draws; its summary values are NaN."""
