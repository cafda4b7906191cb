"""Synthetic regression data and batch iteration."""

from .iterator import DataBatch, NDArrayIter
from .synthetic import (
    NUM_INPUTS,
    NUM_OUTPUTS,
    TRUE_BIAS,
    TRUE_WEIGHTS,
    generate_batch,
    generate_data,
    linear_fn,
)

__all__ = [
    "DataBatch",
    "NDArrayIter",
    "NUM_INPUTS",
    "NUM_OUTPUTS",
    "TRUE_BIAS",
    "TRUE_WEIGHTS",
    "generate_batch",
    "generate_data",
    "linear_fn",
]
