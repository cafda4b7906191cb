"""Synthetic data for the linear law ``z = 2*x + y``."""

import torch
from torch import Tensor

from ..errors import ConfigurationError
from .iterator import NDArrayIter

NUM_INPUTS = 2  # x and y
NUM_OUTPUTS = 1  # z
TRUE_WEIGHTS = (2.0, 1.0)
TRUE_BIAS = 0.0


def linear_fn(x, y):
    """Ground-truth law ``z = a*x + b*y + c`` with ``a=2, b=1, c=0``."""
    return x * TRUE_WEIGHTS[0] + y * TRUE_WEIGHTS[1] + TRUE_BIAS


def _check_range(batch_size: int, low: float, high: float) -> None:
    if batch_size <= 0:
        raise ConfigurationError(f"batch_size must be positive, got {batch_size}")
    if low >= high:
        raise ConfigurationError(f"low must be below high, got [{low}, {high}]")


def generate_batch(
    batch_size: int,
    low: float = -3.0,
    high: float = 3.0,
    generator: torch.Generator | None = None,
) -> tuple[Tensor, Tensor]:
    """Draw ``batch_size`` samples of ``(x, y) -> z``.

    Args:
        batch_size: Number of samples to draw.
        low: Lower bound of the uniform input range.
        high: Upper bound of the uniform input range.
        generator: Optional seeded generator for reproducible draws.

    Returns:
        ``(data, label)`` with shapes ``(batch_size, 2)`` and ``(batch_size, 1)``.
    """
    _check_range(batch_size, low, high)
    data = torch.rand(batch_size, NUM_INPUTS, generator=generator) * (high - low) + low
    label = linear_fn(data[:, 0], data[:, 1]).reshape(-1, NUM_OUTPUTS)
    return data, label


def generate_data(
    batch_size: int,
    low: float = -3.0,
    high: float = 3.0,
    generator: torch.Generator | None = None,
) -> NDArrayIter:
    """Generate one batch row-major and wrap it in an iterator.

    Samples are drawn as a ``(2, batch_size)`` tensor so that ``linear_fn`` can
    be applied to whole rows, then transposed into the layout the model expects.
    """
    _check_range(batch_size, low, high)
    rows = torch.rand(NUM_INPUTS, batch_size, generator=generator) * (high - low) + low
    label = linear_fn(rows[0], rows[1]).reshape(NUM_OUTPUTS, -1)
    return NDArrayIter(rows.T.contiguous(), label.T.contiguous(), batch_size=batch_size)
