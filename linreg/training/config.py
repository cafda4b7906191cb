"""Shared training configuration utilities."""

from dataclasses import dataclass
from typing import Any, Optional, TYPE_CHECKING

import torch

from ..errors import ConfigurationError

if TYPE_CHECKING:
    from ..training_logger import TrainingLogger


@dataclass
class TrainingConfig:
    """Container for common training hyperparameters.

    Explicit function arguments will override these values when both are set.
    ``momentum`` is Adam's first-moment decay rate (``beta1``).
    """

    num_epochs: Optional[int] = 20
    lr: Optional[float] = 0.1
    momentum: float = 0.9
    beta2: float = 0.999
    batch_size: int = 100
    seed: Optional[int] = None
    verbose: bool = True
    logger: Optional["TrainingLogger"] = None
    device: Optional[torch.device] = torch.device("cpu")
    grad_clip: Optional[float] = None  # Max norm for gradient clipping


def resolve_training_config(config: Optional[TrainingConfig], **overrides: Any) -> TrainingConfig:
    """Merge a ``TrainingConfig`` with explicit overrides.

    Args:
        config: Base configuration (optional).
        **overrides: Values passed directly to the trainer.

    Returns:
        A ``TrainingConfig`` with explicit overrides taking precedence.
    """
    base = config or TrainingConfig()
    merged = {name: getattr(base, name) for name in TrainingConfig.__dataclass_fields__}
    for key, value in overrides.items():
        if key not in merged:
            raise ConfigurationError(f"Unknown training option: {key}")
        if value is not None:
            merged[key] = value

    resolved = TrainingConfig(**merged)
    if resolved.num_epochs is None:
        raise ConfigurationError("num_epochs must be provided either directly or via TrainingConfig")
    if resolved.lr is None:
        raise ConfigurationError("lr must be provided either directly or via TrainingConfig")
    if resolved.num_epochs < 0:
        raise ConfigurationError(f"num_epochs must be non-negative, got {resolved.num_epochs}")
    if not 0.0 <= resolved.momentum < 1.0:
        raise ConfigurationError(f"momentum must be in [0, 1), got {resolved.momentum}")
    if resolved.grad_clip is not None and resolved.grad_clip <= 0:
        raise ConfigurationError(f"grad_clip must be positive, got {resolved.grad_clip}")
    return resolved
