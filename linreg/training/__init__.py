"""Training utilities with a common base trainer."""

from .base import BaseTrainer, get_device
from .config import TrainingConfig, resolve_training_config
from .regression import RegressionTrainer

__all__ = [
    "BaseTrainer",
    "RegressionTrainer",
    "get_device",
    "TrainingConfig",
    "resolve_training_config",
]
