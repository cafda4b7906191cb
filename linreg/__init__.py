"""Linear regression walkthroughs on top of PyTorch."""

from . import data, training
from .errors import ConfigurationError
from .evaluation import evaluate, predict, read_parameters, score
from .model import LinearRegressionNet
from .training import RegressionTrainer, TrainingConfig
from .training_logger import TrainingLogger

__all__ = [
    "data",
    "training",
    "ConfigurationError",
    "LinearRegressionNet",
    "RegressionTrainer",
    "TrainingConfig",
    "TrainingLogger",
    "evaluate",
    "predict",
    "read_parameters",
    "score",
]
