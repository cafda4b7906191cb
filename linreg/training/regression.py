"""Regression trainer implementation."""

from typing import Any

import torch
from torch import nn, Tensor

from .base import BaseTrainer


def mean_absolute_error(y_hat: Tensor, y: Tensor) -> float:
    return torch.mean(torch.abs(y_hat - y)).item()


class RegressionTrainer(BaseTrainer):
    """Trainer for regression tasks.

    The loss is the model's own ``loss`` when it defines one (mean squared
    error for ``LinearRegressionNet``), ``MSELoss`` otherwise. Batches are
    scored by that MSE and by the mean absolute error, which stays in the
    units of the target and is easier to read against the true labels.

    Example:
        >>> trainer = RegressionTrainer(LinearRegressionNet(), lr=0.1, momentum=0.9)
        >>> result = trainer.fit(train_iter, num_epochs=20)
        >>> print(result["mse"], result["mae"])
    """

    @property
    def default_loss_fn(self) -> nn.Module:
        return getattr(self.model, "loss", None) or nn.MSELoss()

    def prepare_batch(self, X: Tensor, y: Tensor) -> tuple[Tensor, Tensor]:
        """Reshape y to (-1, num_outputs) for regression."""
        num_outputs = getattr(self.model, "num_outputs", 1)
        return X.to(self.device), y.to(self.device).reshape(-1, num_outputs)

    def compute_metrics(self, y_hat: Tensor, y: Tensor, loss: float) -> dict[str, float]:
        return {"mse": loss, "mae": mean_absolute_error(y_hat, y)}

    def format_train_metrics(self, metrics: dict[str, float]) -> dict[str, str]:
        return {"mse": f"{metrics['mse']:.4f}", "mae": f"{metrics['mae']:.4f}"}

    def format_val_metrics(
        self, train_metrics: dict[str, float], val_metrics: dict[str, float]
    ) -> dict[str, str]:
        return {
            "mse": f"{train_metrics['mse']:.4f}",
            "val_mse": f"{val_metrics['val_mse']:.4f}",
        }

    def log_metrics(
        self,
        epoch: int,
        train_metrics: dict[str, float],
        val_metrics: dict[str, float] | None,
    ) -> dict[str, Any]:
        # MSE is the training loss, so it fills the logger's loss columns
        result: dict[str, Any] = {
            "train_loss": train_metrics["mse"],
            "train_mae": train_metrics["mae"],
        }
        if val_metrics:
            result["val_loss"] = val_metrics["val_mse"]
            result["val_mae"] = val_metrics["val_mae"]
        return result

    def format_epoch_message(
        self,
        epoch: int,
        num_epochs: int,
        train_metrics: dict[str, float],
        val_metrics: dict[str, float] | None,
    ) -> str:
        msg = f"Epoch {epoch}/{num_epochs} - MSE: {train_metrics['mse']:.4f}, MAE: {train_metrics['mae']:.4f}"
        if val_metrics:
            msg += f", Val MSE: {val_metrics['val_mse']:.4f}, Val MAE: {val_metrics['val_mae']:.4f}"
        return msg
