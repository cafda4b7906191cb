"""Inference and scoring for trained regression models."""

import torch
from torch import nn, Tensor

from .data.iterator import NDArrayIter
from .errors import ConfigurationError
from .training.base import BaseTrainer


def mse(y_hat: Tensor, y: Tensor) -> float:
    return torch.mean((y_hat - y) ** 2).item()


def mae(y_hat: Tensor, y: Tensor) -> float:
    return torch.mean(torch.abs(y_hat - y)).item()


def rmse(y_hat: Tensor, y: Tensor) -> float:
    return mse(y_hat, y) ** 0.5


METRICS = {
    "mse": mse,
    "mae": mae,
    "rmse": rmse,
}


def _collect(trainer: BaseTrainer, eval_data: NDArrayIter) -> tuple[Tensor, Tensor]:
    """Run inference over every batch, dropping padded samples."""
    trainer.require_trained()
    eval_data.reset()
    preds, labels = [], []
    for batch in eval_data:
        trainer.forward(batch, is_train=False)
        keep = batch.data.shape[0] - batch.pad
        _, y = trainer.prepare_batch(batch.data, batch.label)
        preds.append(trainer.outputs()[0][:keep].cpu())
        labels.append(y[:keep].cpu())
    eval_data.reset()
    return torch.cat(preds), torch.cat(labels)


def predict(trainer: BaseTrainer, eval_data: NDArrayIter) -> Tensor:
    """Predictions for every sample of ``eval_data``, in iteration order.

    Args:
        trainer: A trained trainer.
        eval_data: Iterator over the samples to predict.

    Returns:
        Tensor of shape ``(num_samples, num_outputs)``.
    """
    preds, _ = _collect(trainer, eval_data)
    return preds


def score(trainer: BaseTrainer, eval_data: NDArrayIter, metric: str = "mse") -> tuple[str, float]:
    """Score ``eval_data`` with a named metric.

    Returns:
        ``(metric_name, value)``.
    """
    if metric not in METRICS:
        raise ConfigurationError(f"Unknown metric {metric!r}; expected one of {sorted(METRICS)}")
    preds, labels = _collect(trainer, eval_data)
    return metric, METRICS[metric](preds, labels)


def _run_module(model: nn.Module, data: Tensor) -> Tensor:
    """Inference with a bare module, leaving its train/eval mode as it was."""
    num_inputs = getattr(model, "num_inputs", None)
    if data.dim() != 2 or data.shape[0] == 0 or (num_inputs is not None and data.shape[1] != num_inputs):
        raise ConfigurationError(
            f"Batch data shape {tuple(data.shape)} does not fit a model with {num_inputs} inputs"
        )
    device = next(model.parameters()).device
    was_training = model.training
    model.eval()
    try:
        with torch.no_grad():
            return model(data.to(device)).cpu()
    finally:
        model.train(was_training)


def evaluate(
    model: BaseTrainer | nn.Module, test_batch: tuple[Tensor, Tensor]
) -> tuple[list[tuple[float, float]], float]:
    """Evaluate a model on one ``(data, label)`` batch.

    ``model`` is either a trained trainer or a bare module, which is run as is.

    Returns:
        ``(predictions, score)`` where ``predictions`` pairs each predicted
        value with its true label and ``score`` is the mean squared error.
    """
    data, label = test_batch
    if isinstance(model, BaseTrainer):
        eval_data = NDArrayIter(data, label, batch_size=data.shape[0])
        preds, labels = _collect(model, eval_data)
    else:
        preds = _run_module(model, data)
        labels = label.reshape(preds.shape).cpu()
    pairs = list(zip(preds.reshape(-1).tolist(), labels.reshape(-1).tolist()))
    return pairs, mse(preds, labels)


def read_parameters(model: BaseTrainer | nn.Module) -> tuple[float, ...]:
    """Learned ``(a', b', c')``: the weights followed by the bias."""
    if isinstance(model, BaseTrainer):
        model.require_trained()
        model = model.model
    weight = model.fc.weight.detach().cpu().reshape(-1).tolist()
    bias = model.fc.bias.detach().cpu().reshape(-1).tolist()
    return tuple(weight + bias)
