"""Base trainer class with common training logic."""

from abc import ABC, abstractmethod
from typing import Any, Sequence

import torch
from torch import nn, Tensor
from torch.optim import Optimizer
from tqdm import tqdm

from ..data.iterator import DataBatch, NDArrayIter
from ..errors import ConfigurationError
from ..training_logger import TrainingLogger
from .config import TrainingConfig, resolve_training_config


def get_device() -> torch.device:
    """Infer the best available device."""
    if torch.cuda.is_available():
        return torch.device("cuda")
    elif hasattr(torch.backends, "mps") and torch.backends.mps.is_available():
        return torch.device("mps")
    return torch.device("cpu")


class BaseTrainer(ABC):
    """Abstract base class for training PyTorch models on batch iterators.

    A trainer owns one model and its optimizer state. It is driven through
    the same lifecycle whether training happens in one call or step by step:

        1. ``bind`` the concrete data and label shapes,
        2. ``init_params`` and ``init_optimizer``,
        3. ``forward`` / ``backward`` / ``update`` per batch.

    ``fit`` and ``fit_manual`` perform steps 1 and 2 lazily from the shapes
    the training iterator provides.

    Subclasses must implement:
        - ``default_loss_fn``: Property returning the default loss function.
        - ``compute_metrics``: Compute task-specific metrics for a batch.
        - ``format_train_metrics``: Format metrics for display.
        - ``format_val_metrics``: Format combined metrics for display.
        - ``log_metrics``: Return kwargs for TrainingLogger.log_epoch.
        - ``format_epoch_message``: Verbose per-epoch line.

    Optionally override:
        - ``prepare_batch``: Transform batch before forward pass.
        - ``post_backward``: Hook after backward (clips gradients by default).
    """

    def __init__(
        self,
        model: nn.Module,
        config: TrainingConfig | None = None,
        *,
        num_epochs: int | None = None,
        lr: float | None = None,
        momentum: float | None = None,
        seed: int | None = None,
        verbose: bool | None = None,
        logger: TrainingLogger | None = None,
        device: torch.device | None = None,
        loss_fn: nn.Module | None = None,
        **kwargs: Any,
    ) -> None:
        self.model = model

        # Resolve config with overrides
        self.cfg = resolve_training_config(
            config,
            num_epochs=num_epochs,
            lr=lr,
            momentum=momentum,
            seed=seed,
            verbose=verbose,
            logger=logger,
            device=device,
            **kwargs,
        )

        self.device = self.cfg.device or torch.device("cpu")
        self.model.to(self.device)
        self.loss_fn = loss_fn or self.default_loss_fn

        self.data_shape: tuple[int, ...] | None = None
        self.label_shape: tuple[int, ...] | None = None
        self.params_initialized = False
        self.optimizer: Optimizer | None = None
        self.num_update = 0

        self._y_hat: Tensor | None = None
        self._loss: Tensor | None = None

    @property
    @abstractmethod
    def default_loss_fn(self) -> nn.Module:
        """Return the default loss function for this task."""
        ...

    @abstractmethod
    def compute_metrics(self, y_hat: Tensor, y: Tensor, loss: float) -> dict[str, float]:
        """Compute task-specific metrics for a batch.

        Args:
            y_hat: Model predictions.
            y: Ground-truth labels.
            loss: Loss value for this batch.

        Returns:
            Dictionary of metric names to values.
        """
        ...

    @abstractmethod
    def format_train_metrics(self, metrics: dict[str, float]) -> dict[str, str]:
        """Format training metrics for tqdm postfix display."""
        ...

    @abstractmethod
    def format_val_metrics(
        self, train_metrics: dict[str, float], val_metrics: dict[str, float]
    ) -> dict[str, str]:
        """Format combined train/val metrics for tqdm postfix display."""
        ...

    @abstractmethod
    def log_metrics(
        self,
        epoch: int,
        train_metrics: dict[str, float],
        val_metrics: dict[str, float] | None,
    ) -> dict[str, Any]:
        """Return kwargs for TrainingLogger.log_epoch."""
        ...

    @abstractmethod
    def format_epoch_message(
        self,
        epoch: int,
        num_epochs: int,
        train_metrics: dict[str, float],
        val_metrics: dict[str, float] | None,
    ) -> str:
        """Format the verbose epoch completion message."""
        ...

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def binded(self) -> bool:
        return self.data_shape is not None

    @property
    def model_input_dims(self) -> tuple[int, int] | None:
        """``(num_inputs, num_outputs)`` declared by the model, if it declares them."""
        num_inputs = getattr(self.model, "num_inputs", None)
        num_outputs = getattr(self.model, "num_outputs", None)
        if num_inputs is None or num_outputs is None:
            return None
        return num_inputs, num_outputs

    def bind(self, data_shape: Sequence[int], label_shape: Sequence[int]) -> None:
        """Declare the concrete data and label shapes used for training.

        Args:
            data_shape: ``(batch_size, num_inputs)``.
            label_shape: ``(batch_size, num_outputs)``.

        Raises:
            ConfigurationError: If the batch size is not above 1, the two
                shapes disagree on it, or the feature dims do not fit the model.
        """
        data_shape, label_shape = tuple(data_shape), tuple(label_shape)
        if len(data_shape) != 2 or len(label_shape) != 2:
            raise ConfigurationError(
                f"Expected 2-d data and label shapes, got {data_shape} and {label_shape}"
            )
        if data_shape[0] <= 1:
            raise ConfigurationError(f"batch_size must be greater than 1, got {data_shape[0]}")
        if data_shape[0] != label_shape[0]:
            raise ConfigurationError(
                f"Data batch size {data_shape[0]} does not match label batch size {label_shape[0]}"
            )
        dims = self.model_input_dims
        if dims is not None and (data_shape[1], label_shape[1]) != dims:
            raise ConfigurationError(
                f"Model expects {dims[0]} inputs and {dims[1]} outputs, "
                f"got data shape {data_shape} and label shape {label_shape}"
            )
        self.data_shape = data_shape
        self.label_shape = label_shape

    def init_params(self, seed: int | None = None) -> None:
        """Initialize model parameters, reproducibly when a seed is given."""
        if not self.binded:
            raise ConfigurationError("bind() must be called before init_params()")
        generator = None
        if seed is not None:
            generator = torch.Generator().manual_seed(seed)
        reset = getattr(self.model, "reset_parameters", None)
        if reset is not None:
            reset(generator=generator)
        self.model.to(self.device)
        self.params_initialized = True

    def init_optimizer(self) -> None:
        """Create an Adam optimizer over the model parameters."""
        if not self.params_initialized:
            raise ConfigurationError("init_params() must be called before init_optimizer()")
        self.optimizer = torch.optim.Adam(
            self.model.parameters(),
            lr=self.cfg.lr,
            betas=(self.cfg.momentum, self.cfg.beta2),
        )

    def check_data_shapes(self, data_iter: NDArrayIter) -> None:
        """Fail fast when an iterator's batches differ from the bound shapes."""
        if data_iter.provide_data != self.data_shape:
            raise ConfigurationError(
                f"Iterator data shape {data_iter.provide_data} does not match bound shape {self.data_shape}"
            )
        if data_iter.provide_label != self.label_shape:
            raise ConfigurationError(
                f"Iterator label shape {data_iter.provide_label} does not match bound shape {self.label_shape}"
            )

    def prepare_training(self, train_data: NDArrayIter) -> None:
        """Bind and initialize from ``train_data`` where not done yet, then check shapes."""
        if not self.binded:
            self.bind(train_data.provide_data, train_data.provide_label)
        self.check_data_shapes(train_data)
        if not self.params_initialized:
            self.init_params(self.cfg.seed)
        if self.optimizer is None:
            self.init_optimizer()

    # ------------------------------------------------------------------
    # Per-batch API
    # ------------------------------------------------------------------

    def prepare_batch(self, X: Tensor, y: Tensor) -> tuple[Tensor, Tensor]:
        """Prepare a batch before forward pass. Override for task-specific transforms."""
        return X.to(self.device), y.to(self.device)

    def post_backward(self) -> None:
        """Clip the gradient norm to ``grad_clip`` when it is configured."""
        if self.cfg.grad_clip is not None:
            nn.utils.clip_grad_norm_(self.model.parameters(), self.cfg.grad_clip)

    def forward(self, batch: DataBatch, is_train: bool = True) -> None:
        """Run the forward pass for one batch and keep its outputs.

        In training mode the batch must match the bound shapes exactly and the
        graph is recorded for ``backward``. Otherwise only the feature dims
        are checked and no gradients are tracked.
        """
        if not self.params_initialized:
            raise ConfigurationError("Parameters are not initialized; call init_params() first")
        X, y = self.prepare_batch(batch.data, batch.label)
        if is_train:
            if tuple(X.shape) != self.data_shape:
                raise ConfigurationError(
                    f"Batch data shape {tuple(X.shape)} does not match bound shape {self.data_shape}"
                )
            self.model.train()
            self._y_hat = self.model(X)
            self._loss = self.loss_fn(self._y_hat, y)
            return

        dims = self.model_input_dims
        if dims is not None and X.shape[1:] != (dims[0],):
            raise ConfigurationError(
                f"Batch data shape {tuple(X.shape)} does not fit a model with {dims[0]} inputs"
            )
        self.model.eval()
        with torch.no_grad():
            self._y_hat = self.model(X)
            self._loss = self.loss_fn(self._y_hat, y)

    def backward(self) -> None:
        """Compute gradients of the last training forward pass."""
        if self._loss is None or not self._loss.requires_grad:
            raise ConfigurationError("backward() requires a preceding forward(is_train=True)")
        if self.optimizer is None:
            raise ConfigurationError("Optimizer is not initialized; call init_optimizer() first")
        self.optimizer.zero_grad()
        self._loss.backward()
        self.post_backward()

    def update(self) -> None:
        """Apply one optimizer step with the current gradients."""
        if self.optimizer is None:
            raise ConfigurationError("Optimizer is not initialized; call init_optimizer() first")
        self.optimizer.step()
        self.num_update += 1

    def outputs(self) -> list[Tensor]:
        """Outputs of the last forward pass."""
        if self._y_hat is None:
            raise ConfigurationError("No outputs available; call forward() first")
        return [self._y_hat.detach()]

    def loss_value(self) -> float:
        if self._loss is None:
            raise ConfigurationError("No loss available; call forward() first")
        return self._loss.item()

    # ------------------------------------------------------------------
    # Training loops
    # ------------------------------------------------------------------

    def resolve_epochs(self, num_epochs: int | None) -> int:
        """Per-call epoch count, falling back to the config."""
        num_epochs = self.cfg.num_epochs if num_epochs is None else num_epochs
        if num_epochs < 0:
            raise ConfigurationError(f"num_epochs must be non-negative, got {num_epochs}")
        return num_epochs

    def _train_epoch(self, train_data: NDArrayIter, on_batch=None, batches=None) -> None:
        """Run forward, backward and update over every batch, then rewind.

        ``batches`` may wrap ``train_data``, e.g. in a progress bar.
        """
        for batch in (train_data if batches is None else batches):
            self.forward(batch, is_train=True)
            self.backward()
            self.update()
            if on_batch is not None:
                on_batch(batch)
        train_data.reset()

    def fit_manual(self, train_data: NDArrayIter, num_epochs: int | None = None) -> "BaseTrainer":
        """Train with the explicit per-batch loop, without reporting."""
        num_epochs = self.resolve_epochs(num_epochs)
        self.prepare_training(train_data)
        train_data.reset()
        for _ in range(num_epochs):
            self._train_epoch(train_data)
        return self

    def fit(
        self,
        train_data: NDArrayIter,
        eval_data: NDArrayIter | None = None,
        num_epochs: int | None = None,
    ) -> dict[str, float] | None:
        """Run the training loop with progress bars and metric logging.

        Returns:
            Final epoch metrics as a dict, or None.
        """
        num_epochs = self.resolve_epochs(num_epochs)
        self.prepare_training(train_data)
        train_data.reset()

        epoch_pbar = tqdm(
            range(num_epochs), desc="Training", unit="epoch", disable=not self.cfg.verbose
        )
        final_metrics: dict[str, float] | None = None

        for epoch in epoch_pbar:
            batch_metrics: list[dict[str, float]] = []

            batch_pbar = tqdm(
                train_data,
                desc=f"Epoch {epoch + 1}/{num_epochs}",
                total=len(train_data),
                leave=False,
                disable=not self.cfg.verbose,
            )

            def record(batch: DataBatch) -> None:
                _, y = self.prepare_batch(batch.data, batch.label)
                metrics = self.compute_metrics(self._y_hat.detach(), y, self.loss_value())
                batch_metrics.append(metrics)
                batch_pbar.set_postfix(self.format_train_metrics(metrics))

            self._train_epoch(train_data, on_batch=record, batches=batch_pbar)
            train_metrics = self._aggregate_metrics(batch_metrics)

            val_metrics: dict[str, float] | None = None
            if eval_data is not None:
                val_metrics = self.validate(eval_data)

            if val_metrics is not None:
                epoch_pbar.set_postfix(self.format_val_metrics(train_metrics, val_metrics))
            else:
                epoch_pbar.set_postfix(self.format_train_metrics(train_metrics))

            if self.cfg.verbose:
                msg = self.format_epoch_message(epoch + 1, num_epochs, train_metrics, val_metrics)
                tqdm.write(msg)

            if self.cfg.logger is not None:
                log_kwargs = self.log_metrics(epoch, train_metrics, val_metrics)
                self.cfg.logger.log_epoch(epoch, **log_kwargs)

            final_metrics = {**train_metrics, **(val_metrics or {})}

        return final_metrics

    def validate(self, eval_data: NDArrayIter) -> dict[str, float]:
        """Run inference over ``eval_data`` and return aggregated metrics."""
        eval_data.reset()
        batch_metrics: list[dict[str, float]] = []
        for batch in eval_data:
            self.forward(batch, is_train=False)
            keep = batch.label.shape[0] - batch.pad
            _, y = self.prepare_batch(batch.data, batch.label)
            y_hat = self._y_hat[:keep]
            loss = self.loss_fn(y_hat, y[:keep]).item()
            batch_metrics.append(self.compute_metrics(y_hat, y[:keep], loss))
        eval_data.reset()
        return self._aggregate_metrics(batch_metrics, prefix="val_")

    def _aggregate_metrics(
        self, batch_metrics: list[dict[str, float]], prefix: str = ""
    ) -> dict[str, float]:
        """Average metrics across batches."""
        if not batch_metrics:
            return {}
        keys = batch_metrics[0].keys()
        return {
            f"{prefix}{k}": sum(m[k] for m in batch_metrics) / len(batch_metrics)
            for k in keys
        }

    def get_params(self) -> dict[str, Tensor]:
        """Copies of the model parameters keyed like ``fc_weight``."""
        return {
            name.replace(".", "_"): param.detach().cpu().clone()
            for name, param in self.model.named_parameters()
        }

    def require_trained(self) -> None:
        """Raise unless parameters exist and at least one update was applied."""
        if not self.params_initialized:
            raise ConfigurationError("Model parameters are missing; train the model before evaluating")
        if self.num_update == 0:
            raise ConfigurationError("Model is untrained; call fit() before evaluating")
