"""Fixed-size batch iterator with an explicit reset/next cursor."""

from dataclasses import dataclass
from typing import Iterator

import numpy as np
import torch
from torch import Tensor
from torch.utils.data import DataLoader, TensorDataset

from ..errors import ConfigurationError

LAST_BATCH_HANDLES = ("pad", "discard")


@dataclass
class DataBatch:
    """One batch of data and labels.

    ``pad`` counts the samples at the end of the batch that were wrapped
    around from the start of the data to fill it up.
    """

    data: Tensor
    label: Tensor
    pad: int = 0


class NDArrayIter:
    """Iterate over in-memory tensors in batches of exactly ``batch_size``.

    Args:
        data: Features of shape ``(num_samples, num_inputs)``.
        label: Targets of shape ``(num_samples, num_outputs)``.
        batch_size: Rows per batch.
        shuffle: Permute the samples on every reset.
        last_batch_handle: ``"pad"`` fills the last batch from the start of
            the data, ``"discard"`` drops an incomplete last batch.
        seed: Seed of the permutation. Every reset replays the same order.

    Example:
        >>> it = NDArrayIter(X, y, batch_size=10)
        >>> batch = it.next()
        >>> it.reset()
    """

    def __init__(
        self,
        data: Tensor,
        label: Tensor,
        batch_size: int,
        shuffle: bool = False,
        last_batch_handle: str = "pad",
        seed: int | None = None,
    ) -> None:
        if batch_size <= 0:
            raise ConfigurationError(f"batch_size must be positive, got {batch_size}")
        if data.shape[0] == 0:
            raise ConfigurationError("data must contain at least one sample")
        if data.shape[0] != label.shape[0]:
            raise ConfigurationError(
                f"data has {data.shape[0]} rows but label has {label.shape[0]}"
            )
        if last_batch_handle not in LAST_BATCH_HANDLES:
            raise ConfigurationError(
                f"last_batch_handle must be one of {LAST_BATCH_HANDLES}, got {last_batch_handle!r}"
            )
        if last_batch_handle == "discard" and data.shape[0] < batch_size:
            raise ConfigurationError(
                f"{data.shape[0]} samples cannot fill a single batch of {batch_size}"
            )
        self.data = data if data.dim() > 1 else data.reshape(-1, 1)
        self.label = label if label.dim() > 1 else label.reshape(-1, 1)
        self.batch_size = batch_size
        self.shuffle = shuffle
        self.last_batch_handle = last_batch_handle
        self.seed = seed
        self._loader_iter: Iterator | None = None
        self._pads: list[int] = []
        self.reset()

    @property
    def num_samples(self) -> int:
        return self.data.shape[0]

    @property
    def provide_data(self) -> tuple[int, ...]:
        """Shape of the data of each batch."""
        return (self.batch_size, *self.data.shape[1:])

    @property
    def provide_label(self) -> tuple[int, ...]:
        """Shape of the label of each batch."""
        return (self.batch_size, *self.label.shape[1:])

    def _order(self) -> np.ndarray:
        idx = np.arange(self.num_samples)
        if self.shuffle:
            rng = np.random.default_rng(self.seed)
            rng.shuffle(idx)
        return idx

    def reset(self) -> None:
        """Rewind the cursor to the first batch."""
        idx = self._order()
        remainder = self.num_samples % self.batch_size
        fill = 0
        if remainder and self.last_batch_handle == "pad":
            fill = self.batch_size - remainder
            idx = np.concatenate([idx, np.resize(idx, fill)])
        elif remainder:
            idx = idx[: self.num_samples - remainder]
        self._pads = [0] * (len(idx) // self.batch_size)
        if fill:
            self._pads[-1] = fill

        order = torch.from_numpy(idx)
        dataset = TensorDataset(self.data[order], self.label[order])
        loader = DataLoader(dataset, batch_size=self.batch_size, shuffle=False)
        self._loader_iter = iter(loader)
        self._cursor = 0

    def next(self) -> DataBatch:
        """Return the next batch, raising ``StopIteration`` when exhausted."""
        X, y = next(self._loader_iter)
        pad = self._pads[self._cursor]
        self._cursor += 1
        return DataBatch(data=X, label=y, pad=pad)

    def __iter__(self) -> "NDArrayIter":
        return self

    def __next__(self) -> DataBatch:
        return self.next()

    def __len__(self) -> int:
        return len(self._pads)
