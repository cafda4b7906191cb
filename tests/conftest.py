import pytest
import torch

from linreg.data import NDArrayIter, generate_batch
from linreg.training import TrainingConfig


@pytest.fixture
def config():
    return TrainingConfig(num_epochs=20, lr=0.1, momentum=0.9, batch_size=100, seed=0, verbose=False)


@pytest.fixture
def generator():
    return torch.Generator().manual_seed(1234)


@pytest.fixture
def train_iter(generator):
    data, label = generate_batch(100, generator=generator)
    return NDArrayIter(data, label, batch_size=100)


@pytest.fixture
def test_batch():
    return generate_batch(10, generator=torch.Generator().manual_seed(99))
