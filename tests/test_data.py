import pytest
import torch

from linreg.data import TRUE_BIAS, TRUE_WEIGHTS, generate_batch, generate_data, linear_fn
from linreg.errors import ConfigurationError


def test_labels_follow_linear_law(generator):
    data, label = generate_batch(100, generator=generator)
    expected = 2.0 * data[:, 0] + data[:, 1]
    assert torch.allclose(label.reshape(-1), expected, atol=1e-6)


def test_batch_shapes_and_range(generator):
    data, label = generate_batch(100, generator=generator)
    assert data.shape == (100, 2)
    assert label.shape == (100, 1)
    assert data.dtype == torch.float32
    assert data.min() >= -3.0
    assert data.max() <= 3.0


def test_custom_range(generator):
    data, _ = generate_batch(50, low=1.0, high=2.0, generator=generator)
    assert data.min() >= 1.0
    assert data.max() <= 2.0


def test_same_seed_same_batch():
    a = generate_batch(8, generator=torch.Generator().manual_seed(3))
    b = generate_batch(8, generator=torch.Generator().manual_seed(3))
    assert torch.equal(a[0], b[0])
    assert torch.equal(a[1], b[1])


@pytest.mark.parametrize("batch_size", [0, -5])
def test_non_positive_batch_size_rejected(batch_size):
    with pytest.raises(ConfigurationError):
        generate_batch(batch_size)


def test_empty_range_rejected():
    with pytest.raises(ConfigurationError):
        generate_batch(10, low=3.0, high=-3.0)


def test_linear_fn_matches_ground_truth():
    assert linear_fn(1.5, -2.0) == pytest.approx(TRUE_WEIGHTS[0] * 1.5 + TRUE_WEIGHTS[1] * -2.0 + TRUE_BIAS)
    assert linear_fn(torch.ones(3), torch.ones(3)).tolist() == [3.0, 3.0, 3.0]


def test_generate_data_wraps_one_batch(generator):
    it = generate_data(20, generator=generator)
    assert it.provide_data == (20, 2)
    assert it.provide_label == (20, 1)
    batch = it.next()
    assert torch.allclose(batch.label.reshape(-1), 2.0 * batch.data[:, 0] + batch.data[:, 1], atol=1e-6)
    with pytest.raises(StopIteration):
        it.next()
