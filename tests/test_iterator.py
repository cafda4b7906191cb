import pytest
import torch

from linreg.data import NDArrayIter
from linreg.errors import ConfigurationError


def _arange_iter(n, batch_size, **kwargs):
    data = torch.arange(n * 2, dtype=torch.float32).reshape(n, 2)
    label = torch.arange(n, dtype=torch.float32).reshape(n, 1)
    return NDArrayIter(data, label, batch_size=batch_size, **kwargs)


def test_batches_in_order():
    it = _arange_iter(8, 4)
    first, second = list(it)
    assert first.label.reshape(-1).tolist() == [0, 1, 2, 3]
    assert second.label.reshape(-1).tolist() == [4, 5, 6, 7]
    assert first.pad == second.pad == 0


def test_exhausted_until_reset():
    it = _arange_iter(4, 2)
    assert len(list(it)) == 2
    assert list(it) == []
    it.reset()
    assert len(list(it)) == 2


def test_reset_replays_shuffled_sequence():
    it = _arange_iter(12, 4, shuffle=True, seed=7)
    first = [b.label.reshape(-1).tolist() for b in it]
    it.reset()
    second = [b.label.reshape(-1).tolist() for b in it]
    assert first == second
    assert sorted(sum(first, [])) == list(range(12))


def test_pad_wraps_from_start():
    it = _arange_iter(10, 4)
    batches = list(it)
    assert len(batches) == 3
    assert batches[-1].pad == 2
    assert batches[-1].label.reshape(-1).tolist() == [8, 9, 0, 1]


def test_discard_drops_tail():
    it = _arange_iter(10, 4, last_batch_handle="discard")
    batches = list(it)
    assert len(batches) == 2
    assert all(b.data.shape == (4, 2) for b in batches)


def test_provide_shapes():
    it = _arange_iter(10, 5)
    assert it.provide_data == (5, 2)
    assert it.provide_label == (5, 1)


def test_one_dimensional_label_is_reshaped():
    it = NDArrayIter(torch.zeros(6, 2), torch.zeros(6), batch_size=3)
    assert it.provide_label == (3, 1)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"batch_size": 0},
        {"batch_size": 2, "last_batch_handle": "roll_over"},
        {"batch_size": 20, "last_batch_handle": "discard"},
    ],
)
def test_invalid_configuration(kwargs):
    with pytest.raises(ConfigurationError):
        NDArrayIter(torch.zeros(6, 2), torch.zeros(6, 1), **kwargs)


def test_row_count_mismatch():
    with pytest.raises(ConfigurationError):
        NDArrayIter(torch.zeros(6, 2), torch.zeros(5, 1), batch_size=2)


@pytest.mark.parametrize("last_batch_handle", ["pad", "discard"])
def test_empty_data_rejected(last_batch_handle):
    with pytest.raises(ConfigurationError):
        NDArrayIter(torch.zeros(0, 2), torch.zeros(0, 1), batch_size=4, last_batch_handle=last_batch_handle)
