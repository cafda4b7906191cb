"""Linear regression walkthroughs.

Generate data and labels with the form ``z = a * x + b * y + c`` where
``a = 2.0``, ``b = 1.0`` and ``c = 0.0`` (no bias), then learn ``a``, ``b``
and ``c`` back with a single fully connected layer and an L2 output.
"""

import torch
from torch import Tensor

from .data import (
    NUM_INPUTS,
    NUM_OUTPUTS,
    TRUE_BIAS,
    TRUE_WEIGHTS,
    NDArrayIter,
    generate_batch,
    generate_data,
    linear_fn,
)
from .evaluation import predict, read_parameters, score
from .model import LinearRegressionNet
from .training import RegressionTrainer, TrainingConfig

TEST_BATCH_SIZE = 10
COMPARE_BATCH_SIZE = 5


def make_generator(seed: int | None) -> torch.Generator | None:
    """Seeded generator for data draws, or None to use torch's global RNG."""
    if seed is None:
        return None
    return torch.Generator().manual_seed(seed)


def init_module(config: TrainingConfig | None = None) -> RegressionTrainer:
    """Build a trainer bound to ``(batch_size, 2) -> (batch_size, 1)`` with Adam ready."""
    cfg = config or TrainingConfig()
    trainer = RegressionTrainer(LinearRegressionNet(NUM_INPUTS, NUM_OUTPUTS), cfg)
    trainer.bind(
        data_shape=(cfg.batch_size, NUM_INPUTS),
        label_shape=(cfg.batch_size, NUM_OUTPUTS),
    )
    trainer.init_params(cfg.seed)
    trainer.init_optimizer()
    return trainer


def _rows(t: Tensor) -> list:
    return t.cpu().tolist()


def example_1(config: TrainingConfig | None = None) -> RegressionTrainer:
    """High-level ``fit``, then ``score`` and ``predict`` on fresh data."""
    cfg = config or TrainingConfig()
    gen = make_generator(cfg.seed)
    trainer = init_module(cfg)

    train_data, train_label = generate_batch(cfg.batch_size, generator=gen)
    train_iter = NDArrayIter(train_data, train_label, batch_size=cfg.batch_size)
    trainer.fit(train_iter)

    # A smaller batch of test data to evaluate the fitted model
    test_data, test_label = generate_batch(TEST_BATCH_SIZE, generator=gen)
    test_iter = NDArrayIter(test_data, test_label, batch_size=TEST_BATCH_SIZE)
    metric, value = score(trainer, test_iter, metric="mse")
    results = predict(trainer, test_iter)

    a, b, c = read_parameters(trainer)
    print(f"Test score: {metric} -> {value}")
    print("Sample results:")
    samples = zip(_rows(test_data), _rows(test_label.reshape(-1)), _rows(results.reshape(-1)))
    for data, label, prediction in list(samples)[:4]:
        print("Data:", data, "Label:", label, "Prediction:", prediction)
    print("Actual weights:", list(TRUE_WEIGHTS), "Model weights:", [a, b])
    print("Actual bias:", TRUE_BIAS, "Model bias:", c)
    return trainer


def example_2(config: TrainingConfig | None = None) -> RegressionTrainer:
    """``predict`` versus a manual ``forward`` on the same test batch."""
    cfg = config or TrainingConfig()
    gen = make_generator(cfg.seed)
    trainer = init_module(cfg)

    train_data, train_label = generate_batch(cfg.batch_size, generator=gen)
    train_iter = NDArrayIter(train_data, train_label, batch_size=cfg.batch_size)
    trainer.fit(train_iter)

    test_data, test_label = generate_batch(COMPARE_BATCH_SIZE, generator=gen)
    test_iter = NDArrayIter(test_data, test_label, batch_size=COMPARE_BATCH_SIZE)
    output_labels = _rows(predict(trainer, test_iter).reshape(-1))

    # Same predictions through the per-batch API; the iterator must be rewound first
    test_iter.reset()
    trainer.forward(test_iter.next(), is_train=False)
    forward_labels = _rows(trainer.outputs()[0].reshape(-1))

    print("Compare results:")
    for x, y in zip(output_labels, forward_labels):
        print("Predict label:", x, "Forward label:", y)
    return trainer


def example_3(config: TrainingConfig | None = None) -> tuple[RegressionTrainer, RegressionTrainer]:
    """Train one model with ``fit`` and another with ``fit_manual``."""
    cfg = config or TrainingConfig()
    gen = make_generator(cfg.seed)
    trainer = init_module(cfg)
    trainer1 = init_module(cfg)

    train_data, train_label = generate_batch(cfg.batch_size, generator=gen)
    train_iter = NDArrayIter(train_data, train_label, batch_size=cfg.batch_size)
    trainer.fit(train_iter)
    trainer1.fit_manual(train_iter)

    test_data, test_label = generate_batch(COMPARE_BATCH_SIZE, generator=gen)
    test_iter = NDArrayIter(test_data, test_label, batch_size=COMPARE_BATCH_SIZE)
    output_labels = _rows(predict(trainer, test_iter).reshape(-1))
    output_labels1 = _rows(predict(trainer1, test_iter).reshape(-1))

    # Similar up to differences in initialization
    print("Compare results:")
    for x, y in zip(output_labels, output_labels1):
        print("fit label:", x, "fit_manual label:", y)
    return trainer, trainer1


def tensor_example() -> list[float]:
    """Add a tensor built from flat data and a shape to a tensor of ones."""
    data = [0, 1, 2, 3, 4, 5]
    shape = (1, 6)
    array_0 = torch.tensor(data, dtype=torch.float32).reshape(shape)
    array_1 = torch.ones(shape)
    return (array_0 + array_1).reshape(-1).tolist()


def graph_example() -> list[float]:
    """Evaluate the law ``2*x + y`` on ones."""
    x = torch.ones(3)
    y = torch.ones(3)
    return linear_fn(x, y).tolist()


def module_example(config: TrainingConfig | None = None) -> RegressionTrainer:
    """Fit on data produced by ``generate_data`` and return the trainer."""
    cfg = config or TrainingConfig()
    train_iter = generate_data(cfg.batch_size, generator=make_generator(cfg.seed))
    trainer = init_module(cfg)
    trainer.fit(train_iter)
    return trainer


def print_model_weights(trainer: RegressionTrainer) -> None:
    params = trainer.get_params()
    weights = params["fc_weight"].reshape(-1).tolist()
    bias = params["fc_bias"].reshape(-1).tolist()[0]
    print("Actual weights:", list(TRUE_WEIGHTS), "Model weights:", weights)
    print("Actual bias:", TRUE_BIAS, "Model bias:", bias)


def predict_example(trainer: RegressionTrainer, generator: torch.Generator | None = None) -> None:
    test_iter = generate_data(TEST_BATCH_SIZE, generator=generator)
    output_labels = _rows(predict(trainer, test_iter).reshape(-1))
    test_label = _rows(test_iter.label.reshape(-1))
    for model_output, expected_output in zip(output_labels, test_label):
        print("Actual:", model_output, "Expected:", expected_output)
