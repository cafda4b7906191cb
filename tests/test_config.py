import json

import pytest

from linreg.errors import ConfigurationError
from linreg.training import TrainingConfig, resolve_training_config
from linreg.training_logger import TrainingLogger


def test_defaults():
    cfg = resolve_training_config(None)
    assert (cfg.num_epochs, cfg.lr, cfg.momentum, cfg.batch_size) == (20, 0.1, 0.9, 100)


def test_overrides_take_precedence():
    base = TrainingConfig(num_epochs=5, lr=0.01)
    cfg = resolve_training_config(base, num_epochs=7, lr=None, seed=3)
    assert cfg.num_epochs == 7
    assert cfg.lr == 0.01
    assert cfg.seed == 3
    assert base.num_epochs == 5


@pytest.mark.parametrize(
    "config, overrides",
    [
        (TrainingConfig(num_epochs=None), {}),
        (TrainingConfig(lr=None), {}),
        (TrainingConfig(), {"num_epochs": -1}),
        (TrainingConfig(), {"momentum": 1.0}),
        (TrainingConfig(), {"no_such_option": 1}),
    ],
)
def test_invalid_config(config, overrides):
    with pytest.raises(ConfigurationError):
        resolve_training_config(config, **overrides)


def test_logger_records_custom_metrics():
    logger = TrainingLogger()
    logger.log_epoch(0, train_loss=2.0, val_loss=3.0, val_mae=1.5)
    logger.log_epoch(1, train_loss=1.0)
    assert logger.history["train_loss"] == [2.0, 1.0]
    assert logger.history["val_loss"] == [3.0]
    assert logger.history["val_mae"] == [1.5]
    assert logger.num_epochs == 2


def test_logger_save_appends_runs(tmp_path, capsys):
    path = tmp_path / "logs" / "run.json"
    for loss in (1.0, 0.5):
        logger = TrainingLogger(path, hparams={"lr": 0.1})
        logger.log_epoch(0, train_loss=loss)
        assert logger.save() == path

    runs = json.loads(path.read_text())
    assert [r["history"]["train_loss"] for r in runs] == [[1.0], [0.5]]
    assert runs[0]["hparams"] == {"lr": 0.1}
    assert "(run 2)" in capsys.readouterr().out


def test_logger_save_without_path():
    with pytest.raises(ValueError):
        TrainingLogger().save()


def test_logger_summary(capsys):
    logger = TrainingLogger(hparams={"lr": 0.1})
    logger.log_epoch(0, train_loss=0.25)
    logger.summary()
    out = capsys.readouterr().out
    assert "Final train loss: 0.2500" in out
    assert "Epochs: 1" in out


def test_grad_clip_must_be_positive():
    with pytest.raises(ConfigurationError):
        resolve_training_config(None, grad_clip=0.0)


def test_logger_last_and_best():
    logger = TrainingLogger()
    for loss in (3.0, 1.0, 2.0):
        logger.log_epoch(logger.num_epochs, val_loss=loss)
    assert logger.last("val_loss") == 2.0
    assert logger.best("val_loss") == 1.0
    assert logger.last("train_loss") is None
    assert logger.epochs == [0, 1, 2]
