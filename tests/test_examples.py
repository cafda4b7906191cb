import json

import pytest

from linreg import cli, examples
from linreg.evaluation import read_parameters


def test_example_1_output(config, capsys):
    trainer = examples.example_1(config)
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("Test score: mse -> ")
    assert float(lines[0].split("->")[1]) < 1.0
    assert lines[1] == "Sample results:"
    assert sum(line.startswith("Data:") for line in lines) == 4
    assert lines[-2].startswith("Actual weights: [2.0, 1.0] Model weights:")
    assert lines[-1].startswith("Actual bias: 0.0 Model bias:")
    assert read_parameters(trainer)[0] == pytest.approx(2.0, abs=0.5)


def test_example_2_predict_matches_forward(config, capsys):
    examples.example_2(config)
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "Compare results:"
    rows = [line for line in lines if line.startswith("Predict label:")]
    assert len(rows) == 5
    for row in rows:
        tokens = row.split()
        assert float(tokens[2]) == pytest.approx(float(tokens[5]))


def test_example_3_models_agree(config, capsys):
    high, low = examples.example_3(config)
    lines = capsys.readouterr().out.splitlines()
    rows = [line for line in lines if line.startswith("fit label:")]
    assert len(rows) == 5
    for a, b in zip(read_parameters(high), read_parameters(low)):
        assert a == pytest.approx(b, abs=0.1)


def test_tensor_and_graph_examples():
    assert examples.tensor_example() == [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]
    assert examples.graph_example() == [3.0, 3.0, 3.0]


def test_module_example_reports(config, capsys):
    trainer = examples.module_example(config)
    examples.print_model_weights(trainer)
    examples.predict_example(trainer, examples.make_generator(0))
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("Actual weights: [2.0, 1.0]")
    assert sum(line.startswith("Actual:") for line in lines) == examples.TEST_BATCH_SIZE


def test_cli_tensor(capsys):
    cli.main(["tensor"])
    assert capsys.readouterr().out.strip() == "[1.0, 2.0, 3.0, 4.0, 5.0, 6.0]"


def test_cli_example_with_log(tmp_path, capsys):
    path = tmp_path / "history.json"
    cli.main(["example-1", "--seed", "0", "--epochs", "10", "--quiet", "--log-path", str(path)])
    out = capsys.readouterr().out
    assert "Test score: mse ->" in out
    runs = json.loads(path.read_text())
    assert len(runs[0]["history"]["train_loss"]) == 10
    assert runs[0]["hparams"]["num_epochs"] == 10


def test_cli_rejects_unknown_command():
    with pytest.raises(SystemExit):
        cli.main(["example-9"])


def test_cli_device_and_grad_clip(capsys):
    cli.main(["example-2", "--seed", "1", "--epochs", "3", "--quiet", "--device", "cpu", "--grad-clip", "1.0"])
    assert "Compare results:" in capsys.readouterr().out
