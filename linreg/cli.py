"""Command line entry points for the linear regression walkthroughs.

Run:
    linreg example-1 --seed 0 --epochs 20
    run-example-1
"""
import argparse
from typing import Callable, Sequence

import torch

from . import examples
from .training import TrainingConfig, get_device
from .training_logger import TrainingLogger


def _run_module_example(cfg: TrainingConfig) -> None:
    trainer = examples.module_example(cfg)
    examples.print_model_weights(trainer)
    examples.predict_example(trainer, examples.make_generator(cfg.seed))


# name -> (runner, description)
COMMANDS: dict[str, tuple[Callable[[TrainingConfig], object], str]] = {
    "example-1": (examples.example_1, "fit, score and predict on fresh data"),
    "example-2": (examples.example_2, "predict versus a manual forward pass"),
    "example-3": (examples.example_3, "fit versus the manual training loop"),
    "module": (_run_module_example, "fit on row-major generated data and report"),
    "tensor": (lambda cfg: print(examples.tensor_example()), "tensor arithmetic"),
    "graph": (lambda cfg: print(examples.graph_example()), "evaluate 2*x + y on ones"),
}


def build_parser() -> argparse.ArgumentParser:
    defaults = TrainingConfig()
    epilog = "\n".join(f"  {name:<10} {desc}" for name, (_, desc) in COMMANDS.items())
    parser = argparse.ArgumentParser(
        description="Linear regression walkthroughs",
        epilog=f"commands:\n{epilog}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("command", choices=sorted(COMMANDS), help="Walkthrough to run.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for data and initialization.")
    parser.add_argument("--epochs", type=int, default=defaults.num_epochs, help="Number of epochs.")
    parser.add_argument("--lr", type=float, default=defaults.lr, help="Adam learning rate.")
    parser.add_argument("--momentum", type=float, default=defaults.momentum, help="Adam beta1.")
    parser.add_argument("--batch-size", type=int, default=defaults.batch_size, help="Training batch size.")
    parser.add_argument("--log-path", type=str, default=None, help="Append the epoch history to this JSON file.")
    parser.add_argument("--grad-clip", type=float, default=None, help="Clip the gradient norm to this value.")
    parser.add_argument("--device", type=str, default="cpu", help="Torch device, or \"auto\" for the best available one.")
    parser.add_argument("--quiet", action="store_true", help="Hide progress bars and epoch lines.")
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    logger = None
    if args.log_path:
        hparams = {"lr": args.lr, "momentum": args.momentum,
                   "num_epochs": args.epochs, "batch_size": args.batch_size}
        logger = TrainingLogger(args.log_path, hparams=hparams)
    cfg = TrainingConfig(
        num_epochs=args.epochs,
        lr=args.lr,
        momentum=args.momentum,
        batch_size=args.batch_size,
        seed=args.seed,
        verbose=not args.quiet,
        logger=logger,
        device=get_device() if args.device == "auto" else torch.device(args.device),
        grad_clip=args.grad_clip,
    )
    runner, _ = COMMANDS[args.command]
    runner(cfg)
    if logger is not None and logger.num_epochs:
        logger.save()


def run_example_1() -> None:
    examples.example_1()


def run_example_2() -> None:
    examples.example_2()


def run_example_3() -> None:
    examples.example_3()


if __name__ == "__main__":
    main()
