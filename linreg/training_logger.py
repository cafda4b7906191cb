"""Per-epoch metric history (kept separate from stdlib logging)."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional


class TrainingLogger:
    """Record regression metrics epoch by epoch and append runs to a JSON file.

    Every keyword passed to ``log_epoch`` becomes its own series in
    ``history``; a series only starts once a value for it is logged.

    Args:
        log_path: Path to save the log file (default: None, no file saved)
        hparams: Dictionary of hyperparameters to record
    """

    def __init__(self, log_path: Optional[str | Path] = None, hparams: Optional[Dict[str, Any]] = None):
        self.log_path = Path(log_path) if log_path else None
        self.hparams: Dict[str, Any] = hparams or {}
        self.start_time = datetime.now()
        self.epochs: List[int] = []
        self.history: Dict[str, List[float]] = {}

    def log_epoch(self, epoch: int, **metrics: Optional[float]) -> None:
        """Append the metrics of one epoch, e.g. ``train_loss`` or ``val_mae``."""
        self.epochs.append(epoch)
        for key, value in metrics.items():
            if value is not None:
                self.history.setdefault(key, []).append(float(value))

    @property
    def num_epochs(self) -> int:
        return len(self.epochs)

    def last(self, key: str) -> Optional[float]:
        series = self.history.get(key)
        return series[-1] if series else None

    def best(self, key: str) -> Optional[float]:
        """Lowest value of an error series."""
        series = self.history.get(key)
        return min(series) if series else None

    def save(self, path: Optional[str | Path] = None) -> Path:
        """Append this run to a JSON file holding a list of runs.

        Args:
            path: Path to save (uses log_path from init if not provided)

        Returns:
            The path written to.
        """
        save_path = Path(path) if path else self.log_path
        if save_path is None:
            raise ValueError('No log path specified')
        save_path.parent.mkdir(parents=True, exist_ok=True)

        runs: List[Dict[str, Any]] = []
        if save_path.exists():
            with open(save_path, 'r') as f:
                existing = json.load(f)
                runs = existing if isinstance(existing, list) else [existing]

        runs.append({
            'timestamp': self.start_time.isoformat(),
            'duration_seconds': (datetime.now() - self.start_time).total_seconds(),
            'hparams': self.hparams,
            'epochs': self.epochs,
            'history': self.history,
        })

        with open(save_path, 'w') as f:
            json.dump(runs, f, indent=2)
        print(f'Log saved to {save_path} (run {len(runs)})')
        return save_path

    def summary(self) -> None:
        """Print the final value of every series and the best validation loss."""
        print(f'\n{"="*50}')
        print('Training Summary')
        print(f'{"="*50}')
        print(f'Duration: {datetime.now() - self.start_time}')
        if self.hparams:
            print(f'Hyperparameters: {self.hparams}')
        print(f'Epochs: {self.num_epochs}')
        for key in self.history:
            print(f'Final {key.replace("_", " ")}: {self.last(key):.4f}')
        if 'val_loss' in self.history:
            print(f'Best val loss: {self.best("val_loss"):.4f}')
        print(f'{"="*50}\n')
