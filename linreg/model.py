"""Linear regression network: one affine layer and a squared-error output."""

import torch
from torch import nn, Tensor


class LinearRegressionNet(nn.Module):
    """
    A linear regression model ``z = w . x + b``.

    Parameters
    ----------
    num_inputs: int
        Number of input features.
    num_outputs: int
        Number of regression targets.
    sigma: float, optional
        Standard deviation for initializing weights. Default is 0.01.
    """
    def __init__(self, num_inputs=2, num_outputs=1, sigma=0.01):
        super().__init__()
        self.num_inputs = num_inputs
        self.num_outputs = num_outputs
        self.sigma = sigma
        self.fc = nn.Linear(num_inputs, num_outputs)
        self.loss_fn = nn.MSELoss()
        self.reset_parameters()

    def reset_parameters(self, generator: torch.Generator | None = None) -> None:
        """Draw weights from ``N(0, sigma)`` and zero the bias."""
        with torch.no_grad():
            w = torch.normal(0.0, self.sigma, self.fc.weight.shape, generator=generator)
            self.fc.weight.copy_(w)
            self.fc.bias.zero_()

    def forward(self, X: Tensor) -> Tensor:
        return self.fc(X)

    def loss(self, y_hat: Tensor, y: Tensor) -> Tensor:
        """
        Compute mean squared error loss.

        Parameters
        ----------
        y_hat: torch.Tensor
            Predicted targets of shape (batch_size, num_outputs).
        y: torch.Tensor
            True targets of shape (batch_size, num_outputs).
        """
        return self.loss_fn(y_hat, y.reshape(y_hat.shape))

    def output(self, X: Tensor, y: Tensor) -> tuple[Tensor, Tensor]:
        """Return ``(prediction, loss)`` for a batch."""
        y_hat = self(X)
        return y_hat, self.loss(y_hat, y)
