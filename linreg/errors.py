"""Error types raised by the linreg harness."""


class ConfigurationError(ValueError):
    """Raised when shapes, batch sizes or training state are misconfigured.

    Configuration errors are not recoverable: the run stops as soon as one is
    raised, before any further training step executes.
    """
