import numpy as np
from typing_extensions import Self, override

from .optimizer import GradientOptimizer


class AdamOptimizer(GradientOptimizer):
    """
    Inherits from `GradientOptimizer`. Gradient descent scaled by bias corrected running
    estimates of the first and second moments of the gradient.
    """

    _options = {
        "lr": "lr",
        "stepsize": "lr",
        "beta1": "beta_1",
        "beta2": "beta_2",
        "grad-tol": "grad_conv_threshold",
        "maxeval": "max_iter",
    }

    def __init__(
        self: Self,
        lr: float = 0.01,
        beta_1: float = 0.9,
        beta_2: float = 0.999,
        grad_conv_threshold: float = 0.01,
        max_iter: int = 1000,
    ) -> None:
        """
        Constructs an instance of AdamOptimizer. Option keys for `create_optimizer` are listed in `_options`.

        Args:
            self (Self): A reference to the current class instance.
            lr (float, optional): Length scale of each step. Defaults to 0.01.
            beta_1 (float, optional): Decay of the first moment estimate. Defaults to 0.9.
            beta_2 (float, optional): Decay of the second moment estimate. Defaults to 0.999.
            grad_conv_threshold (float, optional): Converged once every gradient component is smaller in magnitude. Defaults to 0.01.
            max_iter (int, optional): The number of steps after which the optimizer reports convergence. Defaults to 1000.
        """

        self.lr = lr
        self.beta_1 = beta_1
        self.beta_2 = beta_2
        self.grad_conv_threshold = grad_conv_threshold
        self.max_iter = max_iter

        self.reset()

    @staticmethod
    @override
    def _name() -> str:
        """
        Returns the name of this class. Used in `Serializable`.
        """

        return "adam_optimizer"

    @property
    @override
    def _config_params(self: Self) -> list[str]:
        """
        Returns the config attributes of this class. Used in `Serializable`.
        """

        return ["lr", "beta_1", "beta_2", "grad_conv_threshold", "max_iter"]

    @override
    def reset(self: Self) -> None:
        """
        Resets the optimizer state by zeroing out momentum, variance, and timestamp.

        Args:
            self (Self): A reference to the current class instance.
        """

        self.m: np.ndarray | None = None
        self.v: np.ndarray | None = None
        self.t = 0

    @override
    def update(self: Self, param_vals: np.ndarray, grad: np.ndarray) -> np.ndarray:
        """
        Steps against the moment estimates. The estimates start at zero, dividing by
        1 - beta**t removes that bias.

        Args:
            self (Self): A reference to the current class instance.
            param_vals (np.ndarray): The current parameter values.
            grad (np.ndarray): The energy gradient at `param_vals`.

        Returns:
            np.ndarray: The new parameter values.
        """

        if self.m is None or self.m.shape != grad.shape:
            self.m = np.zeros_like(grad, dtype=float)
        if self.v is None or self.v.shape != grad.shape:
            self.v = np.zeros_like(grad, dtype=float)

        self.t += 1
        self.m = self.beta_1 * self.m + (1 - self.beta_1) * grad
        self.v = self.beta_2 * self.v + (1 - self.beta_2) * (grad**2)

        m_cor = self.m / (1 - self.beta_1**self.t)
        v_cor = self.v / (1 - self.beta_2**self.t)

        return param_vals - self.lr * m_cor / (np.sqrt(v_cor) + 1e-8)

    @override
    def is_converged(self: Self, grad: np.ndarray) -> bool:
        if self.t >= self.max_iter:
            return True

        return len(grad) == 0 or np.max(np.abs(grad)) < self.grad_conv_threshold
