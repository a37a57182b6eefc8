import numpy as np
from typing_extensions import Self, override

from .optimizer import GradientOptimizer


class SGDOptimizer(GradientOptimizer):
    """
    Inherits from `GradientOptimizer`. Plain gradient descent with a fixed learning rate.
    """

    _options = {
        "lr": "lr",
        "stepsize": "lr",
        "grad-tol": "grad_conv_threshold",
        "maxeval": "max_iter",
    }

    def __init__(
        self: Self,
        lr: float = 0.01,
        grad_conv_threshold: float = 0.01,
        max_iter: int = 1000,
    ) -> None:
        """
        Constructs an instance of SGDOptimizer.

        Args:
            self (Self): A reference to the current class instance.
            lr (float, optional): Multiplies the gradient in each step. Defaults to 0.01.
            grad_conv_threshold (float, optional): Converged once every gradient component is smaller in magnitude. Defaults to 0.01.
            max_iter (int, optional): The number of steps after which the optimizer reports convergence. Defaults to 1000.
        """

        self.lr = lr
        self.grad_conv_threshold = grad_conv_threshold
        self.max_iter = max_iter

        self.reset()

    @staticmethod
    @override
    def _name() -> str:
        """
        Returns the name of this class. Used in `Serializable`.
        """

        return "sgd_optimizer"

    @property
    @override
    def _config_params(self: Self) -> list[str]:
        """
        Returns the config attributes of this class. Used in `Serializable`.
        """

        return ["lr", "grad_conv_threshold", "max_iter"]

    @override
    def reset(self: Self) -> None:
        self.t = 0

    @override
    def update(self: Self, param_vals: np.ndarray, grad: np.ndarray) -> np.ndarray:
        """
        Moves in the opposite direction of the gradient with a step size of the learning rate.

        Args:
            self (Self): A reference to the current class instance.
            param_vals (np.ndarray): Where the step starts.
            grad (np.ndarray): The energy gradient at `param_vals`.

        Returns:
            np.ndarray: The new parameter values.
        """

        self.t += 1

        return param_vals - self.lr * grad

    @override
    def is_converged(self: Self, grad: np.ndarray) -> bool:
        if self.t >= self.max_iter:
            return True

        return len(grad) == 0 or np.max(np.abs(grad)) < self.grad_conv_threshold
