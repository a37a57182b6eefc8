from abc import ABC, abstractmethod

import numpy as np
from typing_extensions import Any, Callable, Self, override

from ..utils.serializable import Serializable


class Optimizer(Serializable, ABC):
    """
    Inherits from `Serializable` and `abc.ABC`. A base class that each other optimizer should inherit from.
    Subclasses should define the methods `update(...)` and, for in place optimizers, `is_converged(...)`.

    `_options` maps the string option keys accepted by `create_optimizer` (without the optimizer name prefix)
    to constructor arguments, e.g. "maxeval" -> "max_evals".
    """

    _options: dict[str, str] = {}

    @staticmethod
    @override
    def _type() -> str:
        """
        Returns the type of this class. Used in `Serializable`.
        """

        return "optimizer"

    @property
    def requires_gradient(self: Self) -> bool:
        """
        Whether the optimizer uses gradients. `VQE` only measures gradients for optimizers that do.
        """

        return True

    def reset(self: Self) -> None:
        """
        Resets the state of the optimizer. Optimizers are reused between runs, possibly with
        different numbers of parameters, so all mutable state used between calls to `update(...)`
        is reset here. Subclasses should override this method if they require any mutable state.

        Args:
            self (Self): A reference to the current class instance.
        """

        pass


class GradientOptimizer(Optimizer):
    """
    Inherits from `Optimizer`. Base class for all optimizers stepping in place with gradients through calls to `update()`
    until `is_converged()`.
    """

    @abstractmethod
    def update(self: Self, param_vals: np.ndarray, grad: np.ndarray) -> np.ndarray:
        """
        Performs a single step of optimization, returning the new param_vals,
        does not update param_vals in place.

        Args:
            self (Self): A reference to the current class instance.
            param_vals (np.ndarray): A 1d array with the current parameter values, the same shape as gradient.
            grad (np.ndarray): A 1d array with gradients with respect to each parameter value.

        Returns:
            np.ndarray: The new parameter values, the same shape as the initial parameter values.
        """

        pass

    @abstractmethod
    def is_converged(self: Self, grad: np.ndarray) -> bool:
        """
        Checks whether the convergence criteria of the optimizer is met.

        Args:
            self (Self): A reference to the current class instance.
            grad (np.ndarray): A 1d array with the gradients with respect to each parameter value.

        Returns:
            bool: Whether the optimizer has converged.
        """

        pass


class FunctionalOptimizer(Optimizer):
    """
    Inherits from `Optimizer`. An optimizer that wraps a functional interface, like `scipy.optimize.minimize`,
    which runs the whole optimization in one call.
    """

    @abstractmethod
    def update(
        self: Self,
        param_vals: np.ndarray,
        f: Callable[[np.ndarray], float],
        grad_f: Callable[[np.ndarray], np.ndarray] | None,
        callback: Callable[..., Any],
    ) -> np.ndarray:
        """
        Performs the entire optimization process while calling callback each step of that process.

        Args:
            param_vals (np.ndarray): The starting parameter values.
            f (Callable[[np.ndarray], float]): A function f that maps from parameter values to function value.
            grad_f (Callable[[np.ndarray], np.ndarray] | None): A function grad_f that calculates the gradient of f at parameter values, None for optimizers that do not require gradients.
            callback (Callable[..., Any]): A callback that takes the parameter values at each step.

        Returns:
            np.ndarray: The optimal parameter values found.
        """

        pass
