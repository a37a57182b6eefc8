import numpy as np
from scipy.optimize import minimize
from typing_extensions import Any, Callable, Self, override

from .optimizer import FunctionalOptimizer

# algorithm -> (scipy method, needs gradient, option limiting the number of evaluations)
ALGORITHMS: dict[str, tuple[str, bool, str]] = {
    "cobyla": ("COBYLA", False, "maxiter"),
    "nelder-mead": ("Nelder-Mead", False, "maxfev"),
    "powell": ("Powell", False, "maxfev"),
    "l-bfgs": ("L-BFGS-B", True, "maxfun"),
    "bfgs": ("BFGS", True, "maxiter"),
    "slsqp": ("SLSQP", True, "maxiter"),
    "trust-constr": ("trust-constr", True, "maxiter"),
}


class ScipyOptimizer(FunctionalOptimizer):
    """
    Inherits from `FunctionalOptimizer`. Runs one of the `scipy.optimize.minimize` methods listed in `ALGORITHMS`.
    """

    _options = {
        "optimizer": "algorithm",
        "maxeval": "max_evals",
        "ftol": "tol",
        "tol": "tol",
    }

    def __init__(
        self: Self,
        algorithm: str = "cobyla",
        max_evals: int | None = None,
        tol: float | None = None,
    ) -> None:
        """
        Constructs an instance of ScipyOptimizer.

        Args:
            self (Self): A reference to the current class instance.
            algorithm (str, optional): One of the keys of `ALGORITHMS`. Defaults to "cobyla".
            max_evals (int | None, optional): Limit on evaluations, mapped to the algorithm's own option. Defaults to None.
            tol (float | None, optional): Tolerance for termination passed to scipy. Defaults to None.

        Raises:
            ValueError: If the algorithm is unknown or max_evals is not positive.
        """

        algorithm = algorithm.lower()
        if algorithm not in ALGORITHMS:
            raise ValueError(
                f"Unknown scipy algorithm '{algorithm}'. Available: {list(ALGORITHMS)}"
            )
        if max_evals is not None and max_evals <= 0:
            raise ValueError(f"max_evals must be positive, got {max_evals}.")

        self.algorithm = algorithm
        self.max_evals = max_evals
        self.tol = tol

    @staticmethod
    @override
    def _name() -> str:
        """
        Returns the name of this class. Used in `Serializable`.
        """

        return "scipy_optimizer"

    @property
    @override
    def _config_params(self: Self) -> list[str]:
        """
        Returns the config attributes of this class. Used in `Serializable`.
        """

        return ["algorithm", "max_evals", "tol"]

    @property
    @override
    def requires_gradient(self: Self) -> bool:
        return ALGORITHMS[self.algorithm][1]

    @override
    def update(
        self: Self,
        param_vals: np.ndarray,
        f: Callable[[np.ndarray], float],
        grad_f: Callable[[np.ndarray], np.ndarray] | None,
        callback: Callable[..., Any],
    ) -> np.ndarray:
        """
        Optimizes the given function with scipy, passing the gradient function only to methods that use it.

        Args:
            self (Self): A reference to the current class instance.
            param_vals (np.ndarray): The starting parameter values.
            f (Callable[[np.ndarray], float]): A function f that maps from parameter values to function value.
            grad_f (Callable[[np.ndarray], np.ndarray] | None): A function grad_f that calculates the gradient of f at parameter values, None for optimizers that do not require gradients.
            callback (Callable[..., Any]): A callback that takes the parameter values at each step.

        Returns:
            np.ndarray: The optimal parameter values.
        """

        method, needs_gradient, limit_option = ALGORITHMS[self.algorithm]

        options = {}
        if self.max_evals is not None:
            options[limit_option] = self.max_evals

        result = minimize(
            f,
            np.asarray(param_vals, dtype=float),
            jac=grad_f if needs_gradient else None,
            method=method,
            tol=self.tol,
            callback=callback,
            options=options,
        )

        return np.atleast_1d(np.asarray(result.x, dtype=float))
