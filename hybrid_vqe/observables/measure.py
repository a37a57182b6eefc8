from enum import Enum

import numpy as np
from qiskit import QuantumCircuit  # type: ignore
from qiskit.circuit import ParameterVectorElement  # type: ignore
from qiskit.quantum_info.operators import SparsePauliOp  # type: ignore
from qiskit_aer.primitives import EstimatorV2 as Estimator  # type: ignore
from typing_extensions import Callable, Self

from .observable import Observable
from .qiskit_backend import QiskitBackend

DEFAULT_GRADIENT_STEP = 1e-4
DEFAULT_SHOT_GRADIENT_STEP = 1e-1


class GradientStrategy(str, Enum):
    """
    Inherits from `enum.Enum`. The finite difference stencils available for estimating gradients.

    Members:
        `GradientStrategy.Central` (f(x + h) - f(x - h)) / 2h, two evaluations per parameter.
        `GradientStrategy.Forward` (f(x + h) - f(x)) / h, one evaluation per parameter plus f(x).
        `GradientStrategy.Backward` (f(x) - f(x - h)) / h, one evaluation per parameter plus f(x).
    """

    Central = "central"
    Forward = "forward"
    Backward = "backward"


def default_gradient_step(qiskit_backend: QiskitBackend) -> float:
    """
    Shot noise swamps small steps, so sampled backends get a wider stencil.
    """

    if qiskit_backend.is_exact:
        return DEFAULT_GRADIENT_STEP

    return DEFAULT_SHOT_GRADIENT_STEP


def circuit_values(circuit: QuantumCircuit, param_vals: np.ndarray) -> np.ndarray:
    """
    Selects, in the order of `circuit.parameters`, the entries of the flat parameter vector that
    the circuit actually uses. Kernels bind their arguments to one `ParameterVector`, so the element
    index is the position in `param_vals`. Circuits with free standing parameters are assumed to
    already be in circuit order.

    Args:
        circuit (QuantumCircuit): The parameterized circuit.
        param_vals (np.ndarray): The flat parameter values, the last axis indexes parameters.

    Returns:
        np.ndarray: The values to bind, with the last axis of length `circuit.num_parameters`.
    """

    indices = [
        p.index if isinstance(p, ParameterVectorElement) else i
        for i, p in enumerate(circuit.parameters)
    ]

    return np.asarray(param_vals, dtype=float)[..., indices]


class Measure:
    """
    Calculates Gradients and Expectation Values on a Qiskit Circuit
    Uses an Arbitrary Qiskit Backend along with a provided number of shots
    """

    def __init__(
        self: Self,
        circuit: QuantumCircuit,
        param_vals: np.ndarray,
        ev_observables: list[Observable] = [],
        grad_observables: list[Observable] = [],
        qiskit_backend: QiskitBackend = QiskitBackend.Exact(),
        gradient_strategy: GradientStrategy = GradientStrategy.Central,
        gradient_step: float | None = None,
    ) -> None:
        """
        Instantiates a `Measure` class instance.

        Args:
            circuit (QuantumCircuit): parameterized qiskit circuit that gradients are calculated on.
            param_vals (np.ndarray): current values of each parameter in circuit.
            ev_observables (list[Observable], optional): observables to calculate expectation values against. Defaults to [].
            grad_observables (list[Observable], optional): observables to calcualte gradients wrt to. Defaults to [].
            qiskit_backend (QiskitBackend, optional): backend to run qiskit on. Defaults to `QiskitBackend.Exact()`.
            gradient_strategy (GradientStrategy, optional): finite difference stencil. Defaults to `GradientStrategy.Central`.
            gradient_step (float | None, optional): finite difference step, defaults to `default_gradient_step(qiskit_backend)`.
        """

        self.circuit = circuit
        self.param_vals = np.asarray(param_vals, dtype=float)

        self.ev_observables = ev_observables
        self.grad_observables = grad_observables

        self.qiskit_backend = qiskit_backend
        self.gradient_strategy = GradientStrategy(gradient_strategy)
        self.gradient_step = (
            gradient_step
            if gradient_step is not None
            else default_gradient_step(qiskit_backend)
        )
        if self.gradient_step <= 0:
            raise ValueError(f"gradient step must be positive, got {self.gradient_step}")

        # estimator used for both expectation value and gradient calculations
        self.estimator = Estimator.from_backend(self.qiskit_backend.data)

        # apply shot noise
        if not self.qiskit_backend.is_exact:
            self.estimator.options.default_precision = 1 / self.qiskit_backend.shots ** (
                1 / 2
            )

        self.evs = self._calculate_expectation_value()
        self.grads = self._calculate_gradients()

    def _operator(self: Self, observable: Observable) -> SparsePauliOp:
        """
        Returns the observable's operator laid out onto the physical qubits of the circuit.
        """

        if self.circuit.layout is None:
            return observable.operator

        return observable.operator.apply_layout(self.circuit.layout)

    def _pub(self: Self, observable: Observable, values: np.ndarray) -> tuple:
        """
        Returns the estimator input for one observable, binding values only to circuits that have parameters.
        """

        if self.circuit.num_parameters == 0:
            return (self.circuit, self._operator(observable))

        return (self.circuit, self._operator(observable), values)

    def _calculate_expectation_value(self: Self) -> dict[Observable, float]:
        """
        Calculates and returns the expectation value of each observable at the current parameter values
        """

        if len(self.ev_observables) == 0:
            return {}

        values = circuit_values(self.circuit, self.param_vals)

        job_result = self.estimator.run(
            [self._pub(obv, values) for obv in self.ev_observables]
        ).result()

        return {
            obv: float(np.real(jr.data.evs.item()))
            for obv, jr in zip(self.ev_observables, job_result)
        }

    def _stencil(self: Self) -> tuple[np.ndarray, np.ndarray]:
        """
        Returns the points the finite difference stencil evaluates, one per row, and the
        weights that turn the evaluations at those points into the gradient.
        """

        n = len(self.param_vals)
        h = self.gradient_step
        shifts = h * np.eye(n)

        if self.gradient_strategy == GradientStrategy.Central:
            points = np.concatenate(
                [self.param_vals + shifts, self.param_vals - shifts]
            )
            weights = np.concatenate([np.eye(n), -np.eye(n)], axis=1) / (2 * h)
        elif self.gradient_strategy == GradientStrategy.Forward:
            points = np.concatenate([self.param_vals[None, :], self.param_vals + shifts])
            weights = np.concatenate([-np.ones((n, 1)), np.eye(n)], axis=1) / h
        else:
            points = np.concatenate([self.param_vals[None, :], self.param_vals - shifts])
            weights = np.concatenate([np.ones((n, 1)), -np.eye(n)], axis=1) / h

        return points, weights

    def _calculate_gradients(self: Self) -> dict[Observable, np.ndarray]:
        """
        Calculates and returns the gradient of each observable with respect to every entry of the flat parameter vector
        """

        if len(self.grad_observables) == 0:
            return {}

        # no parameter reaches the circuit
        if len(self.param_vals) == 0 or self.circuit.num_parameters == 0:
            return {obv: np.zeros(len(self.param_vals)) for obv in self.grad_observables}

        points, weights = self._stencil()
        values = circuit_values(self.circuit, points)

        job_result = self.estimator.run(
            [self._pub(obv, values) for obv in self.grad_observables]
        ).result()

        return {
            obv: weights @ np.real(np.asarray(jr.data.evs, dtype=complex)).reshape(-1)
            for obv, jr in zip(self.grad_observables, job_result)
        }


def make_ev_function(
    circuit: QuantumCircuit,
    observable: Observable,
    qiskit_backend: QiskitBackend,
) -> Callable[[np.ndarray], float]:
    """
    Makes a function that evaluates the circuit at different parameter values
    and returns the expectation value of the observable. Used for optimizers that
    require the actual function values to perform optimization.

    Args:
        circuit (QuantumCircuit): The parameterized quantum circuit that observables are calculated on.
        observable (Observable): The observable to calculate the expectation value of.
        qiskit_backend (QiskitBackend): The qiskit backend to run simulations on.

    Returns:
        Callable[[np.ndarray],float]: A callable that returns the expectation value.
    """

    def _ev_function(param_vals: np.ndarray) -> float:
        m = Measure(
            circuit,
            param_vals,
            ev_observables=[observable],
            qiskit_backend=qiskit_backend,
        )

        return m.evs[observable]

    return _ev_function


def make_grad_function(
    circuit: QuantumCircuit,
    observable: Observable,
    qiskit_backend: QiskitBackend,
    gradient_strategy: GradientStrategy = GradientStrategy.Central,
    gradient_step: float | None = None,
) -> Callable[[np.ndarray], np.ndarray]:
    """
    Makes a function that evaluates the circuit at different parameter values
    and returns the gradient of the observable. Used for optimizers that
    require the gradient function, like scipy optimizers.

    Args:
        circuit (QuantumCircuit): The parameterized quantum circuit that observables are calculated on.
        observable (Observable): The observable to calculate the expectation value of.
        qiskit_backend (QiskitBackend): The qiskit backend to run simulations on.
        gradient_strategy (GradientStrategy, optional): The finite difference stencil. Defaults to `GradientStrategy.Central`.
        gradient_step (float | None, optional): The finite difference step. Defaults to None.

    Returns:
        Callable[[np.ndarray],np.ndarray]: A callable that returns the gradient.
    """

    def _grad_function(param_vals: np.ndarray) -> np.ndarray:
        m = Measure(
            circuit,
            param_vals,
            grad_observables=[observable],
            qiskit_backend=qiskit_backend,
            gradient_strategy=gradient_strategy,
            gradient_step=gradient_step,
        )

        return m.grads[observable]

    return _grad_function
