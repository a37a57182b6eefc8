import threading
from concurrent.futures import Future, ThreadPoolExecutor

import numpy as np
from openfermion import QubitOperator, count_qubits
from qiskit import QuantumCircuit, qasm3, transpile  # type: ignore
from tqdm import tqdm  # type: ignore
from typing_extensions import Any, Self

from ..kernel import Kernel
from ..observables.measure import GradientStrategy, Measure
from ..observables.observable import HamiltonianObservable, Observable
from ..observables.qiskit_backend import QiskitBackend
from ..optimizers import (
    FunctionalOptimizer,
    GradientOptimizer,
    Optimizer,
    ScipyOptimizer,
)
from ..utils.logger import Logger

VQE_OPTIONS = ("gradient-strategy", "gradient-step", "show-progress")


class VQE:
    """
    Implements the Variational Quantum Eigensolver (VQE) algorithm for a quantum kernel
    and a Hamiltonian. Every call to `execute` is one optimization, logged as its own run.
    """

    def __init__(
        self: Self,
        kernel: Kernel,
        hamiltonian: QubitOperator | Observable,
        options: dict[str, Any] = {},
        qiskit_backend: QiskitBackend = QiskitBackend.Exact(),
        observables: list[Observable] = [],
    ) -> None:
        """
        Constructs an instance of `VQE`. Wraps the Hamiltonian into an observable measured on a
        register large enough for both the kernel and the Hamiltonian.

        Args:
            self (Self): A reference to the current class instance.
            kernel (Kernel): The parameterized kernel, its arguments are optimized.
            hamiltonian (QubitOperator | Observable): The Hamiltonian to minimize the expectation value of.
            options (dict[str, Any], optional): Solver options, "gradient-strategy" ("central", "forward" or "backward"),
                "gradient-step" and "show-progress". Defaults to {}.
            qiskit_backend (QiskitBackend, optional): Backend to run measures on. Defaults to `QiskitBackend.Exact()`.
            observables (list[Observable], optional): The observables to monitor the values of. Defaults to [].

        Raises:
            ValueError: If an option is unknown or has an invalid value, or the register sizes disagree.
        """

        for key in options:
            if key not in VQE_OPTIONS:
                raise ValueError(
                    f"Unknown VQE option '{key}'. Available: {list(VQE_OPTIONS)}"
                )

        self.kernel = kernel
        self.options = dict(options)

        if isinstance(hamiltonian, Observable):
            if kernel.n_qubits is not None and kernel.n_qubits != hamiltonian.n_qubits:
                raise ValueError(
                    f"Kernel '{kernel.name}' uses {kernel.n_qubits} qubits, the Hamiltonian {hamiltonian.n_qubits}."
                )
            self.hamiltonian = hamiltonian
        else:
            n_qubits = max(count_qubits(hamiltonian), kernel.n_qubits or 0)
            self.hamiltonian = HamiltonianObservable(hamiltonian, n_qubits or None)

        self.n_qubits = self.hamiltonian.n_qubits
        self.observables = observables
        self.qiskit_backend = qiskit_backend

        gradient_strategy = self.options.get("gradient-strategy", GradientStrategy.Central)
        if not isinstance(gradient_strategy, GradientStrategy):
            gradient_strategy = str(gradient_strategy).lower()
        self.gradient_strategy = GradientStrategy(gradient_strategy)
        self.gradient_step: float | None = (
            float(self.options["gradient-step"])
            if "gradient-step" in self.options
            else None
        )
        show_progress = self.options.get("show-progress", True)
        if isinstance(show_progress, str):
            show_progress = show_progress.lower() not in ("false", "0", "no", "off")
        self.show_progress = bool(show_progress)

        # energy of every evaluated parameter vector, in first evaluation order
        self.history: dict[tuple[float, ...], float] = {}

        self.circuit: QuantumCircuit = None  # type: ignore
        self.transpiled_circuit: QuantumCircuit = None  # type: ignore
        self.param_vals = np.zeros(0)
        self.vqe_it = 0

        self.logger: Logger = None  # type: ignore
        self.progress_bar: tqdm = None  # type: ignore

        self._lock = threading.Lock()

    def _run_information(self: Self, optimizer: Optimizer) -> str:
        """
        Returns the run information used for the run name in logger.

        Args:
            self (Self): A reference to the current class instance.
            optimizer (Optimizer): The optimizer of the run.

        Returns:
            str: A descriptive string of the current configuration.
        """

        return f"{optimizer._name()} {self.kernel.name}"

    def _transpile_circuit(self: Self, qc: QuantumCircuit) -> QuantumCircuit:
        """
        Transpiles a circuit based on the backend in `self.qiskit_backend` and with maximized optimization.

        Args:
            self (Self): A reference to the current class instance.
            qc (QuantumCircuit): The quantum circuit to optimize.

        Returns:
            QuantumCircuit: The transpiled quantum circuit.
        """

        return transpile(qc, backend=self.qiskit_backend.data, optimization_level=3)

    def _make_progress_description(self: Self) -> str:
        """
        Returns a string that is used as the description of the progress bar during training.

        Args:
            self (Self): A reference to the current class instance.

        Returns:
            str: The progress bar description.
        """

        last_energy = self.logger.logged_values.get("energy", None)
        last_energy_f = f"{last_energy[-1]:5g}" if last_energy is not None else "NA"

        return f"VQE it: {self.vqe_it} | Energy: {last_energy_f}"

    def _energy(self: Self, param_vals: np.ndarray) -> float:
        """
        Returns the energy at the parameter values, measuring it only the first time the
        parameter values are seen. Used as the objective of functional optimizers.

        Args:
            self (Self): A reference to the current class instance.
            param_vals (np.ndarray): The flat parameter values.

        Returns:
            float: The expectation value of the Hamiltonian.
        """

        key = tuple(float(v) for v in np.asarray(param_vals, dtype=float).reshape(-1))

        if key not in self.history:
            m = Measure(
                self.transpiled_circuit,
                np.array(key),
                [self.hamiltonian],
                qiskit_backend=self.qiskit_backend,
            )
            self.history[key] = m.evs[self.hamiltonian]

        return self.history[key]

    def _gradient(self: Self, param_vals: np.ndarray) -> np.ndarray:
        """
        Returns the finite difference gradient of the energy at the parameter values and logs its magnitude.

        Args:
            self (Self): A reference to the current class instance.
            param_vals (np.ndarray): The flat parameter values.

        Returns:
            np.ndarray: The gradient with respect to each parameter value.
        """

        m = Measure(
            self.transpiled_circuit,
            param_vals,
            grad_observables=[self.hamiltonian],
            qiskit_backend=self.qiskit_backend,
            gradient_strategy=self.gradient_strategy,
            gradient_step=self.gradient_step,
        )
        grad = m.grads[self.hamiltonian]

        # log hamiltonian gradients
        if len(grad) > 0:
            self.logger.add_logged_value("avg_grad", np.mean(np.abs(grad)))
            self.logger.add_logged_value("max_grad", np.max(np.abs(grad)))

        return grad

    def _perform_step(self: Self, optimizer: GradientOptimizer) -> bool:
        """
        Performs a single step of an in place optimizer. Returns whether or not the optimization has converged.

        Args:
            self (Self): A reference to the current class instance.
            optimizer (GradientOptimizer): The optimizer updating the parameter values.

        Returns:
            bool: Whether the VQE algorithm has converged.
        """

        grad = self._gradient(self.param_vals)

        self.param_vals = optimizer.update(self.param_vals, grad)

        return optimizer.is_converged(grad)

    def _vqe_iteration_hook(self: Self, param_vals: np.ndarray, *_: tuple[Any]) -> None:
        """
        A callback that should be called at each step of the optimization process.
        Necessary for our VQE interface to be compatible with both in place and functional
        optimizers.

        Args:
            self (Self): A reference to the current class instance.
            param_vals (np.ndarray): The new parameter values.
            *_ (tuple[Any]): Unused excess arguments to make function signature compatible.
        """

        self.param_vals = np.asarray(param_vals, dtype=float)

        self.logger.add_logged_value("energy", self._energy(self.param_vals))

        # log observable quantities
        if len(self.observables) > 0:
            m = Measure(
                self.transpiled_circuit,
                self.param_vals,
                self.observables,
                qiskit_backend=self.qiskit_backend,
            )
            for i, obv in enumerate(self.observables):
                self.logger.add_logged_value(f"{obv._name()}_{i}", m.evs[obv])

        self.progress_bar.update()
        self.progress_bar.set_description_str(self._make_progress_description())  # type: ignore

        self.vqe_it += 1

    def _log_config(self: Self, optimizer: Optimizer) -> None:
        self.logger.add_config_option("kernel", self.kernel.name)
        self.logger.add_config_option("hamiltonian", self.hamiltonian.to_json())
        self.logger.add_config_option("optimizer", optimizer.to_json())
        self.logger.add_config_option("qiskit_backend", self.qiskit_backend.to_json())
        self.logger.add_config_option("gradient_strategy", self.gradient_strategy.value)
        if self.gradient_step is not None:
            self.logger.add_config_option("gradient_step", self.gradient_step)

    def _log_circuit(self: Self) -> None:
        self.logger.add_logged_value("n_params", len(self.param_vals), t=self.vqe_it)
        self.logger.add_logged_value(
            "circuit_depth", self.circuit.depth(), t=self.vqe_it
        )
        op_counts = self.transpiled_circuit.count_ops()
        self.logger.add_logged_value(
            "cnot_count", op_counts["cx"] if "cx" in op_counts else 0, t=self.vqe_it
        )

        self.logger.add_logged_value(
            "ansatz_qasm", qasm3.dumps(self.transpiled_circuit), file=True
        )

    def _optimize(self: Self, optimizer: Optimizer) -> None:
        """
        Runs the optimizer from `self.param_vals` until it stops, leaving the optimal
        parameter values in `self.param_vals`.

        Args:
            self (Self): A reference to the current class instance.
            optimizer (Optimizer): The optimizer to run.

        Raises:
            NotImplementedError: Each possible subclass of `Optimizer` was not exhaustively checked and returned out of.
        """

        # call hook manually first time
        self._vqe_iteration_hook(self.param_vals)

        # nothing to optimize for a kernel without arguments
        if len(self.param_vals) == 0:
            return

        if isinstance(optimizer, FunctionalOptimizer):
            # perform entire optimization in one step
            self.param_vals = optimizer.update(
                self.param_vals,
                self._energy,
                self._gradient if optimizer.requires_gradient else None,
                self._vqe_iteration_hook,
            )
        elif isinstance(optimizer, GradientOptimizer):
            while not self._perform_step(optimizer):
                self._vqe_iteration_hook(self.param_vals)
        else:
            raise NotImplementedError()

    def execute(self: Self, *args: Any) -> tuple[float, list[float]]:
        """
        Minimizes the expectation value of the Hamiltonian over the kernel arguments. Accepts
        either the initial kernel arguments alone, `execute(0.0)`, or an optimizer followed by
        them, `execute(optimizer, 0.0)`. The default optimizer is COBYLA.

        Args:
            self (Self): A reference to the current class instance.
            *args (Any): An optional `Optimizer` and the initial arguments of the kernel.

        Returns:
            tuple[float, list[float]]: The optimal energy and the flat optimal parameter values.
        """

        if len(args) > 0 and isinstance(args[0], Optimizer):
            optimizer, initial = args[0], args[1:]
        else:
            optimizer, initial = ScipyOptimizer(), args

        with self._lock:
            return self._execute(optimizer, *initial)

    def _execute(
        self: Self, optimizer: Optimizer, *initial: Any
    ) -> tuple[float, list[float]]:
        shapes = self.kernel.argument_shapes(*initial)

        self.circuit = self.kernel.parameterize(self.n_qubits, shapes)
        self.transpiled_circuit = self._transpile_circuit(self.circuit)
        self.param_vals = Kernel.flatten(*initial)

        self.history = {}
        self.vqe_it = 0
        optimizer.reset()

        self.logger = Logger(self._run_information(optimizer))
        self.logger.start()
        self.progress_bar = tqdm(disable=not self.show_progress)  # type: ignore

        status = "FAILED"
        try:
            self._log_config(optimizer)
            self._log_circuit()

            self._optimize(optimizer)

            energy = self._energy(self.param_vals)

            self.logger.add_logged_value("params", self.param_vals.tolist(), file=True)
            self.logger.add_logged_value("final_energy", energy)
            status = "FINISHED"
        finally:
            self.logger.end(status)
            self.progress_bar.close()

        return energy, self.param_vals.tolist()

    def execute_async(self: Self, *args: Any) -> "Future[tuple[float, list[float]]]":
        """
        Runs `execute` with the same arguments on a worker thread.

        Returns:
            Future[tuple[float, list[float]]]: Resolves to the optimal energy and parameter values.
        """

        executor = ThreadPoolExecutor(max_workers=1)
        future = executor.submit(self.execute, *args)
        executor.shutdown(wait=False)

        return future

    def get_unique_parameters(self: Self) -> list[list[float]]:
        """
        Returns every distinct parameter vector the last run evaluated the energy at, in first evaluation order.
        """

        return [list(k) for k in self.history]

    def get_unique_energies(self: Self) -> list[tuple[float, list[float]]]:
        """
        Returns the energy of every distinct parameter vector the last run evaluated, paired with the vector.
        """

        return [(e, list(k)) for k, e in self.history.items()]
