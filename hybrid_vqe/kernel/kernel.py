import functools
import inspect
from numbers import Number

import numpy as np
from qiskit import QuantumCircuit, qasm3  # type: ignore
from qiskit.circuit import ParameterVector  # type: ignore
from typing_extensions import Any, Callable, Self

PARAMETER_NAME = "theta"


class Kernel:
    """
    A quantum kernel: a Python function whose first argument is the qubit register, a
    `QuantumCircuit` it appends gates to, and whose remaining arguments are the variational
    parameters. Each variational argument is either a scalar or a vector of floats.

    The kernel is built symbolically once, binding every argument to elements of a single
    `ParameterVector` in argument order, so the optimizer only ever sees a flat parameter vector.
    """

    def __init__(
        self: Self, func: Callable[..., None], n_qubits: int | None = None
    ) -> None:
        """
        Constructs a `Kernel` around `func`.

        Args:
            self (Self): A reference to the current class instance.
            func (Callable[..., None]): The function that appends the kernel's gates to a register.
            n_qubits (int | None, optional): Fixed size of the register. Defaults to None, in which case
                the register is sized by the Hamiltonian the kernel is solved against.

        Raises:
            TypeError: If `func` does not take the register as its first argument.
        """

        params = list(inspect.signature(func).parameters.values())
        if len(params) == 0 or params[0].kind not in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            raise TypeError(
                f"Kernel '{func.__name__}' must take the qubit register as its first argument."
            )

        if n_qubits is not None and n_qubits <= 0:
            raise ValueError(f"n_qubits must be positive, got {n_qubits}.")

        self.func = func
        self.name = func.__name__
        self.n_qubits = n_qubits

        self.arguments = params[1:]
        self.variadic = any(
            p.kind == inspect.Parameter.VAR_POSITIONAL for p in self.arguments
        )

        functools.update_wrapper(self, func)

    def __call__(self: Self, q: QuantumCircuit, *args: Any) -> None:
        """
        Appends the kernel to `q`, which lets kernels call other kernels.
        """

        self.func(q, *args)

    def __repr__(self: Self) -> str:
        return f"Kernel({self.name})"

    def argument_shapes(self: Self, *args: Any) -> list[int | None]:
        """
        Returns the structure of concrete kernel arguments, `None` for a scalar and the
        length for a vector.

        Args:
            self (Self): A reference to the current class instance.
            *args (Any): The concrete variational arguments.

        Raises:
            TypeError: If the number of arguments does not match the kernel's signature or an argument
                is neither a number nor a sequence.
            ValueError: If a vector argument is empty.

        Returns:
            list[int | None]: The shape of each argument.
        """

        if not self.variadic and len(args) != len(self.arguments):
            raise TypeError(
                f"Kernel '{self.name}' takes {len(self.arguments)} variational argument(s), got {len(args)}."
            )

        shapes: list[int | None] = []
        for i, arg in enumerate(args):
            if isinstance(arg, Number):
                shapes.append(None)
                continue

            try:
                n = len(arg)
            except TypeError:
                raise TypeError(
                    f"Argument {i} of kernel '{self.name}' must be a number or a sequence of numbers, got {type(arg).__name__}."
                ) from None

            if n == 0:
                raise ValueError(
                    f"Argument {i} of kernel '{self.name}' is an empty vector."
                )

            shapes.append(n)

        return shapes

    @staticmethod
    def flatten(*args: Any) -> np.ndarray:
        """
        Concatenates structured arguments into the flat parameter vector.
        """

        if len(args) == 0:
            return np.zeros(0)

        return np.concatenate([np.atleast_1d(np.asarray(a, dtype=float)) for a in args])

    @staticmethod
    def unflatten(values: Any, shapes: list[int | None]) -> list[Any]:
        """
        Splits a flat parameter vector back into arguments of the given shapes.
        Numeric values come back as python floats, symbolic ones as they were passed.
        """

        if isinstance(values, np.ndarray):
            values = values.tolist()
        values = list(values)

        expected = sum(1 if s is None else s for s in shapes)
        if len(values) != expected:
            raise ValueError(
                f"Expected {expected} parameter values, got {len(values)}."
            )

        args: list[Any] = []
        i = 0
        for s in shapes:
            if s is None:
                args.append(values[i])
                i += 1
            else:
                args.append(values[i : i + s])
                i += s

        return args

    def construct(self: Self, n_qubits: int, *args: Any) -> QuantumCircuit:
        """
        Builds the kernel into a fresh register of `n_qubits` qubits.

        Args:
            self (Self): A reference to the current class instance.
            n_qubits (int): The size of the register.
            *args (Any): The variational arguments, concrete or symbolic.

        Returns:
            QuantumCircuit: The circuit the kernel appended its gates to.
        """

        qc = QuantumCircuit(n_qubits, name=self.name)
        self.func(qc, *args)

        return qc

    def parameterize(self: Self, n_qubits: int, shapes: list[int | None]) -> QuantumCircuit:
        """
        Builds the kernel symbolically for arguments of the given shapes. Every argument is bound
        to consecutive elements of one `ParameterVector`.

        Args:
            self (Self): A reference to the current class instance.
            n_qubits (int): The size of the register.
            shapes (list[int | None]): The argument shapes, see `argument_shapes`.

        Returns:
            QuantumCircuit: The parameterized circuit.
        """

        n_params = sum(1 if s is None else s for s in shapes)
        theta = ParameterVector(PARAMETER_NAME, n_params)

        return self.construct(n_qubits, *self.unflatten(list(theta), shapes))

    def to_qasm(self: Self, n_qubits: int, *args: Any) -> str:
        return qasm3.dumps(self.construct(n_qubits, *args))


def qpu(
    func: Callable[..., None] | None = None, *, n_qubits: int | None = None
) -> Any:
    """
    Decorator turning a function into a `Kernel`. Usable bare, `@qpu`, or with a fixed
    register size, `@qpu(n_qubits=2)`.
    """

    def _wrap(f: Callable[..., None]) -> Kernel:
        return Kernel(f, n_qubits)

    if func is None:
        return _wrap

    return _wrap(func)
