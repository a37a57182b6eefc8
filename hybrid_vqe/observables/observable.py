from abc import ABC, abstractmethod

from openfermion import QubitOperator, count_qubits
from qiskit.quantum_info.operators import SparsePauliOp  # type: ignore
from typing_extensions import Self, override

from ..utils.conversions import (
    from_pauli_terms,
    hermitian_part,
    openfermion_to_qiskit,
    pauli_terms,
)
from ..utils.serializable import Serializable


class Observable(Serializable, ABC):
    """
    Base class for all observables
    """

    def __init__(self: Self, n_qubits: int) -> None:
        """
        Initializes the Observable

        Args:
            n_qubits: int, the number of qubits in the vector the observable is acting on
        """
        self.n_qubits = n_qubits

        self.operator = self._make_operator()

    @staticmethod
    @override
    def _type() -> str:
        """
        Returns the type of this class. Used in `Serializable`.
        """

        return "observable"

    @abstractmethod
    def _make_operator(self: Self) -> SparsePauliOp:
        """
        Generates the operator that is controlled by the observable
        Should be overriden in inherited classes
        """

        raise NotImplementedError()

    def __hash__(self: Self) -> int:
        return str(self).__hash__()

    def __eq__(self: Self, other: object) -> bool:
        if isinstance(other, Observable):
            return self.operator == other.operator

        return NotImplemented


class PauliObservable(Observable):
    """
    An observable given as a weighted sum of Pauli strings, written with the `X`, `Y`, `Z` helpers
    or as (term, coefficient) pairs like ("X0 Y1", 0.5).
    """

    def __init__(
        self: Self,
        terms: QubitOperator | list[tuple[str, float]],
        n_qubits: int | None = None,
    ) -> None:
        """
        Args:
            self (Self): A reference to the current class instance.
            terms (QubitOperator | list[tuple[str, float]]): The Pauli sum.
            n_qubits (int | None, optional): Number of qubits of the register the observable is measured on.
                Defaults to the highest qubit the operator touches.

        Raises:
            ValueError: If the operator is not Hermitian, touches a qubit outside of `n_qubits`,
                or acts on no qubits while `n_qubits` is not given.
        """

        if isinstance(terms, QubitOperator):
            self.qubit_operator = terms
        else:
            self.qubit_operator = from_pauli_terms([tuple(t) for t in terms])  # type: ignore

        self.terms = pauli_terms(self.qubit_operator)

        if n_qubits is None:
            n_qubits = count_qubits(self.qubit_operator)
        if n_qubits <= 0:
            raise ValueError(
                "Observable acts on no qubits, pass n_qubits to give it a register."
            )

        super().__init__(n_qubits)

    @staticmethod
    @override
    def _name() -> str:
        """
        Returns the name of this class. Used in `Serializable`.
        """

        return "pauli_observable"

    @property
    @override
    def _config_params(self: Self) -> list[str]:
        """
        Returns the config attributes of this class. Used in `Serializable`.
        """

        return ["terms", "n_qubits"]

    @override
    def _make_operator(self: Self) -> SparsePauliOp:
        return hermitian_part(
            openfermion_to_qiskit(self.qubit_operator, self.n_qubits)
        )


class HamiltonianObservable(PauliObservable):
    """
    Observable for the Hamiltonian whose ground state energy is searched for
    """

    @staticmethod
    @override
    def _name() -> str:
        """
        Returns the name of this class. Used in `Serializable`.
        """

        return "hamiltonian_observable"
