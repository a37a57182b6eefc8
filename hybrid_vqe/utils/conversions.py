import numpy as np
from openfermion import QubitOperator
from qiskit.quantum_info.operators import SparsePauliOp  # type: ignore

HERMITIAN_TOLERANCE = 1e-10


def openfermion_to_qiskit(
    qubit_operator: QubitOperator, n_qubits: int
) -> SparsePauliOp:
    """
    Converts from an openfermion QubitOperator to a Qiskit SparsePauliOp.
    Qiskit labels are little endian, so qubit i is written at position n_qubits - i - 1.

    Args:
        qubit_operator: QubitOperator, an openfermion QubitOperator
        n_qubits: int, the number of qubits the qubit operator is acting on
    """
    pauli_strs = []
    pauli_coeffs = []

    for q_op, coeff in qubit_operator.terms.items():
        s = ["I"] * n_qubits
        for i, p in q_op:
            if i >= n_qubits:
                raise ValueError(
                    f"Operator acts on qubit {i} but only {n_qubits} qubits are available."
                )
            s[n_qubits - i - 1] = p

        pauli_strs.append("".join(s))
        pauli_coeffs.append(coeff)

    if len(pauli_strs) == 0:
        return SparsePauliOp(["I" * n_qubits], [0.0])

    return SparsePauliOp(pauli_strs, pauli_coeffs).simplify()


def hermitian_part(op: SparsePauliOp) -> SparsePauliOp:
    """
    Checks that a Pauli sum is Hermitian, which for a simplified sum of Pauli strings means every
    coefficient is real, and returns it with strictly real coefficients.

    Args:
        op (SparsePauliOp): The operator to check.

    Raises:
        ValueError: If any coefficient has a non negligible imaginary component.

    Returns:
        SparsePauliOp: The operator with real coefficients.
    """

    coeffs = np.asarray(op.coeffs)
    if np.max(np.abs(coeffs.imag)) > HERMITIAN_TOLERANCE:
        raise ValueError(f"Operator is not Hermitian: {op}")

    return SparsePauliOp(op.paulis, coeffs.real)


def pauli_terms(qubit_operator: QubitOperator) -> list[tuple[str, float]]:
    """
    Flattens a QubitOperator into a json compatible list of (term, coefficient) pairs,
    where term is written like "X0 Y1" and the identity term is "".
    """

    return [
        (" ".join(f"{p}{i}" for i, p in term), complex(coeff).real)
        for term, coeff in qubit_operator.terms.items()
    ]


def from_pauli_terms(terms: list[tuple[str, float]]) -> QubitOperator:
    """
    Inverse of `pauli_terms`.
    """

    op = QubitOperator()
    for term, coeff in terms:
        op += QubitOperator(term, coeff)

    return op
