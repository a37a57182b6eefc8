from openfermion import QubitOperator


def X(qubit: int) -> QubitOperator:
    """
    Pauli X acting on `qubit`. Combine with `+`, `-`, `*` and scalars to build Hamiltonians,
    e.g. `5.907 - 2.1433 * X(0) * X(1)`.
    """

    return QubitOperator(f"X{qubit}")


def Y(qubit: int) -> QubitOperator:
    """
    Pauli Y acting on `qubit`.
    """

    return QubitOperator(f"Y{qubit}")


def Z(qubit: int) -> QubitOperator:
    """
    Pauli Z acting on `qubit`.
    """

    return QubitOperator(f"Z{qubit}")
