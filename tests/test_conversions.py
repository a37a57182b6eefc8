import numpy as np
import pytest
from openfermion import QubitOperator

from hybrid_vqe.observables import X, Y, Z
from hybrid_vqe.utils.conversions import (
    from_pauli_terms,
    hermitian_part,
    openfermion_to_qiskit,
    pauli_terms,
)


def test_qubit_zero_is_rightmost_label() -> None:
    op = openfermion_to_qiskit(X(0) * Z(1), 2)

    assert op.paulis.to_labels() == ["ZX"]
    assert np.allclose(op.coeffs, [1.0])


def test_pads_with_identities() -> None:
    op = openfermion_to_qiskit(Y(1), 3)

    assert op.paulis.to_labels() == ["IYI"]


def test_qubit_out_of_range() -> None:
    with pytest.raises(ValueError):
        openfermion_to_qiskit(Z(2), 2)


def test_empty_operator_is_zero() -> None:
    op = openfermion_to_qiskit(QubitOperator(), 2)

    assert op.paulis.to_labels() == ["II"]
    assert np.allclose(op.coeffs, [0.0])


def test_constant_term() -> None:
    op = openfermion_to_qiskit(1.5 + Z(0), 1)

    assert dict(zip(op.paulis.to_labels(), op.coeffs.real)) == {"I": 1.5, "Z": 1.0}


def test_like_terms_are_combined() -> None:
    op = openfermion_to_qiskit(X(0) * X(1) + X(1) * X(0), 2)

    assert op.paulis.to_labels() == ["XX"]
    assert np.allclose(op.coeffs, [2.0])


def test_hermitian_part_is_real() -> None:
    op = hermitian_part(openfermion_to_qiskit(X(0) * Y(1) - Y(0) * X(1), 2))

    assert op.coeffs.dtype.kind in "fc"
    assert np.allclose(op.coeffs.imag, 0.0)


def test_hermitian_part_rejects_imaginary_coefficients() -> None:
    # XY = iZ on the same qubit
    with pytest.raises(ValueError):
        hermitian_part(openfermion_to_qiskit(X(0) * Y(0), 1))


def test_pauli_terms() -> None:
    op = 0.5 * X(0) * Y(1) + 2.0

    assert sorted(pauli_terms(op)) == [("", 2.0), ("X0 Y1", 0.5)]
    assert from_pauli_terms(pauli_terms(op)) == op
