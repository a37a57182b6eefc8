import numpy as np
import pytest
from openfermion import QubitOperator
from qiskit import QuantumCircuit  # type: ignore
from qiskit.circuit import ParameterVector  # type: ignore

from hybrid_vqe.observables import (
    GradientStrategy,
    HamiltonianObservable,
    Measure,
    Observable,
    PauliObservable,
    QiskitBackend,
    X,
    Y,
    Z,
)
from hybrid_vqe.observables.measure import (
    DEFAULT_GRADIENT_STEP,
    DEFAULT_SHOT_GRADIENT_STEP,
    default_gradient_step,
    make_ev_function,
    make_grad_function,
)


def test_pauli_algebra() -> None:
    op = X(0) * X(0)

    assert op == QubitOperator("")
    assert Y(0) * Z(1) == QubitOperator("Y0 Z1")
    assert 2 - Z(1) == QubitOperator("", 2.0) - QubitOperator("Z1")


def test_register_defaults_to_touched_qubits() -> None:
    obs = PauliObservable(Z(0) + 0.5 * X(2))

    assert obs.n_qubits == 3
    assert obs.operator.num_qubits == 3


def test_constant_needs_register() -> None:
    with pytest.raises(ValueError):
        PauliObservable(QubitOperator("", 1.0))

    assert PauliObservable(QubitOperator("", 1.0), n_qubits=2).n_qubits == 2


def test_non_hermitian_is_rejected() -> None:
    with pytest.raises(ValueError):
        PauliObservable(1j * Z(0))


def test_terms_constructor() -> None:
    obs = PauliObservable([("X0 Y1", 0.5), ("", 1.0)])

    assert obs.qubit_operator == 0.5 * X(0) * Y(1) + 1.0


def test_config_round_trip(deuteron_hamiltonian: HamiltonianObservable) -> None:
    config = deuteron_hamiltonian.to_config()
    obs = Observable.from_config(config)

    assert isinstance(obs, HamiltonianObservable)
    assert obs == deuteron_hamiltonian
    assert obs.n_qubits == 2

    assert Observable.from_json(deuteron_hamiltonian.to_json()) == deuteron_hamiltonian


def test_z_after_flip_is_minus_one() -> None:
    qc = QuantumCircuit(2)
    qc.x(0)

    z0 = PauliObservable(Z(0), 2)
    z1 = PauliObservable(Z(1), 2)

    m = Measure(qc, np.zeros(0), [z0, z1])

    assert m.evs[z0] == pytest.approx(-1.0)
    assert m.evs[z1] == pytest.approx(1.0)


def test_deuteron_energy_of_hartree_fock_state(
    deuteron_hamiltonian: HamiltonianObservable,
) -> None:
    qc = QuantumCircuit(2)
    qc.x(0)

    m = Measure(qc, np.zeros(0), [deuteron_hamiltonian])

    # 5.907 - .21829 - 6.125
    assert m.evs[deuteron_hamiltonian] == pytest.approx(-0.43629, abs=1e-6)


def test_central_gradient(ry_circuit: QuantumCircuit) -> None:
    z = PauliObservable(Z(0))

    m = Measure(ry_circuit, np.array([0.3]), [z], [z])

    assert m.evs[z] == pytest.approx(np.cos(0.3), abs=1e-8)
    assert m.grads[z] == pytest.approx([-np.sin(0.3)], abs=1e-6)


@pytest.mark.parametrize(
    "strategy", [GradientStrategy.Forward, GradientStrategy.Backward]
)
def test_one_sided_gradients(ry_circuit: QuantumCircuit, strategy: GradientStrategy) -> None:
    z = PauliObservable(Z(0))

    m = Measure(
        ry_circuit, np.array([1.1]), grad_observables=[z], gradient_strategy=strategy
    )

    assert m.grads[z] == pytest.approx([-np.sin(1.1)], abs=1e-3)


def test_gradient_step_option(ry_circuit: QuantumCircuit) -> None:
    z = PauliObservable(Z(0))

    m = Measure(
        ry_circuit,
        np.array([0.0]),
        grad_observables=[z],
        gradient_strategy="forward",  # type: ignore
        gradient_step=0.5,
    )

    assert m.gradient_step == 0.5
    assert m.grads[z] == pytest.approx([(np.cos(0.5) - 1) / 0.5], abs=1e-8)

    with pytest.raises(ValueError):
        Measure(ry_circuit, np.array([0.0]), gradient_step=0.0)


def test_unused_parameter_has_zero_gradient() -> None:
    theta = ParameterVector("theta", 2)
    qc = QuantumCircuit(1)
    qc.ry(theta[1], 0)

    z = PauliObservable(Z(0))
    m = Measure(qc, np.array([0.7, 0.3]), [z], [z])

    assert m.evs[z] == pytest.approx(np.cos(0.3), abs=1e-8)
    assert m.grads[z][0] == 0.0
    assert m.grads[z][1] == pytest.approx(-np.sin(0.3), abs=1e-6)


def test_functional_interface(ry_circuit: QuantumCircuit) -> None:
    z = PauliObservable(Z(0))
    backend = QiskitBackend.Exact()

    f = make_ev_function(ry_circuit, z, backend)
    grad_f = make_grad_function(ry_circuit, z, backend)

    assert f(np.array([np.pi])) == pytest.approx(-1.0, abs=1e-8)
    assert grad_f(np.array([np.pi / 2])) == pytest.approx([-1.0], abs=1e-6)


def test_default_gradient_step() -> None:
    assert default_gradient_step(QiskitBackend.Exact()) == DEFAULT_GRADIENT_STEP
    assert default_gradient_step(QiskitBackend.ShotNoise()) == DEFAULT_SHOT_GRADIENT_STEP


def test_backend_names() -> None:
    assert QiskitBackend.names() == ["exact", "shot-noise", "hardware-noise"]
    assert QiskitBackend.from_name("exact").is_exact
    assert QiskitBackend.from_name("Shot-Noise").shots == 2**20

    with pytest.raises(ValueError, match="Available"):
        QiskitBackend.from_name("qpp")


def test_shot_noise_is_close() -> None:
    qc = QuantumCircuit(1)
    qc.h(0)
    x = PauliObservable(X(0))

    m = Measure(qc, np.zeros(0), [x], qiskit_backend=QiskitBackend.ShotNoise())

    assert m.evs[x] == pytest.approx(1.0, abs=0.01)
