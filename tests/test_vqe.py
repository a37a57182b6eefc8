from concurrent.futures import Future

import pytest
from qiskit import QuantumCircuit  # type: ignore

from hybrid_vqe import VQE, create_optimizer, qpu
from hybrid_vqe.deuteron import (
    GROUND_STATE_ENERGY,
    H,
    ansatz,
    ansatz_vec,
    xasm_open_qasm_mixed_ansatz,
)
from hybrid_vqe.observables import (
    HamiltonianObservable,
    PauliObservable,
    QiskitBackend,
    Z,
)
from hybrid_vqe.optimizers import AdamOptimizer, ScipyOptimizer, SGDOptimizer
from hybrid_vqe.utils.logger import get_experiment_id, make_client

QUIET = {"show-progress": False}


def test_scalar_kernel() -> None:
    vqe = VQE(ansatz, H, QUIET)

    energy, params = vqe.execute(0.0)

    assert abs(energy - GROUND_STATE_ENERGY) < 0.1
    assert len(params) == 1


def test_vector_kernel() -> None:
    vqe = VQE(ansatz_vec, H, QUIET)

    energy, params = vqe.execute([0.0])

    assert abs(energy - GROUND_STATE_ENERGY) < 0.1
    assert len(params) == 1


def test_mixed_kernel_with_gradient_optimizer() -> None:
    optimizer = create_optimizer(
        "scipy", [("scipy-optimizer", "l-bfgs"), ("scipy-maxeval", 20)]
    )
    vqe = VQE(
        xasm_open_qasm_mixed_ansatz, H, {**QUIET, "gradient-strategy": "central"}
    )

    energy, params = vqe.execute(optimizer, 0.55)

    assert abs(energy - GROUND_STATE_ENERGY) < 0.1
    assert params[0] == pytest.approx(0.5945, abs=0.01)


def test_energy_is_found_exactly() -> None:
    vqe = VQE(ansatz, H, QUIET)

    energy, _ = vqe.execute(ScipyOptimizer("cobyla", tol=1e-8), 0.0)

    assert energy == pytest.approx(GROUND_STATE_ENERGY, abs=1e-4)


@pytest.mark.parametrize(
    "optimizer",
    [SGDOptimizer(lr=0.02, max_iter=300), AdamOptimizer(lr=0.05, max_iter=300)],
)
def test_in_place_optimizers(optimizer: SGDOptimizer | AdamOptimizer) -> None:
    vqe = VQE(ansatz, H, {**QUIET, "gradient-strategy": "forward"})

    energy, _ = vqe.execute(optimizer, 0.0)

    assert abs(energy - GROUND_STATE_ENERGY) < 0.05


def test_unique_history() -> None:
    vqe = VQE(ansatz, H, QUIET)
    energy, params = vqe.execute(0.0)

    all_params = vqe.get_unique_parameters()
    all_energies = vqe.get_unique_energies()

    assert len(all_params) > 1
    assert len({tuple(p) for p in all_params}) == len(all_params)
    assert [p for _, p in all_energies] == all_params

    # starts at the initial point, ends on the optimum
    assert all_params[0] == [0.0]
    assert params in all_params
    assert min(e for e, _ in all_energies) == pytest.approx(energy, abs=1e-6)


def test_history_belongs_to_last_run() -> None:
    vqe = VQE(ansatz, H, QUIET)
    vqe.execute(0.0)
    vqe.execute(ScipyOptimizer("cobyla", max_evals=5), 1.0)

    assert vqe.get_unique_parameters()[0] == [1.0]
    assert len(vqe.get_unique_parameters()) <= 6


def test_execute_async() -> None:
    vqe = VQE(ansatz_vec, H, QUIET)

    future = vqe.execute_async([0.0])

    assert isinstance(future, Future)
    energy, params = future.result()
    assert abs(energy - GROUND_STATE_ENERGY) < 0.1
    assert len(params) == 1


def test_concurrent_solvers() -> None:
    futures = [VQE(k, H, QUIET).execute_async(0.0) for k in (ansatz, xasm_open_qasm_mixed_ansatz)]

    for future in futures:
        energy, _ = future.result()
        assert abs(energy - GROUND_STATE_ENERGY) < 0.1


def test_kernel_without_arguments() -> None:
    @qpu
    def hartree_fock(q: QuantumCircuit) -> None:
        q.x(0)

    vqe = VQE(hartree_fock, H, QUIET)
    energy, params = vqe.execute()

    assert energy == pytest.approx(-0.43629, abs=1e-6)
    assert params == []


def test_unused_arguments_stay_put() -> None:
    @qpu
    def partial(q: QuantumCircuit, x: list[float]) -> None:
        ansatz(q, x[1])

    vqe = VQE(partial, H, QUIET)
    energy, params = vqe.execute(create_optimizer("scipy", {"optimizer": "l-bfgs"}), [0.3, 0.0])

    assert params[0] == pytest.approx(0.3)
    assert abs(energy - GROUND_STATE_ENERGY) < 0.01


def test_register_sizes() -> None:
    @qpu(n_qubits=3)
    def wide(q: QuantumCircuit, x: float) -> None:
        ansatz(q, x)

    assert VQE(wide, H, QUIET).n_qubits == 3
    assert VQE(ansatz, H, QUIET).n_qubits == 2

    with pytest.raises(ValueError):
        VQE(wide, HamiltonianObservable(H), QUIET)


def test_invalid_options() -> None:
    with pytest.raises(ValueError, match="Unknown VQE option"):
        VQE(ansatz, H, {"maxeval": 3})

    with pytest.raises(ValueError):
        VQE(ansatz, H, {"gradient-strategy": "parameter-shift"})


def test_wrong_initial_arguments() -> None:
    vqe = VQE(ansatz, H, QUIET)

    with pytest.raises(TypeError):
        vqe.execute(0.0, 1.0)


def test_run_is_logged() -> None:
    vqe = VQE(ansatz, H, QUIET, observables=[PauliObservable(Z(0), 2)])
    energy, _ = vqe.execute(ScipyOptimizer("cobyla", max_evals=10), 0.0)

    assert vqe.logger.run_id is None
    assert vqe.logger.config_options["kernel"] == "ansatz"
    assert vqe.logger.logged_values["energy"][0] == pytest.approx(-0.43629, abs=1e-6)
    assert vqe.logger.logged_values["final_energy"] == [energy]
    # Z0 of the initial |01> state
    assert vqe.logger.logged_values["pauli_observable_0"][0] == pytest.approx(-1.0)

    client = make_client()
    runs = client.search_runs(
        experiment_ids=[get_experiment_id(client)],
        filter_string="attributes.run_name = 'scipy_optimizer ansatz'",
    )
    assert any(r.info.status == "FINISHED" for r in runs)


def test_gradients_only_measured_when_required() -> None:
    gradient_free = VQE(ansatz, H, QUIET)
    gradient_free.execute(ScipyOptimizer("cobyla", max_evals=10), 0.0)

    assert "max_grad" not in gradient_free.logger.logged_values

    gradient_based = VQE(ansatz, H, QUIET)
    gradient_based.execute(ScipyOptimizer("l-bfgs", max_evals=10), 0.0)

    assert len(gradient_based.logger.logged_values["max_grad"]) > 0


def test_shot_noise_backend() -> None:
    vqe = VQE(ansatz, H, QUIET, qiskit_backend=QiskitBackend.ShotNoise())

    energy, _ = vqe.execute(0.0)

    assert abs(energy - GROUND_STATE_ENERGY) < 0.1
