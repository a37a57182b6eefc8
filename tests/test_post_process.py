from matplotlib.figure import Figure

from hybrid_vqe import VQE
from hybrid_vqe.deuteron import H, ansatz
from hybrid_vqe.optimizers import ScipyOptimizer
from hybrid_vqe.post_process import (
    adjust_capitalization,
    check_filtered,
    compare_runs,
    get_nested_json,
    get_run_metrics,
    get_run_params,
    get_runs,
)

PARAMS = {
    "kernel": "ansatz",
    "optimizer": {"_name": "scipy_optimizer", "algorithm": "cobyla"},
    "qiskit_backend": {"shots": 0},
}


def test_get_nested_json() -> None:
    assert get_nested_json(PARAMS, "optimizer.algorithm") == "cobyla"
    assert get_nested_json(PARAMS, "qiskit_backend.shots") == 0
    assert get_nested_json(PARAMS, "optimizer.max_evals") is None
    assert get_nested_json(PARAMS, "kernel.name") is None


def test_check_filtered() -> None:
    assert not check_filtered(PARAMS, {"kernel": "ansatz"}, {})
    assert check_filtered(PARAMS, {"kernel": "ansatz_vec"}, {})
    assert check_filtered(PARAMS, {}, {"optimizer.algorithm": ["cobyla"]})
    assert not check_filtered(PARAMS, {}, {"optimizer.algorithm": ["l-bfgs"]})


def test_adjust_capitalization() -> None:
    assert adjust_capitalization("cnot_count") == "CNOT Count"
    assert adjust_capitalization("scipy_optimizer") == "Scipy Optimizer"
    assert adjust_capitalization("cobyla") == "COBYLA"


def test_logged_runs_are_plotted() -> None:
    vqe = VQE(ansatz, H, {"show-progress": False})
    vqe.execute(ScipyOptimizer("cobyla", max_evals=10), 0.0)

    get_runs.cache_clear()
    run_ids = [r.info.run_id for r in get_runs()]
    assert len(run_ids) > 0

    run_id = run_ids[0]
    params = get_run_params(run_id)
    assert params["optimizer"]["_type"] == "optimizer"
    assert params["qiskit_backend"]["shots"] in (0, 2**20)

    metrics = get_run_metrics(run_id)
    assert len(metrics["energy_error"]) == len(metrics["energy"])

    fig = compare_runs(
        group_by="optimizer.algorithm",
        y_parameter="energy_error",
        filter_fixed={"kernel": "ansatz"},
        log_scale=True,
    )
    assert isinstance(fig, Figure)

    assert compare_runs(
        group_by="optimizer.algorithm",
        y_parameter="energy",
        filter_fixed={"kernel": "no_such_kernel"},
    ) is None
