from itertools import product
from multiprocessing import Pool as MPPool

from typing_extensions import Any

from .deuteron import H, ansatz, ansatz_vec, xasm_open_qasm_mixed_ansatz
from .kernel import Kernel
from .observables.qiskit_backend import QiskitBackend
from .optimizers import AdamOptimizer, Optimizer, ScipyOptimizer, SGDOptimizer
from .utils.logger import get_experiment_id, make_client
from .vqe import VQE

NUM_PROCESSES = 4

# kernels cross the process boundary by name, with their initial arguments
KERNELS: dict[str, tuple[Kernel, tuple[Any, ...]]] = {
    ansatz.name: (ansatz, (0.0,)),
    ansatz_vec.name: (ansatz_vec, ([0.0],)),
    xasm_open_qasm_mixed_ansatz.name: (xasm_open_qasm_mixed_ansatz, (0.55,)),
}


def train_function(
    params: tuple[str, dict[str, Any], dict[str, Any], dict[str, Any]],
) -> tuple[float, list[float]]:
    kernel_name, optimizer_conf, qiskit_backend_conf, options = params

    kernel, initial = KERNELS[kernel_name]
    qiskit_backend = QiskitBackend.from_config(qiskit_backend_conf)
    optimizer = Optimizer.from_config(optimizer_conf)

    vqe = VQE(kernel, H, options, qiskit_backend=qiskit_backend)

    return vqe.execute(optimizer, *initial)


def main() -> None:
    qiskit_backends_t = [QiskitBackend.Exact, QiskitBackend.ShotNoise]
    optimizers: list[Optimizer] = [
        ScipyOptimizer("cobyla"),
        ScipyOptimizer("l-bfgs", max_evals=20),
        AdamOptimizer(lr=0.05, max_iter=200),
        SGDOptimizer(lr=0.02, max_iter=200),
    ]
    options_l = [
        {"show-progress": False, "gradient-strategy": s}
        for s in ("central", "forward")
    ]

    qiskit_backend_confs = [q().to_config() for q in qiskit_backends_t]
    optimizer_confs = [o.to_config() for o in optimizers]

    args = product(KERNELS, optimizer_confs, qiskit_backend_confs, options_l)

    # the run store and its experiment are created once, before the workers log into them
    get_experiment_id(make_client())

    with MPPool(NUM_PROCESSES) as p:
        p.map(train_function, args)


if __name__ == "__main__":
    main()
