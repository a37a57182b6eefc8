import argparse
import sys

from qiskit import QuantumCircuit  # type: ignore

from .kernel import exp_i_theta, openqasm, qpu
from .observables import QiskitBackend, X, Y, Z
from .optimizers import create_optimizer
from .utils import ExpectationError, expect
from .vqe import VQE

# ground state energy of the deuteron N=2 Hamiltonian
GROUND_STATE_ENERGY = -1.74886
TOLERANCE = 0.1

H = 5.907 - 2.1433 * X(0) * X(1) - 2.1433 * Y(0) * Y(1) + 0.21829 * Z(0) - 6.125 * Z(1)


@qpu
def ansatz(q: QuantumCircuit, x: float) -> None:
    q.x(0)
    q.ry(x, 1)
    q.cx(1, 0)


@qpu
def ansatz_vec(q: QuantumCircuit, x: list[float]) -> None:
    """
    Only the first entry of `x` is used.
    """

    q.x(0)
    ansatz_exponent = X(0) * Y(1) - Y(0) * X(1)
    exp_i_theta(q, x[0], ansatz_exponent)


@qpu
def xasm_open_qasm_mixed_ansatz(q: QuantumCircuit, xx: float) -> None:
    openqasm(q, "x q[0];")
    # OpenQASM 2 snippets take no parameters
    q.ry(xx, 1)
    openqasm(q, "cx q[1], q[0];")


def check_energy(name: str, energy: float) -> None:
    expect(
        abs(energy - GROUND_STATE_ENERGY) < TOLERANCE,
        f"{name}: energy {energy} is not within {TOLERANCE} of {GROUND_STATE_ENERGY}",
    )


def run(qiskit_backend: QiskitBackend, show_progress: bool = False) -> VQE:
    """
    Solves the deuteron Hamiltonian with each of the three kernels, printing and checking
    every energy. Returns the solver of the last kernel.

    Args:
        qiskit_backend (QiskitBackend): The backend circuits are run on.
        show_progress (bool, optional): Whether to show progress bars. Defaults to False.

    Raises:
        ExpectationError: If an energy is not within `TOLERANCE` of `GROUND_STATE_ENERGY`.

    Returns:
        VQE: The solver of the mixed OpenQASM kernel, its history holds every evaluated energy.
    """

    options = {"show-progress": show_progress}

    vqe = VQE(ansatz, H, options, qiskit_backend=qiskit_backend)
    energy, params = vqe.execute(0.0)
    print(f"<H>({params[0]}) = {energy}")
    check_energy(ansatz.name, energy)

    # same problem for the vector kernel, through the async interface
    vqe_vec = VQE(ansatz_vec, H, options, qiskit_backend=qiskit_backend)
    energy_vec, params_vec = vqe_vec.execute_async([0.0]).result()
    print(f"<H>({params_vec[0]}) = {energy_vec}")
    check_energy(ansatz_vec.name, energy_vec)

    # gradient based optimizer, started from .55
    optimizer = create_optimizer(
        "scipy", [("scipy-optimizer", "l-bfgs"), ("scipy-maxeval", 20)]
    )
    vqe_openqasm = VQE(
        xasm_open_qasm_mixed_ansatz,
        H,
        {**options, "gradient-strategy": "central"},
        qiskit_backend=qiskit_backend,
    )
    energy_oq, params_oq = vqe_openqasm.execute(optimizer, 0.55)
    print(f"<H>({params_oq[0]}) = {energy_oq}")
    check_energy(xasm_open_qasm_mixed_ansatz.name, energy_oq)

    print("All Energies and Parameters:")
    for e, pset in vqe_openqasm.get_unique_energies():
        print(f"E: Pvec = {e}: [ {' '.join(str(p) for p in pset)} ]")

    return vqe_openqasm


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Deuteron N=2 ground state energy with three VQE kernels."
    )
    parser.add_argument(
        "-qpu",
        "--qpu",
        default="exact",
        choices=QiskitBackend.names(),
        help="backend the kernels are run on",
    )
    parser.add_argument(
        "--progress", action="store_true", help="show optimization progress bars"
    )
    args = parser.parse_args(argv)

    try:
        run(QiskitBackend.from_name(args.qpu), args.progress)
    except ExpectationError as e:
        sys.exit(str(e))


if __name__ == "__main__":
    main()
