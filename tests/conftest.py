import os
import tempfile

# runs are logged to a throwaway store, set before hybrid_vqe reads it on import
os.environ["HYBRID_VQE_RUN_DIR"] = tempfile.mkdtemp(prefix="hybrid_vqe_runs_")

import pytest
from qiskit import QuantumCircuit  # type: ignore
from qiskit.circuit import ParameterVector  # type: ignore

from hybrid_vqe.deuteron import H
from hybrid_vqe.observables import HamiltonianObservable


@pytest.fixture
def deuteron_hamiltonian() -> HamiltonianObservable:
    return HamiltonianObservable(H)


@pytest.fixture
def ry_circuit() -> QuantumCircuit:
    theta = ParameterVector("theta", 1)
    qc = QuantumCircuit(1)
    qc.ry(theta[0], 0)

    return qc
