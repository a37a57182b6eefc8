from . import measure, qiskit_backend
from .measure import GradientStrategy, Measure
from .observable import HamiltonianObservable, Observable, PauliObservable
from .pauli import X, Y, Z
from .qiskit_backend import QiskitBackend

__all__ = [
    "measure",
    "qiskit_backend",
    "GradientStrategy",
    "HamiltonianObservable",
    "Measure",
    "Observable",
    "PauliObservable",
    "QiskitBackend",
    "X",
    "Y",
    "Z",
]
