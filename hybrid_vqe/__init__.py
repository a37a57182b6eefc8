from .kernel import Kernel, exp_i_theta, openqasm, qpu
from .observables import QiskitBackend, X, Y, Z
from .optimizers import create_optimizer
from .utils import ExpectationError, expect
from .vqe import VQE

__all__ = [
    "Kernel",
    "exp_i_theta",
    "openqasm",
    "qpu",
    "QiskitBackend",
    "X",
    "Y",
    "Z",
    "create_optimizer",
    "ExpectationError",
    "expect",
    "VQE",
]
