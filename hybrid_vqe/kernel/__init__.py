from . import functional
from .functional import exp_i_theta, openqasm
from .kernel import Kernel, qpu

__all__ = [
    "functional",
    "exp_i_theta",
    "openqasm",
    "Kernel",
    "qpu",
]
