from .adam import AdamOptimizer
from .factory import available_optimizers, create_optimizer
from .optimizer import (
    FunctionalOptimizer,
    GradientOptimizer,
    Optimizer,
)
from .scipy_optimizer import ScipyOptimizer
from .sgd import SGDOptimizer

__all__ = [
    "AdamOptimizer",
    "available_optimizers",
    "create_optimizer",
    "FunctionalOptimizer",
    "GradientOptimizer",
    "Optimizer",
    "ScipyOptimizer",
    "SGDOptimizer",
]
