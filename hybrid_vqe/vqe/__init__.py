from .vqe import VQE, VQE_OPTIONS

__all__ = ["VQE", "VQE_OPTIONS"]
