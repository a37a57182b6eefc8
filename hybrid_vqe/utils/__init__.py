from .expect import ExpectationError, expect
from .serializable import Serializable

__all__ = [
    "ExpectationError",
    "expect",
    "Serializable",
]
