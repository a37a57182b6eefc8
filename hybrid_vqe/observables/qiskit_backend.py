from qiskit_aer import AerSimulator  # type: ignore
from qiskit_aer.noise import NoiseModel  # type: ignore
from qiskit_ibm_runtime.fake_provider import FakeVigoV2  # type: ignore
from typing_extensions import Any, Protocol, Self, Type, override

from ..utils.serializable import Serializable


class QiskitBackendConstructor(Protocol):
    def __call__(self: Self) -> "QiskitBackend": ...


class QiskitBackend(Serializable):
    """
    Inherits from `Serializable`. A wrapper around the Aer simulator that circuits are dispatched to.
    Named constructors cover the supported targets, `from_name` resolves them from a command line flag.
    """

    Exact: QiskitBackendConstructor
    ShotNoise: QiskitBackendConstructor
    HardwareNoise: QiskitBackendConstructor

    _all: list[QiskitBackendConstructor] = []
    _by_name: dict[str, QiskitBackendConstructor] = {}

    def __init__(
        self: Self,
        shots: int = 2**20,
        method: str = "automatic",
        device: str = "CPU",
        use_noise_model: bool = False,
    ) -> None:
        """

        Args:
            self (Self): A reference to the current class instance.
            shots (int, optional): Number of shots, 0 is noiseless. Defaults to 2**20.
            method (str, optional): Which method for simulation. Defaults to "automatic".
            device (str, optional): Which device to run on. Defaults to "CPU".
            use_noise_model (bool, optional): Whether to use a noise model. Defaults to False.
        """

        if shots < 0:
            raise ValueError(f"shots must be non negative, got {shots}.")

        self.shots = shots
        self.method = method
        self.device = device
        self.use_noise_model = use_noise_model

        options: dict[str, Any] = {"method": method, "device": device}
        if shots != 0:
            options["shots"] = shots
        if use_noise_model:
            options["noise_model"] = NoiseModel.from_backend(FakeVigoV2())

        self.data = AerSimulator(**options)

    @property
    def is_exact(self: Self) -> bool:
        return self.shots == 0

    @staticmethod
    @override
    def _type() -> str:
        """
        The type of the class. Used in `Serializable`.
        """

        return "qiskit_backend"

    @staticmethod
    @override
    def _name() -> str:
        """
        Not needed, the backend has no subclasses.
        """

        return ""

    @property
    @override
    def _config_params(self: Self) -> list[str]:
        """
        The params that the config has. Used in `Serializable`.
        """

        return ["shots", "method", "device", "use_noise_model"]

    @classmethod
    @override
    def all(cls: Type["QiskitBackend"]) -> list[Type["QiskitBackend"]]:
        raise NotImplementedError(
            "For non-abstract classes, use all_constructors instead()."
        )

    @classmethod
    @override
    def all_constructors(cls: Type["QiskitBackend"]) -> list[QiskitBackendConstructor]:
        return QiskitBackend._all

    @classmethod
    def names(cls: Type["QiskitBackend"]) -> list[str]:
        return list(QiskitBackend._by_name)

    @classmethod
    def from_name(cls: Type["QiskitBackend"], name: str) -> "QiskitBackend":
        """
        Constructs a backend from its command line name.

        Args:
            cls (Type[QiskitBackend]): A reference to the current class.
            name (str): One of `QiskitBackend.names()`.

        Raises:
            ValueError: If the name is unknown.

        Returns:
            QiskitBackend: A freshly constructed backend.
        """

        constructor = QiskitBackend._by_name.get(name.lower())
        if constructor is None:
            raise ValueError(
                f"Unknown backend '{name}'. Available: {QiskitBackend.names()}"
            )

        return constructor()


def _qiskit_backend_constructor_wrapper(
    name: str,
    shots: int = 2**20,
    method: str = "automatic",
    device: str = "CPU",
    use_noise_model: bool = False,
) -> QiskitBackendConstructor:
    """
    Wraps the constructor of the QiskitBackend class and registers it under `name`.

    Returns:
        QiskitBackendConstructor: A new constructor that takes no arguments.
    """

    def _callable() -> QiskitBackend:
        return QiskitBackend(shots, method, device, use_noise_model)

    QiskitBackend._all.append(_callable)
    QiskitBackend._by_name[name] = _callable

    return _callable


QiskitBackend.Exact = _qiskit_backend_constructor_wrapper("exact", shots=0)
QiskitBackend.ShotNoise = _qiskit_backend_constructor_wrapper("shot-noise")
QiskitBackend.HardwareNoise = _qiskit_backend_constructor_wrapper(
    "hardware-noise", use_noise_model=True
)
