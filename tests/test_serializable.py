import pytest

from hybrid_vqe.observables import Observable, QiskitBackend
from hybrid_vqe.optimizers import Optimizer, SGDOptimizer


def test_backend_round_trip() -> None:
    for constructor in QiskitBackend.all_constructors():
        backend = constructor()
        rebuilt = QiskitBackend.from_config(backend.to_config())

        assert rebuilt.to_config() == backend.to_config()


def test_backend_json() -> None:
    backend = QiskitBackend.from_json(QiskitBackend.Exact().to_json())

    assert backend.is_exact
    assert backend.to_config()["_type"] == "qiskit_backend"


def test_backend_has_no_subclasses() -> None:
    with pytest.raises(NotImplementedError):
        QiskitBackend.all()


def test_unknown_config() -> None:
    with pytest.raises(ValueError):
        Optimizer.from_config({"_type": "optimizer", "_name": "nlopt_optimizer"})


def test_class_kwargs() -> None:
    config = SGDOptimizer(lr=0.3).to_config()
    del config["max_iter"]

    assert Optimizer.from_config(config, max_iter=4).max_iter == 4


def test_str() -> None:
    assert str(SGDOptimizer(lr=0.5)) == (
        "SGDOptimizer(lr=0.5, grad_conv_threshold=0.01, max_iter=1000)"
    )


def test_all_lists_concrete_classes() -> None:
    names = {c._name() for c in Observable.all()}

    assert names == {"pauli_observable", "hamiltonian_observable"}
