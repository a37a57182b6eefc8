from openfermion import QubitOperator
from qiskit import QuantumCircuit, qasm2  # type: ignore
from qiskit.circuit import ParameterExpression  # type: ignore
from qiskit.circuit.library import PauliEvolutionGate  # type: ignore

from ..utils.conversions import hermitian_part, openfermion_to_qiskit

REGISTER_NAME = "q"


def exp_i_theta(
    q: QuantumCircuit, theta: float | ParameterExpression, operator: QubitOperator
) -> None:
    """
    Appends exp(i * theta * operator) to the register, for a Hermitian Pauli sum such as
    `X(0) * Y(1) - Y(0) * X(1)`. `PauliEvolutionGate` implements exp(-i * t * operator),
    hence the negated time.

    Args:
        q (QuantumCircuit): The register the kernel is building.
        theta (float | ParameterExpression): The rotation angle.
        operator (QubitOperator): The generator, must be Hermitian.
    """

    op = hermitian_part(openfermion_to_qiskit(operator, q.num_qubits))

    q.append(PauliEvolutionGate(op, time=-theta), q.qubits)


def openqasm(q: QuantumCircuit, source: str) -> None:
    """
    Appends OpenQASM 2 statements to the register, which they address as `q`, e.g.
    `openqasm(q, "x q[0]; cx q[1], q[0];")`. Lets a kernel mix OpenQASM snippets with
    Python gate calls. The snippet cannot reference kernel parameters.

    Args:
        q (QuantumCircuit): The register the kernel is building.
        source (str): OpenQASM 2 statements using the standard `qelib1.inc` gates.
    """

    program = (
        "OPENQASM 2.0;\n"
        'include "qelib1.inc";\n'
        f"qreg {REGISTER_NAME}[{q.num_qubits}];\n"
        f"{source}\n"
    )

    q.compose(qasm2.loads(program), qubits=q.qubits, inplace=True)
