"""
Quantum circuit representation.

Builder-style API for the parameterized circuits MC-VQE needs: fixed
state-preparation gates followed by a trainable entangler whose rotation
angles are symbolic ``Parameter`` objects until bound.

Example
-------
>>> from tiny_mcvqe.circuit import Circuit, Parameter
>>> theta = Parameter("theta")
>>> qc = Circuit(2)
>>> qc.ry(theta, 0).cx(0, 1)
>>> bound = qc.bind({theta: 0.5})
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

import numpy as np

from tiny_mcvqe import gates as g


# ---------------------------------------------------------------------------
# Parameter: symbolic placeholder for variational circuits
# ---------------------------------------------------------------------------

class Parameter:
    """
    Symbolic parameter for parameterized quantum circuits.

    Two parameters are equal only if they are the same object, so two
    entanglers built independently never share parameters by accident.
    """

    __slots__ = ("name", "_id")
    _counter = 0

    def __init__(self, name: str) -> None:
        self.name = name
        Parameter._counter += 1
        self._id = Parameter._counter

    def __repr__(self) -> str:
        return f"Parameter('{self.name}')"

    def __hash__(self) -> int:
        return hash(self._id)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Parameter):
            return self._id == other._id
        return NotImplemented


# ---------------------------------------------------------------------------
# Instruction: a single operation in the circuit
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Instruction:
    """A single gate operation applied to specific qubits."""
    name: str
    qubits: tuple[int, ...]
    params: tuple[Any, ...] = ()  # float or Parameter

    @property
    def n_qubits(self) -> int:
        return len(self.qubits)

    @property
    def is_parameterized(self) -> bool:
        return any(isinstance(p, Parameter) for p in self.params)

    def bind(self, param_map: Mapping[Parameter, float]) -> Instruction:
        """Return a new Instruction with parameters resolved."""
        if not self.is_parameterized:
            return self
        new_params = tuple(
            float(param_map[p]) if isinstance(p, Parameter) else p
            for p in self.params
        )
        return Instruction(name=self.name, qubits=self.qubits, params=new_params)

    def matrix(self) -> np.ndarray:
        """Get the unitary matrix. Raises if unresolved parameters remain."""
        if self.is_parameterized:
            raise ValueError(
                f"Cannot get matrix: gate '{self.name}' has unbound parameters "
                f"{[p for p in self.params if isinstance(p, Parameter)]}"
            )
        return g.get_matrix(self.name, self.params)


# ---------------------------------------------------------------------------
# Circuit
# ---------------------------------------------------------------------------

class Circuit:
    """
    Quantum circuit on ``n_qubits`` qubits.

    Parameters
    ----------
    n_qubits : int
        Number of quantum bits.
    name : str, optional
        Circuit name for display/QASM export.
    """

    def __init__(self, n_qubits: int, name: str = "circuit") -> None:
        if n_qubits < 1:
            raise ValueError(f"Need at least 1 qubit, got {n_qubits}")
        self.n_qubits = n_qubits
        self.name = name
        self._instructions: list[Instruction] = []
        self._parameters: list[Parameter] = []

    # -- Properties ---------------------------------------------------------

    @property
    def instructions(self) -> list[Instruction]:
        """List of instructions in the circuit."""
        return list(self._instructions)

    @property
    def parameters(self) -> list[Parameter]:
        """Unbound parameters, in the order they first appear."""
        return list(self._parameters)

    @property
    def n_parameters(self) -> int:
        return len(self._parameters)

    @property
    def depth(self) -> int:
        """Circuit depth (longest path through any qubit)."""
        qubit_depth = [0] * self.n_qubits
        for inst in self._instructions:
            max_d = max(qubit_depth[q] for q in inst.qubits)
            for q in inst.qubits:
                qubit_depth[q] = max_d + 1
        return max(qubit_depth)

    @property
    def num_gates(self) -> int:
        """Total number of gates."""
        return len(self._instructions)

    @property
    def is_parameterized(self) -> bool:
        return len(self._parameters) > 0

    # -- Internal helpers ---------------------------------------------------

    def _validate_qubits(self, qubits: Sequence[int]) -> None:
        for q in qubits:
            if not 0 <= q < self.n_qubits:
                raise ValueError(
                    f"Qubit {q} out of range for {self.n_qubits}-qubit circuit"
                )
        if len(set(qubits)) != len(qubits):
            raise ValueError(f"Duplicate qubits in {qubits}")

    def _register(self, params: tuple) -> None:
        for p in params:
            if isinstance(p, Parameter) and p not in self._parameters:
                self._parameters.append(p)

    def _add(self, name: str, qubits: tuple[int, ...], params: tuple = ()) -> Circuit:
        """Add an instruction and return self for chaining."""
        self._validate_qubits(qubits)
        self._instructions.append(Instruction(name=name, qubits=qubits, params=params))
        self._register(params)
        return self

    # -- Single-qubit gates -------------------------------------------------

    def x(self, qubit: int) -> Circuit:
        """Pauli-X gate."""
        return self._add("x", (qubit,))

    def h(self, qubit: int) -> Circuit:
        """Hadamard gate."""
        return self._add("h", (qubit,))

    def rx(self, theta: float | Parameter, qubit: int) -> Circuit:
        """Rotation around X-axis."""
        return self._add("rx", (qubit,), (theta,))

    def ry(self, theta: float | Parameter, qubit: int) -> Circuit:
        """Rotation around Y-axis."""
        return self._add("ry", (qubit,), (theta,))

    # -- Two-qubit gates ----------------------------------------------------

    def cx(self, control: int, target: int) -> Circuit:
        """Controlled-NOT (CNOT) gate."""
        return self._add("cx", (control, target))

    # -- Parameter binding --------------------------------------------------

    def bind(self, values: Mapping[Parameter, float] | Sequence[float]) -> Circuit:
        """
        Return a new circuit with parameters bound to concrete values.

        Parameters
        ----------
        values : dict or sequence
            Mapping from Parameter objects to floats, or a flat sequence
            matched against :attr:`parameters` in order.
        """
        if isinstance(values, Mapping):
            param_map = dict(values)
        else:
            values = np.asarray(values, dtype=float).ravel()
            if values.shape[0] != len(self._parameters):
                raise ValueError(
                    f"Circuit '{self.name}' has {len(self._parameters)} parameters, "
                    f"got {values.shape[0]} values"
                )
            param_map = dict(zip(self._parameters, values))

        new_circuit = Circuit(self.n_qubits, self.name)
        for inst in self._instructions:
            bound_inst = inst.bind(param_map) if _all_bound(inst, param_map) else inst
            new_circuit._instructions.append(bound_inst)
            new_circuit._register(bound_inst.params)
        return new_circuit

    # -- Composition --------------------------------------------------------

    def compose(self, other: Circuit) -> Circuit:
        """Append another circuit (same qubit indices) to this one."""
        if other.n_qubits > self.n_qubits:
            raise ValueError(
                f"Cannot compose {other.n_qubits}-qubit circuit onto "
                f"{self.n_qubits}-qubit circuit"
            )
        for inst in other._instructions:
            self._instructions.append(inst)
            self._register(inst.params)
        return self

    # -- Display ------------------------------------------------------------

    def __repr__(self) -> str:
        params_str = f", params={len(self._parameters)}" if self._parameters else ""
        return (
            f"Circuit(n_qubits={self.n_qubits}, "
            f"depth={self.depth}, gates={self.num_gates}{params_str})"
        )

    def draw(self) -> str:
        """Draw the circuit as ASCII art, one column per instruction."""
        lines: list[list[str]] = [[] for _ in range(self.n_qubits)]

        for inst in self._instructions:
            if inst.params:
                param_strs = [
                    p.name if isinstance(p, Parameter) else f"{p:.2f}"
                    for p in inst.params
                ]
                label = f"{inst.name}({','.join(param_strs)})"
            else:
                label = inst.name.upper()
            width = len(label) + 2

            q0 = inst.qubits[0]
            lines[q0].append(f"[{label}]")
            for q in inst.qubits[1:]:
                lines[q].append("  ●".ljust(width))
            for other in range(self.n_qubits):
                if other not in inst.qubits:
                    lines[other].append("─" * width)

        return "\n".join(
            f"q{q}: ──{'─'.join(lines[q])}──" for q in range(self.n_qubits)
        )


def _all_bound(inst: Instruction, param_map: Mapping[Parameter, float]) -> bool:
    return all(
        p in param_map for p in inst.params if isinstance(p, Parameter)
    )
