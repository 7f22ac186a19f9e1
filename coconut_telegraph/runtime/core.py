"""Core instruction model for CoconutTelegraph programs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping, Sequence


class Direction(Enum):
    Forward = "Forward"
    Backward = "Backward"
    Left = "Left"
    Right = "Right"

    def __str__(self) -> str:
        return self.value


class RobotState(Enum):
    Idle = "Idle"
    Moving = "Moving"
    Turning = "Turning"
    Sensing = "Sensing"
    Acting = "Acting"
    Error = "Error"

    def __str__(self) -> str:
        return self.value


Memory = Mapping[str, float]
Predicate = Callable[[Memory], bool]

_COMPARISONS = {
    ">": lambda reading, threshold: reading > threshold,
    "<": lambda reading, threshold: reading < threshold,
    ">=": lambda reading, threshold: reading >= threshold,
    "<=": lambda reading, threshold: reading <= threshold,
}


@dataclass(frozen=True)
class MemoryThreshold:
    """Predicate comparing one memory reading against a fixed threshold.

    A missing reading never satisfies the predicate.
    """

    key: str
    threshold: float
    comparison: str = ">"

    def __post_init__(self):
        if self.comparison not in _COMPARISONS:
            raise ValueError(f"Unknown comparison '{self.comparison}'")

    def __call__(self, memory: Memory) -> bool:
        reading = memory.get(self.key)
        if reading is None:
            return False
        return _COMPARISONS[self.comparison](reading, self.threshold)

    def __str__(self) -> str:
        return f"{self.key} {self.comparison} {self.threshold}"


def _predicate_label(predicate: Any) -> str:
    if isinstance(predicate, MemoryThreshold):
        return str(predicate)
    return "?"


def _block(instructions: Sequence["Instruction"]) -> str:
    return "[" + "; ".join(instr.pretty() for instr in instructions) + "]"


def _to_byte(value: int) -> int:
    return ((int(value) + 128) % 256) - 128


class Instruction:
    """Base class of the closed instruction set."""

    def pretty(self) -> str:  # pragma: no cover - overridden by every kind
        raise NotImplementedError


@dataclass(frozen=True)
class Move(Instruction):
    direction: Direction
    distance: int

    def __post_init__(self):
        object.__setattr__(self, "distance", max(0, int(self.distance)))

    def pretty(self) -> str:
        return f"MOVE({self.direction}, {self.distance})"


@dataclass(frozen=True)
class Turn(Instruction):
    degrees: int

    def pretty(self) -> str:
        return f"TURN({self.degrees} deg)"


@dataclass(frozen=True)
class Sense(Instruction):
    sensor_id: int
    target: str
    kind: str = "proximity"

    def __post_init__(self):
        object.__setattr__(self, "sensor_id", _to_byte(self.sensor_id))

    def pretty(self) -> str:
        return f"SENSE({self.kind.title()}#{self.sensor_id} -> {self.target})"


@dataclass(frozen=True)
class Actuate(Instruction):
    actuator_id: int
    value: float
    kind: str = "motor"

    def __post_init__(self):
        object.__setattr__(self, "actuator_id", _to_byte(self.actuator_id))
        object.__setattr__(self, "value", float(self.value))

    def pretty(self) -> str:
        return f"ACTUATE({self.kind.title()}#{self.actuator_id} <- {self.value})"


@dataclass(frozen=True)
class Cond(Instruction):
    predicate: Predicate
    then_branch: tuple = ()
    else_branch: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "then_branch", tuple(self.then_branch))
        object.__setattr__(self, "else_branch", tuple(self.else_branch))

    def pretty(self) -> str:
        return (
            f"IF({_predicate_label(self.predicate)}) THEN {_block(self.then_branch)}"
            f" ELSE {_block(self.else_branch)}"
        )


@dataclass(frozen=True)
class Loop(Instruction):
    """Repeat a static body; counts below one are coerced to one."""

    count: int
    body: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "count", max(1, int(self.count)))
        object.__setattr__(self, "body", tuple(self.body))

    def pretty(self) -> str:
        return f"LOOP({self.count}) {_block(self.body)}"


@dataclass(frozen=True)
class While(Instruction):
    predicate: Predicate
    body: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "body", tuple(self.body))

    def pretty(self) -> str:
        return f"WHILE({_predicate_label(self.predicate)}) {_block(self.body)}"


@dataclass(frozen=True)
class Parallel(Instruction):
    branches: tuple = ()

    def __post_init__(self):
        object.__setattr__(
            self, "branches", tuple(tuple(branch) for branch in self.branches)
        )

    def pretty(self) -> str:
        return "PARALLEL(" + " || ".join(_block(b) for b in self.branches) + ")"


@dataclass(frozen=True)
class Wait(Instruction):
    duration_ms: int

    def __post_init__(self):
        object.__setattr__(self, "duration_ms", max(0, int(self.duration_ms)))

    def pretty(self) -> str:
        return f"WAIT({self.duration_ms}ms)"


@dataclass(frozen=True)
class Log(Instruction):
    message: str

    def pretty(self) -> str:
        return f"LOG({self.message})"


@dataclass(frozen=True)
class Halt(Instruction):
    def pretty(self) -> str:
        return "HALT"


INSTRUCTION_KINDS = (
    Move,
    Turn,
    Sense,
    Actuate,
    Cond,
    Loop,
    While,
    Parallel,
    Wait,
    Log,
    Halt,
)


@dataclass(frozen=True)
class Program:
    """A named, immutable sequence of instructions."""

    name: str
    instructions: tuple = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "instructions", tuple(self.instructions))

    def __iter__(self):
        return iter(self.instructions)

    def then(self, other: "Program") -> "Program":
        """Sequential composition: ``other`` runs after this program."""

        return Program(
            f"{self.name} >> {other.name}", self.instructions + other.instructions
        )

    def alongside(self, other: "Program") -> "Program":
        """Wrap both instruction lists in a single Parallel node."""

        return Program(
            f"{self.name} || {other.name}",
            (Parallel((self.instructions, other.instructions)),),
        )

    __rshift__ = then
    __or__ = alongside

    def run(self, robot):
        from .interpreter import execute

        return execute(self, robot)

    def pretty(self) -> str:
        lines = [f"Program: {self.name}"]
        lines.extend(f"  {instr.pretty()}" for instr in self.instructions)
        return "\n".join(lines)


__all__ = [
    "Actuate",
    "Cond",
    "Direction",
    "Halt",
    "INSTRUCTION_KINDS",
    "Instruction",
    "Log",
    "Loop",
    "Memory",
    "MemoryThreshold",
    "Move",
    "Parallel",
    "Predicate",
    "Program",
    "RobotState",
    "Sense",
    "Turn",
    "Wait",
    "While",
]
