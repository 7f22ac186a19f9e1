"""Higher-level behaviors built from the instruction primitives.

Behaviors compose like programs:

• ``a >> b``: ``b`` runs after ``a``.
• ``a | b``: both run inside a single Parallel node.
• ``a.when(pred)``: only runs when ``pred`` holds.
• ``a.ensuring(inv)``: checks ``inv`` afterwards and halts if it fails.
• ``a * n``: repeats ``a`` ``n`` times.
"""

from __future__ import annotations

from typing import Callable

from .compiler import compile_dense
from .core import (
    Actuate,
    Cond,
    Direction,
    Halt,
    Log,
    Loop,
    MemoryThreshold,
    Move,
    Predicate,
    Program,
    Sense,
    Turn,
    Wait,
)


class Behavior:
    """Lazily built program with composition operators."""

    def __init__(self, factory: Callable[[], Program]):
        self._factory = factory

    @classmethod
    def of(cls, program: Program) -> "Behavior":
        return cls(lambda: program)

    @classmethod
    def named(cls, name: str, *instructions) -> "Behavior":
        return cls.of(Program(name, instructions))

    def to_program(self) -> Program:
        return self._factory()

    def __rshift__(self, other: "Behavior") -> "Behavior":
        return Behavior(lambda: self.to_program() >> other.to_program())

    def __or__(self, other: "Behavior") -> "Behavior":
        return Behavior(lambda: self.to_program() | other.to_program())

    def when(self, predicate: Predicate) -> "Behavior":
        def build():
            inner = self.to_program()
            return Program(
                f"guarded({inner.name})", (Cond(predicate, inner.instructions, ()),)
            )

        return Behavior(build)

    def ensuring(self, invariant: Predicate, message: str = "Invariant violated") -> "Behavior":
        def build():
            inner = self.to_program()
            check = Cond(
                invariant,
                (Log("OK: Invariant holds"),),
                (Log(f"FAIL: {message}"), Halt()),
            )
            return Program(f"checked({inner.name})", inner.instructions + (check,))

        return Behavior(build)

    def __mul__(self, times: int) -> "Behavior":
        def build():
            inner = self.to_program()
            return Program(
                f"repeat({inner.name}, {times})", (Loop(times, inner.instructions),)
            )

        return Behavior(build)


def wall_follow(distance: int = 30) -> Program:
    return Program(
        "wall-follow",
        (
            Sense(0, "wall"),
            Cond(
                MemoryThreshold("wall", distance, "<"),
                # too close, turn away
                (Turn(90), Move(Direction.Forward, 10)),
                (Move(Direction.Forward, 20),),
            ),
            Wait(100),
        ),
    )


def _left_brighter(memory) -> bool:
    left = memory.get("left")
    return left is not None and left > memory.get("right", 0.0)


def line_follow() -> Program:
    return Program(
        "line-follow",
        (
            Sense(0, "left", "light"),
            Sense(1, "right", "light"),
            Cond(_left_brighter, (Turn(-30),), (Turn(30),)),
            Move(Direction.Forward, 5),
        ),
    )


def square_search(size: int) -> Program:
    return Program(
        "square-search", (Loop(4, (Move(Direction.Forward, size), Turn(90))),)
    )


def emergency_stop() -> Program:
    return Program(
        "emergency-stop",
        (Log("EMERGENCY STOP"), Actuate(0, 0), Actuate(1, 0), Halt()),
    )


def obstacle_avoid(threshold: int = 40) -> Program:
    return Program(
        "obstacle-avoid",
        (
            Sense(0, "front"),
            Cond(
                MemoryThreshold("front", threshold, "<"),
                (Log("Obstacle!"), Move(Direction.Backward, 10), Turn(90)),
                (Move(Direction.Forward, 20),),
            ),
        ),
    )


def complex_behavior() -> Program:
    """Hand-decoded reading of the ultra string ``&38:$3.;33;,:``.

    This is not what :func:`expand_ultra` makes of that string.
    """

    return Program(
        "complex",
        (
            Actuate(0, 80),
            Actuate(1, 80),
            Turn(48),
            Wait(100),
            Loop(3, (Move(Direction.Forward, 30),)),
            Wait(50),
        ),
    )


DENSE_LIBRARY = {
    "wall-follow-dense": ">10?0",
    "square-patrol": "[4>50@90]",
    "sensor-sweep": "?0.?1.?2.",
    "full-stop": "!00!10#",
}

BEHAVIOR_FACTORIES = {
    "wall-follow": wall_follow,
    "line-follow": line_follow,
    "square-search": lambda: square_search(50),
    "emergency-stop": emergency_stop,
    "obstacle-avoid": obstacle_avoid,
    "complex": complex_behavior,
}


def behavior_library() -> dict[str, Program]:
    """Every named library program, dense entries compiled under their name."""

    library = {name: factory() for name, factory in BEHAVIOR_FACTORIES.items()}
    for name, code in DENSE_LIBRARY.items():
        library[name] = compile_dense(code, name)
    return library


__all__ = [
    "BEHAVIOR_FACTORIES",
    "Behavior",
    "DENSE_LIBRARY",
    "behavior_library",
    "complex_behavior",
    "emergency_stop",
    "line_follow",
    "obstacle_avoid",
    "square_search",
    "wall_follow",
]
