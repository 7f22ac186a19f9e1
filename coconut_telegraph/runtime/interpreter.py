"""Tree-walking interpreter for CoconutTelegraph instructions."""

from __future__ import annotations

from dataclasses import dataclass
import itertools
import time
from typing import Callable, Iterable, Iterator

from ..constants import MOVE_POWERS, WAIT_CEILING_MS, WHILE_MAX_ITERATIONS
from .core import (
    Actuate,
    Cond,
    Halt,
    Instruction,
    Log,
    Loop,
    Move,
    Parallel,
    Program,
    Sense,
    Turn,
    Wait,
    While,
)
from .robot import Robot


@dataclass(frozen=True)
class ExecutionResult:
    """Summary of one ``run``: instructions stepped and trace lines added."""

    steps: int
    log: tuple[str, ...]


class Interpreter:
    """Execute instructions against one Robot, strictly in order.

    Nested blocks are kept on an explicit stack, so nesting depth is not
    bounded by the Python call stack. Faults raised by predicates, sensors
    or actuators are not caught; they abort the run in progress.
    """

    def __init__(self, robot: Robot, *, sleep: Callable[[float], None] = time.sleep):
        self.robot = robot
        self.sleep = sleep
        self.steps = 0

    def run(self, program: Program) -> ExecutionResult:
        start = len(self.robot.execution_log)
        first_step = self.steps
        self.robot.log(f"=== Running program: {program.name} ===")
        self.execute(program.instructions)
        self.robot.log(f"=== Program complete: {program.name} ===")
        return ExecutionResult(
            self.steps - first_step, tuple(self.robot.execution_log[start:])
        )

    def execute(self, instructions: Iterable[Instruction]) -> None:
        blocks: list[Iterator[Instruction]] = [iter(instructions)]
        while blocks:
            instr = next(blocks[-1], None)
            if instr is None:
                blocks.pop()
                continue
            block = self._step(instr)
            if block is not None:
                blocks.append(iter(block))

    # -- internal helpers -------------------------------------------------

    def _repeat(self, instr: Loop) -> Iterator[Instruction]:
        for iteration in range(1, instr.count + 1):
            self.robot.log(f"  Iteration {iteration}")
            yield from instr.body

    def _repeat_while(self, instr: While) -> Iterator[Instruction]:
        # The ceiling holds no matter what the predicate returns.
        iterations = 0
        while iterations < WHILE_MAX_ITERATIONS and instr.predicate(self.robot.memory):
            yield from instr.body
            iterations += 1

    def _step(self, instr: Instruction) -> Iterable[Instruction] | None:
        """Apply one instruction; return the block it opens, if any."""

        robot = self.robot
        self.steps += 1

        if isinstance(instr, Move):
            robot.log(f"Moving {instr.direction} for {instr.distance} units")
            left, right = MOVE_POWERS[instr.direction.value]
            robot.actuator("motor", 0).set(left)
            robot.actuator("motor", 1).set(right)
        elif isinstance(instr, Turn):
            robot.log(f"Turning {instr.degrees} degrees")
            robot.heading = (robot.heading + instr.degrees) % 360
        elif isinstance(instr, Sense):
            value = robot.read_sensor(instr.kind, instr.sensor_id)
            robot.memory[instr.target] = value
            robot.log(f"Read {instr.kind.title()}#{instr.sensor_id} = {value}")
        elif isinstance(instr, Actuate):
            actuator = robot.actuator(instr.kind, instr.actuator_id)
            actuator.set(instr.value)
            robot.log(f"Set {instr.kind.title()}#{instr.actuator_id} = {instr.value}")
        elif isinstance(instr, Cond):
            if instr.predicate(robot.memory):
                return instr.then_branch
            return instr.else_branch
        elif isinstance(instr, Loop):
            robot.log(f"Looping {instr.count} times")
            return self._repeat(instr)
        elif isinstance(instr, While):
            return self._repeat_while(instr)
        elif isinstance(instr, Parallel):
            robot.log(f"Parallel execution of {len(instr.branches)} branches")
            return itertools.chain.from_iterable(instr.branches)
        elif isinstance(instr, Wait):
            robot.log(f"Waiting {instr.duration_ms}ms")
            self.sleep(min(instr.duration_ms, WAIT_CEILING_MS) / 1000.0)
        elif isinstance(instr, Log):
            robot.log(instr.message)
        elif isinstance(instr, Halt):
            robot.stop_actuators()
            robot.log("HALT")
        else:
            raise TypeError(f"Unknown instruction {instr!r}")
        return None


def execute(program: Program, robot: Robot, *, sleep: Callable[[float], None] = time.sleep) -> ExecutionResult:
    """Run ``program`` against ``robot`` and return the run summary."""

    return Interpreter(robot, sleep=sleep).run(program)


def execute_instructions(instructions: Iterable[Instruction], robot: Robot, *, sleep=time.sleep) -> None:
    """Execute bare instructions without the program banner lines."""

    Interpreter(robot, sleep=sleep).execute(instructions)


__all__ = [
    "ExecutionResult",
    "Interpreter",
    "execute",
    "execute_instructions",
]
