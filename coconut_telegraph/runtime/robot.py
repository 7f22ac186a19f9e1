"""Robot execution context, actuators and the sensor/logger boundaries."""

from __future__ import annotations

import math
import random
from typing import Any, Mapping, Protocol

from ..constants import (
    DEFAULT_ACTUATORS,
    LED_LIMITS,
    MOTOR_LIMITS,
    SENSOR_RANGES,
    SERVO_MODULUS,
    STATE_TRANSITIONS,
)
from .core import RobotState


class SensorSource(Protocol):
    def read(self, kind: str, sensor_id: int) -> float: ...


class Logger(Protocol):
    def record(self, message: str) -> None: ...


class PrintLogger:
    """Echo every trace line to stdout."""

    def record(self, message: str) -> None:
        print(message)


class NullLogger:
    def record(self, message: str) -> None:
        pass


class ListLogger:
    def __init__(self):
        self.records: list[str] = []

    def record(self, message: str) -> None:
        self.records.append(message)


class SimulatedSensorSource:
    """Seeded uniform readings within each sensor kind's range."""

    def __init__(self, seed: int | None = None, ranges: Mapping[str, tuple] | None = None):
        self._random = random.Random(seed)
        self.ranges = dict(ranges or SENSOR_RANGES)

    def read(self, kind: str, sensor_id: int) -> float:
        low, high = self.ranges.get(kind, (0.0, 100.0))
        return low + self._random.random() * (high - low)


class FixedSensorSource:
    """Return preset readings keyed by ``(kind, id)`` or by ``id`` alone."""

    def __init__(self, readings: Mapping[Any, float] | None = None, default: float = 0.0):
        self.readings = dict(readings or {})
        self.default = default
        self.calls: list[tuple[str, int]] = []

    def read(self, kind: str, sensor_id: int) -> float:
        self.calls.append((kind, sensor_id))
        if (kind, sensor_id) in self.readings:
            return float(self.readings[(kind, sensor_id)])
        return float(self.readings.get(sensor_id, self.default))


class Actuator:
    kind = "actuator"

    def __init__(self, actuator_id: int, value: float = 0.0):
        self.id = actuator_id
        self.value = 0.0
        self.set(value)

    def set(self, value: float) -> None:
        self.value = float(value)

    def __repr__(self) -> str:  # pragma: no cover - representation helper
        return f"{self.kind.title()}#{self.id}({self.value})"


class Motor(Actuator):
    kind = "motor"

    def set(self, value: float) -> None:
        low, high = MOTOR_LIMITS
        self.value = max(low, min(high, float(value)))


class Servo(Actuator):
    kind = "servo"

    def set(self, value: float) -> None:
        self.value = math.fmod(float(value), SERVO_MODULUS)


class LED(Actuator):
    kind = "led"

    def set(self, value: float) -> None:
        low, high = LED_LIMITS
        self.value = max(low, min(high, float(value)))


ACTUATOR_TYPES = {cls.kind: cls for cls in (Motor, Servo, LED)}

LEGAL_TRANSITIONS = frozenset(
    (RobotState(src), RobotState(dst)) for src, dst in STATE_TRANSITIONS
)


class IllegalTransitionError(RuntimeError):
    def __init__(self, src: RobotState, dst: RobotState):
        super().__init__(f"Illegal state transition {src} -> {dst}")
        self.src = src
        self.dst = dst


class Robot:
    """Mutable execution context: memory, actuators, state and trace.

    A Robot is owned by one interpreter pass at a time; nothing here locks.
    """

    def __init__(
        self,
        name: str,
        sensors: SensorSource | None = None,
        logger: Logger | None = None,
    ):
        self.name = name
        self.sensors = sensors if sensors is not None else SimulatedSensorSource()
        self.logger = logger if logger is not None else PrintLogger()
        self.memory: dict[str, float] = {}
        self.heading = 0.0
        self.actuators: dict[tuple[str, int], Actuator] = {}
        for kind, count in DEFAULT_ACTUATORS.items():
            for actuator_id in range(count):
                self.actuator(kind, actuator_id)
        self._state = RobotState.Idle
        self._log: list[str] = []

    def __repr__(self) -> str:  # pragma: no cover - representation helper
        return f"Robot({self.name!r}, state={self._state})"

    @property
    def state(self) -> RobotState:
        return self._state

    @property
    def execution_log(self) -> list[str]:
        return list(self._log)

    @property
    def motors(self) -> list[Actuator]:
        return self._of_kind("motor")

    @property
    def servos(self) -> list[Actuator]:
        return self._of_kind("servo")

    @property
    def leds(self) -> list[Actuator]:
        return self._of_kind("led")

    def _of_kind(self, kind: str) -> list[Actuator]:
        found = [a for (k, _), a in self.actuators.items() if k == kind]
        return sorted(found, key=lambda a: a.id)

    def actuator(self, kind: str, actuator_id: int) -> Actuator:
        """Return the addressed actuator, registering it on first use."""

        key = (kind, actuator_id)
        if key not in self.actuators:
            try:
                factory = ACTUATOR_TYPES[kind]
            except KeyError:
                raise ValueError(f"Unknown actuator kind '{kind}'") from None
            self.actuators[key] = factory(actuator_id)
        return self.actuators[key]

    def read_sensor(self, kind: str, sensor_id: int) -> float:
        return float(self.sensors.read(kind, sensor_id))

    def log(self, message: str) -> None:
        line = f"[{self.name}] {message}"
        self._log.append(line)
        self.logger.record(line)

    def transition(self, src: RobotState, dst: RobotState) -> None:
        """Checked transition; pairs outside the whitelist are rejected."""

        if (src, dst) not in LEGAL_TRANSITIONS:
            raise IllegalTransitionError(src, dst)
        self._state = dst
        self.log(f"State: {src} -> {dst}")

    def set_state(self, state: RobotState) -> None:
        """Unchecked transition."""

        self.log(f"State: {self._state} -> {state}")
        self._state = state

    def stop_actuators(self) -> None:
        for actuator in self.actuators.values():
            actuator.set(0)

    def reset(self) -> None:
        self.stop_actuators()
        self.memory.clear()
        self.heading = 0.0
        self._state = RobotState.Idle
        self._log.clear()
        self.log("Robot reset")


__all__ = [
    "ACTUATOR_TYPES",
    "Actuator",
    "FixedSensorSource",
    "IllegalTransitionError",
    "LED",
    "LEGAL_TRANSITIONS",
    "ListLogger",
    "Logger",
    "Motor",
    "NullLogger",
    "PrintLogger",
    "Robot",
    "SensorSource",
    "Servo",
    "SimulatedSensorSource",
]
