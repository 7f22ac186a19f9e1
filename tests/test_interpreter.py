"""Interpreter semantics against a robot with scripted sensors."""

import random

import pytest

from coconut_telegraph import (
    MAX_NESTING_DEPTH,
    WHILE_MAX_ITERATIONS,
    Actuate,
    Cond,
    Direction,
    FixedSensorSource,
    Halt,
    Interpreter,
    ListLogger,
    Log,
    Loop,
    MemoryThreshold,
    Move,
    Program,
    Robot,
    RobotState,
    Sense,
    Wait,
    While,
    compile_dense,
    execute,
    execute_instructions,
)


class RecordingSleep:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def robot():
    return Robot("T", FixedSensorSource({0: 42.0}), ListLogger())


def run(code, robot, sleep):
    return execute(compile_dense(code), robot, sleep=sleep)


def messages(robot):
    prefix = f"[{robot.name}] "
    return [line[len(prefix):] for line in robot.execution_log]


def test_move_and_turn_trace(robot, sleep):
    result = run(">50@90<30", robot, sleep)
    assert result.log == (
        "[T] === Running program: dense ===",
        "[T] Moving Forward for 50 units",
        "[T] Turning 90 degrees",
        "[T] Moving Backward for 30 units",
        "[T] === Program complete: dense ===",
    )
    assert result.steps == 3
    assert robot.heading == 90
    assert [m.value for m in robot.motors] == [-50.0, -50.0]


def test_heading_wraps(robot, sleep):
    run("@300@90@-45", robot, sleep)
    assert robot.heading == 345


def test_sense_stores_reading(robot, sleep):
    run("?0", robot, sleep)
    assert robot.memory == {"s0": 42.0}
    assert "Read Proximity#0 = 42.0" in messages(robot)


def test_actuate_sets_and_clamps(robot, sleep):
    run("!050", robot, sleep)
    assert robot.motors[0].value == 50.0
    assert "Set Motor#0 = 50.0" in messages(robot)

    execute_instructions([Actuate(1, 250)], robot, sleep=sleep)
    assert robot.motors[1].value == 100.0


@pytest.mark.parametrize("reading,branch", [(42.0, "near"), (10.0, "far"), (30.0, "far")])
def test_dense_conditional_reads_s0(reading, branch, sleep):
    robot = Robot("T", FixedSensorSource({0: reading}), ListLogger())
    run('?0{30:"near":"far"}', robot, sleep)
    assert messages(robot)[-2] == branch


def test_conditional_without_reading_takes_else(robot, sleep):
    run('{30:"then":"else"}', robot, sleep)
    assert "else" in messages(robot)
    assert "then" not in messages(robot)


@pytest.mark.parametrize("seed", range(20))
def test_exactly_one_branch_runs(seed, robot, sleep):
    rng = random.Random(seed)
    outcomes = [rng.random() < 0.5 for _ in range(10)]
    calls = []

    def predicate(memory):
        calls.append(memory)
        return outcomes[len(calls) - 1]

    cond = Cond(predicate, (Log("then"),), (Log("else"),))
    execute_instructions([cond] * len(outcomes), robot, sleep=sleep)

    logged = messages(robot)
    assert len(calls) == len(outcomes)
    assert all(memory is robot.memory for memory in calls)
    assert logged == ["then" if outcome else "else" for outcome in outcomes]


def test_loop_runs_body_count_times(robot, sleep):
    result = run('[3"x"]', robot, sleep)
    logged = messages(robot)
    assert logged.count("x") == 3
    assert "Looping 3 times" in logged
    assert [m for m in logged if m.startswith("  Iteration")] == [
        "  Iteration 1",
        "  Iteration 2",
        "  Iteration 3",
    ]
    assert result.steps == 4


def test_step_count_includes_nested_instructions(robot, sleep):
    assert run(">1[2@1]", robot, sleep).steps == 4


def test_while_is_capped(robot, sleep):
    calls = []

    def always(memory):
        calls.append(1)
        return True

    execute_instructions([While(always, (Log("tick"),))], robot, sleep=sleep)
    assert len(calls) == WHILE_MAX_ITERATIONS
    assert messages(robot).count("tick") == WHILE_MAX_ITERATIONS


def test_while_stops_when_predicate_fails(sleep):
    class Counting:
        def __init__(self):
            self.n = 0

        def read(self, kind, sensor_id):
            self.n += 1
            return float(self.n)

    sensors = Counting()
    robot = Robot("T", sensors, ListLogger())
    robot.memory["s0"] = 0.0
    loop = While(MemoryThreshold("s0", 3, "<"), (Sense(0, "s0"),))

    execute_instructions([loop], robot, sleep=sleep)

    assert sensors.n == 3
    assert robot.memory["s0"] == 3.0


def test_while_with_false_predicate_never_runs(robot, sleep):
    execute_instructions([While(lambda m: False, (Halt(),))], robot, sleep=sleep)
    assert robot.execution_log == []


def test_parallel_branches_run_in_order(robot, sleep):
    a = Program("a", (Log("a1"), Log("a2")))
    b = Program("b", (Log("b1"),))
    result = execute(a | b, robot, sleep=sleep)
    assert result.log[1:-1] == (
        "[T] Parallel execution of 2 branches",
        "[T] a1",
        "[T] a2",
        "[T] b1",
    )


def test_wait_sleep_is_capped(robot, sleep):
    execute_instructions([Wait(5000), Wait(50), Wait(0)], robot, sleep=sleep)
    assert sleep.calls == [0.1, 0.05, 0.0]
    assert messages(robot)[0] == "Waiting 5000ms"


def test_halt_stops_actuators_but_not_the_program(robot, sleep):
    robot.actuator("servo", 1).set(45)
    robot.actuator("led", 2).set(60)
    run('!050!170#"after"', robot, sleep)
    assert [m.value for m in robot.motors] == [0.0, 0.0]
    assert [s.value for s in robot.servos] == [0.0, 0.0]
    assert [led.value for led in robot.leds] == [0.0, 0.0, 0.0]
    logged = messages(robot)
    assert logged.index("HALT") < logged.index("after")


def test_predicate_faults_abort_the_run(robot, sleep):
    program = Program(
        "faulty", (Cond(lambda m: 1 / 0, (Log("then"),)), Log("never"))
    )
    with pytest.raises(ZeroDivisionError):
        execute(program, robot, sleep=sleep)
    assert "never" not in messages(robot)


def test_sensor_faults_propagate(sleep):
    class Broken:
        def read(self, kind, sensor_id):
            raise IOError("sensor offline")

    robot = Robot("T", Broken(), ListLogger())
    with pytest.raises(IOError):
        run("?0", robot, sleep)


def test_unknown_instruction_is_a_type_error(robot, sleep):
    with pytest.raises(TypeError):
        execute_instructions([object()], robot, sleep=sleep)


def test_interpreter_leaves_state_alone(robot, sleep):
    Interpreter(robot, sleep=sleep).run(compile_dense("[2>5@90]?0!050#"))
    assert robot.state is RobotState.Idle


def test_program_run_uses_real_interpreter(robot):
    result = Program("p", (Move(Direction.Left, 3),)).run(robot)
    assert result.steps == 1
    assert [m.value for m in robot.motors] == [-30.0, 30.0]


def test_runs_share_one_robot(robot, sleep):
    run("?0", robot, sleep)
    second = run('{30:"remembered"}', robot, sleep)
    assert "[T] remembered" in second.log
    assert len(robot.execution_log) == 6


def test_loop_count_is_static(robot, sleep):
    execute_instructions([Loop(2, (Sense(0, "s0"),))], robot, sleep=sleep)
    assert robot.sensors.calls == [("proximity", 0), ("proximity", 0)]


def test_reused_interpreter_counts_steps_per_run(robot, sleep):
    interpreter = Interpreter(robot, sleep=sleep)
    assert interpreter.run(compile_dense(">1")).steps == 1
    assert interpreter.run(compile_dense(">1@5")).steps == 2
    assert interpreter.steps == 3


def test_deepest_compiled_program_runs(robot, sleep):
    result = run("[1" * 600 + ">1" + "]" * 600, robot, sleep)
    assert result.steps == MAX_NESTING_DEPTH


def test_deep_trees_run_without_recursion(robot, sleep):
    block = (Log("core"),)
    for depth in range(5000):
        if depth % 2:
            block = (Loop(1, block),)
        else:
            block = (Cond(lambda memory: True, block),)
    execute_instructions(block, robot, sleep=sleep)
    logged = messages(robot)
    assert logged[-1] == "core"
    assert logged.count("Looping 1 times") == 2500
