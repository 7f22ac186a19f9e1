"""Library programs and behavior composition."""

import pytest

from coconut_telegraph import (
    BEHAVIOR_FACTORIES,
    DENSE_LIBRARY,
    Behavior,
    Cond,
    Direction,
    FixedSensorSource,
    Halt,
    ListLogger,
    Log,
    Loop,
    Move,
    Parallel,
    Program,
    Robot,
    Turn,
    behavior_library,
    compile_dense,
    emergency_stop,
    execute,
    line_follow,
    obstacle_avoid,
    square_search,
    wall_follow,
)


def no_sleep(seconds):
    pass


def run(program, readings=None):
    robot = Robot("B", FixedSensorSource(readings or {}), ListLogger())
    execute(program, robot, sleep=no_sleep)
    return robot


def test_square_search_matches_dense_code():
    program = square_search(10)
    assert program == Program(
        "square-search", (Loop(4, (Move(Direction.Forward, 10), Turn(90))),)
    )
    assert program.instructions == compile_dense("[4>10@90]").instructions


def test_library_contains_every_entry():
    library = behavior_library()
    assert set(library) == set(BEHAVIOR_FACTORIES) | set(DENSE_LIBRARY)
    for name, code in DENSE_LIBRARY.items():
        assert library[name] == compile_dense(code, name)


@pytest.mark.parametrize(
    "reading,expected", [(10, "[B] Turning 90 degrees"), (50, "[B] Moving Forward for 20 units")]
)
def test_wall_follow(reading, expected):
    robot = run(wall_follow(), {0: reading})
    assert expected in robot.execution_log
    assert robot.memory["wall"] == float(reading)


def test_line_follow_turns_toward_brighter_side():
    robot = run(line_follow(), {("light", 0): 5, ("light", 1): 1})
    assert "[B] Turning -30 degrees" in robot.execution_log

    robot = run(line_follow(), {("light", 0): 1, ("light", 1): 5})
    assert "[B] Turning 30 degrees" in robot.execution_log


def test_obstacle_avoid_backs_off():
    robot = run(obstacle_avoid(), {0: 5})
    assert "[B] Obstacle!" in robot.execution_log
    assert "[B] Moving Backward for 10 units" in robot.execution_log


def test_emergency_stop_zeroes_motors():
    robot = Robot("B", FixedSensorSource(), ListLogger())
    robot.actuator("motor", 0).set(80)
    execute(emergency_stop(), robot, sleep=no_sleep)
    assert [m.value for m in robot.motors] == [0.0, 0.0]
    assert robot.execution_log[1] == "[B] EMERGENCY STOP"
    assert robot.execution_log[-2] == "[B] HALT"


def test_sequence_composition():
    a = Behavior.named("a", Log("one"))
    b = Behavior.named("b", Log("two"))
    program = (a >> b).to_program()
    assert program.name == "a >> b"
    assert program.instructions == (Log("one"), Log("two"))


def test_parallel_composition():
    a = Behavior.named("a", Log("one"))
    b = Behavior.named("b", Log("two"))
    program = (a | b).to_program()
    assert program.name == "a || b"
    assert program.instructions == (Parallel(((Log("one"),), (Log("two"),))),)


def test_guarded_behavior():
    guarded = Behavior.named("hello", Log("hi")).when(lambda memory: "go" in memory)
    program = guarded.to_program()
    assert program.name == "guarded(hello)"
    (cond,) = program.instructions
    assert isinstance(cond, Cond)
    assert cond.else_branch == ()

    robot = run(program)
    assert "[B] hi" not in robot.execution_log


def test_ensuring_halts_when_invariant_fails():
    checked = Behavior.named("walk", Move(Direction.Forward, 5)).ensuring(
        lambda memory: False, "walked too far"
    )
    program = checked.to_program()
    assert program.name == "checked(walk)"

    robot = run(program)
    assert "[B] FAIL: walked too far" in robot.execution_log
    assert "[B] HALT" in robot.execution_log
    assert robot.motors[0].value == 0.0


def test_ensuring_logs_success():
    program = Behavior.named("noop").ensuring(lambda memory: True).to_program()
    robot = run(program)
    assert "[B] OK: Invariant holds" in robot.execution_log
    assert "[B] HALT" not in robot.execution_log


def test_repeat():
    program = (Behavior.of(square_search(5)) * 3).to_program()
    assert program.name == "repeat(square-search, 3)"
    assert program.instructions == (Loop(3, square_search(5).instructions),)


def test_behaviors_are_built_lazily():
    built = []

    def factory():
        built.append(1)
        return Program("lazy", (Halt(),))

    behavior = Behavior(factory) >> Behavior(factory)
    assert built == []
    behavior.to_program()
    assert built == [1, 1]
