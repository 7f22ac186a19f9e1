"""Command-line interface for the CoconutTelegraph runtime."""
from __future__ import annotations

import argparse
import json
import sys

from ..constants import REPL_HISTORY_LIMIT
from .analysis import export_graphviz, instruction_stats, print_program, visualize_program
from .behaviors import behavior_library
from .compiler import compile_dense, compile_strict, compile_ultra
from .core import Program
from .diagnostics import CompileError
from .interpreter import execute
from .macros import expand_ultra
from .robot import NullLogger, PrintLogger, Robot, SimulatedSensorSource
from .serialize import diff_programs, hash_program


def _compile_line(line):
    if line.startswith("u:"):
        return compile_ultra(line[2:].strip(), "ultra")
    return compile_dense(line, "dense")


def run_repl(robot=None, history_limit=REPL_HISTORY_LIMIT):  # pragma: no cover
    """Interactive dense-code shell."""

    if robot is None:
        robot = Robot("repl", SimulatedSensorSource(), NullLogger())

    print("CoconutTelegraph REPL — enter dense code, u:<ultra>, or :help")
    history = []
    counter = 0

    def resolve_entry(token=None):
        if not history:
            print("No cached programs yet.")
            return None
        if token is None:
            return history[-1]
        try:
            target = int(token)
        except ValueError:
            print("Program index must be an integer.")
            return None
        for entry in reversed(history):
            if entry["index"] == target:
                return entry
        print(f"No cached program #{target}.")
        return None

    while True:
        try:
            line = input("coconut> ")
        except EOFError:
            print()
            break

        stripped = line.strip()
        if not stripped:
            continue

        if stripped.startswith(":"):
            parts = stripped.split()
            cmd = parts[0]

            if cmd in (":quit", ":exit"):
                break
            if cmd == ":help":
                print("Commands: :help, :quit, :hash [n], :diff n m, :stats [n], :reset, :state")
                print(f"History: last {history_limit} programs cached.")
                continue
            if cmd == ":hash":
                entry = resolve_entry(parts[1] if len(parts) > 1 else None)
                if entry:
                    print(f"SHA256(program_{entry['index']}) = {hash_program(entry['program'])}")
                continue
            if cmd == ":stats":
                entry = resolve_entry(parts[1] if len(parts) > 1 else None)
                if entry:
                    print(json.dumps(instruction_stats(entry["program"]), indent=2))
                continue
            if cmd == ":diff":
                if len(parts) != 3:
                    print("Usage: :diff <a> <b>")
                    continue
                entry_a = resolve_entry(parts[1])
                entry_b = resolve_entry(parts[2])
                if not entry_a or not entry_b:
                    continue
                diff = diff_programs(entry_a["program"], entry_b["program"])
                if diff:
                    for diff_line in diff:
                        print(diff_line)
                else:
                    print("Programs are identical.")
                continue
            if cmd == ":reset":
                robot.reset()
                print("Robot reset.")
                continue
            if cmd == ":state":
                print(f"state: {robot.state}  heading: {robot.heading}")
                print(f"memory: {robot.memory}")
                continue

            print(f"Unknown command: {cmd}")
            continue

        program = _compile_line(stripped)
        counter += 1
        program = Program(f"{program.name}#{counter}", program.instructions)
        result = execute(program, robot)
        history.append({"index": counter, "src": stripped, "program": program})
        if len(history) > history_limit:
            history.pop(0)

        print(f"[#{counter}] {len(program.instructions)} instructions, {result.steps} steps")
        for item in result.log:
            print("   ", item)


def parse_args(args):
    argp = argparse.ArgumentParser(description="CoconutTelegraph dense robot code runtime")

    source = argp.add_mutually_exclusive_group()
    source.add_argument("--src", help="Inline dense code", default=None)
    source.add_argument("--ultra", help="Inline ultra-dense code")
    source.add_argument("--behavior", help="Run a named program from the behavior library")

    argp.add_argument(
        "--strict", action="store_true", help="Fail on malformed code instead of tolerating it"
    )
    argp.add_argument(
        "--expand", action="store_true", help="Print the dense expansion of --ultra code"
    )
    argp.add_argument("--seed", type=int, default=None, help="Seed for simulated sensors")
    argp.add_argument("--name", default="Coconut", help="Robot name used in the trace")
    argp.add_argument("--quiet", action="store_true", help="Do not echo the trace while running")
    argp.add_argument("--hash", action="store_true", help="Print the program hash")
    argp.add_argument("--stats", action="store_true", help="Print instruction statistics")
    argp.add_argument(
        "--list-behaviors", action="store_true", help="List the behavior library"
    )
    argp.add_argument("--repl", action="store_true", help="Start an interactive REPL")
    argp.add_argument(
        "--visualize",
        nargs="?",
        const="",
        metavar="OUTPUT",
        help="Render the instruction graph with matplotlib (optionally save to OUTPUT)",
    )
    argp.add_argument(
        "--viz",
        metavar="OUTPUT",
        help="Export a Graphviz instruction visualization to an SVG file",
    )

    params = argp.parse_args(args)
    if params.src is None and params.ultra is None and params.behavior is None:
        params.src = "[4>50@90]"
    return params


def load_program(params):
    """Compile the program selected by the parsed arguments."""

    if params.behavior:
        library = behavior_library()
        if params.behavior not in library:
            raise KeyError(f"Unknown behavior '{params.behavior}'")
        return library[params.behavior]
    if params.ultra is not None:
        if params.strict:
            return compile_strict(params.ultra, ultra=True)
        return compile_ultra(params.ultra)
    if params.strict:
        return compile_strict(params.src)
    return compile_dense(params.src)


def main(args):
    params = parse_args(args)

    if params.list_behaviors:
        for name, program in behavior_library().items():
            print(f"{name}: {len(program.instructions)} instructions")
        return 0

    sensors = SimulatedSensorSource(params.seed)
    if params.repl:
        run_repl(Robot(params.name, sensors, NullLogger()))
        return 0

    logger = NullLogger() if params.quiet else PrintLogger()
    robot = Robot(params.name, sensors, logger)

    if params.ultra is not None:
        print("Ultra:", params.ultra)
        if params.expand:
            print("Dense:", expand_ultra(params.ultra))
    elif params.src is not None:
        print("Source:", params.src)

    try:
        program = load_program(params)
    except CompileError as exc:
        print("  ✗ Compilation failed:")
        for diag in exc.diagnostics:
            print("   ", diag)
        return 1
    except KeyError as exc:
        print(f"  ✗ {exc.args[0]}")
        return 1

    print_program(program)
    if params.hash:
        print(f"SHA256({program.name}) = {hash_program(program)}")
    if params.stats:
        print(json.dumps(instruction_stats(program), indent=2))

    print("\nExecution:")
    result = execute(program, robot)
    print(f"  ✓ {result.steps} steps, final state {robot.state}")
    if params.quiet:
        for entry in result.log:
            print("   ", entry)

    if params.viz:
        export_graphviz(program, params.viz)
    if params.visualize is not None:
        visualize_program(program, params.visualize or None)
    return 0


__all__ = [
    "load_program",
    "main",
    "parse_args",
    "run_repl",
]


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main(sys.argv[1:]))
