import pytest

from coconut_telegraph import (
    Log,
    Parallel,
    Program,
    build_instruction_graph,
    child_blocks,
    compile_dense,
    instruction_stats,
    iter_instructions,
    print_program,
)
from coconut_telegraph.runtime import analysis


SOURCE = "[4>50@90]{30:@90:>20}"


def test_iter_instructions_is_depth_first():
    program = compile_dense(SOURCE)
    walked = [(type(instr).__name__, depth) for instr, depth in iter_instructions(program)]
    assert walked == [
        ("Loop", 0),
        ("Move", 1),
        ("Turn", 1),
        ("Cond", 0),
        ("Turn", 1),
        ("Move", 1),
    ]


def test_instruction_stats():
    stats = instruction_stats(compile_dense(SOURCE, "demo"))
    assert stats == {
        "name": "demo",
        "total": 6,
        "top_level": 2,
        "max_depth": 1,
        "kinds": {"Cond": 1, "Loop": 1, "Move": 2, "Turn": 2},
    }


def test_child_blocks_of_parallel():
    par = Parallel(((Log("a"),), (Log("b"),)))
    assert [label for label, _ in child_blocks(par)] == ["branch 0", "branch 1"]
    assert child_blocks(Log("x")) == []


def test_print_program(capsys):
    print_program(compile_dense(">5", "p"))
    assert capsys.readouterr().out == "Program: p\n  MOVE(Forward, 5)\n"


def test_instruction_graph():
    pytest.importorskip("networkx")
    graph = build_instruction_graph(compile_dense(SOURCE, "demo"))
    assert graph.number_of_nodes() == 7
    assert graph.nodes["root"]["label"] == "demo"
    edges = {(u, v, data["edge"]) for u, v, data in graph.edges(data=True)}
    assert edges == {
        ("root", "n0", "start"),
        ("n0", "n1", "body"),
        ("n1", "n2", "next"),
        ("n0", "n3", "next"),
        ("n3", "n4", "then"),
        ("n3", "n5", "else"),
    }
    assert graph.nodes["n1"]["label"] == "MOVE(Forward, 50)"
    assert graph.nodes["n3"]["label"] == "COND"


def test_empty_program_graph():
    pytest.importorskip("networkx")
    graph = build_instruction_graph(Program("empty"))
    assert list(graph.nodes) == ["root"]


def test_graph_requires_networkx(monkeypatch):
    monkeypatch.setattr(analysis, "nx", None)
    with pytest.raises(RuntimeError, match="networkx"):
        build_instruction_graph(compile_dense(">1"))
