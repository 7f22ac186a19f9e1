"""Analysis and visualization utilities for compiled programs."""
from __future__ import annotations

from collections import Counter
from pathlib import Path

try:
    import networkx as nx
except ModuleNotFoundError:  # pragma: no cover
    nx = None

try:
    import matplotlib.pyplot as plt
except ModuleNotFoundError:  # pragma: no cover
    plt = None

try:
    import pydot
except ModuleNotFoundError:  # pragma: no cover
    pydot = None

from .core import Cond, Loop, Parallel, While

KIND_COLORS = {
    "Move": "#8BC34A",
    "Turn": "#8BC34A",
    "Sense": "#FF7043",
    "Actuate": "#FFEB3B",
    "Cond": "#9575CD",
    "Loop": "#90CAF9",
    "While": "#90CAF9",
    "Parallel": "#80CBC4",
    "Wait": "#B0BEC5",
    "Log": "#B0BEC5",
    "Halt": "#F8BBD0",
}


def child_blocks(instr):
    """Return the nested instruction blocks of ``instr`` with their labels."""

    if isinstance(instr, Cond):
        return [("then", instr.then_branch), ("else", instr.else_branch)]
    if isinstance(instr, (Loop, While)):
        return [("body", instr.body)]
    if isinstance(instr, Parallel):
        return [(f"branch {idx}", branch) for idx, branch in enumerate(instr.branches)]
    return []


def iter_instructions(instructions, depth=0):
    """Yield ``(instruction, depth)`` pairs in depth-first order."""

    for instr in instructions:
        yield instr, depth
        for _, block in child_blocks(instr):
            yield from iter_instructions(block, depth + 1)


def instruction_stats(program):
    """Count instructions by kind and measure nesting depth."""

    counts = Counter()
    max_depth = 0
    for instr, depth in iter_instructions(program.instructions):
        counts[type(instr).__name__] += 1
        max_depth = max(max_depth, depth)
    return {
        "name": program.name,
        "total": sum(counts.values()),
        "top_level": len(program.instructions),
        "max_depth": max_depth,
        "kinds": dict(sorted(counts.items())),
    }


def print_program(program):
    print(program.pretty())


def build_instruction_graph(program):
    """Build a DiGraph with ``next`` edges between siblings and block edges
    from each compound instruction to the first instruction of its blocks."""

    if nx is None:
        raise RuntimeError("Instruction graphs require networkx to be installed")

    graph = nx.DiGraph()
    graph.add_node("root", label=program.name, kind="Program", color="#d3d3d3")
    counter = 0

    def add_block(parent, label, instructions):
        nonlocal counter
        previous = None
        for instr in instructions:
            node_id = f"n{counter}"
            counter += 1
            kind = type(instr).__name__
            graph.add_node(
                node_id,
                label=instr.pretty() if not child_blocks(instr) else kind.upper(),
                kind=kind,
                color=KIND_COLORS.get(kind, "#B0BEC5"),
            )
            if previous is None:
                graph.add_edge(parent, node_id, edge=label)
            else:
                graph.add_edge(previous, node_id, edge="next")
            for block_label, block in child_blocks(instr):
                add_block(node_id, block_label, block)
            previous = node_id

    add_block("root", "start", program.instructions)
    return graph


def visualize_program(program, output_path=None):  # pragma: no cover
    """Render the instruction graph with matplotlib; show it or save it."""

    if plt is None:
        raise RuntimeError("Visualization requires networkx and matplotlib to be installed")

    graph = build_instruction_graph(program)
    labels = {n: graph.nodes[n].get("label", str(n)) for n in graph.nodes}
    colors = [graph.nodes[n].get("color", "#d3d3d3") for n in graph.nodes]
    edge_labels = {(u, v): data.get("edge", "") for u, v, data in graph.edges(data=True)}
    positions = nx.spring_layout(graph, seed=42)

    plt.figure()
    nx.draw(
        graph,
        positions,
        with_labels=True,
        labels=labels,
        node_color=colors,
        node_size=1400,
        font_size=7,
    )
    nx.draw_networkx_edge_labels(graph, positions, edge_labels=edge_labels, font_size=6)
    plt.title(f"CoconutTelegraph program — {program.name}")
    if output_path:
        plt.savefig(output_path)
        print(f"  ✓ Program graph rendered → {output_path}")
    else:
        plt.show()
    plt.close()


def export_graphviz(program, output_path):  # pragma: no cover
    """Export a Graphviz SVG with one cluster per nested block."""

    if pydot is None:
        raise RuntimeError("Graphviz export requires the optional pydot dependency")

    graph = pydot.Dot(
        "coconut_program",
        graph_type="digraph",
        rankdir="TB",
        fontname="Helvetica",
    )
    counter = 0

    def build_cluster(label, instructions, path):
        nonlocal counter
        cluster = pydot.Cluster(
            f"cluster_{path}",
            label=label,
            color="#7f8c8d",
            fontname="Helvetica",
            fontsize="10",
            style="rounded",
        )
        previous = None
        for instr in instructions:
            node_id = f"n{counter}"
            counter += 1
            kind = type(instr).__name__
            text = kind.upper() if child_blocks(instr) else instr.pretty()
            cluster.add_node(
                pydot.Node(
                    node_id,
                    label=text.replace('"', '\\"'),
                    shape="box",
                    style="filled",
                    fillcolor=KIND_COLORS.get(kind, "#B0BEC5"),
                    fontname="Helvetica",
                )
            )
            if previous is not None:
                graph.add_edge(pydot.Edge(previous, node_id))
            for idx, (block_label, block) in enumerate(child_blocks(instr)):
                if not block:
                    continue
                sub = build_cluster(block_label, block, f"{path}_{node_id}_{idx}")
                cluster.add_subgraph(sub)
                first = sub.get_nodes()[0].get_name()
                graph.add_edge(pydot.Edge(node_id, first, style="dashed", label=block_label))
            previous = node_id
        return cluster

    graph.add_subgraph(build_cluster(program.name, program.instructions, "root"))

    output_path = Path(output_path)
    if output_path.parent and not output_path.parent.exists():
        output_path.parent.mkdir(parents=True, exist_ok=True)

    graph.write_svg(str(output_path))
    print(f"  ✓ Graphviz visualization exported → {output_path}")


__all__ = [
    "KIND_COLORS",
    "build_instruction_graph",
    "child_blocks",
    "export_graphviz",
    "instruction_stats",
    "iter_instructions",
    "print_program",
    "visualize_program",
]
